"""
Mem42 Agents

Collaborative synthesis over an engram knowledge base.

Philosophy:
- Several personas react to every query before an answer is written
- Documents are stored as dense engrams, not raw text
- Retrieval is tag-filtered cosine similarity
- Memory points are offered to the caller, never persisted here

Usage:
    from mem42.common import load_config, LLMClient, InMemoryVectorStore
    from mem42.retriever import CollaborativeOrchestrator, Searcher
    from mem42.ingest import DocumentIngestor, EngramBuilder
"""

__version__ = "0.1.0"
