"""
Ingest Agent - Engram Capture

Turns uploaded documents into tagged, embedded engrams.

Pipeline:
1. Extract text (PyMuPDF for PDFs, UTF-8 otherwise)
2. Distill into an engram with the LLM
3. Embed and upsert into the knowledge base
"""

from .document_loader import Document, extract_text
from .engram import EngramBuilder
from .ingestor import DocumentIngestor, IngestReport
from .knowledge_base import KnowledgeBase

__all__ = [
    "Document",
    "extract_text",
    "EngramBuilder",
    "DocumentIngestor",
    "IngestReport",
    "KnowledgeBase",
]
