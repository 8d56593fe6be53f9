"""
Retriever Agent - Collaborative Synthesis

Answers a query by consulting several personas, retrieving knowledge-base
context, and synthesizing a final thought.

Key Components:
- find_top_k_similar: in-memory cosine ranking
- QueryOptimizer: folds persona plans into one retrieval query
- Searcher: tag-filtered retrieval from the vector store
- Synthesizer: LLM-based final answer
- MemoryExtractor: memory point extraction and parsing
- CollaborativeOrchestrator: sequences the stages and emits events

Pipeline:
1. Persona plans (parallel)
2. Query optimization
3. Tag prefilter + top-K retrieval
4. Synthesis
5. Optional memory extraction
"""

from .ranker import cosine_similarity, score_candidates, find_top_k_similar
from .personas import Persona, PLANNING_MODULES, SYSTEM_PROMPT_BASE
from .query_optimizer import QueryOptimizer
from .searcher import Searcher, RetrievalResult, CONTEXT_SEPARATOR
from .synthesizer import Synthesizer, NO_CONTEXT_PLACEHOLDER
from .memory_extractor import MemoryExtractor, parse_memory_point
from .events import EventType, SynthesisEvent
from .orchestrator import CollaborativeOrchestrator, SynthesisRun

__all__ = [
    "cosine_similarity",
    "score_candidates",
    "find_top_k_similar",
    "Persona",
    "PLANNING_MODULES",
    "SYSTEM_PROMPT_BASE",
    "QueryOptimizer",
    "Searcher",
    "RetrievalResult",
    "CONTEXT_SEPARATOR",
    "Synthesizer",
    "NO_CONTEXT_PLACEHOLDER",
    "MemoryExtractor",
    "parse_memory_point",
    "EventType",
    "SynthesisEvent",
    "CollaborativeOrchestrator",
    "SynthesisRun",
]
