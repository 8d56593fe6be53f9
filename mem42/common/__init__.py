"""
Mem42 Common Module

Shared infrastructure for the retriever and ingest agents.
"""

from .config import Mem42Config, load_config
from .embedding_service import EmbeddingService, create_embedding_service
from .llm_client import LLMClient
from .vector_store import (
    VectorStore,
    InMemoryVectorStore,
    QdrantVectorStore,
    SearchHit,
    CollectionInfo,
    matches_tag_filter,
)

__all__ = [
    "Mem42Config",
    "load_config",
    "EmbeddingService",
    "create_embedding_service",
    "LLMClient",
    "VectorStore",
    "InMemoryVectorStore",
    "QdrantVectorStore",
    "SearchHit",
    "CollectionInfo",
    "matches_tag_filter",
]
