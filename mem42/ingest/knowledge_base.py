"""
Knowledge Base maintenance: engram count, clear, delete.
"""

import logging
from typing import Iterable

from ..common.vector_store import DEFAULT_DIMENSION, VectorStore

logger = logging.getLogger("mem42.ingest.knowledge_base")


class KnowledgeBase:
    """Maintenance operations over a vector store collection."""

    def __init__(self, store: VectorStore, dimension: int = DEFAULT_DIMENSION):
        self._store = store
        self._dimension = dimension

    @property
    def store(self) -> VectorStore:
        return self._store

    def engram_count(self) -> int:
        """Number of stored engrams; 0 if the collection cannot be read."""
        try:
            return self._store.get_collection_info().point_count
        except Exception as e:
            logger.warning("Could not fetch collection info: %s", e)
            return 0

    def clear(self) -> None:
        """Delete every engram by recreating the collection (cosine distance)."""
        self._store.recreate_collection(self._dimension, "cosine")
        logger.info("Knowledge base cleared")

    def delete(self, ids: Iterable[str]) -> None:
        self._store.delete(ids)
