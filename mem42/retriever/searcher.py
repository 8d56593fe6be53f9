"""
Searcher

Tag-filtered retrieval over the knowledge base.
Narrows the candidate pool by tags, embeds the optimized query, and fetches
the top matches from the configured vector store. Returns the joined engram
contents as synthesis context.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..common.embedding_service import EmbeddingService
from ..common.errors import RetrievalFailure
from ..common.vector_store import SearchHit, VectorStore

logger = logging.getLogger("mem42.retriever.searcher")

CONTEXT_SEPARATOR = "\n\n---\n\n"
DEFAULT_TOPK = 3


@dataclass
class RetrievalResult:
    """Outcome of the retrieval stage"""
    query: str
    hits: List[SearchHit] = field(default_factory=list)
    skipped: bool = False  # True when the candidate pool was empty

    @property
    def context(self) -> Optional[str]:
        """Joined engram contents, or None when nothing was retrieved"""
        if not self.hits:
            return None
        return CONTEXT_SEPARATOR.join(hit.content for hit in self.hits)


class Searcher:
    """
    Retrieves knowledge-base context for an optimized query.

    An empty candidate pool (empty store, or a tag filter that eliminates
    everything) skips the embedding call and the search entirely.
    """

    def __init__(
        self,
        store: VectorStore,
        embedding_service: EmbeddingService,
        topk: int = DEFAULT_TOPK,
    ):
        self._store = store
        self._embedding = embedding_service
        self._topk = topk

    @property
    def store(self) -> VectorStore:
        return self._store

    async def candidate_count(self, tag_filter: Optional[Sequence[str]] = None) -> int:
        """Number of entries that survive the tag filter"""
        return await asyncio.to_thread(self._store.count, tag_filter)

    async def retrieve(
        self,
        query_text: str,
        tag_filter: Optional[Sequence[str]] = None,
    ) -> RetrievalResult:
        """
        Fetch the top matches for ``query_text``.

        Args:
            query_text: Optimized retrieval query
            tag_filter: Optional tags every match must carry

        Returns:
            RetrievalResult (context is None when nothing was retrieved,
            including when ``query_text`` is blank)

        Raises:
            ExternalAPIFailure: if embedding the query fails
            RetrievalFailure: if the vector search fails
        """
        if not query_text or not query_text.strip():
            logger.warning("Retrieval query is empty, skipping search")
            return RetrievalResult(query=query_text or "", skipped=True)

        pool_size = await self.candidate_count(tag_filter)
        if pool_size == 0:
            logger.info("No candidates for tag filter %s, skipping search", list(tag_filter or []))
            return RetrievalResult(query=query_text, skipped=True)

        query_vector = await asyncio.to_thread(self._embedding.embed_single, query_text)

        try:
            hits = await asyncio.to_thread(
                self._store.search, query_vector, self._topk, tag_filter
            )
        except RetrievalFailure:
            raise
        except Exception as e:
            raise RetrievalFailure(f"Vector search failed: {e}") from e

        logger.info("Retrieved %d of %d candidate(s)", len(hits), pool_size)
        return RetrievalResult(query=query_text, hits=hits)
