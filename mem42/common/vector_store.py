"""
Vector Stores

Two interchangeable knowledge-base backends:
- InMemoryVectorStore: in-process entries ranked with the Similarity Ranker
- QdrantVectorStore: external Qdrant collection (cosine distance)

Both expose search / upsert / count / delete plus collection maintenance.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .errors import DimensionMismatchError, RetrievalFailure
from .schemas import StoredEntry, normalize_tags

logger = logging.getLogger("mem42.common.vector_store")

DEFAULT_COLLECTION = "mem42"
DEFAULT_DIMENSION = 768


@dataclass
class SearchHit:
    """A single ranked entry returned by a vector store"""
    id: str
    content: str
    score: float
    tags: List[str] = field(default_factory=list)
    source: Optional[str] = None


@dataclass
class CollectionInfo:
    """Summary of a knowledge-base collection"""
    point_count: int
    dimension: Optional[int] = None


def matches_tag_filter(entry_tags: Optional[Sequence[str]], tag_filter: Optional[Sequence[str]]) -> bool:
    """
    Permissive tag match.

    Every filter tag must appear as a case-insensitive substring of at least
    one of the entry's tags. An empty filter matches everything; an untagged
    entry never matches a non-empty filter.
    """
    if not tag_filter:
        return True
    if not entry_tags:
        return False

    lowered = [t.lower() for t in entry_tags]
    return all(
        any(wanted.lower() in tag for tag in lowered)
        for wanted in tag_filter
    )


class VectorStore(ABC):
    """Interface shared by the knowledge-base backends"""

    @abstractmethod
    def search(
        self,
        vector: Sequence[float],
        limit: int,
        tag_filter: Optional[Sequence[str]] = None,
    ) -> List[SearchHit]:
        """Return up to ``limit`` entries ranked by cosine similarity"""

    @abstractmethod
    def upsert(self, id: str, vector: Sequence[float], payload: Dict[str, Any]) -> None:
        """Insert or replace one entry"""

    @abstractmethod
    def count(self, tag_filter: Optional[Sequence[str]] = None) -> int:
        """Number of entries that pass ``tag_filter``"""

    @abstractmethod
    def delete(self, ids: Iterable[str]) -> None:
        """Remove entries by id"""

    @abstractmethod
    def get_collection_info(self) -> CollectionInfo:
        """Point count (and dimension where known)"""

    @abstractmethod
    def recreate_collection(self, dimension: int, distance: str = "cosine") -> None:
        """Drop every entry and reset the collection parameters"""

    def ensure_collection(self) -> None:
        """Create the collection if it does not exist yet"""

    def add(self, entry: StoredEntry) -> None:
        """Store a StoredEntry"""
        self.upsert(entry.id, entry.embedding, entry.to_payload())


class InMemoryVectorStore(VectorStore):
    """
    In-process knowledge base.

    Entries keep insertion order, so equal-similarity matches are returned
    in the order they were stored.
    """

    def __init__(self, dimension: Optional[int] = None):
        self._dimension = dimension
        self._entries: Dict[str, StoredEntry] = {}

    @property
    def entries(self) -> List[StoredEntry]:
        return list(self._entries.values())

    def filter(self, tag_filter: Optional[Sequence[str]] = None) -> List[StoredEntry]:
        """Entries that pass the permissive tag filter"""
        return [e for e in self._entries.values() if matches_tag_filter(e.tags, tag_filter)]

    def search(
        self,
        vector: Sequence[float],
        limit: int,
        tag_filter: Optional[Sequence[str]] = None,
    ) -> List[SearchHit]:
        from ..retriever.ranker import score_candidates

        candidates = self.filter(tag_filter)
        try:
            scored = score_candidates(vector, candidates)
        except DimensionMismatchError as e:
            raise RetrievalFailure(f"In-memory search rejected query: {e}") from e

        return [
            SearchHit(
                id=entry.id,
                content=entry.content,
                score=score,
                tags=list(entry.tags or []),
                source=entry.source,
            )
            for entry, score in scored[:limit]
        ]

    def upsert(self, id: str, vector: Sequence[float], payload: Dict[str, Any]) -> None:
        if self._dimension is None:
            self._dimension = len(vector)
        elif len(vector) != self._dimension:
            raise DimensionMismatchError(
                f"Entry {id} has dimension {len(vector)}, store expects {self._dimension}"
            )

        tags = payload.get("tags")
        self._entries[id] = StoredEntry(
            id=id,
            content=payload.get("content", ""),
            embedding=list(vector),
            tags=tags if tags else None,
            source=payload.get("source"),
        )

    def count(self, tag_filter: Optional[Sequence[str]] = None) -> int:
        if not tag_filter:
            return len(self._entries)
        return len(self.filter(tag_filter))

    def delete(self, ids: Iterable[str]) -> None:
        for entry_id in ids:
            self._entries.pop(entry_id, None)

    def get_collection_info(self) -> CollectionInfo:
        return CollectionInfo(point_count=len(self._entries), dimension=self._dimension)

    def recreate_collection(self, dimension: int, distance: str = "cosine") -> None:
        if distance.lower() != "cosine":
            raise ValueError(f"In-memory store only supports cosine distance, got {distance}")
        self._entries.clear()
        self._dimension = dimension


class QdrantVectorStore(VectorStore):
    """
    Knowledge base backed by a Qdrant collection.

    Tag filters run server-side as exact keyword matches on the ``tags``
    payload field. The collection is created lazily on first use.
    """

    _DISTANCES = {
        "cosine": "COSINE",
        "dot": "DOT",
        "euclid": "EUCLID",
    }

    def __init__(
        self,
        url: str = "",
        api_key: Optional[str] = None,
        collection: str = DEFAULT_COLLECTION,
        dimension: int = DEFAULT_DIMENSION,
        client=None,
    ):
        self._url = url
        self._api_key = api_key
        self._collection = collection
        self._dimension = dimension
        self._client = client
        self._collection_ready = False

    @classmethod
    def from_config(cls, qdrant_config, dimension: int = DEFAULT_DIMENSION) -> "QdrantVectorStore":
        return cls(
            url=qdrant_config.url,
            api_key=qdrant_config.api_key or None,
            collection=qdrant_config.collection,
            dimension=dimension,
        )

    @property
    def client(self):
        """Lazily construct the Qdrant client"""
        if self._client is None:
            from qdrant_client import QdrantClient

            if not self._url:
                raise RuntimeError("QDRANT_URL is not configured")
            self._client = QdrantClient(url=self._url, api_key=self._api_key)
            logger.info("Connected to Qdrant at %s", self._url)
        return self._client

    @property
    def collection(self) -> str:
        return self._collection

    def ensure_collection(self) -> None:
        if self._collection_ready:
            return
        if self.client.collection_exists(self._collection):
            logger.debug("Collection %s already exists", self._collection)
        else:
            logger.info("Collection %s not found, creating it", self._collection)
            self._create_collection(self._dimension, "cosine")
        self._collection_ready = True

    def _create_collection(self, dimension: int, distance: str) -> None:
        from qdrant_client import models

        distance_name = self._DISTANCES.get(distance.lower())
        if distance_name is None:
            raise ValueError(f"Unsupported distance metric: {distance}")

        self.client.create_collection(
            collection_name=self._collection,
            vectors_config=models.VectorParams(
                size=dimension,
                distance=getattr(models.Distance, distance_name),
            ),
        )

    def _build_filter(self, tag_filter: Optional[Sequence[str]]):
        tags = normalize_tags(tag_filter)
        if not tags:
            return None

        from qdrant_client import models

        return models.Filter(
            must=[
                models.FieldCondition(key="tags", match=models.MatchValue(value=tag))
                for tag in tags
            ]
        )

    def search(
        self,
        vector: Sequence[float],
        limit: int,
        tag_filter: Optional[Sequence[str]] = None,
    ) -> List[SearchHit]:
        self.ensure_collection()
        try:
            response = self.client.query_points(
                collection_name=self._collection,
                query=list(vector),
                limit=limit,
                query_filter=self._build_filter(tag_filter),
                with_payload=True,
            )
        except Exception as e:
            raise RetrievalFailure(f"Qdrant search failed: {e}") from e

        return [self._to_search_hit(point) for point in response.points]

    def _to_search_hit(self, point) -> SearchHit:
        payload = point.payload or {}
        return SearchHit(
            id=str(point.id),
            content=payload.get("content", ""),
            score=float(point.score),
            tags=list(payload.get("tags") or []),
            source=payload.get("source"),
        )

    def upsert(self, id: str, vector: Sequence[float], payload: Dict[str, Any]) -> None:
        from qdrant_client import models

        self.ensure_collection()
        self.client.upsert(
            collection_name=self._collection,
            points=[models.PointStruct(id=id, vector=list(vector), payload=payload)],
            wait=True,
        )

    def count(self, tag_filter: Optional[Sequence[str]] = None) -> int:
        self.ensure_collection()
        try:
            result = self.client.count(
                collection_name=self._collection,
                count_filter=self._build_filter(tag_filter),
                exact=True,
            )
        except Exception as e:
            raise RetrievalFailure(f"Qdrant count failed: {e}") from e
        return result.count

    def delete(self, ids: Iterable[str]) -> None:
        from qdrant_client import models

        self.ensure_collection()
        self.client.delete(
            collection_name=self._collection,
            points_selector=models.PointIdsList(points=list(ids)),
            wait=True,
        )

    def get_collection_info(self) -> CollectionInfo:
        info = self.client.get_collection(self._collection)
        return CollectionInfo(point_count=info.points_count or 0, dimension=self._dimension)

    def recreate_collection(self, dimension: int, distance: str = "cosine") -> None:
        if self.client.collection_exists(self._collection):
            self.client.delete_collection(self._collection)
        self._create_collection(dimension, distance)
        self._dimension = dimension
        self._collection_ready = True
        logger.info("Recreated collection %s (dim=%d, %s)", self._collection, dimension, distance)
