"""
Similarity Ranker

Top-K cosine-similarity ranking over in-memory entries. Pure and
synchronous: no I/O, no shared state.

Cosine similarity is used instead of a raw dot product because hosted
embeddings are not guaranteed to be unit-normalized.
"""

import operator
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar

import numpy as np

from ..common.errors import DimensionMismatchError

T = TypeVar("T")


def _default_vector(candidate) -> Sequence[float]:
    return candidate.embedding


def cosine_similarity(vec1: Sequence[float], vec2: Sequence[float]) -> float:
    """
    Cosine of the angle between two vectors.

    Returns 0.0 when either vector has zero magnitude.

    Raises:
        DimensionMismatchError: if the vectors differ in length
    """
    v1 = np.asarray(vec1, dtype=float)
    v2 = np.asarray(vec2, dtype=float)

    if v1.shape != v2.shape:
        raise DimensionMismatchError(f"Vector dimension mismatch: {v1.shape} vs {v2.shape}")

    norm1 = np.linalg.norm(v1)
    norm2 = np.linalg.norm(v2)
    if norm1 == 0 or norm2 == 0:
        return 0.0

    return float(np.dot(v1, v2) / (norm1 * norm2))


def score_candidates(
    query_vector: Optional[Sequence[float]],
    candidates: Sequence[T],
    vector_of: Callable[[T], Sequence[float]] = _default_vector,
) -> List[Tuple[T, float]]:
    """
    Score every candidate against the query, best match first.

    Ties keep their input order. An empty or all-zero query, or an empty
    candidate set, yields an empty list.

    Raises:
        DimensionMismatchError: if any candidate vector differs in length
            from the query
    """
    if query_vector is None or len(query_vector) == 0 or len(candidates) == 0:
        return []

    query = np.asarray(query_vector, dtype=float)
    query_norm = np.linalg.norm(query)
    if query_norm == 0:
        return []

    dim = query.shape[0]
    vectors = [vector_of(c) for c in candidates]
    for idx, vec in enumerate(vectors):
        if vec is None or len(vec) != dim:
            got = 0 if vec is None else len(vec)
            raise DimensionMismatchError(
                f"Candidate {idx} has dimension {got}, query has {dim}"
            )

    matrix = np.asarray(vectors, dtype=float)
    norms = np.linalg.norm(matrix, axis=1)
    dots = matrix @ query

    # Zero-magnitude candidates are unrelated to everything
    safe_norms = np.where(norms == 0, 1.0, norms)
    similarities = np.where(norms == 0, 0.0, dots / (safe_norms * query_norm))

    order = np.argsort(-similarities, kind="stable")
    return [(candidates[i], float(similarities[i])) for i in order]


def find_top_k_similar(
    query_vector: Optional[Sequence[float]],
    candidates: Sequence[T],
    k: int,
    vector_of: Callable[[T], Sequence[float]] = _default_vector,
) -> List[T]:
    """
    Return up to ``k`` candidates most similar to the query, best first.

    Args:
        query_vector: Query embedding
        candidates: Entries to rank; ``vector_of`` extracts each vector
            (defaults to the ``embedding`` attribute)
        k: Positive number of results to return

    Returns:
        ``min(k, len(candidates))`` entries for a valid query, else ``[]``
    """
    if isinstance(k, bool):
        raise ValueError(f"k must be a positive integer, got {k!r}")
    try:
        k = operator.index(k)
    except TypeError:
        raise ValueError(f"k must be a positive integer, got {k!r}") from None
    if k < 1:
        raise ValueError(f"k must be a positive integer, got {k!r}")

    scored = score_candidates(query_vector, candidates, vector_of)
    return [candidate for candidate, _ in scored[:k]]
