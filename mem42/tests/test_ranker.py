"""
Tests for cosine similarity ranking
"""

import pytest

from mem42.common.schemas import StoredEntry


def entry(entry_id, vector, tags=None):
    return StoredEntry(id=entry_id, content=f"content {entry_id}", embedding=vector, tags=tags)


class TestCosineSimilarity:
    """Tests for cosine_similarity"""

    def test_identical_vectors(self):
        from mem42.retriever.ranker import cosine_similarity

        assert cosine_similarity([0.3, 0.4, 0.5], [0.3, 0.4, 0.5]) == pytest.approx(1.0)

    def test_orthogonal_vectors(self):
        from mem42.retriever.ranker import cosine_similarity

        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)

    def test_opposite_vectors(self):
        from mem42.retriever.ranker import cosine_similarity

        assert cosine_similarity([1.0, 2.0], [-1.0, -2.0]) == pytest.approx(-1.0)

    def test_symmetric(self):
        from mem42.retriever.ranker import cosine_similarity

        a, b = [0.2, 0.7, 0.1], [0.9, 0.1, 0.4]
        assert cosine_similarity(a, b) == pytest.approx(cosine_similarity(b, a))

    def test_zero_magnitude_scores_zero(self):
        from mem42.retriever.ranker import cosine_similarity

        assert cosine_similarity([0.0, 0.0], [1.0, 0.0]) == 0.0

    def test_dimension_mismatch(self):
        from mem42.retriever.ranker import cosine_similarity
        from mem42.common.errors import DimensionMismatchError

        with pytest.raises(DimensionMismatchError):
            cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0])


class TestFindTopKSimilar:
    """Tests for find_top_k_similar"""

    def test_returns_best_matches_in_order(self):
        from mem42.retriever.ranker import find_top_k_similar

        a = entry("A", [1.0, 0.0])
        b = entry("B", [0.0, 1.0])
        c = entry("C", [0.9, 0.1])

        result = find_top_k_similar([1.0, 0.0], [a, b, c], 2)

        assert [hit.id for hit in result] == ["A", "C"]

    def test_fewer_candidates_than_k(self):
        from mem42.retriever.ranker import find_top_k_similar

        result = find_top_k_similar([1.0, 0.0], [entry("A", [1.0, 0.0])], 5)

        assert len(result) == 1

    def test_empty_candidates(self):
        from mem42.retriever.ranker import find_top_k_similar

        assert find_top_k_similar([1.0, 0.0], [], 3) == []

    def test_zero_query_returns_nothing(self):
        from mem42.retriever.ranker import find_top_k_similar

        assert find_top_k_similar([0.0, 0.0], [entry("A", [1.0, 0.0])], 3) == []

    def test_empty_query_returns_nothing(self):
        from mem42.retriever.ranker import find_top_k_similar

        assert find_top_k_similar([], [entry("A", [1.0, 0.0])], 3) == []

    def test_zero_norm_candidate_ranks_above_opposite(self):
        from mem42.retriever.ranker import find_top_k_similar

        result = find_top_k_similar(
            [1.0, 0.0], [entry("N", [-1.0, 0.0]), entry("Z", [0.0, 0.0])], 2
        )

        assert [hit.id for hit in result] == ["Z", "N"]

    def test_ties_keep_insertion_order(self):
        from mem42.retriever.ranker import find_top_k_similar

        candidates = [entry("first", [2.0, 0.0]), entry("second", [1.0, 0.0]), entry("third", [3.0, 0.0])]

        result = find_top_k_similar([1.0, 0.0], candidates, 3)

        assert [hit.id for hit in result] == ["first", "second", "third"]

    def test_dimension_mismatch_raises(self):
        from mem42.retriever.ranker import find_top_k_similar
        from mem42.common.errors import DimensionMismatchError

        with pytest.raises(DimensionMismatchError):
            find_top_k_similar([1.0, 0.0], [entry("A", [1.0, 0.0]), entry("B", [1.0, 0.0, 0.0])], 2)

    @pytest.mark.parametrize("k", [0, -1, 1.5, True, None])
    def test_invalid_k(self, k):
        from mem42.retriever.ranker import find_top_k_similar

        with pytest.raises(ValueError):
            find_top_k_similar([1.0, 0.0], [entry("A", [1.0, 0.0])], k)

    def test_accepts_numpy_integer_k(self):
        import numpy as np
        from mem42.retriever.ranker import find_top_k_similar

        candidates = [entry("A", [1.0, 0.0]), entry("B", [0.0, 1.0]), entry("C", [0.9, 0.1])]

        result = find_top_k_similar([1.0, 0.0], candidates, np.int64(2))

        assert [hit.id for hit in result] == ["A", "C"]

    def test_custom_vector_accessor(self):
        from mem42.retriever.ranker import find_top_k_similar

        pairs = [("x", [0.0, 1.0]), ("y", [1.0, 0.0])]

        result = find_top_k_similar([1.0, 0.0], pairs, 1, vector_of=lambda p: p[1])

        assert result[0][0] == "y"


class TestScoreCandidates:
    """Tests for score_candidates"""

    def test_scores_descending(self):
        from mem42.retriever.ranker import score_candidates

        scored = score_candidates([1.0, 0.0], [entry("B", [0.0, 1.0]), entry("A", [1.0, 0.0])])

        assert [e.id for e, _ in scored] == ["A", "B"]
        assert scored[0][1] == pytest.approx(1.0)
        assert scored[1][1] == pytest.approx(0.0)

    def test_zero_norm_candidate_scores_zero(self):
        from mem42.retriever.ranker import score_candidates

        scored = score_candidates([1.0, 0.0], [entry("Z", [0.0, 0.0])])

        assert scored[0][1] == 0.0

    def test_none_query(self):
        from mem42.retriever.ranker import score_candidates

        assert score_candidates(None, [entry("A", [1.0, 0.0])]) == []
