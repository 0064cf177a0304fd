"""
Tests for MMR and diversity re-ranking.
"""

import pytest

from vector_service.boundary.vdb.vector_schemas import SearchResult
from vector_service.core.exceptions import DimensionMismatchError
from vector_service.core.reranking.mmr import (
    MMROptions,
    apply_diversity_reranking,
    apply_mmr,
    cosine_similarity,
)


def _result(point_id: str, score: float, vector: list[float] | None) -> SearchResult:
    return SearchResult(id=point_id, score=score, payload={"docId": point_id}, vector=vector)


@pytest.fixture
def near_duplicates() -> list[SearchResult]:
    """Candidate 1 matches the query; 2 and 3 are near-duplicates of 1."""
    return [
        _result("c1", 0.90, [1.0, 0.0, 0.0]),
        _result("c2", 0.85, [0.99, 0.1, 0.0]),
        _result("c3", 0.84, [0.99, 0.0, 0.1]),
    ]


class TestCosineSimilarity:
    def test_identical_vectors(self):
        assert cosine_similarity([1.0, 2.0], [1.0, 2.0]) == pytest.approx(1.0)

    def test_orthogonal_vectors(self):
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)

    def test_zero_norm_returns_zero(self):
        assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0

    def test_length_mismatch_raises(self):
        with pytest.raises(DimensionMismatchError):
            cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0])


class TestApplyMMR:
    def test_near_duplicates_tie_break_on_input_order(self, near_duplicates):
        # Arrange
        query = [1.0, 0.0, 0.0]

        # Act
        ranked = apply_mmr(near_duplicates, query, MMROptions(lambda_=0.5), top_k=2)

        # Assert
        assert [r.id for r in ranked] == ["c1", "c2"]
        assert [r.mmr_rank for r in ranked] == [1, 2]
        assert ranked[0].original_score == 0.90
        assert ranked[1].original_score == 0.85

    def test_lambda_one_is_pure_relevance(self):
        results = [
            _result("far", 0.9, [0.0, 1.0]),
            _result("near", 0.8, [1.0, 0.0]),
            _result("mid", 0.7, [1.0, 1.0]),
        ]

        ranked = apply_mmr(results, [1.0, 0.0], MMROptions(lambda_=1.0), top_k=3)

        assert [r.id for r in ranked] == ["near", "mid", "far"]

    def test_lambda_zero_prefers_dissimilar_results(self):
        results = [
            _result("a", 0.9, [1.0, 0.0]),
            _result("a-dup", 0.89, [0.99, 0.1]),
            _result("b", 0.5, [0.0, 1.0]),
        ]

        ranked = apply_mmr(results, [1.0, 0.0], MMROptions(lambda_=0.0), top_k=2)

        assert [r.id for r in ranked] == ["a", "b"]

    def test_lambda_alias_is_accepted(self):
        assert MMROptions.model_validate({"lambda": 0.2}).lambda_ == 0.2

    def test_fetch_k_limits_candidates(self, near_duplicates):
        ranked = apply_mmr(near_duplicates, [1.0, 0.0, 0.0], MMROptions(fetch_k=1), top_k=3)

        assert [r.id for r in ranked] == ["c1"]

    def test_candidates_without_vectors_pass_through(self):
        results = [_result("a", 0.9, None), _result("b", 0.8, None), _result("c", 0.7, None)]

        ranked = apply_mmr(results, [1.0, 0.0], MMROptions(), top_k=2)

        assert [r.id for r in ranked] == ["a", "b"]
        assert [r.mmr_score for r in ranked] == [0.9, 0.8]
        assert [r.mmr_rank for r in ranked] == [1, 2]

    def test_empty_input_returns_empty(self):
        assert apply_mmr([], [1.0], MMROptions(), top_k=5) == []

    def test_top_k_larger_than_candidates(self, near_duplicates):
        ranked = apply_mmr(near_duplicates, [1.0, 0.0, 0.0], MMROptions(), top_k=10)

        assert len(ranked) == 3

    def test_payload_is_preserved(self, near_duplicates):
        ranked = apply_mmr(near_duplicates, [1.0, 0.0, 0.0], MMROptions(), top_k=1)

        assert ranked[0].payload == {"docId": "c1"}


class TestApplyDiversityReranking:
    def test_seeds_with_highest_score(self):
        results = [
            _result("low", 0.2, [0.0, 1.0]),
            _result("high", 0.9, [1.0, 0.0]),
        ]

        ranked = apply_diversity_reranking(results, diversity_weight=0.3, top_k=1)

        assert ranked[0].id == "high"
        assert ranked[0].mmr_score == 0.9

    def test_penalizes_similar_results(self):
        results = [
            _result("a", 0.9, [1.0, 0.0]),
            _result("a-dup", 0.85, [1.0, 0.01]),
            _result("b", 0.8, [0.0, 1.0]),
        ]

        ranked = apply_diversity_reranking(results, diversity_weight=0.5, top_k=3)

        assert [r.id for r in ranked] == ["a", "b", "a-dup"]

    def test_zero_weight_keeps_score_order(self):
        results = [
            _result("a", 0.9, [1.0, 0.0]),
            _result("a-dup", 0.85, [1.0, 0.01]),
            _result("b", 0.8, [0.0, 1.0]),
        ]

        ranked = apply_diversity_reranking(results, diversity_weight=0.0, top_k=3)

        assert [r.id for r in ranked] == ["a", "a-dup", "b"]

    def test_score_ties_seed_first_occurrence(self):
        results = [_result("first", 0.5, [1.0, 0.0]), _result("second", 0.5, [0.0, 1.0])]

        ranked = apply_diversity_reranking(results, top_k=1)

        assert ranked[0].id == "first"

    def test_empty_input_returns_empty(self):
        assert apply_diversity_reranking([], top_k=3) == []
