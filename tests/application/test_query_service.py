"""
Tests for QueryService.

Runs against the in-memory vector index with hand-picked vectors so result
order is predictable.
"""

from unittest.mock import MagicMock

import pytest

from vector_service.application.services import QueryService
from vector_service.boundary.vdb.memory_index import InMemoryVectorIndex
from vector_service.boundary.vdb.vector_schemas import Point
from vector_service.core.exceptions import InvalidFilterError
from vector_service.models.query import QueryRequest


@pytest.fixture
def index() -> InMemoryVectorIndex:
    index = InMemoryVectorIndex(vector_size=2)
    index.upsert(
        [
            Point(id="a", vector=[1.0, 0.0], payload={"docId": "doc-a", "lang": "en"}),
            Point(id="a-dup", vector=[0.99, 0.05], payload={"docId": "doc-a", "lang": "en"}),
            Point(id="b", vector=[0.6, 0.8], payload={"docId": "doc-b", "lang": "de"}),
        ]
    )
    return index


@pytest.fixture
def provider() -> MagicMock:
    provider = MagicMock()
    provider.embed.return_value = [1.0, 0.0]
    return provider


@pytest.fixture
def service(index, provider) -> QueryService:
    return QueryService(index, provider)


class TestQuery:
    def test_vector_query_skips_embedding(self, service, provider):
        # Act
        data = service.query(QueryRequest(vector=[1.0, 0.0], top_k=2))

        # Assert
        provider.embed.assert_not_called()
        assert [r.id for r in data.results] == ["a", "a-dup"]
        assert data.query.actual_k == 2
        assert data.query.mmr_applied is False

    def test_text_query_is_embedded(self, service, provider):
        data = service.query(QueryRequest(text="solar storage", top_k=1))

        provider.embed.assert_called_once_with("solar storage")
        assert data.results[0].id == "a"
        assert data.query.text == "solar storage"

    def test_vectors_stripped_unless_requested(self, service):
        plain = service.query(QueryRequest(vector=[1.0, 0.0]))
        with_vectors = service.query(QueryRequest(vector=[1.0, 0.0], with_vectors=True))

        assert all(r.vector is None for r in plain.results)
        assert plain.query.embedding is None
        assert with_vectors.results[0].vector == [1.0, 0.0]
        assert with_vectors.query.embedding == [1.0, 0.0]

    def test_filters_are_applied(self, service):
        data = service.query(
            QueryRequest(
                vector=[1.0, 0.0],
                filters={"must": [{"key": "lang", "match": {"value": "de"}}]},
            )
        )

        assert [r.id for r in data.results] == ["b"]

    def test_invalid_filters_raise(self, service):
        with pytest.raises(InvalidFilterError) as exc_info:
            service.query(QueryRequest(vector=[1.0, 0.0], filters={"where": []}))

        assert exc_info.value.errors == [
            "Invalid filter key: where. Valid keys are: must, should, must_not"
        ]

    def test_mmr_promotes_diverse_result(self, service):
        data = service.query(
            QueryRequest.model_validate(
                {"vector": [1.0, 0.0], "top_k": 2, "mmr": {"enabled": True, "lambda": 0.3}}
            )
        )

        assert [r.id for r in data.results] == ["a", "b"]
        assert data.query.mmr_applied is True
        assert data.results[0].mmr_rank == 1
        assert data.results[1].original_score is not None
        assert all(r.vector is None for r in data.results)

    def test_mmr_over_fetches_candidates(self, provider):
        index = MagicMock()
        index.search.return_value = []
        service = QueryService(index, provider)

        service.query(QueryRequest.model_validate({"vector": [1.0, 0.0], "top_k": 5, "mmr": {"enabled": True, "fetch_k": 40}}))

        kwargs = index.search.call_args.kwargs
        assert kwargs["limit"] == 40
        assert kwargs["with_vector"] is True

    def test_diversity_reranking(self, service):
        data = service.query(
            QueryRequest.model_validate(
                {
                    "vector": [1.0, 0.0],
                    "top_k": 2,
                    "diversity_reranking": {"enabled": True, "weight": 0.6},
                }
            )
        )

        assert [r.id for r in data.results] == ["a", "b"]
        assert data.query.diversity_applied is True
        assert data.query.mmr_applied is False

    def test_score_threshold(self, service):
        data = service.query(QueryRequest(vector=[1.0, 0.0], score_threshold=0.9))

        assert [r.id for r in data.results] == ["a", "a-dup"]


class TestQueryRequestValidation:
    def test_requires_text_or_vector(self):
        with pytest.raises(ValueError):
            QueryRequest()

    def test_rejects_both_text_and_vector(self):
        with pytest.raises(ValueError):
            QueryRequest(text="hi", vector=[1.0])

    def test_top_k_bounds(self):
        with pytest.raises(ValueError):
            QueryRequest(vector=[1.0], top_k=0)
