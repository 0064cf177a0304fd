"""
Tests for IngestService (embed, upsert, delete).
"""

import uuid
from unittest.mock import MagicMock

import pytest

from vector_service.application.services import IngestService
from vector_service.boundary.vdb.memory_index import InMemoryVectorIndex
from vector_service.boundary.vdb.vector_schemas import Point
from vector_service.core.exceptions import (
    DimensionMismatchError,
    EmptyInputError,
    InputError,
    InvalidFilterError,
    TextTooLongError,
)
from vector_service.models.ingest import DeleteRequest, EmbedRequest, UpsertRequest


@pytest.fixture
def service(vector_index, embedding_provider) -> IngestService:
    return IngestService(vector_index, embedding_provider)


def _point(vector: list[float], **payload) -> dict:
    return {"id": str(uuid.uuid4()), "vector": vector, "payload": payload}


class TestEmbed:
    def test_returns_chunks_with_embeddings(self, service, long_text):
        # Act
        data = service.embed(EmbedRequest(text=long_text, doc_id="doc-1", chunk_size=100))

        # Assert
        assert data.total_chunks == len(data.chunks) > 1
        assert data.embedding_dimensions == 8
        assert data.total_tokens == sum(c.tokens for c in data.chunks)
        assert all(len(c.embedding) == 8 for c in data.chunks)
        assert all(c.doc_id == "doc-1" for c in data.chunks)
        assert [c.chunk_index for c in data.chunks] == list(range(data.total_chunks))

    def test_blank_text_rejected(self, service):
        with pytest.raises(EmptyInputError):
            service.embed(EmbedRequest(text="   "))

    def test_text_over_provider_limit_rejected(self, vector_index):
        provider = MagicMock()
        provider.max_input_length.return_value = 10
        service = IngestService(vector_index, provider)

        with pytest.raises(TextTooLongError) as exc_info:
            service.embed(EmbedRequest(text="x" * 100))

        assert exc_info.value.message == "Text too long: ~25 tokens (max: 10)"
        provider.embed_batch.assert_not_called()


class TestUpsert:
    def test_creates_collection_and_upserts_in_batches(self, embedding_provider):
        # Arrange
        index = InMemoryVectorIndex(vector_size=2)
        service = IngestService(index, embedding_provider)
        request = UpsertRequest(
            points=[_point([1.0, 0.0], docId="a") for _ in range(5)],
            batch_size=2,
        )

        # Act
        data = service.upsert(request)

        # Assert
        assert data.points_upserted == 5
        assert data.collection_created is True
        assert data.collection_exists is True
        assert len(index.points()) == 5

    def test_existing_collection_is_not_recreated(self, service, vector_index):
        vector_index.ensure_collection()

        data = service.upsert(UpsertRequest(points=[_point([0.1] * 8)]))

        assert data.collection_created is False

    def test_missing_collection_without_create_rejected(self, service):
        with pytest.raises(InputError):
            service.upsert(
                UpsertRequest(points=[_point([0.1] * 8)], create_collection_if_missing=False)
            )

    def test_inconsistent_dimensions_rejected(self, service, vector_index):
        request = UpsertRequest(points=[_point([0.1] * 8), _point([0.1] * 4)])

        with pytest.raises(DimensionMismatchError) as exc_info:
            service.upsert(request)

        assert exc_info.value.details["expected"] == 8
        assert exc_info.value.details["found"] == 4
        assert vector_index.points() == []

    def test_point_ids_must_be_uuids(self):
        with pytest.raises(ValueError):
            UpsertRequest(points=[{"id": "not-a-uuid", "vector": [0.1]}])


class TestDelete:
    @pytest.fixture
    def populated(self, vector_index) -> InMemoryVectorIndex:
        vector_index.upsert(
            [
                Point(id="p1", vector=[0.1] * 8, payload={"docId": "a", "year": 2020}),
                Point(id="p2", vector=[0.1] * 8, payload={"docId": "a", "year": 2024}),
                Point(id="p3", vector=[0.1] * 8, payload={"docId": "b", "year": 2024}),
            ]
        )
        return vector_index

    def test_delete_by_ids(self, service, populated):
        data = service.delete(DeleteRequest(ids=["p1", "p3"]))

        assert data.deleted_by == "ids"
        assert data.deleted_count == "2 point(s) by ID"
        assert [p.id for p in populated.points()] == ["p2"]

    def test_delete_by_doc_id(self, service, populated):
        data = service.delete(DeleteRequest(doc_id="a"))

        assert data.deleted_by == "doc_id"
        assert data.deleted_count == "All points with docId: a"
        assert [p.id for p in populated.points()] == ["p3"]

    def test_delete_by_filter(self, service, populated):
        data = service.delete(
            DeleteRequest(filter={"must": [{"key": "year", "range": {"gte": 2024}}]})
        )

        assert data.deleted_by == "filter"
        assert [p.id for p in populated.points()] == ["p1"]

    def test_ids_take_precedence(self, service, populated):
        data = service.delete(DeleteRequest(ids=["p1"], doc_id="b"))

        assert data.deleted_by == "ids"
        assert sorted(p.id for p in populated.points()) == ["p2", "p3"]

    def test_invalid_filter_rejected(self, service, populated):
        with pytest.raises(InvalidFilterError):
            service.delete(DeleteRequest(filter={"must": "year"}))

        assert len(populated.points()) == 3

    def test_requires_a_selector(self):
        with pytest.raises(ValueError):
            DeleteRequest()
