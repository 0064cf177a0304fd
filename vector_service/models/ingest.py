"""
Embed, upsert and delete request/response models.

Dependencies: pydantic
System role: Ingestion API schemas
"""

from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from vector_service.core.chunking.text_chunker import EmbeddingChunk


class EmbedRequest(BaseModel):
    """Chunk and embed a text without storing it."""

    text: str = Field(min_length=1)
    doc_id: str | None = None
    chunk_size: int = Field(default=400, ge=50, le=2000)
    overlap: int = Field(default=15, ge=0, le=50)
    preserve_sentences: bool = True


class EmbeddedChunk(EmbeddingChunk):
    embedding: list[float]


class EmbedData(BaseModel):
    chunks: list[EmbeddedChunk]
    total_chunks: int
    total_tokens: int
    embedding_dimensions: int
    processing_time_ms: int


class UpsertPoint(BaseModel):
    id: UUID = Field(description="Point ID (UUID)")
    vector: list[float] = Field(min_length=1)
    payload: dict[str, Any] = Field(default_factory=dict)


class UpsertRequest(BaseModel):
    points: list[UpsertPoint] = Field(min_length=1)
    create_collection_if_missing: bool = True
    batch_size: int = Field(default=1000, ge=1, le=5000)


class UpsertData(BaseModel):
    points_upserted: int
    collection_exists: bool
    collection_created: bool
    processing_time_ms: int


class DeleteRequest(BaseModel):
    """Delete by point ids, by owning document, or by payload filter."""

    ids: list[str] | None = None
    doc_id: str | None = None
    filter: dict[str, Any] | None = None

    @model_validator(mode="after")
    def _one_selector(self) -> "DeleteRequest":
        if not self.ids and not self.doc_id and not self.filter:
            raise ValueError("Either ids, doc_id, or filter must be provided")
        return self


class DeleteData(BaseModel):
    deleted_by: Literal["ids", "doc_id", "filter"]
    deleted_count: str
    processing_time_ms: int
