"""
Query request and response models.

Dependencies: pydantic
System role: Similarity search API schemas
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class MMRRequest(BaseModel):
    """MMR re-ranking parameters."""

    model_config = ConfigDict(populate_by_name=True)

    enabled: bool = False
    lambda_: float = Field(default=0.5, ge=0.0, le=1.0, alias="lambda")
    fetch_k: int = Field(default=50, ge=1, le=1000)


class DiversityRequest(BaseModel):
    """Diversity re-ranking parameters."""

    enabled: bool = False
    weight: float = Field(default=0.3, ge=0.0, le=1.0)


class QueryRequest(BaseModel):
    """Similarity search request. Exactly one of text or vector is required."""

    text: str | None = Field(default=None, min_length=1)
    vector: list[float] | None = Field(default=None, min_length=1)
    top_k: int = Field(default=10, ge=1, le=1000)
    filters: dict[str, Any] | None = Field(
        default=None,
        description="Payload filter with must / should / must_not clauses",
    )
    fetch_payload: bool = True
    with_vectors: bool = False
    score_threshold: float | None = Field(default=None, ge=0.0, le=1.0)
    ef_search: int | None = Field(default=None, ge=1, le=1000)
    mmr: MMRRequest = Field(default_factory=MMRRequest)
    diversity_reranking: DiversityRequest = Field(default_factory=DiversityRequest)

    @model_validator(mode="after")
    def _text_or_vector(self) -> "QueryRequest":
        if (self.text is None) == (self.vector is None):
            raise ValueError("Exactly one of text or vector must be provided")
        return self


class QueryResultItem(BaseModel):
    id: str
    score: float
    payload: dict[str, Any] | None = None
    vector: list[float] | None = None
    original_score: float | None = None
    mmr_score: float | None = None
    mmr_rank: int | None = None


class QueryInfo(BaseModel):
    text: str | None = None
    embedding: list[float] | None = None
    top_k: int
    actual_k: int
    filters: dict[str, Any] | None = None
    mmr_applied: bool = False
    diversity_applied: bool = False


class QueryData(BaseModel):
    results: list[QueryResultItem]
    query: QueryInfo
    processing_time_ms: int
