"""
Vector database schemas.

Pydantic models for vector operations (points, search results, payload filters).
Used for type-safe vector index interactions.

Dependencies: pydantic
System role: Type definitions for vector operations
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Payload key back-referencing the owning source document
DOC_ID_KEY = "docId"

MatchScalar = str | int | float | bool


class Point(BaseModel):
    """
    One embedded chunk stored in the vector index.

    The id is unique per chunk; payload[DOC_ID_KEY] links it to its document.
    """

    id: str = Field(description="Point identifier (UUID)")
    vector: list[float] = Field(description="Embedding vector")
    payload: dict[str, Any] = Field(default_factory=dict)


class SearchResult(BaseModel):
    """Single nearest-neighbour candidate."""

    id: str
    score: float
    payload: dict[str, Any] | None = None
    vector: list[float] | None = None


class MatchValue(BaseModel):
    value: MatchScalar


class RangeCondition(BaseModel):
    gte: float | None = None
    lte: float | None = None
    gt: float | None = None
    lt: float | None = None


class FieldCondition(BaseModel):
    """Condition over one payload field: exact match or numeric range."""

    key: str
    match: MatchValue | None = None
    range: RangeCondition | None = None


class PayloadFilter(BaseModel):
    """
    Boolean combination of field conditions.

    A clause entry may itself be a PayloadFilter, which keeps an inner OR
    group intact when filters are combined with AND (and vice versa).
    """

    model_config = ConfigDict(extra="forbid")

    must: "list[FieldCondition | PayloadFilter] | None" = None
    should: "list[FieldCondition | PayloadFilter] | None" = None
    must_not: "list[FieldCondition | PayloadFilter] | None" = None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
PayloadFilter.model_rebuild()
