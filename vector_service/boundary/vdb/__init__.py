"""
Vector database boundary layer.

Provides the VectorIndex contract, payload filter helpers and schemas.
Concrete backends are built through vector_index_factory:
- QdrantVectorIndex: Production Qdrant client
- InMemoryVectorIndex: Local/dev and test backend

Dependencies: qdrant_client (Qdrant backend only)
System role: Vector index adapter for sync and retrieval
"""

from vector_service.boundary.vdb.base import VectorIndex
from vector_service.boundary.vdb.vector_schemas import (
    DOC_ID_KEY,
    FieldCondition,
    MatchValue,
    PayloadFilter,
    Point,
    RangeCondition,
    SearchResult,
)

__all__ = [
    "DOC_ID_KEY",
    "FieldCondition",
    "MatchValue",
    "PayloadFilter",
    "Point",
    "RangeCondition",
    "SearchResult",
    "VectorIndex",
]
