"""
Vector index contract.

Every backend (Qdrant for deployments, in-memory for development and tests)
implements this interface, so the sync engine and query path stay agnostic
to the concrete database.

Dependencies: abc
System role: Boundary interface for the vector database
"""

from abc import ABC, abstractmethod
from typing import Any

from vector_service.boundary.vdb.filters import create_doc_id_filter
from vector_service.boundary.vdb.vector_schemas import PayloadFilter, Point, SearchResult


class VectorIndex(ABC):
    """Collection lifecycle plus point upsert, search and delete."""

    collection_name: str

    @abstractmethod
    def ensure_collection(self, create_if_missing: bool = True) -> bool:
        """
        Make sure the collection exists.

        Returns:
            bool: True when the collection exists (or was created)
        """

    @abstractmethod
    def upsert(self, points: list[Point]) -> None:
        """Insert or replace points. Empty input is a no-op."""

    @abstractmethod
    def search(
        self,
        vector: list[float],
        limit: int = 10,
        filter: PayloadFilter | None = None,
        with_payload: bool = True,
        with_vector: bool = False,
        score_threshold: float | None = None,
        ef_search: int | None = None,
    ) -> list[SearchResult]:
        """Return nearest neighbours ordered by descending score."""

    @abstractmethod
    def delete_by_ids(self, ids: list[str]) -> None:
        """Delete points by id. Empty input is a no-op."""

    @abstractmethod
    def delete_by_filter(self, filter: PayloadFilter) -> None:
        """Delete every point matching the filter."""

    def delete_by_doc_id(self, doc_id: str) -> None:
        """Delete every point owned by a document. Absence is not an error."""
        self.delete_by_filter(create_doc_id_filter(doc_id))

    @abstractmethod
    def get_collection_info(self) -> dict[str, Any]:
        """Return backend-specific collection details."""

    @abstractmethod
    def health_check(self) -> bool:
        """Return True when the backend is reachable."""
