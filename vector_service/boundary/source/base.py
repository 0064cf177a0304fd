"""
Source store contracts.

DocumentSource serves bulk scans; ChangeFeed serves the CDC watch loop.

Dependencies: abc
System role: Boundary interfaces for the source-of-truth store
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator

from vector_service.boundary.source.source_schemas import ChangeEvent, SourceDocument


class DocumentSource(ABC):
    """Batch access to the authoritative document collection."""

    embedding_marker_field: str = "embedding"

    @abstractmethod
    def count_documents(self, only_missing_embeddings: bool = False) -> int:
        """Count documents, optionally only those lacking the embedding marker."""

    @abstractmethod
    def count_with_embeddings(self) -> int:
        """Count documents carrying the embedding marker."""

    @abstractmethod
    def iter_documents(
        self,
        only_missing_embeddings: bool = False,
        batch_size: int = 1000,
    ) -> Iterator[SourceDocument]:
        """Stream documents, fetching batch_size at a time."""

    @abstractmethod
    def ping(self) -> bool:
        """Return True when the store is reachable."""

    def has_embedding(self, document: SourceDocument) -> bool:
        return bool(document.data.get(self.embedding_marker_field))

    def close(self) -> None:
        """Release connections."""


class ChangeFeed(ABC):
    """
    Re-openable subscription to insert/update/delete events.

    Implementations raise FeedError on disconnect or unexpected closure.
    """

    @abstractmethod
    def open(self) -> None:
        """Connect and subscribe. Raises FeedError on failure."""

    @abstractmethod
    def next_event(self) -> ChangeEvent | None:
        """
        Wait for the next event.

        Returns:
            ChangeEvent | None: None when nothing arrived within the await window

        Raises:
            FeedError: When the subscription fails or closes
        """

    @abstractmethod
    def close(self) -> None:
        """Tear down subscription and connection. Safe to call repeatedly."""

    @property
    @abstractmethod
    def connected(self) -> bool:
        """True while a connection is held."""

    @property
    @abstractmethod
    def has_stream(self) -> bool:
        """True while a subscription is open."""

    @abstractmethod
    def ping(self) -> bool:
        """Return True when the store answers a ping."""
