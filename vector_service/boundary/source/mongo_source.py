"""
MongoDB source store.

MongoDocumentSource scans the collection for bulk sync; MongoChangeFeed wraps
a change stream filtered to insert/update/delete with full-document lookup.

Dependencies: pymongo, vector_service.core.exceptions
System role: Source-of-truth adapter (bulk scan + CDC)
"""

import logging
import threading
from collections.abc import Iterator
from typing import Any

from pymongo import MongoClient
from pymongo.change_stream import CollectionChangeStream
from pymongo.errors import PyMongoError

from vector_service.boundary.source.base import ChangeFeed, DocumentSource
from vector_service.boundary.source.source_schemas import (
    ChangeEvent,
    OperationType,
    SourceDocument,
)
from vector_service.core.exceptions import FeedError

logger = logging.getLogger(__name__)

WATCHED_OPERATIONS = [op.value for op in OperationType]


def to_source_document(raw: dict[str, Any]) -> SourceDocument:
    """Convert a raw MongoDB document into a SourceDocument."""
    data = {k: v for k, v in raw.items() if k != "_id"}
    return SourceDocument(id=str(raw["_id"]), data=data)


def to_change_event(change: dict[str, Any]) -> ChangeEvent:
    """Convert a raw change-stream document into a ChangeEvent."""
    full_document = change.get("fullDocument")
    snapshot = None
    if full_document is not None:
        snapshot = to_source_document(full_document)
        snapshot.updated_at = change.get("wallTime")
    return ChangeEvent(
        operation_type=OperationType(change["operationType"]),
        document_id=str(change["documentKey"]["_id"]),
        full_document=snapshot,
    )


class MongoDocumentSource(DocumentSource):
    """Bulk access to one MongoDB collection."""

    def __init__(
        self,
        uri: str,
        database: str,
        collection: str,
        embedding_marker_field: str = "embedding",
        server_selection_timeout_ms: int = 10000,
        max_pool_size: int = 5,
        client: MongoClient | None = None,
    ) -> None:
        self.embedding_marker_field = embedding_marker_field
        self._client = client or MongoClient(
            uri,
            maxPoolSize=max_pool_size,
            serverSelectionTimeoutMS=server_selection_timeout_ms,
        )
        self._collection = self._client[database][collection]

    def _missing_query(self, only_missing_embeddings: bool) -> dict[str, Any]:
        if only_missing_embeddings:
            return {self.embedding_marker_field: {"$exists": False}}
        return {}

    def count_documents(self, only_missing_embeddings: bool = False) -> int:
        return self._collection.count_documents(self._missing_query(only_missing_embeddings))

    def count_with_embeddings(self) -> int:
        return self._collection.count_documents({self.embedding_marker_field: {"$exists": True}})

    def iter_documents(
        self,
        only_missing_embeddings: bool = False,
        batch_size: int = 1000,
    ) -> Iterator[SourceDocument]:
        cursor = self._collection.find(self._missing_query(only_missing_embeddings)).batch_size(
            batch_size
        )
        try:
            for raw in cursor:
                yield to_source_document(raw)
        finally:
            cursor.close()

    def ping(self) -> bool:
        try:
            self._client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.warning(f"{__name__}:ping - MongoDB unreachable: {e}")
            return False

    def close(self) -> None:
        self._client.close()


class MongoChangeFeed(ChangeFeed):
    """
    Change stream over one MongoDB collection.

    Each open() creates a fresh client; close() may be called from another
    thread to interrupt a pending next_event().
    """

    def __init__(
        self,
        uri: str,
        database: str,
        collection: str,
        max_await_time_ms: int = 30000,
        server_selection_timeout_ms: int = 10000,
        max_pool_size: int = 5,
    ) -> None:
        self._uri = uri
        self._database = database
        self._collection_name = collection
        self._max_await_time_ms = max_await_time_ms
        self._server_selection_timeout_ms = server_selection_timeout_ms
        self._max_pool_size = max_pool_size
        self._client: MongoClient | None = None
        self._stream: CollectionChangeStream | None = None
        self._lock = threading.Lock()

    def open(self) -> None:
        self.close()
        try:
            client = MongoClient(
                self._uri,
                maxPoolSize=self._max_pool_size,
                serverSelectionTimeoutMS=self._server_selection_timeout_ms,
                heartbeatFrequencyMS=10000,
            )
            client.admin.command("ping")
            stream = client[self._database][self._collection_name].watch(
                pipeline=[{"$match": {"operationType": {"$in": WATCHED_OPERATIONS}}}],
                full_document="updateLookup",
                max_await_time_ms=self._max_await_time_ms,
            )
        except PyMongoError as e:
            raise FeedError(f"Failed to open change stream: {e}") from e

        with self._lock:
            self._client = client
            self._stream = stream
        logger.debug(f"{__name__}:open - Change stream established")

    def next_event(self) -> ChangeEvent | None:
        with self._lock:
            stream = self._stream
        if stream is None:
            raise FeedError("Change stream is not open")

        try:
            change = stream.try_next()
        except PyMongoError as e:
            raise FeedError(f"Change stream error: {e}") from e

        if change is None:
            if not stream.alive:
                raise FeedError("Change stream closed unexpectedly")
            return None
        return to_change_event(change)

    def close(self) -> None:
        with self._lock:
            stream, client = self._stream, self._client
            self._stream = None
            self._client = None
        try:
            if stream is not None:
                stream.close()
            if client is not None:
                client.close()
        except PyMongoError as e:
            logger.warning(f"{__name__}:close - Error closing change stream: {e}")

    @property
    def connected(self) -> bool:
        return self._client is not None

    @property
    def has_stream(self) -> bool:
        return self._stream is not None

    def ping(self) -> bool:
        client = self._client
        if client is None:
            return False
        try:
            client.admin.command("ping")
            return True
        except PyMongoError:
            return False
