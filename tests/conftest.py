"""
Shared test fixtures and configuration for entire test suite.

Provides: in-memory source store and scripted change feed, deterministic
embedding provider, in-memory vector index, service container and API client
Dependencies: pytest, fastapi, langchain_core
System role: Test infrastructure and fixture management
"""

import os
import queue
import time
from collections.abc import Iterator

import pytest

os.environ.setdefault("EMBEDDINGS_PROVIDER", "fake")

from langchain_core.embeddings import DeterministicFakeEmbedding  # noqa: E402

from vector_service.boundary.embeddings.langchain_provider import (  # noqa: E402
    LangChainEmbeddingProvider,
)
from vector_service.boundary.source.base import ChangeFeed, DocumentSource  # noqa: E402
from vector_service.boundary.source.source_schemas import (  # noqa: E402
    ChangeEvent,
    SourceDocument,
)
from vector_service.boundary.vdb.memory_index import InMemoryVectorIndex  # noqa: E402
from vector_service.configs import (  # noqa: E402
    EmbeddingSettings,
    Settings,
    SourceStoreSettings,
    SyncSettings,
    VectorStoreSettings,
)
from vector_service.core.exceptions import FeedError  # noqa: E402
from vector_service.core.sync.sync_engine import SyncEngine  # noqa: E402

DIMENSIONS = 8
API_KEY = "test-api-key"

LONG_TEXT = (
    "Solar panels convert sunlight into electricity. "
    "Home batteries store excess solar energy for later use. "
    "Inverters turn direct current into alternating current. "
) * 40


class InMemoryDocumentSource(DocumentSource):
    """Dict-backed document source."""

    def __init__(self, embedding_marker_field: str = "embedding") -> None:
        self.embedding_marker_field = embedding_marker_field
        self.documents: dict[str, SourceDocument] = {}
        self.closed = False

    def add(self, doc_id: str, **data) -> SourceDocument:
        document = SourceDocument(id=doc_id, data=data)
        self.documents[doc_id] = document
        return document

    def _selected(self, only_missing_embeddings: bool) -> list[SourceDocument]:
        docs = list(self.documents.values())
        if only_missing_embeddings:
            docs = [d for d in docs if self.embedding_marker_field not in d.data]
        return docs

    def count_documents(self, only_missing_embeddings: bool = False) -> int:
        return len(self._selected(only_missing_embeddings))

    def count_with_embeddings(self) -> int:
        return sum(1 for d in self.documents.values() if self.embedding_marker_field in d.data)

    def iter_documents(
        self,
        only_missing_embeddings: bool = False,
        batch_size: int = 1000,
    ) -> Iterator[SourceDocument]:
        yield from self._selected(only_missing_embeddings)

    def ping(self) -> bool:
        return not self.closed

    def close(self) -> None:
        self.closed = True


class ScriptedChangeFeed(ChangeFeed):
    """
    Change feed driven by the test.

    The first open_failures calls to open() fail; always_fail makes every call
    fail. push() queues ChangeEvents or exceptions to raise from next_event().
    """

    def __init__(self, open_failures: int = 0, always_fail: bool = False) -> None:
        self.open_failures = open_failures
        self.always_fail = always_fail
        self.open_calls = 0
        self.close_calls = 0
        self._events: queue.Queue = queue.Queue()
        self._open = False

    def push(self, item: ChangeEvent | Exception) -> None:
        self._events.put(item)

    def open(self) -> None:
        self.open_calls += 1
        if self.always_fail or self.open_calls <= self.open_failures:
            raise FeedError("connection refused")
        self._open = True

    def next_event(self) -> ChangeEvent | None:
        if not self._open:
            raise FeedError("Change stream is not open")
        try:
            item = self._events.get(timeout=0.02)
        except queue.Empty:
            return None
        if isinstance(item, Exception):
            raise item
        return item

    def close(self) -> None:
        self.close_calls += 1
        self._open = False

    @property
    def connected(self) -> bool:
        return self._open

    @property
    def has_stream(self) -> bool:
        return self._open

    def ping(self) -> bool:
        return self._open


def _wait_until(predicate, timeout: float = 5.0, interval: float = 0.01) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


@pytest.fixture
def wait_until():
    """Poll a predicate until it holds or the timeout expires."""
    return _wait_until


@pytest.fixture
def long_text() -> str:
    return LONG_TEXT


@pytest.fixture
def embedding_provider() -> LangChainEmbeddingProvider:
    """Deterministic embedding provider without network or delays."""
    return LangChainEmbeddingProvider(
        embeddings=DeterministicFakeEmbedding(size=DIMENSIONS),
        dimensions=DIMENSIONS,
        max_input_length=8191,
        provider_name="fake",
        batch_size=100,
        batch_delay_seconds=0,
        max_attempts=1,
    )


@pytest.fixture
def vector_index() -> InMemoryVectorIndex:
    return InMemoryVectorIndex(collection_name="test_docs", vector_size=DIMENSIONS)


@pytest.fixture
def document_source() -> InMemoryDocumentSource:
    return InMemoryDocumentSource()


@pytest.fixture
def change_feed() -> ScriptedChangeFeed:
    return ScriptedChangeFeed()


@pytest.fixture
def make_feed():
    """Factory for scripted feeds with custom failure behaviour."""
    return ScriptedChangeFeed


@pytest.fixture
def sync_engine(vector_index, embedding_provider, document_source) -> SyncEngine:
    return SyncEngine(
        vector_index=vector_index,
        embedding_provider=embedding_provider,
        source=document_source,
    )


@pytest.fixture
def settings() -> Settings:
    """Settings for an in-memory deployment with the watcher disabled."""
    return Settings(
        api_key=API_KEY,
        vector_store=VectorStoreSettings(
            store_type="memory",
            collection="test_docs",
            vector_size=DIMENSIONS,
        ),
        embeddings=EmbeddingSettings(provider="fake", dimensions=DIMENSIONS),
        source_store=SourceStoreSettings(change_streams_enabled=False, read_only=False),
        sync=SyncSettings(reconnect_delay_seconds=0),
    )


@pytest.fixture
def service_cache(settings, vector_index, embedding_provider, document_source, change_feed):
    """Service container wired with in-memory collaborators."""
    from vector_service.api.deps.dependencies import ServiceCache

    return ServiceCache(
        settings=settings,
        vector_index=vector_index,
        embedding_provider=embedding_provider,
        document_source=document_source,
        change_feed=change_feed,
    )


@pytest.fixture
def client(service_cache):
    """TestClient running the full application lifespan."""
    from fastapi.testclient import TestClient

    from vector_service.api.main import create_app

    with TestClient(create_app(service_cache)) as test_client:
        yield test_client


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {API_KEY}"}
