"""
Dependency injection container.

ServiceCache owns every long-lived collaborator (vector index, embedding
provider, source store, change feed, sync engine, watcher). The application
holds one instance on app.state; tests construct it with in-memory
collaborators instead of patching globals.

Dependencies: fastapi, vector_service.configs, vector_service.boundary
System role: DI container for service injection
"""

import logging
import secrets

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from vector_service.application.services import IngestService, QueryService
from vector_service.boundary.embeddings.base import EmbeddingProvider
from vector_service.boundary.source.base import ChangeFeed, DocumentSource
from vector_service.boundary.vdb.base import VectorIndex
from vector_service.configs import Settings, get_settings
from vector_service.core.sync.change_watcher import ChangeStreamWatcher
from vector_service.core.sync.sync_engine import SyncEngine, SyncOptions

logger = logging.getLogger(__name__)


class ServiceCache:
    """Container for lazily built service instances."""

    def __init__(
        self,
        settings: Settings | None = None,
        vector_index: VectorIndex | None = None,
        embedding_provider: EmbeddingProvider | None = None,
        document_source: DocumentSource | None = None,
        change_feed: ChangeFeed | None = None,
    ) -> None:
        """
        Initialize the container.

        Args:
            settings: Application settings (loaded from the environment when None)
            vector_index: Prebuilt vector index
            embedding_provider: Prebuilt embedding provider
            document_source: Prebuilt document source
            change_feed: Prebuilt change feed
        """
        self.settings = settings or get_settings()
        self._vector_index = vector_index
        self._embedding_provider = embedding_provider
        self._document_source = document_source
        self._change_feed = change_feed
        self._sync_engine: SyncEngine | None = None
        self._watcher: ChangeStreamWatcher | None = None

    @property
    def vector_index(self) -> VectorIndex:
        """Get cached vector index."""
        if self._vector_index is None:
            from vector_service.boundary.vdb.vector_index_factory import create_vector_index

            self._vector_index = create_vector_index(self.settings.vector_store)
        return self._vector_index

    @property
    def embedding_provider(self) -> EmbeddingProvider:
        """Get cached embedding provider."""
        if self._embedding_provider is None:
            from vector_service.boundary.embeddings import create_embedding_provider

            self._embedding_provider = create_embedding_provider(self.settings.embeddings)
        return self._embedding_provider

    @property
    def document_source(self) -> DocumentSource:
        """Get cached MongoDB document source."""
        if self._document_source is None:
            from vector_service.boundary.source.mongo_source import MongoDocumentSource

            cfg = self.settings.source_store
            self._document_source = MongoDocumentSource(
                uri=cfg.uri,
                database=cfg.database,
                collection=cfg.collection,
                embedding_marker_field=cfg.embedding_marker_field,
                server_selection_timeout_ms=cfg.server_selection_timeout_ms,
                max_pool_size=cfg.max_pool_size,
            )
        return self._document_source

    @property
    def change_feed(self) -> ChangeFeed:
        """Get cached MongoDB change feed."""
        if self._change_feed is None:
            from vector_service.boundary.source.mongo_source import MongoChangeFeed

            cfg = self.settings.source_store
            self._change_feed = MongoChangeFeed(
                uri=cfg.uri,
                database=cfg.database,
                collection=cfg.collection,
                max_await_time_ms=cfg.max_await_time_ms,
                server_selection_timeout_ms=cfg.server_selection_timeout_ms,
                max_pool_size=cfg.max_pool_size,
            )
        return self._change_feed

    @property
    def sync_engine(self) -> SyncEngine:
        """Get cached sync engine."""
        if self._sync_engine is None:
            self._sync_engine = SyncEngine(
                vector_index=self.vector_index,
                embedding_provider=self.embedding_provider,
                source=self.document_source,
                read_only=self.settings.source_store.read_only,
                max_workers=self.settings.sync.bulk_max_workers,
            )
        return self._sync_engine

    @property
    def watcher(self) -> ChangeStreamWatcher:
        """Get cached change-stream watcher."""
        if self._watcher is None:
            source_cfg = self.settings.source_store
            sync_cfg = self.settings.sync
            self._watcher = ChangeStreamWatcher(
                feed=self.change_feed,
                engine=self.sync_engine,
                options=SyncOptions(
                    text_field=source_cfg.text_field,
                    metadata_fields=source_cfg.metadata_fields,
                    chunk_size=sync_cfg.chunk_size,
                    overlap=sync_cfg.overlap,
                ),
                max_reconnect_attempts=sync_cfg.reconnect_max_attempts,
                reconnect_delay_seconds=sync_cfg.reconnect_delay_seconds,
                backoff=sync_cfg.reconnect_backoff,
                max_reconnect_delay_seconds=sync_cfg.reconnect_max_delay_seconds,
            )
        return self._watcher

    @property
    def watcher_enabled(self) -> bool:
        cfg = self.settings.source_store
        return cfg.change_streams_enabled and not cfg.read_only

    @property
    def query_service(self) -> QueryService:
        return QueryService(self.vector_index, self.embedding_provider)

    @property
    def ingest_service(self) -> IngestService:
        return IngestService(self.vector_index, self.embedding_provider)

    def clear(self) -> None:
        """Stop the watcher, close connections and drop cached instances."""
        if self._watcher is not None:
            self._watcher.stop()
        if self._change_feed is not None:
            self._change_feed.close()
        if self._document_source is not None:
            self._document_source.close()
        self._vector_index = None
        self._embedding_provider = None
        self._document_source = None
        self._change_feed = None
        self._sync_engine = None
        self._watcher = None


def get_service_cache(request: Request) -> ServiceCache:
    """Get the application's service cache."""
    return request.app.state.service_cache


def get_query_service(cache: ServiceCache = Depends(get_service_cache)) -> QueryService:
    return cache.query_service


def get_ingest_service(cache: ServiceCache = Depends(get_service_cache)) -> IngestService:
    return cache.ingest_service


def get_sync_engine(cache: ServiceCache = Depends(get_service_cache)) -> SyncEngine:
    return cache.sync_engine


def get_watcher(cache: ServiceCache = Depends(get_service_cache)) -> ChangeStreamWatcher:
    return cache.watcher


_bearer = HTTPBearer(auto_error=False)


def require_api_key(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    cache: ServiceCache = Depends(get_service_cache),
) -> None:
    """
    Enforce bearer-token authentication.

    Raises:
        HTTPException(401): Missing or invalid token, or no API key configured
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing Authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )

    expected = cache.settings.api_key
    if not expected or not secrets.compare_digest(credentials.credentials, expected):
        logger.warning(f"{__name__}:require_api_key - Invalid authorization token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization token",
            headers={"WWW-Authenticate": "Bearer"},
        )
