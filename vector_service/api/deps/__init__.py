"""API-specific dependencies."""

from .dependencies import (
    ServiceCache,
    get_ingest_service,
    get_query_service,
    get_service_cache,
    get_sync_engine,
    get_watcher,
    require_api_key,
)

__all__ = [
    "ServiceCache",
    "get_ingest_service",
    "get_query_service",
    "get_service_cache",
    "get_sync_engine",
    "get_watcher",
    "require_api_key",
]
