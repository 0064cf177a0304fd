"""
Health check API endpoints.

Routes: GET /health, GET /delete/health

Dependencies: vector_service.api.deps
System role: Health check HTTP API
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from vector_service.api.deps import ServiceCache, get_service_cache, require_api_key
from vector_service.models.common import SuccessResponse
from vector_service.models.health import (
    EmbeddingHealth,
    HealthData,
    IndexHealthData,
    SourceHealth,
    VectorIndexHealth,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", response_model=SuccessResponse[HealthData])
def health_check(cache: ServiceCache = Depends(get_service_cache)) -> SuccessResponse[HealthData]:
    """
    Report vector index, source store and watcher health.

    The source counts as healthy when the running watcher answers a ping, or,
    without a watcher, when the source itself answers one. An enabled watcher
    that has stopped (reconnect attempts exhausted) marks the service degraded.
    """
    settings = cache.settings
    index_healthy = cache.vector_index.health_check()

    watcher_status = cache.watcher.status() if cache.watcher_enabled else None
    if watcher_status is not None and watcher_status.is_running:
        source_healthy = cache.watcher.health_check()
    else:
        source_healthy = cache.document_source.ping()

    watcher_healthy = watcher_status is None or watcher_status.is_running

    healthy = index_healthy and source_healthy and watcher_healthy
    if not healthy:
        logger.warning(
            f"{__name__}:health_check - Service degraded",
            extra={
                "index_healthy": index_healthy,
                "source_healthy": source_healthy,
                "watcher_healthy": watcher_healthy,
                "watcher_error": watcher_status.last_error if watcher_status else None,
            },
        )

    return SuccessResponse(
        success=healthy,
        data=HealthData(
            status="healthy" if healthy else "degraded",
            vector_index=VectorIndexHealth(
                healthy=index_healthy,
                collection=cache.vector_index.collection_name,
            ),
            source=SourceHealth(
                healthy=source_healthy,
                change_streams_enabled=settings.source_store.change_streams_enabled,
                read_only=settings.source_store.read_only,
                watcher_running=bool(watcher_status and watcher_status.is_running),
            ),
            embeddings=EmbeddingHealth(
                provider=settings.embeddings.provider,
                dimensions=settings.embeddings.dimensions,
            ),
            watcher=watcher_status,
            timestamp=datetime.now(timezone.utc),
        ),
    )


@router.get(
    "/delete/health",
    response_model=SuccessResponse[IndexHealthData],
    dependencies=[Depends(require_api_key)],
)
def delete_health(cache: ServiceCache = Depends(get_service_cache)) -> SuccessResponse[IndexHealthData]:
    """Vector index reachability for the delete service."""
    return SuccessResponse(
        data=IndexHealthData(
            vector_index_healthy=cache.vector_index.health_check(),
            timestamp=datetime.now(timezone.utc),
        )
    )
