"""
MongoDB sync API endpoints.

Routes: POST /sync/mongo, GET /sync/mongo/status, GET /sync/mongo/watcher

Dependencies: vector_service.core.sync
System role: Bulk reconciliation and watcher status HTTP API
"""

from typing import Any

from fastapi import APIRouter, Depends

from vector_service.api.deps import get_sync_engine, get_watcher, require_api_key
from vector_service.api.routers.error_handling import handle_service_errors
from vector_service.core.sync.change_watcher import ChangeStreamWatcher, WatcherStatus
from vector_service.core.sync.sync_engine import BulkSyncOptions, SyncEngine, SyncStats
from vector_service.models.common import ErrorResponse, SuccessResponse

router = APIRouter(
    prefix="/sync/mongo",
    tags=["sync"],
    dependencies=[Depends(require_api_key)],
    responses={403: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)


@router.post("", response_model=SuccessResponse[SyncStats])
@handle_service_errors
def run_sync(
    request: BulkSyncOptions,
    engine: SyncEngine = Depends(get_sync_engine),
) -> SuccessResponse[SyncStats]:
    """
    Reconcile the whole source collection with the vector index.

    Read-only deployments only accept dry runs (403 otherwise).
    """
    return SuccessResponse(data=engine.run_bulk_sync(request))


@router.get("/status", response_model=SuccessResponse[dict[str, Any]])
@handle_service_errors
def sync_status(engine: SyncEngine = Depends(get_sync_engine)) -> SuccessResponse[dict[str, Any]]:
    """Source embedding coverage plus vector index health."""
    return SuccessResponse(data=engine.sync_status())


@router.get("/watcher", response_model=SuccessResponse[WatcherStatus])
def watcher_status(
    watcher: ChangeStreamWatcher = Depends(get_watcher),
) -> SuccessResponse[WatcherStatus]:
    """Non-blocking change-stream watcher status."""
    return SuccessResponse(data=watcher.status())
