from vector_service.core.sync.change_watcher import (
    ChangeStreamWatcher,
    WatcherState,
    WatcherStatus,
)
from vector_service.core.sync.sync_engine import (
    BulkSyncOptions,
    ReconcileResult,
    SyncEngine,
    SyncOptions,
    SyncPreview,
    SyncStats,
)

__all__ = [
    "BulkSyncOptions",
    "ChangeStreamWatcher",
    "ReconcileResult",
    "SyncEngine",
    "SyncOptions",
    "SyncPreview",
    "SyncStats",
    "WatcherState",
    "WatcherStatus",
]
