"""
Health check response models.

Dependencies: pydantic
System role: Health API schemas
"""

from datetime import datetime

from pydantic import BaseModel

from vector_service.core.sync.change_watcher import WatcherStatus


class VectorIndexHealth(BaseModel):
    healthy: bool
    collection: str


class SourceHealth(BaseModel):
    healthy: bool
    change_streams_enabled: bool
    read_only: bool
    watcher_running: bool


class EmbeddingHealth(BaseModel):
    provider: str
    dimensions: int


class HealthData(BaseModel):
    status: str
    vector_index: VectorIndexHealth
    source: SourceHealth
    embeddings: EmbeddingHealth
    watcher: WatcherStatus | None = None
    timestamp: datetime


class IndexHealthData(BaseModel):
    vector_index_healthy: bool
    timestamp: datetime
