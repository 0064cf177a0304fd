"""
Synchronization engine configuration settings.

Chunking defaults applied by the watcher, reconnection policy for the change
feed, and bulk-mode parallelism.

Dependencies: pydantic, pydantic_settings
System role: Sync engine tuning
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SyncSettings(BaseSettings):
    """Sync engine configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    chunk_size: int = Field(default=400, ge=50, le=2000, description="Target tokens per chunk")
    overlap: int = Field(default=15, ge=0, le=50, description="Overlap percentage between chunks")
    reconnect_max_attempts: int = Field(
        default=10,
        ge=0,
        description="Reconnection attempts before the watcher gives up",
    )
    reconnect_delay_seconds: float = Field(default=5.0, ge=0.0, description="Base reconnection delay")
    reconnect_backoff: Literal["fixed", "exponential"] = Field(
        default="fixed",
        description="Delay policy between reconnection attempts",
    )
    reconnect_max_delay_seconds: float = Field(
        default=60.0,
        ge=0.0,
        description="Upper bound on the exponential reconnection delay",
    )
    bulk_max_workers: int = Field(
        default=1,
        ge=1,
        le=32,
        description="Documents reconciled in parallel during bulk sync",
    )
