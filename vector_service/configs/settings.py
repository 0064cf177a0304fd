"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from vector_service.configs.base import BaseSettings
from vector_service.configs.embeddings import EmbeddingSettings
from vector_service.configs.source_store import SourceStoreSettings
from vector_service.configs.sync import SyncSettings
from vector_service.configs.vector_store import VectorStoreSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    vector_store: VectorStoreSettings = Field(default_factory=VectorStoreSettings)
    embeddings: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    source_store: SourceStoreSettings = Field(default_factory=SourceStoreSettings)
    sync: SyncSettings = Field(default_factory=SyncSettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from vector_service.configs import get_settings
        settings = get_settings()
    """
    return Settings()
