"""
Configuration management module.

Provides centralized, type-safe configuration using Pydantic Settings.
All config modules support environment variable mapping with validation.
"""

from vector_service.configs.embeddings import EmbeddingSettings
from vector_service.configs.settings import Settings, get_settings
from vector_service.configs.source_store import SourceStoreSettings
from vector_service.configs.sync import SyncSettings
from vector_service.configs.vector_store import VectorStoreSettings

__all__ = [
    "EmbeddingSettings",
    "Settings",
    "SourceStoreSettings",
    "SyncSettings",
    "VectorStoreSettings",
    "get_settings",
]
