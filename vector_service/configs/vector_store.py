"""
Vector store configuration settings.

Manages Qdrant connection and collection configuration.

Dependencies: pydantic, pydantic_settings
System role: Vector database configuration for indexing and retrieval
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class VectorStoreSettings(BaseSettings):
    """Vector store configuration (in-memory for dev/tests, Qdrant for prod)."""

    model_config = SettingsConfigDict(
        env_prefix="VECTOR_STORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    store_type: Literal["qdrant", "memory"] = Field(
        default="qdrant",
        description="Vector store type: 'memory' for local dev, 'qdrant' for production",
    )
    url: str = Field(default="http://localhost:6333", description="Qdrant base URL")
    api_key: str | None = Field(default=None, description="Qdrant API key, if the cluster requires one")
    collection: str = Field(default="my_docs", description="Collection holding document points")
    vector_size: int = Field(default=1536, ge=1, description="Embedding dimensionality of the collection")
    distance: Literal["Cosine", "Dot", "Euclid"] = Field(
        default="Cosine",
        description="Distance metric used when the collection is created",
    )
    timeout_seconds: int = Field(default=30, ge=1, description="Request timeout")
    hnsw_m: int = Field(default=16, ge=2, description="HNSW graph degree")
    hnsw_ef_construct: int = Field(default=256, ge=4, description="HNSW construction beam width")
