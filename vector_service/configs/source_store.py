"""
Source store configuration settings.

Manages the MongoDB connection that holds the authoritative documents and
the change-stream feature flags.

Dependencies: pydantic, pydantic_settings
System role: Source-of-truth store configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SourceStoreSettings(BaseSettings):
    """MongoDB source store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MONGO_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    uri: str = Field(default="mongodb://localhost:27017", description="MongoDB connection string")
    database: str = Field(default="mydb", description="Database holding the source collection")
    collection: str = Field(default="documents", description="Source collection name")
    change_streams_enabled: bool = Field(
        default=True,
        description="Start the change-stream watcher at application startup",
    )
    read_only: bool = Field(
        default=False,
        description="Refuse bulk sync writes (dry runs still allowed) and skip the watcher",
    )
    text_field: str = Field(default="text", description="Document field containing the text content")
    metadata_fields: list[str] = Field(
        default=["title", "category", "source", "tags"],
        description="Document fields copied into point payloads",
    )
    embedding_marker_field: str = Field(
        default="embedding",
        description="Field whose presence marks a document as already embedded",
    )
    max_await_time_ms: int = Field(
        default=30000,
        ge=1,
        description="Maximum time the change stream waits for new events per poll",
    )
    server_selection_timeout_ms: int = Field(default=10000, ge=1)
    max_pool_size: int = Field(default=5, ge=1)
