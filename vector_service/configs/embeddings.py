"""
Embedding provider configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Embedding model configuration for chunk and query vectors
"""

from typing import Literal

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EmbeddingSettings(BaseSettings):
    """Embedding provider configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EMBEDDINGS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    provider: Literal["openai", "fake"] = Field(
        default="openai",
        description="Embedding provider: 'openai' or 'fake' (deterministic hashing, dev only)",
    )
    model: str = Field(default="text-embedding-3-small", description="Embedding model ID")
    dimensions: int = Field(default=1536, ge=1, description="Output vector dimensionality")
    max_input_tokens: int = Field(default=8191, ge=1, description="Maximum tokens per input text")
    batch_size: int = Field(default=100, ge=1, le=2048, description="Texts per provider request")
    batch_delay_seconds: float = Field(
        default=0.1,
        ge=0.0,
        description="Pause between provider requests during batch embedding",
    )
    openai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("EMBEDDINGS_OPENAI_API_KEY", "OPENAI_API_KEY"),
        description="OpenAI API key",
    )

    @model_validator(mode="after")
    def _require_api_key(self) -> "EmbeddingSettings":
        if self.provider == "openai" and not self.openai_api_key:
            raise ValueError("OPENAI_API_KEY is required when EMBEDDINGS_PROVIDER=openai")
        return self
