"""
Embedding provider factory.

Selects OpenAI (langchain-openai) or the deterministic fake embedding model
(langchain-core) from EMBEDDINGS_PROVIDER.

Dependencies: langchain_openai, langchain_core, vector_service.configs
System role: Embedding provider instantiation and selection
"""

import logging

from vector_service.boundary.embeddings.base import EmbeddingProvider
from vector_service.boundary.embeddings.langchain_provider import LangChainEmbeddingProvider
from vector_service.configs.embeddings import EmbeddingSettings
from vector_service.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def create_embedding_provider(settings: EmbeddingSettings) -> EmbeddingProvider:
    """
    Build the embedding provider selected by configuration.

    Args:
        settings: Embedding settings

    Returns:
        EmbeddingProvider: Configured provider

    Raises:
        ConfigurationError: If the provider is unknown or misconfigured
    """
    provider = settings.provider.lower()

    if provider == "openai":
        if not settings.openai_api_key:
            raise ConfigurationError("OPENAI_API_KEY is required for the openai embedding provider")

        from langchain_openai import OpenAIEmbeddings

        embeddings = OpenAIEmbeddings(
            model=settings.model,
            dimensions=settings.dimensions,
            api_key=settings.openai_api_key,
        )
    elif provider == "fake":
        from langchain_core.embeddings import DeterministicFakeEmbedding

        embeddings = DeterministicFakeEmbedding(size=settings.dimensions)
    else:
        raise ConfigurationError(f"Unknown embedding provider: {provider}")

    logger.info(
        f"{__name__}:create_embedding_provider - Embedding provider initialized",
        extra={"provider": provider, "model": settings.model, "dimensions": settings.dimensions},
    )
    return LangChainEmbeddingProvider(
        embeddings=embeddings,
        dimensions=settings.dimensions,
        max_input_length=settings.max_input_tokens,
        provider_name=provider,
        batch_size=settings.batch_size,
        batch_delay_seconds=settings.batch_delay_seconds,
    )
