"""
Embedding provider boundary.

- EmbeddingProvider: contract used by sync and query paths
- LangChainEmbeddingProvider: adapter over langchain_core Embeddings
- create_embedding_provider: settings-driven factory
"""

from vector_service.boundary.embeddings.base import EmbeddingProvider
from vector_service.boundary.embeddings.embedding_factory import create_embedding_provider
from vector_service.boundary.embeddings.langchain_provider import LangChainEmbeddingProvider

__all__ = [
    "EmbeddingProvider",
    "LangChainEmbeddingProvider",
    "create_embedding_provider",
]
