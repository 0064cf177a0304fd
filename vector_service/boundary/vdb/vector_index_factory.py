"""
Vector index factory for selecting between in-memory (dev) and Qdrant (prod).

Depends on VECTOR_STORE_STORE_TYPE environment variable.
Provides consistent interface regardless of underlying implementation.

Dependencies: vector_service.boundary.vdb, vector_service.configs
System role: Vector index instantiation and selection
"""

import logging

from vector_service.boundary.vdb.base import VectorIndex
from vector_service.configs.vector_store import VectorStoreSettings
from vector_service.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def create_vector_index(settings: VectorStoreSettings) -> VectorIndex:
    """
    Build the vector index selected by configuration.

    Args:
        settings: Vector store settings

    Returns:
        VectorIndex: QdrantVectorIndex or InMemoryVectorIndex

    Raises:
        ConfigurationError: If store_type is unknown
    """
    store_type = settings.store_type.lower()

    if store_type == "memory":
        from vector_service.boundary.vdb.memory_index import InMemoryVectorIndex

        logger.info(f"{__name__}:create_vector_index - Creating in-memory index (local dev mode)")
        return InMemoryVectorIndex(
            collection_name=settings.collection,
            vector_size=settings.vector_size,
        )

    if store_type == "qdrant":
        from vector_service.boundary.vdb.qdrant_index import QdrantVectorIndex

        logger.info(
            f"{__name__}:create_vector_index - Creating Qdrant index",
            extra={"url": settings.url, "collection": settings.collection},
        )
        return QdrantVectorIndex(
            url=settings.url,
            collection_name=settings.collection,
            vector_size=settings.vector_size,
            distance=settings.distance,
            api_key=settings.api_key,
            timeout_seconds=settings.timeout_seconds,
            hnsw_m=settings.hnsw_m,
            hnsw_ef_construct=settings.hnsw_ef_construct,
        )

    raise ConfigurationError(
        f"Invalid VECTOR_STORE_STORE_TYPE: {store_type}. Must be 'memory' or 'qdrant'."
    )
