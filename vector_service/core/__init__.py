"""
Core business logic module.

Contains the chunker, the re-ranking stage, the synchronization engine and
the exception hierarchy. Everything here is independent of the HTTP layer.
"""

from vector_service.core.exceptions import (
    ConfigurationError,
    DimensionMismatchError,
    EmbeddingError,
    EmptyInputError,
    FeedError,
    InputError,
    InvalidFilterError,
    ProviderError,
    ReadOnlyModeError,
    TextTooLongError,
    VectorServiceException,
    VectorStoreError,
)

__all__ = [
    "ConfigurationError",
    "DimensionMismatchError",
    "EmbeddingError",
    "EmptyInputError",
    "FeedError",
    "InputError",
    "InvalidFilterError",
    "ProviderError",
    "ReadOnlyModeError",
    "TextTooLongError",
    "VectorServiceException",
    "VectorStoreError",
]
