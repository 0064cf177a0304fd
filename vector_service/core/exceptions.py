"""
Exception hierarchy for the vector service.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Taxonomy:
- InputError: rejected synchronously, never retried
- ProviderError: embedding / vector index call failures
- FeedError: change-feed disconnects, retried with bounded reconnection

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class VectorServiceException(Exception):
    """Base exception for all vector service errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class InputError(VectorServiceException):
    """Raised when caller-supplied input is invalid."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize input error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class EmptyInputError(InputError):
    """Raised when text is blank."""

    def __init__(self, field: str = "text", details: dict[str, Any] | None = None) -> None:
        super().__init__("Text is empty", field=field, details=details)


class TextTooLongError(InputError):
    """Raised when estimated tokens exceed the provider ceiling."""

    def __init__(
        self,
        estimated_tokens: int,
        max_tokens: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize text too long error.

        Args:
            estimated_tokens: Approximate token count of the input
            max_tokens: Maximum tokens accepted
            details: Additional context
        """
        details = details or {}
        details.update({"estimated_tokens": estimated_tokens, "max_tokens": max_tokens})
        super().__init__(
            f"Text too long: ~{estimated_tokens} tokens (max: {max_tokens})",
            field="text",
            details=details,
        )


class InvalidFilterError(InputError):
    """Raised when a payload filter is malformed."""

    def __init__(self, errors: list[str], details: dict[str, Any] | None = None) -> None:
        """
        Initialize invalid filter error.

        Args:
            errors: Every validation error found in the filter
            details: Additional context
        """
        self.errors = errors
        details = details or {}
        details["errors"] = errors
        super().__init__(f"Invalid filters: {', '.join(errors)}", field="filters", details=details)


class DimensionMismatchError(InputError):
    """Raised when vectors in one request have inconsistent dimensions."""

    def __init__(self, expected: int, found: int, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details.update({"expected": expected, "found": found})
        super().__init__(
            f"Inconsistent vector dimensions. Expected {expected}, found {found}",
            field="vector",
            details=details,
        )


class ProviderError(VectorServiceException):
    """Base exception for remote provider failures."""

    pass


class EmbeddingError(ProviderError):
    """Raised when embedding generation fails."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize embedding error.

        Args:
            message: Error message
            provider: Embedding provider name
            details: Additional context
        """
        details = details or {}
        if provider:
            details["provider"] = provider
        super().__init__(message, details)


class VectorStoreError(ProviderError):
    """Raised when vector index operations fail."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize vector store error.

        Args:
            message: Error message
            operation: Operation that failed (upsert, search, delete)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class FeedError(VectorServiceException):
    """Raised when the source change feed disconnects or closes."""

    pass


class ReadOnlyModeError(VectorServiceException):
    """Raised when a write is attempted while the source is in read-only mode."""

    def __init__(self, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            "Source store is in read-only mode. Use dry_run=true to preview without making changes.",
            details,
        )


class ConfigurationError(VectorServiceException):
    """Raised when required configuration is missing or inconsistent."""

    pass
