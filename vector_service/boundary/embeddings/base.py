"""
Embedding provider contract.

Dependencies: abc
System role: Boundary interface for text -> vector conversion
"""

from abc import ABC, abstractmethod


class EmbeddingProvider(ABC):
    """Turns text into fixed-dimension vectors."""

    @abstractmethod
    def embed(self, text: str) -> list[float]:
        """Embed a single text."""

    @abstractmethod
    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """
        Embed many texts, preserving order.

        Empty input returns an empty list. A failure aborts the whole call.
        """

    @abstractmethod
    def dimensions(self) -> int:
        """Vector dimensionality."""

    @abstractmethod
    def max_input_length(self) -> int:
        """Maximum input length in tokens."""

    @abstractmethod
    def provider_name(self) -> str:
        """Short provider identifier (e.g. "openai")."""
