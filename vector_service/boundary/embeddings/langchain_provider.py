"""
LangChain embeddings adapter.

Wraps any langchain_core Embeddings implementation (OpenAIEmbeddings in
production, DeterministicFakeEmbedding for dev/tests) behind the
EmbeddingProvider contract, adding capped batch sizes, an inter-batch delay
for provider rate limits, retries, and EmbeddingError translation.

Dependencies: langchain_core, tenacity
System role: Embedding provider used by sync and query paths
"""

import logging
import time

from langchain_core.embeddings import Embeddings
from tenacity import Retrying, stop_after_attempt, wait_exponential, wait_random

from vector_service.boundary.embeddings.base import EmbeddingProvider
from vector_service.core.exceptions import DimensionMismatchError, EmbeddingError

logger = logging.getLogger(__name__)

RETRY_WAIT = wait_exponential(multiplier=1, max=20) + wait_random(0, 2)


class LangChainEmbeddingProvider(EmbeddingProvider):
    """EmbeddingProvider backed by a LangChain Embeddings model."""

    def __init__(
        self,
        embeddings: Embeddings,
        dimensions: int,
        max_input_length: int,
        provider_name: str,
        batch_size: int = 100,
        batch_delay_seconds: float = 0.1,
        max_attempts: int = 3,
    ) -> None:
        """
        Initialize the adapter.

        Args:
            embeddings: LangChain embeddings model
            dimensions: Expected vector dimensionality
            max_input_length: Maximum tokens per input
            provider_name: Provider identifier for logs and errors
            batch_size: Texts per provider request
            batch_delay_seconds: Pause between consecutive batch requests
            max_attempts: Attempts per request before giving up
        """
        self._embeddings = embeddings
        self._dimensions = dimensions
        self._max_input_length = max_input_length
        self._provider_name = provider_name
        self._batch_size = batch_size
        self._batch_delay_seconds = batch_delay_seconds
        self._retrying = Retrying(
            stop=stop_after_attempt(max_attempts),
            wait=RETRY_WAIT,
            before_sleep=lambda retry_state: logger.warning(
                f"{__name__}:embed - Retry {retry_state.attempt_number}/{max_attempts} "
                f"after provider error"
            ),
            reraise=True,
        )

    def _check_dimensions(self, vector: list[float]) -> list[float]:
        if len(vector) != self._dimensions:
            raise DimensionMismatchError(expected=self._dimensions, found=len(vector))
        return vector

    def embed(self, text: str) -> list[float]:
        try:
            vector = self._retrying(self._embeddings.embed_query, text)
        except Exception as e:
            logger.error(
                f"{__name__}:embed - Failed to generate embedding",
                extra={"text_length": len(text), "provider": self._provider_name, "error": str(e)},
            )
            raise EmbeddingError(
                message=f"{self._provider_name} embedding failed: {e}",
                provider=self._provider_name,
            ) from e
        return self._check_dimensions(vector)

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []

        vectors: list[list[float]] = []
        for start in range(0, len(texts), self._batch_size):
            batch = texts[start : start + self._batch_size]
            try:
                vectors.extend(self._retrying(self._embeddings.embed_documents, batch))
            except Exception as e:
                logger.error(
                    f"{__name__}:embed_batch - Failed to generate batch embeddings",
                    extra={
                        "text_count": len(texts),
                        "batch_start": start,
                        "provider": self._provider_name,
                        "error": str(e),
                    },
                )
                raise EmbeddingError(
                    message=f"{self._provider_name} batch embedding failed: {e}",
                    provider=self._provider_name,
                    details={"batch_start": start, "text_count": len(texts)},
                ) from e

            logger.debug(
                f"{__name__}:embed_batch - Processed embedding batch",
                extra={
                    "batch_start": start,
                    "batch_size": len(batch),
                    "total_texts": len(texts),
                },
            )
            if start + self._batch_size < len(texts) and self._batch_delay_seconds > 0:
                time.sleep(self._batch_delay_seconds)

        if len(vectors) != len(texts):
            raise EmbeddingError(
                message=f"Provider returned {len(vectors)} vectors for {len(texts)} texts",
                provider=self._provider_name,
            )
        return [self._check_dimensions(v) for v in vectors]

    def dimensions(self) -> int:
        return self._dimensions

    def max_input_length(self) -> int:
        return self._max_input_length

    def provider_name(self) -> str:
        return self._provider_name
