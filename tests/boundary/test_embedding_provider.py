"""
Tests for the LangChain embedding provider adapter and its factory.
"""

import warnings
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from langchain_core.embeddings import DeterministicFakeEmbedding

from vector_service.boundary.embeddings import create_embedding_provider
from vector_service.boundary.embeddings.langchain_provider import RETRY_WAIT, LangChainEmbeddingProvider
from vector_service.configs import EmbeddingSettings
from vector_service.core.exceptions import DimensionMismatchError, EmbeddingError


def _provider(embeddings, dimensions: int = 3, batch_size: int = 2) -> LangChainEmbeddingProvider:
    return LangChainEmbeddingProvider(
        embeddings=embeddings,
        dimensions=dimensions,
        max_input_length=8191,
        provider_name="test",
        batch_size=batch_size,
        batch_delay_seconds=0,
        max_attempts=1,
    )


@pytest.fixture
def embeddings() -> MagicMock:
    mock = MagicMock()
    mock.embed_query.return_value = [0.1, 0.2, 0.3]
    mock.embed_documents.side_effect = lambda texts: [[float(len(t)), 0.0, 0.0] for t in texts]
    return mock


class TestEmbed:
    def test_returns_query_vector(self, embeddings):
        assert _provider(embeddings).embed("hello") == [0.1, 0.2, 0.3]

    def test_wraps_provider_errors(self, embeddings):
        embeddings.embed_query.side_effect = RuntimeError("quota exceeded")

        with pytest.raises(EmbeddingError) as exc_info:
            _provider(embeddings).embed("hello")

        assert "quota exceeded" in exc_info.value.message
        assert exc_info.value.details["provider"] == "test"

    def test_rejects_wrong_dimensions(self, embeddings):
        embeddings.embed_query.return_value = [0.1, 0.2]

        with pytest.raises(DimensionMismatchError):
            _provider(embeddings).embed("hello")

    def test_retries_transient_failures(self, embeddings):
        embeddings.embed_query.side_effect = [RuntimeError("timeout"), [0.1, 0.2, 0.3]]
        provider = LangChainEmbeddingProvider(
            embeddings=embeddings,
            dimensions=3,
            max_input_length=8191,
            provider_name="test",
            max_attempts=2,
        )

        with patch("tenacity.nap.time.sleep"):
            assert provider.embed("hello") == [0.1, 0.2, 0.3]
        assert embeddings.embed_query.call_count == 2

    def test_retry_wait_emits_no_deprecation_warning(self, embeddings):
        embeddings.embed_query.side_effect = [RuntimeError("timeout"), [0.1, 0.2, 0.3]]
        provider = LangChainEmbeddingProvider(
            embeddings=embeddings,
            dimensions=3,
            max_input_length=8191,
            provider_name="test",
            max_attempts=2,
        )

        with warnings.catch_warnings(), patch("tenacity.nap.time.sleep"):
            warnings.simplefilter("error", DeprecationWarning)
            assert provider.embed("hello") == [0.1, 0.2, 0.3]

    @pytest.mark.parametrize("attempt,base", [(1, 1.0), (3, 4.0), (10, 20.0)])
    def test_retry_wait_bounds(self, attempt, base):
        delay = RETRY_WAIT(SimpleNamespace(attempt_number=attempt))

        assert base <= delay <= base + 2


class TestEmbedBatch:
    def test_empty_input_skips_provider(self, embeddings):
        assert _provider(embeddings).embed_batch([]) == []
        embeddings.embed_documents.assert_not_called()

    def test_splits_into_batches_and_preserves_order(self, embeddings):
        texts = ["a", "bb", "ccc", "dddd", "eeeee"]

        vectors = _provider(embeddings, batch_size=2).embed_batch(texts)

        assert [v[0] for v in vectors] == [1.0, 2.0, 3.0, 4.0, 5.0]
        assert [c.args[0] for c in embeddings.embed_documents.call_args_list] == [
            ["a", "bb"],
            ["ccc", "dddd"],
            ["eeeee"],
        ]

    def test_sleeps_between_batches(self, embeddings):
        provider = LangChainEmbeddingProvider(
            embeddings=embeddings,
            dimensions=3,
            max_input_length=8191,
            provider_name="test",
            batch_size=2,
            batch_delay_seconds=0.5,
            max_attempts=1,
        )

        with patch("vector_service.boundary.embeddings.langchain_provider.time.sleep") as sleep:
            provider.embed_batch(["a", "b", "c", "d", "e"])

        assert sleep.call_count == 2

    def test_wraps_batch_failure(self, embeddings):
        embeddings.embed_documents.side_effect = RuntimeError("service unavailable")

        with pytest.raises(EmbeddingError) as exc_info:
            _provider(embeddings).embed_batch(["a", "b", "c"])

        assert exc_info.value.details["batch_start"] == 0

    def test_count_mismatch_raises(self, embeddings):
        embeddings.embed_documents.side_effect = lambda texts: [[0.0, 0.0, 0.0]]

        with pytest.raises(EmbeddingError):
            _provider(embeddings, batch_size=10).embed_batch(["a", "b"])


class TestMetadata:
    def test_reports_configuration(self, embeddings):
        provider = _provider(embeddings, dimensions=3)

        assert provider.dimensions() == 3
        assert provider.max_input_length() == 8191
        assert provider.provider_name() == "test"


class TestFactory:
    def test_fake_provider_is_deterministic(self):
        provider = create_embedding_provider(EmbeddingSettings(provider="fake", dimensions=16))

        first = provider.embed("same text")
        second = provider.embed("same text")

        assert len(first) == 16
        assert first == second
        assert provider.provider_name() == "fake"

    def test_fake_provider_wraps_langchain_fake(self):
        provider = create_embedding_provider(EmbeddingSettings(provider="fake", dimensions=4))

        assert isinstance(provider._embeddings, DeterministicFakeEmbedding)

    def test_openai_requires_api_key(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        monkeypatch.delenv("EMBEDDINGS_OPENAI_API_KEY", raising=False)

        with pytest.raises(ValueError):
            EmbeddingSettings(provider="openai", _env_file=None)
