"""
Overlap-aware text chunker.

Splits raw document text into overlapping, sentence-boundary-aware segments
sized for embedding. Token counts are estimated from character counts with a
fixed ratio rather than a real tokenizer.

Dependencies: pydantic
System role: First stage of the sync pipeline (text -> chunks)
"""

import logging
import math
import re
import uuid

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

# ~4 characters per token
TOKENS_PER_CHAR = 0.25
DEFAULT_MAX_TOKENS = 8000

_SENTENCE_END = re.compile(r"[.!?]\s+")


class ChunkingOptions(BaseModel):
    """Chunking parameters."""

    chunk_size: int = Field(default=400, ge=1, description="Target tokens per chunk")
    overlap: int = Field(default=15, ge=0, le=50, description="Overlap percentage")
    preserve_sentences: bool = Field(default=True)
    min_chunk_size: int = Field(default=50, ge=0, description="Minimum chunk size in characters")


class TextChunk(BaseModel):
    """One contiguous slice of a source text."""

    text: str
    start_index: int
    end_index: int
    chunk_index: int
    tokens: int


class EmbeddingChunk(TextChunk):
    """Chunk carrying a fresh point id and its owning document id."""

    id: str
    doc_id: str | None = None


class ValidationResult(BaseModel):
    valid: bool
    reason: str | None = None


class TextChunker:
    """Split text into overlapping chunks with approximate token sizing."""

    def estimate_tokens(self, text: str) -> int:
        return math.ceil(len(text) * TOKENS_PER_CHAR)

    def tokens_to_chars(self, tokens: int) -> int:
        return math.ceil(tokens / TOKENS_PER_CHAR)

    def _find_sentence_boundary(self, text: str, target: int) -> int:
        """Return the sentence end nearest to target, or target if none is close."""
        radius = min(200, math.floor(len(text) * 0.1))
        window_start = max(0, target - radius)
        window_end = min(len(text), target + radius)

        best = target
        min_distance = radius
        for match in _SENTENCE_END.finditer(text, window_start, window_end):
            position = match.end()
            distance = abs(position - target)
            if distance < min_distance:
                min_distance = distance
                best = position
        return best

    def chunk(self, text: str, options: ChunkingOptions | None = None) -> list[TextChunk]:
        """
        Chunk text into overlapping segments.

        Args:
            text: Source text
            options: Chunking parameters (defaults when None)

        Returns:
            list[TextChunk]: Chunks ordered by chunk_index, starting at 0;
                empty for blank text
        """
        opts = options or ChunkingOptions()

        if not text.strip():
            return []

        if len(text) < opts.min_chunk_size:
            return [
                TextChunk(
                    text=text.strip(),
                    start_index=0,
                    end_index=len(text),
                    chunk_index=0,
                    tokens=self.estimate_tokens(text),
                )
            ]

        target_chars = self.tokens_to_chars(opts.chunk_size)
        overlap_chars = math.floor(target_chars * opts.overlap / 100)

        chunks: list[TextChunk] = []
        start = 0
        while start < len(text):
            end = min(start + target_chars, len(text))

            if opts.preserve_sentences and end < len(text):
                boundary = self._find_sentence_boundary(text, end)
                if abs(boundary - end) < target_chars * 0.3 and boundary > start:
                    end = boundary

            chunk_text = text[start:end].strip()
            if len(chunk_text) >= opts.min_chunk_size:
                chunks.append(
                    TextChunk(
                        text=chunk_text,
                        start_index=start,
                        end_index=end,
                        chunk_index=len(chunks),
                        tokens=self.estimate_tokens(chunk_text),
                    )
                )

            if end >= len(text):
                break

            start = max(start + 1, end - overlap_chars)

        logger.debug(
            f"{__name__}:chunk - Text chunking completed",
            extra={
                "original_length": len(text),
                "chunks_count": len(chunks),
                "chunk_size": opts.chunk_size,
                "overlap": opts.overlap,
            },
        )
        return chunks

    def chunk_for_embedding(
        self,
        text: str,
        doc_id: str | None = None,
        options: ChunkingOptions | None = None,
    ) -> list[EmbeddingChunk]:
        """
        Chunk text and assign a UUID4 point id to every chunk.

        Args:
            text: Source text
            doc_id: Owning document id
            options: Chunking parameters

        Returns:
            list[EmbeddingChunk]: Chunks ready to be embedded and upserted
        """
        return [
            EmbeddingChunk(**chunk.model_dump(), id=str(uuid.uuid4()), doc_id=doc_id)
            for chunk in self.chunk(text, options)
        ]

    def validate(self, text: str, max_tokens: int = DEFAULT_MAX_TOKENS) -> ValidationResult:
        """
        Check whether text is suitable for chunking and embedding.

        Args:
            text: Text to validate
            max_tokens: Token ceiling, usually the embedding provider's limit

        Returns:
            ValidationResult: valid flag and reason when invalid
        """
        if not text or not text.strip():
            return ValidationResult(valid=False, reason="Text is empty")

        estimated = self.estimate_tokens(text)
        if estimated > max_tokens:
            return ValidationResult(
                valid=False,
                reason=f"Text too long: ~{estimated} tokens (max: {max_tokens})",
            )
        return ValidationResult(valid=True)
