from vector_service.core.chunking.text_chunker import (
    ChunkingOptions,
    EmbeddingChunk,
    TextChunk,
    TextChunker,
    ValidationResult,
)

__all__ = [
    "ChunkingOptions",
    "EmbeddingChunk",
    "TextChunk",
    "TextChunker",
    "ValidationResult",
]
