"""
Ingest service.

Direct (non-sync) write path: chunk+embed a text, upsert caller-supplied
points, and delete points by id, document or filter.

Dependencies: vector_service.boundary, vector_service.core.chunking
System role: Ingestion orchestration for the HTTP surface
"""

import logging
import time

from vector_service.boundary.embeddings.base import EmbeddingProvider
from vector_service.boundary.vdb.base import VectorIndex
from vector_service.boundary.vdb.filters import validate_filter
from vector_service.boundary.vdb.vector_schemas import PayloadFilter, Point
from vector_service.core.chunking.text_chunker import ChunkingOptions, TextChunker
from vector_service.core.exceptions import (
    DimensionMismatchError,
    EmptyInputError,
    InputError,
    InvalidFilterError,
    TextTooLongError,
)
from vector_service.models.ingest import (
    DeleteData,
    DeleteRequest,
    EmbedData,
    EmbeddedChunk,
    EmbedRequest,
    UpsertData,
    UpsertRequest,
)

logger = logging.getLogger(__name__)


def _elapsed_ms(start_time: float) -> int:
    return int((time.perf_counter() - start_time) * 1000)


class IngestService:
    """Embed, upsert and delete operations on the vector index."""

    def __init__(
        self,
        vector_index: VectorIndex,
        embedding_provider: EmbeddingProvider,
        chunker: TextChunker | None = None,
    ) -> None:
        self._index = vector_index
        self._embeddings = embedding_provider
        self._chunker = chunker or TextChunker()

    def embed(self, request: EmbedRequest) -> EmbedData:
        """
        Chunk a text and embed each chunk.

        Raises:
            EmptyInputError: If the text is blank
            TextTooLongError: If the text exceeds the provider's token limit
            EmbeddingError: If the provider fails
        """
        start_time = time.perf_counter()
        max_tokens = self._embeddings.max_input_length()
        validation = self._chunker.validate(request.text, max_tokens)
        if not validation.valid:
            if not request.text.strip():
                raise EmptyInputError()
            raise TextTooLongError(self._chunker.estimate_tokens(request.text), max_tokens)

        logger.info(
            f"{__name__}:embed - Processing embed request",
            extra={
                "text_length": len(request.text),
                "doc_id": request.doc_id,
                "chunk_size": request.chunk_size,
                "overlap": request.overlap,
            },
        )
        chunks = self._chunker.chunk_for_embedding(
            request.text,
            request.doc_id,
            ChunkingOptions(
                chunk_size=request.chunk_size,
                overlap=request.overlap,
                preserve_sentences=request.preserve_sentences,
            ),
        )
        vectors = self._embeddings.embed_batch([c.text for c in chunks])

        embedded = [
            EmbeddedChunk(**chunk.model_dump(), embedding=vector)
            for chunk, vector in zip(chunks, vectors)
        ]
        total_tokens = sum(c.tokens for c in chunks)
        logger.info(
            f"{__name__}:embed - Embed request completed",
            extra={"chunks": len(chunks), "total_tokens": total_tokens, "doc_id": request.doc_id},
        )
        return EmbedData(
            chunks=embedded,
            total_chunks=len(embedded),
            total_tokens=total_tokens,
            embedding_dimensions=self._embeddings.dimensions(),
            processing_time_ms=_elapsed_ms(start_time),
        )

    def upsert(self, request: UpsertRequest) -> UpsertData:
        """
        Upsert caller-supplied points in batches.

        Raises:
            DimensionMismatchError: If points disagree on vector length
            InputError: If the collection is missing and may not be created
            VectorStoreError: If the index rejects a batch
        """
        start_time = time.perf_counter()
        points = request.points

        expected = len(points[0].vector)
        for point in points:
            if len(point.vector) != expected:
                raise DimensionMismatchError(
                    expected=expected,
                    found=len(point.vector),
                    details={"point_id": str(point.id)},
                )

        collection_exists = self._index.ensure_collection(False)
        collection_created = False
        if not collection_exists and request.create_collection_if_missing:
            collection_exists = self._index.ensure_collection(True)
            collection_created = collection_exists
        if not collection_exists:
            raise InputError(
                "Collection does not exist and create_collection_if_missing is false",
                field="create_collection_if_missing",
            )

        upserted = 0
        for start in range(0, len(points), request.batch_size):
            batch = points[start : start + request.batch_size]
            self._index.upsert(
                [Point(id=str(p.id), vector=p.vector, payload=p.payload) for p in batch]
            )
            upserted += len(batch)
            logger.debug(
                f"{__name__}:upsert - Upserted batch",
                extra={"batch_start": start, "batch_size": len(batch), "total": len(points)},
            )

        logger.info(
            f"{__name__}:upsert - Upsert request completed",
            extra={"points_upserted": upserted, "collection_created": collection_created},
        )
        return UpsertData(
            points_upserted=upserted,
            collection_exists=collection_exists,
            collection_created=collection_created,
            processing_time_ms=_elapsed_ms(start_time),
        )

    def delete(self, request: DeleteRequest) -> DeleteData:
        """
        Delete points. ids take precedence over doc_id, which takes precedence over filter.

        Raises:
            InvalidFilterError: If the filter is malformed
            VectorStoreError: If the delete fails
        """
        start_time = time.perf_counter()

        if request.ids:
            self._index.delete_by_ids(request.ids)
            deleted_by, deleted_count = "ids", f"{len(request.ids)} point(s) by ID"
        elif request.doc_id:
            self._index.delete_by_doc_id(request.doc_id)
            deleted_by, deleted_count = "doc_id", f"All points with docId: {request.doc_id}"
        else:
            errors = validate_filter(request.filter)
            if errors:
                raise InvalidFilterError(errors)
            self._index.delete_by_filter(PayloadFilter.model_validate(request.filter))
            deleted_by, deleted_count = "filter", "Points matching filter criteria"

        logger.info(
            f"{__name__}:delete - Delete request completed",
            extra={"deleted_by": deleted_by, "deleted_count": deleted_count},
        )
        return DeleteData(
            deleted_by=deleted_by,
            deleted_count=deleted_count,
            processing_time_ms=_elapsed_ms(start_time),
        )
