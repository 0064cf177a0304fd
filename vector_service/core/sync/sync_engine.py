"""
Sync engine.

Reconciles source documents with the vector index: delete a document's points,
then re-chunk, re-embed and upsert its current text. Drives bulk sync over the
whole source collection and dispatches individual change events for the
watcher.

Dependencies: vector_service.core.chunking, vector_service.boundary
System role: Orchestrates chunker + embedding provider + vector index
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from vector_service.boundary.embeddings.base import EmbeddingProvider
from vector_service.boundary.source.base import DocumentSource
from vector_service.boundary.source.source_schemas import (
    ChangeEvent,
    OperationType,
    SourceDocument,
)
from vector_service.boundary.vdb.base import VectorIndex
from vector_service.boundary.vdb.vector_schemas import DOC_ID_KEY, Point
from vector_service.core.chunking.text_chunker import ChunkingOptions, TextChunker
from vector_service.core.exceptions import (
    ConfigurationError,
    ReadOnlyModeError,
    VectorStoreError,
)
from vector_service.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

SOURCE_TAG = "mongo"


class SyncOptions(BaseModel):
    """Field mapping and chunking parameters for reconciliation."""

    text_field: str = Field(default="text")
    metadata_fields: list[str] = Field(default_factory=list)
    chunk_size: int = Field(default=400, ge=50, le=2000)
    overlap: int = Field(default=15, ge=0, le=50)


class BulkSyncOptions(SyncOptions):
    """Bulk sync request parameters."""

    batch_size: int = Field(default=1000, ge=1, le=10000)
    re_embed_if_missing: bool = Field(
        default=True,
        description="Re-embed documents that already carry the embedding marker",
    )
    only_missing_embeddings: bool = Field(default=False)
    dry_run: bool = Field(default=False)


class SyncPreview(BaseModel):
    doc_id: str
    chunks: int
    has_embedding: bool
    text_length: int


class SyncError(BaseModel):
    doc_id: str
    error: str


class SyncStats(BaseModel):
    """Accumulated results of one bulk sync run."""

    documents_processed: int = 0
    chunks_created: int = 0
    points_upserted: int = 0
    documents_skipped: int = 0
    errors: list[SyncError] = Field(default_factory=list)
    dry_run: bool = False
    preview: list[SyncPreview] | None = None
    processing_time_ms: int = 0


class ReconcileResult(BaseModel):
    doc_id: str
    chunks_created: int = 0
    points_upserted: int = 0


@dataclass
class _DocumentOutcome:
    doc_id: str
    skipped: bool = False
    chunks: int = 0
    points: int = 0
    preview: SyncPreview | None = None
    error: str | None = None


class SyncEngine:
    """
    Keeps the vector index in line with the source store.

    A document's points are always deleted before its new points are
    inserted, so reconciling the same content twice yields the same index.
    """

    def __init__(
        self,
        vector_index: VectorIndex,
        embedding_provider: EmbeddingProvider,
        source: DocumentSource | None = None,
        chunker: TextChunker | None = None,
        read_only: bool = False,
        max_workers: int = 1,
        source_tag: str = SOURCE_TAG,
    ) -> None:
        """
        Initialize the sync engine.

        Args:
            vector_index: Target vector index
            embedding_provider: Provider used to embed chunks
            source: Source collection for bulk sync and status
            chunker: Text chunker (default instance when None)
            read_only: Refuse bulk writes; dry runs stay allowed
            max_workers: Documents reconciled in parallel during bulk sync
            source_tag: Value stored in the payload "source" field
        """
        self._index = vector_index
        self._embeddings = embedding_provider
        self._source = source
        self._chunker = chunker or TextChunker()
        self._read_only = read_only
        self._max_workers = max_workers
        self._source_tag = source_tag

    @property
    def read_only(self) -> bool:
        return self._read_only

    def _chunking_options(self, options: SyncOptions) -> ChunkingOptions:
        return ChunkingOptions(chunk_size=options.chunk_size, overlap=options.overlap)

    def delete_document(self, doc_id: str) -> None:
        """Remove every point owned by a document."""
        self._index.delete_by_doc_id(doc_id)
        logger.info(f"{__name__}:delete_document - Document vectors deleted", extra={"doc_id": doc_id})

    def reconcile_document(
        self,
        document: SourceDocument,
        options: SyncOptions,
        timestamp_key: str = "updatedAt",
    ) -> ReconcileResult:
        """
        Make a document's points match its current content.

        Deletes existing points first; when the text field is missing or blank
        nothing is inserted afterwards.

        Args:
            document: Source snapshot
            options: Field mapping and chunking parameters
            timestamp_key: Payload key for the reconciliation timestamp

        Returns:
            ReconcileResult: Chunk and point counts

        Raises:
            ProviderError: If embedding or index calls fail
        """
        self._index.delete_by_doc_id(document.id)

        text = document.text(options.text_field)
        if text is None:
            logger.debug(
                f"{__name__}:reconcile_document - Document missing or invalid text field",
                extra={"doc_id": document.id, "text_field": options.text_field},
            )
            return ReconcileResult(doc_id=document.id)

        chunks = self._chunker.chunk_for_embedding(
            text, document.id, self._chunking_options(options)
        )
        if not chunks:
            return ReconcileResult(doc_id=document.id)

        vectors = self._embeddings.embed_batch([c.text for c in chunks])

        base_payload: dict[str, Any] = {
            DOC_ID_KEY: document.id,
            "source": self._source_tag,
            timestamp_key: datetime.now(timezone.utc).isoformat(),
        }
        for field in options.metadata_fields:
            if field in document.data and field != DOC_ID_KEY:
                base_payload[field] = document.data[field]

        points = [
            Point(
                id=chunk.id,
                vector=vector,
                payload={
                    **base_payload,
                    "chunkIndex": chunk.chunk_index,
                    "startIndex": chunk.start_index,
                    "endIndex": chunk.end_index,
                    "text": chunk.text,
                    "tokens": chunk.tokens,
                },
            )
            for chunk, vector in zip(chunks, vectors)
        ]
        self._index.upsert(points)

        logger.info(
            f"{__name__}:reconcile_document - Document vectors updated",
            extra={"doc_id": document.id, "chunks": len(chunks), "points": len(points)},
        )
        return ReconcileResult(
            doc_id=document.id,
            chunks_created=len(chunks),
            points_upserted=len(points),
        )

    def handle_change_event(self, event: ChangeEvent, options: SyncOptions) -> ReconcileResult:
        """
        Apply one change event.

        Insert/update events without a snapshot are treated as documents
        without text, so their points are deleted.
        """
        logger.debug(
            f"{__name__}:handle_change_event - Processing change event",
            extra={"operation_type": event.operation_type.value, "doc_id": event.document_id},
        )
        if event.operation_type is OperationType.DELETE:
            self.delete_document(event.document_id)
            return ReconcileResult(doc_id=event.document_id)

        if event.full_document is None:
            logger.warning(
                f"{__name__}:handle_change_event - No full document available, deleting vectors",
                extra={"doc_id": event.document_id, "operation_type": event.operation_type.value},
            )
            self.delete_document(event.document_id)
            return ReconcileResult(doc_id=event.document_id)

        return self.reconcile_document(event.full_document, options)

    def _require_source(self) -> DocumentSource:
        if self._source is None:
            raise ConfigurationError("No document source configured for bulk sync")
        return self._source

    def _sync_one(self, document: SourceDocument, options: BulkSyncOptions) -> _DocumentOutcome:
        source = self._require_source()
        try:
            text = document.text(options.text_field)
            if text is None:
                logger.warning(
                    f"{__name__}:run_bulk_sync - Document missing text field",
                    extra={"doc_id": document.id, "text_field": options.text_field},
                )
                return _DocumentOutcome(doc_id=document.id, skipped=True)

            has_embedding = source.has_embedding(document)
            if has_embedding and not options.re_embed_if_missing:
                return _DocumentOutcome(doc_id=document.id, skipped=True)

            if options.dry_run:
                chunks = self._chunker.chunk(text, self._chunking_options(options))
                return _DocumentOutcome(
                    doc_id=document.id,
                    chunks=len(chunks),
                    preview=SyncPreview(
                        doc_id=document.id,
                        chunks=len(chunks),
                        has_embedding=has_embedding,
                        text_length=len(text),
                    ),
                )

            result = self.reconcile_document(document, options, timestamp_key="syncedAt")
            return _DocumentOutcome(
                doc_id=document.id,
                chunks=result.chunks_created,
                points=result.points_upserted,
            )
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:run_bulk_sync - Failed to process document",
                e,
                doc_id=document.id,
            )
            return _DocumentOutcome(doc_id=document.id, error=str(e))

    def _process_batch(
        self,
        batch: list[SourceDocument],
        options: BulkSyncOptions,
        stats: SyncStats,
        executor: ThreadPoolExecutor | None,
    ) -> None:
        if executor is None:
            outcomes = [self._sync_one(doc, options) for doc in batch]
        else:
            outcomes = list(executor.map(lambda doc: self._sync_one(doc, options), batch))

        for outcome in outcomes:
            if outcome.error is not None:
                stats.errors.append(SyncError(doc_id=outcome.doc_id, error=outcome.error))
            elif outcome.skipped:
                stats.documents_skipped += 1
            else:
                stats.documents_processed += 1
                stats.chunks_created += outcome.chunks
                stats.points_upserted += outcome.points
                if outcome.preview is not None and stats.preview is not None:
                    stats.preview.append(outcome.preview)

    def run_bulk_sync(self, options: BulkSyncOptions) -> SyncStats:
        """
        Reconcile the whole source collection.

        Args:
            options: Bulk sync parameters

        Returns:
            SyncStats: Counters, per-document errors and dry-run preview

        Raises:
            ReadOnlyModeError: If writes are disabled and dry_run is false
            VectorStoreError: If the collection cannot be created
            ConfigurationError: If no document source is configured
        """
        if self._read_only and not options.dry_run:
            raise ReadOnlyModeError(details={"dry_run": options.dry_run})

        source = self._require_source()
        start_time = time.perf_counter()

        logger.info(
            f"{__name__}:run_bulk_sync - Starting bulk sync",
            extra={
                "batch_size": options.batch_size,
                "re_embed_if_missing": options.re_embed_if_missing,
                "only_missing_embeddings": options.only_missing_embeddings,
                "text_field": options.text_field,
                "dry_run": options.dry_run,
            },
        )

        if not options.dry_run and not self._index.ensure_collection(True):
            raise VectorStoreError(
                message="Failed to create vector collection",
                operation="ensure_collection",
            )

        total = source.count_documents(options.only_missing_embeddings)
        logger.info(f"{__name__}:run_bulk_sync - Found documents to sync", extra={"total": total})

        stats = SyncStats(dry_run=options.dry_run, preview=[] if options.dry_run else None)
        executor = (
            ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="bulk-sync")
            if self._max_workers > 1
            else None
        )
        try:
            batch: list[SourceDocument] = []
            for document in source.iter_documents(
                options.only_missing_embeddings, options.batch_size
            ):
                batch.append(document)
                if len(batch) >= options.batch_size:
                    self._process_batch(batch, options, stats, executor)
                    batch = []
                    self._log_progress(stats, total)
            if batch:
                self._process_batch(batch, options, stats, executor)
        finally:
            if executor is not None:
                executor.shutdown(wait=True)

        stats.processing_time_ms = int((time.perf_counter() - start_time) * 1000)
        logger.info(
            f"{__name__}:run_bulk_sync - Bulk sync completed",
            extra={
                "documents_processed": stats.documents_processed,
                "chunks_created": stats.chunks_created,
                "points_upserted": stats.points_upserted,
                "documents_skipped": stats.documents_skipped,
                "errors": len(stats.errors),
                "processing_time_ms": stats.processing_time_ms,
                "dry_run": options.dry_run,
            },
        )
        return stats

    def _log_progress(self, stats: SyncStats, total: int) -> None:
        seen = stats.documents_processed + stats.documents_skipped + len(stats.errors)
        progress = round(seen / total * 100) if total else 100
        logger.debug(
            f"{__name__}:run_bulk_sync - Sync progress",
            extra={"processed": seen, "total": total, "progress": f"{progress}%"},
        )

    def sync_status(self) -> dict[str, Any]:
        """
        Report source embedding coverage and index health.

        Returns:
            dict: source counts plus index health and collection info
        """
        source = self._require_source()
        total = source.count_documents()
        with_embeddings = source.count_with_embeddings()

        healthy = self._index.health_check()
        collection = None
        if healthy:
            try:
                collection = self._index.get_collection_info()
            except VectorStoreError as e:
                logger.warning(f"{__name__}:sync_status - Collection info unavailable: {e}")

        return {
            "source": {
                "connected": True,
                "total_documents": total,
                "documents_with_embeddings": with_embeddings,
                "documents_without_embeddings": total - with_embeddings,
            },
            "vector_index": {
                "healthy": healthy,
                "collection": collection,
            },
        }
