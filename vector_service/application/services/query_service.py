"""
Query service.

Similarity search path: validate filters, embed text queries, over-fetch
candidates when re-ranking is requested, apply MMR or diversity re-ranking,
and strip vectors the caller did not ask for.

Dependencies: vector_service.boundary, vector_service.core.reranking
System role: Retrieval orchestration
"""

import logging
import time

from vector_service.boundary.embeddings.base import EmbeddingProvider
from vector_service.boundary.vdb.base import VectorIndex
from vector_service.boundary.vdb.filters import validate_filter
from vector_service.boundary.vdb.vector_schemas import PayloadFilter, SearchResult
from vector_service.core.exceptions import InvalidFilterError
from vector_service.core.reranking.mmr import (
    MMROptions,
    RankedResult,
    apply_diversity_reranking,
    apply_mmr,
)
from vector_service.models.query import QueryData, QueryInfo, QueryRequest, QueryResultItem

logger = logging.getLogger(__name__)


class QueryService:
    """Runs similarity queries against the vector index."""

    def __init__(self, vector_index: VectorIndex, embedding_provider: EmbeddingProvider) -> None:
        self._index = vector_index
        self._embeddings = embedding_provider

    def query(self, request: QueryRequest) -> QueryData:
        """
        Execute a similarity query.

        Args:
            request: Query parameters

        Returns:
            QueryData: Ranked results and a summary of the executed query

        Raises:
            InvalidFilterError: If filters are malformed
            EmbeddingError: If the text query cannot be embedded
            VectorStoreError: If the search fails
        """
        start_time = time.perf_counter()
        mmr = request.mmr
        diversity = request.diversity_reranking

        logger.info(
            f"{__name__}:query - Processing query request",
            extra={
                "has_text": request.text is not None,
                "has_vector": request.vector is not None,
                "top_k": request.top_k,
                "has_filters": request.filters is not None,
                "mmr_enabled": mmr.enabled,
                "diversity_enabled": diversity.enabled,
            },
        )

        payload_filter = None
        if request.filters is not None:
            errors = validate_filter(request.filters)
            if errors:
                raise InvalidFilterError(errors)
            payload_filter = PayloadFilter.model_validate(request.filters)

        query_vector = request.vector
        if query_vector is None:
            query_vector = self._embeddings.embed(request.text)

        needs_reranking = mmr.enabled or diversity.enabled
        fetch_limit = max(request.top_k, mmr.fetch_k) if needs_reranking else request.top_k

        candidates = self._index.search(
            query_vector,
            limit=fetch_limit,
            filter=payload_filter,
            with_payload=request.fetch_payload,
            with_vector=request.with_vectors or needs_reranking,
            score_threshold=request.score_threshold,
            ef_search=request.ef_search,
        )
        logger.debug(
            f"{__name__}:query - Search completed",
            extra={"candidates": len(candidates), "fetch_limit": fetch_limit},
        )

        mmr_applied = False
        diversity_applied = False
        results: list[SearchResult] | list[RankedResult]
        if mmr.enabled and candidates:
            results = apply_mmr(
                candidates,
                query_vector,
                MMROptions(lambda_=mmr.lambda_, fetch_k=mmr.fetch_k),
                request.top_k,
            )
            mmr_applied = True
        elif diversity.enabled and candidates:
            results = apply_diversity_reranking(candidates, diversity.weight, request.top_k)
            diversity_applied = True
        else:
            results = candidates[: request.top_k]

        items = [QueryResultItem.model_validate(r.model_dump()) for r in results]
        if not request.with_vectors:
            for item in items:
                item.vector = None

        processing_time_ms = int((time.perf_counter() - start_time) * 1000)
        logger.info(
            f"{__name__}:query - Query request completed",
            extra={
                "results_count": len(items),
                "mmr_applied": mmr_applied,
                "diversity_applied": diversity_applied,
                "processing_time_ms": processing_time_ms,
            },
        )
        return QueryData(
            results=items,
            query=QueryInfo(
                text=request.text,
                embedding=query_vector if request.with_vectors else None,
                top_k=request.top_k,
                actual_k=len(items),
                filters=request.filters,
                mmr_applied=mmr_applied,
                diversity_applied=diversity_applied,
            ),
            processing_time_ms=processing_time_ms,
        )
