"""
Qdrant vector index.

Wraps qdrant-client with collection bootstrap (HNSW settings), retrying
transport calls and translating failures into VectorStoreError.

Dependencies: qdrant_client, tenacity, vector_service.core.exceptions
System role: Production vector index backend
"""

import logging
from typing import Any

from qdrant_client import QdrantClient, models
from qdrant_client.http.exceptions import ResponseHandlingException, UnexpectedResponse
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from vector_service.boundary.vdb.base import VectorIndex
from vector_service.boundary.vdb.vector_schemas import PayloadFilter, Point, SearchResult
from vector_service.core.exceptions import VectorStoreError

logger = logging.getLogger(__name__)

_DISTANCES = {
    "Cosine": models.Distance.COSINE,
    "Dot": models.Distance.DOT,
    "Euclid": models.Distance.EUCLID,
}


def _is_transient(exc: BaseException) -> bool:
    """Transport failures and 5xx/429 responses are worth retrying."""
    if isinstance(exc, ResponseHandlingException):
        return True
    if isinstance(exc, UnexpectedResponse):
        return exc.status_code == 429 or exc.status_code >= 500
    return False


# Exponential backoff from 0.5s capped at 8s, plus up to 1s of jitter
RETRY_WAIT = wait_exponential(multiplier=0.5, max=8) + wait_random(0, 1)

_transient_retry = retry(
    retry=retry_if_exception(_is_transient),
    stop=stop_after_attempt(3),
    wait=RETRY_WAIT,
    before_sleep=lambda retry_state: logger.warning(
        f"{__name__}:{retry_state.fn.__name__} - Retry {retry_state.attempt_number}/3 "
        f"after transient Qdrant error"
    ),
    reraise=True,
)


def _to_qdrant_filter(filter: PayloadFilter | None) -> models.Filter | None:
    if filter is None:
        return None
    return models.Filter.model_validate(filter.to_dict())


class QdrantVectorIndex(VectorIndex):
    """
    Qdrant-backed vector index for one collection.

    Points carry UUID ids; payloads carry the owning docId for
    replace-by-document deletes.
    """

    def __init__(
        self,
        url: str,
        collection_name: str,
        vector_size: int,
        distance: str = "Cosine",
        api_key: str | None = None,
        timeout_seconds: int = 30,
        hnsw_m: int = 16,
        hnsw_ef_construct: int = 256,
        client: QdrantClient | None = None,
    ) -> None:
        """
        Initialize the Qdrant client.

        Args:
            url: Qdrant base URL
            collection_name: Collection to operate on
            vector_size: Dimensionality used when creating the collection
            distance: Cosine, Dot or Euclid
            api_key: Optional Qdrant API key
            timeout_seconds: Request timeout
            hnsw_m: HNSW graph degree for new collections
            hnsw_ef_construct: HNSW build-time beam width for new collections
            client: Preconstructed client (tests)
        """
        self.collection_name = collection_name
        self._vector_size = vector_size
        self._distance = _DISTANCES[distance]
        self._hnsw_m = hnsw_m
        self._hnsw_ef_construct = hnsw_ef_construct
        self._client = client or QdrantClient(
            url=url,
            api_key=api_key or None,
            timeout=timeout_seconds,
        )

    def ensure_collection(self, create_if_missing: bool = True) -> bool:
        try:
            if self._client.collection_exists(self.collection_name):
                logger.info(
                    f"{__name__}:ensure_collection - Collection exists",
                    extra={"collection": self.collection_name},
                )
                return True
            if not create_if_missing:
                return False

            logger.info(
                f"{__name__}:ensure_collection - Creating collection",
                extra={"collection": self.collection_name, "vector_size": self._vector_size},
            )
            self._client.create_collection(
                collection_name=self.collection_name,
                vectors_config=models.VectorParams(size=self._vector_size, distance=self._distance),
                hnsw_config=models.HnswConfigDiff(
                    m=self._hnsw_m,
                    ef_construct=self._hnsw_ef_construct,
                ),
                optimizers_config=models.OptimizersConfigDiff(default_segment_number=2),
            )
            return True
        except (ResponseHandlingException, UnexpectedResponse) as e:
            logger.error(
                f"{__name__}:ensure_collection - Failed to check or create collection",
                extra={"collection": self.collection_name, "error": str(e)},
            )
            return False

    @_transient_retry
    def _upsert(self, points: list[models.PointStruct]) -> None:
        self._client.upsert(collection_name=self.collection_name, points=points, wait=True)

    def upsert(self, points: list[Point]) -> None:
        if not points:
            return
        try:
            self._upsert(
                [
                    models.PointStruct(id=p.id, vector=p.vector, payload=p.payload)
                    for p in points
                ]
            )
        except (ResponseHandlingException, UnexpectedResponse) as e:
            raise VectorStoreError(
                message=f"Failed to upsert points: {e}",
                operation="upsert",
                details={"point_count": len(points)},
            ) from e
        logger.info(f"{__name__}:upsert - Points upserted", extra={"count": len(points)})

    @_transient_retry
    def _query(self, **kwargs) -> list[models.ScoredPoint]:
        return self._client.query_points(collection_name=self.collection_name, **kwargs).points

    def search(
        self,
        vector: list[float],
        limit: int = 10,
        filter: PayloadFilter | None = None,
        with_payload: bool = True,
        with_vector: bool = False,
        score_threshold: float | None = None,
        ef_search: int | None = None,
    ) -> list[SearchResult]:
        try:
            hits = self._query(
                query=vector,
                limit=limit,
                query_filter=_to_qdrant_filter(filter),
                with_payload=with_payload,
                with_vectors=with_vector,
                score_threshold=score_threshold,
                search_params=models.SearchParams(hnsw_ef=ef_search) if ef_search else None,
            )
        except (ResponseHandlingException, UnexpectedResponse) as e:
            raise VectorStoreError(message=f"Search failed: {e}", operation="search") from e

        logger.debug(
            f"{__name__}:search - Search completed",
            extra={"result_count": len(hits), "limit": limit},
        )
        return [
            SearchResult(
                id=str(hit.id),
                score=hit.score,
                payload=hit.payload,
                vector=hit.vector if isinstance(hit.vector, list) else None,
            )
            for hit in hits
        ]

    @_transient_retry
    def _delete(self, selector: models.PointIdsList | models.FilterSelector) -> None:
        self._client.delete(
            collection_name=self.collection_name,
            points_selector=selector,
            wait=True,
        )

    def delete_by_ids(self, ids: list[str]) -> None:
        if not ids:
            return
        try:
            self._delete(models.PointIdsList(points=ids))
        except (ResponseHandlingException, UnexpectedResponse) as e:
            raise VectorStoreError(
                message=f"Failed to delete points: {e}",
                operation="delete_by_ids",
                details={"ids": ids},
            ) from e
        logger.info(f"{__name__}:delete_by_ids - Points deleted", extra={"count": len(ids)})

    def delete_by_filter(self, filter: PayloadFilter) -> None:
        try:
            self._delete(models.FilterSelector(filter=_to_qdrant_filter(filter)))
        except (ResponseHandlingException, UnexpectedResponse) as e:
            raise VectorStoreError(
                message=f"Failed to delete by filter: {e}",
                operation="delete_by_filter",
                details={"filter": filter.to_dict()},
            ) from e
        logger.info(
            f"{__name__}:delete_by_filter - Points deleted by filter",
            extra={"filter": filter.to_dict()},
        )

    def get_collection_info(self) -> dict[str, Any]:
        try:
            info = self._client.get_collection(self.collection_name)
        except (ResponseHandlingException, UnexpectedResponse) as e:
            raise VectorStoreError(
                message=f"Failed to get collection info: {e}",
                operation="get_collection_info",
            ) from e
        return info.model_dump(mode="json")

    def health_check(self) -> bool:
        try:
            self._client.get_collections()
            return True
        except Exception as e:
            logger.warning(f"{__name__}:health_check - Qdrant unreachable: {e}")
            return False
