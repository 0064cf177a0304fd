"""
In-memory vector index.

Brute-force cosine search over a dict of points with the same filter
semantics as Qdrant. Intended for local development and tests.

Dependencies: vector_service.core.reranking
System role: Local/dev vector index backend
"""

import logging
import threading
from typing import Any

from vector_service.boundary.vdb.base import VectorIndex
from vector_service.boundary.vdb.vector_schemas import (
    FieldCondition,
    PayloadFilter,
    Point,
    SearchResult,
)
from vector_service.core.exceptions import DimensionMismatchError
from vector_service.core.reranking.mmr import cosine_similarity

logger = logging.getLogger(__name__)


def _condition_matches(payload: dict[str, Any], condition: FieldCondition | PayloadFilter) -> bool:
    if isinstance(condition, PayloadFilter):
        return filter_matches(payload, condition)
    value = payload.get(condition.key)
    if condition.match is not None:
        expected = condition.match.value
        if isinstance(value, list):
            return expected in value
        return value == expected
    if condition.range is not None:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        rng = condition.range
        return (
            (rng.gte is None or value >= rng.gte)
            and (rng.lte is None or value <= rng.lte)
            and (rng.gt is None or value > rng.gt)
            and (rng.lt is None or value < rng.lt)
        )
    return False


def filter_matches(payload: dict[str, Any], filter: PayloadFilter | None) -> bool:
    """Evaluate a payload filter against one payload."""
    if filter is None:
        return True
    if filter.must and not all(_condition_matches(payload, c) for c in filter.must):
        return False
    if filter.should and not any(_condition_matches(payload, c) for c in filter.should):
        return False
    if filter.must_not and any(_condition_matches(payload, c) for c in filter.must_not):
        return False
    return True


class InMemoryVectorIndex(VectorIndex):
    """Thread-safe dict-backed vector index."""

    def __init__(self, collection_name: str = "my_docs", vector_size: int | None = None) -> None:
        self.collection_name = collection_name
        self.vector_size = vector_size
        self._points: dict[str, Point] = {}
        self._exists = False
        self._lock = threading.Lock()

    def ensure_collection(self, create_if_missing: bool = True) -> bool:
        with self._lock:
            if not self._exists and create_if_missing:
                logger.info(
                    f"{__name__}:ensure_collection - Creating collection",
                    extra={"collection": self.collection_name},
                )
                self._exists = True
            return self._exists

    def upsert(self, points: list[Point]) -> None:
        if not points:
            return
        for point in points:
            if self.vector_size is not None and len(point.vector) != self.vector_size:
                raise DimensionMismatchError(expected=self.vector_size, found=len(point.vector))
        with self._lock:
            self._exists = True
            for point in points:
                self._points[point.id] = point.model_copy(deep=True)
        logger.debug(f"{__name__}:upsert - Points upserted", extra={"count": len(points)})

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
        with self._lock:
            candidates = list(self._points.values())

        scored = []
        for point in candidates:
            if not filter_matches(point.payload, filter):
                continue
            score = cosine_similarity(vector, point.vector)
            if score_threshold is not None and score < score_threshold:
                continue
            scored.append((score, point))

        scored.sort(key=lambda item: item[0], reverse=True)
        return [
            SearchResult(
                id=point.id,
                score=score,
                payload=dict(point.payload) if with_payload else None,
                vector=list(point.vector) if with_vector else None,
            )
            for score, point in scored[:limit]
        ]

    def delete_by_ids(self, ids: list[str]) -> None:
        with self._lock:
            for point_id in ids:
                self._points.pop(point_id, None)

    def delete_by_filter(self, filter: PayloadFilter) -> None:
        with self._lock:
            doomed = [pid for pid, p in self._points.items() if filter_matches(p.payload, filter)]
            for point_id in doomed:
                del self._points[point_id]
        logger.debug(f"{__name__}:delete_by_filter - Points deleted", extra={"count": len(doomed)})

    def get_collection_info(self) -> dict[str, Any]:
        with self._lock:
            return {
                "name": self.collection_name,
                "status": "green" if self._exists else "missing",
                "points_count": len(self._points),
                "vector_size": self.vector_size,
            }

    def health_check(self) -> bool:
        return True

    def points(self) -> list[Point]:
        """Snapshot of stored points."""
        with self._lock:
            return list(self._points.values())
