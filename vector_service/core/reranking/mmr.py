"""
Maximal Marginal Relevance re-ranking.

Re-orders nearest-neighbour candidates to balance relevance to the query
against redundancy among already selected results. Both rerankers are pure
functions; ties resolve to the first candidate in input order.

Dependencies: pydantic
System role: Query-time re-ranking stage
"""

import math

from pydantic import BaseModel, ConfigDict, Field

from vector_service.boundary.vdb.vector_schemas import SearchResult
from vector_service.core.exceptions import DimensionMismatchError


class MMROptions(BaseModel):
    """MMR parameters."""

    lambda_: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        alias="lambda",
        description="1.0 = pure relevance, 0.0 = pure diversity",
    )
    fetch_k: int = Field(default=50, ge=1, description="Candidates considered for re-ranking")

    model_config = ConfigDict(populate_by_name=True)


class RankedResult(SearchResult):
    """Search result annotated with its re-ranking scores."""

    original_score: float
    mmr_score: float
    mmr_rank: int


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """
    Cosine similarity of two vectors.

    Returns 0.0 when either vector has zero norm.

    Raises:
        DimensionMismatchError: If the vectors differ in length
    """
    if len(a) != len(b):
        raise DimensionMismatchError(expected=len(a), found=len(b))

    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a += x * x
        norm_b += y * y

    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (math.sqrt(norm_a) * math.sqrt(norm_b))


def _passthrough(results: list[SearchResult], top_k: int) -> list[RankedResult]:
    return [
        RankedResult(
            **r.model_dump(),
            original_score=r.score,
            mmr_score=r.score,
            mmr_rank=i + 1,
        )
        for i, r in enumerate(results[:top_k])
    ]


def _ranked(candidate: SearchResult, score: float, rank: int) -> RankedResult:
    return RankedResult(
        **candidate.model_dump(),
        original_score=candidate.score,
        mmr_score=score,
        mmr_rank=rank,
    )


def apply_mmr(
    results: list[SearchResult],
    query_vector: list[float],
    options: MMROptions,
    top_k: int,
) -> list[RankedResult]:
    """
    Apply MMR re-ranking.

    Each step picks the candidate maximising
    ``lambda * sim(query, c) - (1 - lambda) * max(sim(c, s) for s in selected)``.

    Args:
        results: Candidates ordered by search score, with vectors
        query_vector: Query embedding
        options: lambda and fetch_k
        top_k: Number of results to return

    Returns:
        list[RankedResult]: Selected results in selection order, ranks from 1.
        Candidates without vectors fall back to the first top_k inputs unchanged.
    """
    if not results or top_k < 1:
        return []

    remaining = [r for r in results[: options.fetch_k] if r.vector]
    if not remaining:
        return _passthrough(results, top_k)

    lam = options.lambda_
    selected: list[RankedResult] = []

    while len(selected) < top_k and remaining:
        best_index = -1
        best_score = -math.inf

        for i, candidate in enumerate(remaining):
            relevance = cosine_similarity(query_vector, candidate.vector)
            penalty = 0.0
            if selected:
                penalty = max(cosine_similarity(candidate.vector, s.vector) for s in selected)
            score = lam * relevance - (1 - lam) * penalty
            if score > best_score:
                best_score = score
                best_index = i

        chosen = remaining.pop(best_index)
        selected.append(_ranked(chosen, best_score, len(selected) + 1))

    return selected


def apply_diversity_reranking(
    results: list[SearchResult],
    diversity_weight: float = 0.3,
    top_k: int = 10,
) -> list[RankedResult]:
    """
    Diversify results without a query vector.

    Seeds with the highest-scoring candidate, then picks by
    ``score * (1 - w) - mean(sim(c, s) for s in selected) * w``.

    Args:
        results: Candidates with vectors
        diversity_weight: w in [0, 1]
        top_k: Number of results to return

    Returns:
        list[RankedResult]: Selected results in selection order, ranks from 1
    """
    if not results or top_k < 1:
        return []

    remaining = [r for r in results if r.vector]
    if not remaining:
        return _passthrough(results, top_k)

    seed_index = max(range(len(remaining)), key=lambda i: (remaining[i].score, -i))
    seed = remaining.pop(seed_index)
    selected = [_ranked(seed, seed.score, 1)]

    while len(selected) < top_k and remaining:
        best_index = -1
        best_score = -math.inf

        for i, candidate in enumerate(remaining):
            penalty = sum(cosine_similarity(candidate.vector, s.vector) for s in selected) / len(
                selected
            )
            score = candidate.score * (1 - diversity_weight) - penalty * diversity_weight
            if score > best_score:
                best_score = score
                best_index = i

        chosen = remaining.pop(best_index)
        selected.append(_ranked(chosen, best_score, len(selected) + 1))

    return selected
