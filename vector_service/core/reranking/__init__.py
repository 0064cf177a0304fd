from vector_service.core.reranking.mmr import (
    MMROptions,
    RankedResult,
    apply_diversity_reranking,
    apply_mmr,
    cosine_similarity,
)

__all__ = [
    "MMROptions",
    "RankedResult",
    "apply_diversity_reranking",
    "apply_mmr",
    "cosine_similarity",
]
