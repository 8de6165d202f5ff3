"""Ranking scored candidates into the final result"""

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from lp_variants.models.schemas import (
    BusinessContext,
    ComparisonSummary,
    ResultMetadata,
    ScoredCandidate,
    VariantGenerationResult,
)

logger = logging.getLogger(__name__)

DEFAULT_RESULT_VERSION = "1.0-variants"


def _first_best(scored: List[ScoredCandidate], key: Callable[[ScoredCandidate], int]) -> Optional[str]:
    """Variant id with the highest key; the earliest one wins ties"""
    best = None
    for candidate in scored:
        if best is None or key(candidate) > key(best):
            best = candidate
    return best.variant_id if best is not None else None


class Ranker:
    """
    Orders scored candidates and picks the recommendation.

    Ranking is deterministic: a stable sort by score keeps equal scores in
    their original order, so ties always resolve to the lowest index.
    """

    def __init__(self, version: str = DEFAULT_RESULT_VERSION):
        self.version = version

    def aggregate(
        self,
        scored: List[ScoredCandidate],
        processing_time_ms: float,
        analysis: Optional[BusinessContext] = None,
    ) -> VariantGenerationResult:
        ranked = sorted(scored, key=lambda candidate: candidate.score, reverse=True)
        recommended = ranked[0].variant_id if ranked else ""

        logger.info(
            f"[Ranker] Ranked {len(ranked)} variants | "
            f"recommended: {recommended or 'none'} | "
            f"scores: {[c.score for c in ranked]}"
        )
        return VariantGenerationResult(
            success=True,
            variants=ranked,
            recommended_variant_id=recommended,
            metadata=ResultMetadata(
                generated_at=datetime.now(timezone.utc),
                processing_time_ms=processing_time_ms,
                total_variants=len(ranked),
                version=self.version,
            ),
            summary=self.compare(scored),
            analysis=analysis,
        )

    def compare(self, scored: List[ScoredCandidate]) -> ComparisonSummary:
        """Best variant overall and on each quality axis, in original order for ties"""
        return ComparisonSummary(
            best_overall=_first_best(scored, lambda c: c.score),
            best_for_business=_first_best(scored, lambda c: c.breakdown.business_alignment),
            best_design=_first_best(scored, lambda c: c.breakdown.design_quality),
            best_content=_first_best(scored, lambda c: c.breakdown.content_quality),
        )
