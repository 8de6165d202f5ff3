"""Per-variant configuration planning"""

import logging
from typing import List, Optional, Sequence

from lp_variants.core.tables import FocusCatalog, load_tables
from lp_variants.models.errors import InvalidRequestError
from lp_variants.models.schemas import (
    BusinessContext,
    DESIGN_FOCUSES,
    Overrides,
    VariantConfig,
)

logger = logging.getLogger(__name__)

MIN_VARIANTS = 1
MAX_VARIANTS = 3


class VariantPlanner:
    """Turns a business context into one VariantConfig per design focus"""

    def __init__(self, catalog: Optional[FocusCatalog] = None):
        self.catalog = catalog or load_tables().focus

    # Resolves which focuses to build and merges caller overrides over the inferred context.
    # Raises InvalidRequestError for a bad count or an unknown focus before anything is built.
    def plan(
        self,
        count: int,
        focus_areas: Optional[Sequence[str]],
        context: BusinessContext,
        overrides: Optional[Overrides],
        topic: str,
    ) -> List[VariantConfig]:
        """
        Build variant configurations.

        Args:
            count: Number of variants, 1 to 3
            focus_areas: Explicit focuses to use in order; empty means the canonical order
            context: Inferred business context
            overrides: Caller-supplied values that beat the context
            topic: Original business description

        Returns:
            Exactly ``count`` configs when focus_areas is empty, otherwise at most ``count``
        """
        if isinstance(count, bool) or not isinstance(count, int) or not MIN_VARIANTS <= count <= MAX_VARIANTS:
            raise InvalidRequestError(
                message=f"variant count must be an integer between {MIN_VARIANTS} and {MAX_VARIANTS}, got {count!r}",
                hint="Request 1, 2 or 3 variants",
            )

        if focus_areas:
            unknown = [f for f in focus_areas if f not in DESIGN_FOCUSES]
            if unknown:
                raise InvalidRequestError(
                    message=f"unknown design focus: {', '.join(map(str, unknown))}",
                    hint=f"Valid focuses: {', '.join(DESIGN_FOCUSES)}",
                )
            focuses = list(focus_areas)[:count]
        else:
            focuses = list(DESIGN_FOCUSES[:count])

        overrides = overrides or Overrides()
        resolved = context.with_overrides(overrides)

        configs = []
        for focus in focuses:
            copy = self.catalog.focuses[focus]
            configs.append(
                VariantConfig(
                    design_focus=focus,
                    topic=topic,
                    enhanced_topic=f"{topic} {copy.clause}",
                    target_audience=resolved.target_audience,
                    business_goal=resolved.business_goal,
                    industry=resolved.industry,
                    competitive_advantage=list(resolved.competitive_advantage),
                    tone=resolved.tone,
                    design_style=overrides.design_style or copy.design_style,
                    description=copy.description,
                    features=list(copy.features),
                    marketing_psychology=copy.marketing_psychology,
                )
            )

        logger.info(f"[VariantPlanner] Planned {len(configs)} variants: {', '.join(focuses)}")
        return configs
