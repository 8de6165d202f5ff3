"""Multi-criteria scoring of generated candidates"""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from bs4 import BeautifulSoup

from lp_variants.core.tables import FocusCatalog, ScoringTables, load_tables
from lp_variants.models.errors import ScoringError
from lp_variants.models.schemas import (
    BusinessContext,
    Candidate,
    CandidateMetadata,
    DesignFocus,
    Recommendation,
    ScoreBreakdown,
    ScoredCandidate,
    ScoringPreferences,
)

logger = logging.getLogger(__name__)

HEADING_TAG = re.compile(r"^h[1-6]$")

# Preference flag -> design focus that earns the bonus
PREFERENCE_FOCUS = {
    "prioritize_conversion": "conversion-optimized",
    "prioritize_design": "modern-clean",
    "prioritize_content": "content-rich",
}

STRENGTH_LABELS = {
    "business_alignment": "Strong alignment with the business goal",
    "industry_fit": "Strong fit for the industry",
    "design_quality": "High design quality",
    "content_quality": "High content quality",
}

STRENGTH_RATIO = 0.8


def variant_id_for(index: int, design_focus: str) -> str:
    """Stable id from the 0-based config position and its focus"""
    return f"variant_{index + 1}_{design_focus}"


class ScoringEngine:
    """
    Scores candidates against the business context.

    Sub-scores:
        business_alignment (0-30): goal x focus compatibility table
        industry_fit (0-25): industry x focus compatibility table
        design_quality (0-25): markup and stylesheet heuristics
        content_quality (0-20): text and structure heuristics

    The composite is the weighted sum of each sub-score as a fraction of its
    maximum, scaled to 0-100, plus a flat bonus when a caller preference matches
    the candidate's focus.
    """

    def __init__(self, tables: Optional[ScoringTables] = None, focus: Optional[FocusCatalog] = None):
        loaded = None if tables and focus else load_tables()
        self.tables = tables or loaded.scoring
        self.focus = focus or loaded.focus

    def score(
        self,
        candidate: Candidate,
        context: BusinessContext,
        design_focus: DesignFocus,
        index: int,
        description: str,
        features: Sequence[str],
        preferences: Optional[ScoringPreferences] = None,
    ) -> ScoredCandidate:
        """
        Score one candidate.

        Never raises: fallback candidates get the fixed fallback score, and a
        candidate that cannot be scored gets 0 with an explanatory reason.
        """
        variant_id = variant_id_for(index, design_focus)

        if candidate.is_fallback:
            logger.info(f"[ScoringEngine] {variant_id} is a fallback, score={self.tables.fallback_score}")
            return self._assemble(
                candidate, variant_id, design_focus, description, features, context,
                score=self.tables.fallback_score,
                breakdown=ScoreBreakdown(),
                reasoning=["Generation failed for this variant; a placeholder design is shown instead."],
                strengths=[],
            )

        try:
            breakdown = self._breakdown(candidate, context, design_focus)
        except Exception as e:
            logger.error(f"[ScoringEngine] ✗ {variant_id} could not be scored: {e}")
            return self._assemble(
                candidate, variant_id, design_focus, description, features, context,
                score=0,
                breakdown=ScoreBreakdown(),
                reasoning=[f"Scoring error: {e}"],
                strengths=[],
            )

        score = self._composite(breakdown, design_focus, preferences)
        logger.info(
            f"[ScoringEngine] {variant_id} score={score} | "
            f"business={breakdown.business_alignment} | "
            f"industry={breakdown.industry_fit} | "
            f"design={breakdown.design_quality} | "
            f"content={breakdown.content_quality}"
        )
        return self._assemble(
            candidate, variant_id, design_focus, description, features, context,
            score=score,
            breakdown=breakdown,
            reasoning=self._reasoning(breakdown, context, design_focus),
            strengths=self._strengths(breakdown, design_focus, features),
        )

    # ============================================================================
    # Sub-scores
    # ============================================================================

    def _breakdown(self, candidate: Candidate, context: BusinessContext, design_focus: str) -> ScoreBreakdown:
        html_content = candidate.html_content
        css_content = candidate.css_content or ""
        if not isinstance(html_content, str) or not html_content.strip():
            raise ScoringError("candidate has no markup to score")
        if not isinstance(css_content, str):
            raise ScoringError("candidate stylesheet is not text")

        soup = BeautifulSoup(html_content, "html.parser")
        design = self._design_quality(soup, html_content, css_content)
        # content scoring strips script/style from the tree, so it runs last
        content = self._content_quality(soup, html_content)

        defaults = self.tables.defaults
        return ScoreBreakdown(
            business_alignment=self.tables.goal_alignment.get(design_focus, {}).get(
                context.business_goal, defaults.business_alignment
            ),
            industry_fit=self.tables.industry_fit.get(design_focus, {}).get(
                context.industry, defaults.industry_fit
            ),
            design_quality=design,
            content_quality=content,
        )

    def _design_quality(self, soup: BeautifulSoup, html_content: str, css_content: str) -> int:
        rules = self.tables.design
        points = rules.base

        semantic = sum(1 for tag in rules.semantic_tags if soup.find(tag) is not None)
        points += min(rules.max_semantic_points, semantic)

        headings = soup.find_all(HEADING_TAG)
        if 2 <= len(headings) <= 6:
            points += 2

        images = soup.find_all("img")
        if images:
            with_alt = sum(1 for img in images if (img.get("alt") or "").strip())
            if with_alt / len(images) > 0.8:
                points += 2

        if "--" in css_content or "var(" in css_content:
            points += 2
        if "@media" in css_content or "sm:" in css_content or "md:" in css_content:
            points += 2

        classes = " ".join(
            " ".join(tag.get("class", [])) for tag in soup.find_all(class_=True)
        )
        layout = sum(1 for p in rules.layout_primitives if p in css_content or p in classes)
        points += min(rules.max_layout_points, layout)

        responsive = sum(1 for prefix in rules.responsive_prefixes if prefix in html_content)
        points += min(rules.max_responsive_points, responsive)

        if "@media" in css_content:
            points += 1
        if soup.find("meta", attrs={"name": "viewport"}) is not None:
            points += 1

        return min(self.tables.maximums.design_quality, points)

    def _content_quality(self, soup: BeautifulSoup, html_content: str) -> int:
        rules = self.tables.content
        points = rules.base
        lowered = html_content.lower()

        sections = sum(1 for section in rules.section_types if section in lowered)
        points += min(rules.max_section_points, sections)

        markers = len(soup.find_all(attrs={"data-editable-id": True}))
        points += min(rules.max_marker_points, markers // 3)

        if "aria-" in lowered:
            points += 1
        if soup.find("button") is not None or soup.find("a", href=True) is not None:
            points += 1
        if soup.find("label", attrs={"for": True}) is not None:
            points += 1

        for tag in soup(["script", "style"]):
            tag.decompose()
        text_length = len(soup.get_text(" ", strip=True))
        if 200 < text_length < 5000:
            points += 3
        elif text_length > 100:
            points += 2

        return min(self.tables.maximums.content_quality, points)

    # ============================================================================
    # Composite, reasoning, recommendation
    # ============================================================================

    def _composite(
        self,
        breakdown: ScoreBreakdown,
        design_focus: str,
        preferences: Optional[ScoringPreferences],
    ) -> int:
        weights = self.tables.weights
        maximums = self.tables.maximums
        composite = 100 * (
            weights.business_alignment * breakdown.business_alignment / maximums.business_alignment
            + weights.industry_fit * breakdown.industry_fit / maximums.industry_fit
            + weights.design_quality * breakdown.design_quality / maximums.design_quality
            + weights.content_quality * breakdown.content_quality / maximums.content_quality
        )
        if preferences is not None:
            for flag, focus in PREFERENCE_FOCUS.items():
                if getattr(preferences, flag) and focus == design_focus:
                    composite += self.tables.preference_bonus
        return max(0, min(100, round(composite)))

    def _reasoning(self, breakdown: ScoreBreakdown, context: BusinessContext, design_focus: str) -> List[str]:
        goal = context.business_goal
        industry = context.industry
        reasons = []

        if breakdown.business_alignment > 20:
            reasons.append(f"Very well suited to the '{goal}' goal.")
        elif breakdown.business_alignment > 15:
            reasons.append(f"Suited to the '{goal}' goal.")
        else:
            reasons.append(f"Standard alignment with the '{goal}' goal.")

        if breakdown.industry_fit > 20:
            reasons.append(f"Optimized for the {industry} industry.")
        elif breakdown.industry_fit > 15:
            reasons.append(f"Suited to the {industry} industry.")

        if breakdown.design_quality > 20:
            reasons.append("High-quality design with modern, accessible markup.")
        elif breakdown.design_quality > 15:
            reasons.append("Good design quality.")

        if breakdown.content_quality > 15:
            reasons.append("Rich, well-structured content.")
        elif breakdown.content_quality > 10:
            reasons.append("Adequate content.")

        reasons.append(self.focus.focuses[design_focus].reasoning)
        return reasons

    def _strengths(self, breakdown: ScoreBreakdown, design_focus: str, features: Sequence[str]) -> List[str]:
        maximums = self.tables.maximums
        strengths = [
            label
            for field, label in STRENGTH_LABELS.items()
            if getattr(breakdown, field) >= STRENGTH_RATIO * getattr(maximums, field)
        ]
        if not strengths:
            fallback = list(features) or self.focus.focuses[design_focus].features
            strengths = fallback[:1]
        return strengths

    def _assemble(
        self,
        candidate: Candidate,
        variant_id: str,
        design_focus: str,
        description: str,
        features: Sequence[str],
        context: BusinessContext,
        score: int,
        breakdown: ScoreBreakdown,
        reasoning: List[str],
        strengths: List[str],
    ) -> ScoredCandidate:
        copy = self.focus.focuses[design_focus]
        return ScoredCandidate(
            **_carry_over(candidate),
            description=description,
            features=list(features),
            variant_id=variant_id,
            score=score,
            breakdown=breakdown,
            reasoning=reasoning,
            design_focus=design_focus,
            recommendation=Recommendation(
                reason=copy.recommendation.reason.format(goal=context.business_goal),
                target_use_case=copy.recommendation.target_use_case,
                strengths=strengths,
            ),
        )


def _carry_over(candidate: Candidate) -> Dict[str, Any]:
    """Candidate fields copied onto the scored result, tolerating malformed values"""
    html_content = getattr(candidate, "html_content", None)
    css_content = getattr(candidate, "css_content", None)
    metadata = getattr(candidate, "metadata", None)
    if not isinstance(metadata, CandidateMetadata):
        metadata = CandidateMetadata(generated_at=datetime.now(timezone.utc), model="unknown")
    return {
        "success": bool(getattr(candidate, "success", False)),
        "html_content": html_content if isinstance(html_content, str) else "",
        "css_content": css_content if isinstance(css_content, str) else "",
        "title": getattr(candidate, "title", None) or "",
        "structure": getattr(candidate, "structure", None),
        "metadata": metadata,
        "provenance": getattr(candidate, "provenance", "generated"),
        "error": getattr(candidate, "error", None),
    }
