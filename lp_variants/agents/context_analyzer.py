"""Business context inference from a freeform description"""

import logging
import re
from itertools import islice
from typing import Callable, Dict, List, Optional, Tuple

from lp_variants.core.tables import ClassificationTables, PersonaTraits, load_tables
from lp_variants.models.schemas import BusinessContext

logger = logging.getLogger(__name__)

Matcher = Callable[[str], bool]


# Builds a presence test for one keyword against lower-cased text.
# ASCII keywords need word boundaries (optional plural s); anything else matches as a substring.
def _keyword_matcher(keyword: str) -> Matcher:
    needle = keyword.lower()
    if needle.isascii():
        pattern = re.compile(r"(?<![a-z0-9])" + re.escape(needle) + r"s?(?![a-z0-9])")
        return lambda text: pattern.search(text) is not None
    return lambda text: needle in text


def _compile_category(table: Dict[str, List[str]]) -> List[Tuple[str, List[Matcher]]]:
    return [(label, [_keyword_matcher(kw) for kw in keywords]) for label, keywords in table.items()]


def _best_label(text: str, category: List[Tuple[str, List[Matcher]]], default: str) -> str:
    """Label with the most keyword hits; earlier labels win ties, no hits gives the default"""
    best_label, best_count = default, 0
    for label, matchers in category:
        count = sum(1 for matches in matchers if matches(text))
        if count > best_count:
            best_label, best_count = label, count
    return best_label


class ContextAnalyzer:
    """
    Infers a BusinessContext from freeform text.

    Stateless once constructed: every lookup goes through the classification
    tables passed in (or the packaged defaults), so instances can be shared
    freely or swapped out in tests.
    """

    def __init__(self, tables: Optional[ClassificationTables] = None):
        self.tables = tables or load_tables().classification
        self._industries = _compile_category(self.tables.industries)
        self._audiences = _compile_category(self.tables.audiences)
        self._goals = _compile_category(self.tables.goals)
        self._tones = _compile_category(self.tables.tones)

        rules = self.tables.advantages
        self._advantage_patterns = [re.compile(p, re.IGNORECASE) for p in rules.patterns]
        self._fallback_patterns = [
            re.compile(re.escape(kw), re.IGNORECASE) for kw in rules.fallback.keywords
        ]

        self._industry_aliases = {k.lower(): v for k, v in self.tables.aliases.get("industry", {}).items()}
        self._goal_aliases = {k.lower(): v for k, v in self.tables.aliases.get("goal", {}).items()}

    # Classifies industry, audience, goal and tone, and pulls out competitive advantages.
    # Never raises: empty or unrecognizable input yields the defaults.
    def analyze(self, text: Optional[str]) -> BusinessContext:
        """
        Analyze a business description.

        Args:
            text: Freeform business description (any language the tables cover)

        Returns:
            BusinessContext with taxonomy labels or defaults
        """
        defaults = self.tables.defaults
        if not text or not text.strip():
            logger.info("[ContextAnalyzer] Empty input, using defaults")
            return BusinessContext(
                industry=defaults.industry,
                target_audience=defaults.audience,
                business_goal=defaults.goal,
                tone=defaults.tone,
            )

        normalized = text.lower()
        context = BusinessContext(
            industry=_best_label(normalized, self._industries, defaults.industry),
            target_audience=_best_label(normalized, self._audiences, defaults.audience),
            business_goal=_best_label(normalized, self._goals, defaults.goal),
            competitive_advantage=self._extract_advantages(text),
            tone=_best_label(normalized, self._tones, defaults.tone),
        )
        logger.info(
            f"[ContextAnalyzer] industry={context.industry} | "
            f"audience={context.target_audience} | "
            f"goal={context.business_goal} | "
            f"tone={context.tone} | "
            f"advantages={len(context.competitive_advantage)}"
        )
        return context

    def _extract_advantages(self, text: str) -> List[str]:
        rules = self.tables.advantages
        window = text[:rules.max_scan_chars]
        found: List[str] = []

        for pattern in self._advantage_patterns:
            for match in islice(pattern.finditer(window), rules.max_matches_per_pattern):
                advantage = match.group(1).strip()
                if advantage and len(advantage) <= rules.max_chars:
                    found.append(advantage)

        if not found:
            fallback = rules.fallback
            for pattern in self._fallback_patterns:
                match = pattern.search(window)
                if match is None:
                    continue
                start = max(0, match.start() - fallback.window_before)
                end = min(len(window), match.start() + fallback.window_after)
                found.append(window[start:end].strip())
                if len(found) >= fallback.max_hits:
                    break

        return [item[:rules.max_chars] for item in found[:rules.max_results]]

    def persona_traits(self, industry: str) -> PersonaTraits:
        """Pain points, motivations and decision factors for an industry"""
        personas = self.tables.personas
        return personas.get(industry, personas["general"])

    def canonical_industry(self, value: Optional[str]) -> Optional[str]:
        """Map a user-facing industry spelling onto a taxonomy label"""
        return self._canonical(value, self._industry_aliases, self.tables.industries)

    def canonical_goal(self, value: Optional[str]) -> Optional[str]:
        """Map a user-facing goal spelling onto a taxonomy label"""
        return self._canonical(value, self._goal_aliases, self.tables.goals)

    @staticmethod
    def _canonical(value: Optional[str], aliases: Dict[str, str], labels: Dict[str, List[str]]) -> Optional[str]:
        if value is None:
            return None
        key = value.strip().lower()
        if not key:
            return None
        if key in labels:
            return key
        return aliases.get(key, key)
