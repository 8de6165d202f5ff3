"""Versioned classification and scoring tables

The keyword dictionaries, compatibility matrices and editorial copy live in
YAML files under ``lp_variants/data`` so they can evolve without touching the
analysis or scoring code. Each file carries a ``version`` key that is echoed
into logs. Files are validated once into pydantic models and cached per
directory.
"""

import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from lp_variants.core.config import DEFAULT_TABLES_DIR
from lp_variants.models.errors import ApplicationError, ErrorCode
from lp_variants.models.schemas import DesignFocus, DesignStyle, MarketingPsychology, DESIGN_FOCUSES

logger = logging.getLogger(__name__)

CLASSIFICATION_FILE = "classification.yaml"
SCORING_FILE = "scoring.yaml"
FOCUS_FILE = "variant_focus.yaml"
MARKETING_FILE = "marketing.yaml"

VALID_TONES = {"professional", "friendly", "casual", "premium"}


# ============================================================================
# Classification
# ============================================================================

class CategoryDefaults(BaseModel):
    industry: str
    audience: str
    goal: str
    tone: str


class AdvantageFallback(BaseModel):
    keywords: List[str]
    window_before: int = Field(ge=0)
    window_after: int = Field(ge=0)
    max_hits: int = Field(ge=1)


class AdvantageRules(BaseModel):
    max_scan_chars: int = Field(gt=0)
    max_matches_per_pattern: int = Field(gt=0)
    max_results: int = Field(gt=0)
    max_chars: int = Field(gt=0)
    patterns: List[str]
    fallback: AdvantageFallback

    @field_validator("patterns")
    @classmethod
    def _patterns_compile(cls, value: List[str]) -> List[str]:
        for pattern in value:
            try:
                compiled = re.compile(pattern)
            except re.error as e:
                raise ValueError(f"invalid advantage pattern {pattern!r}: {e}")
            if compiled.groups < 1:
                raise ValueError(f"advantage pattern {pattern!r} needs a capture group")
        return value


class PersonaTraits(BaseModel):
    pain_points: List[str]
    motivations: List[str]
    decision_factors: List[str]


class ClassificationTables(BaseModel):
    version: str
    defaults: CategoryDefaults
    industries: Dict[str, List[str]]
    audiences: Dict[str, List[str]]
    goals: Dict[str, List[str]]
    tones: Dict[str, List[str]]
    advantages: AdvantageRules
    aliases: Dict[str, Dict[str, str]] = Field(default_factory=dict)
    personas: Dict[str, PersonaTraits]

    @model_validator(mode="after")
    def _check_labels(self) -> "ClassificationTables":
        unknown_tones = set(self.tones) - VALID_TONES
        if unknown_tones:
            raise ValueError(f"unknown tone labels: {sorted(unknown_tones)}")
        if self.defaults.tone not in VALID_TONES:
            raise ValueError(f"default tone {self.defaults.tone!r} is not a valid tone")
        if "general" not in self.personas:
            raise ValueError("personas must define a 'general' entry")
        return self


# ============================================================================
# Scoring
# ============================================================================

class SubScoreWeights(BaseModel):
    business_alignment: float
    industry_fit: float
    design_quality: float
    content_quality: float


class SubScoreMaximums(BaseModel):
    business_alignment: int = Field(gt=0)
    industry_fit: int = Field(gt=0)
    design_quality: int = Field(gt=0)
    content_quality: int = Field(gt=0)


class LookupDefaults(BaseModel):
    business_alignment: int
    industry_fit: int


class DesignHeuristics(BaseModel):
    base: int
    semantic_tags: List[str]
    max_semantic_points: int
    layout_primitives: List[str]
    max_layout_points: int
    responsive_prefixes: List[str]
    max_responsive_points: int


class ContentHeuristics(BaseModel):
    base: int
    section_types: List[str]
    max_section_points: int
    max_marker_points: int


class ScoringTables(BaseModel):
    version: str
    weights: SubScoreWeights
    maximums: SubScoreMaximums
    defaults: LookupDefaults
    preference_bonus: int
    fallback_score: int = Field(ge=0, le=100)
    goal_alignment: Dict[DesignFocus, Dict[str, int]]
    industry_fit: Dict[DesignFocus, Dict[str, int]]
    design: DesignHeuristics
    content: ContentHeuristics

    @model_validator(mode="after")
    def _check_ranges(self) -> "ScoringTables":
        total = (
            self.weights.business_alignment + self.weights.industry_fit
            + self.weights.design_quality + self.weights.content_quality
        )
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"weights must sum to 1.0, got {total}")
        for focus, row in self.goal_alignment.items():
            for goal, value in row.items():
                if not 0 <= value <= self.maximums.business_alignment:
                    raise ValueError(f"goal_alignment[{focus}][{goal}]={value} out of range")
        for focus, row in self.industry_fit.items():
            for industry, value in row.items():
                if not 0 <= value <= self.maximums.industry_fit:
                    raise ValueError(f"industry_fit[{focus}][{industry}]={value} out of range")
        return self


# ============================================================================
# Focus copy and marketing copy
# ============================================================================

class RecommendationCopy(BaseModel):
    reason: str
    target_use_case: str


class FocusCopy(BaseModel):
    label: str
    clause: str
    design_style: DesignStyle
    description: str
    features: List[str]
    marketing_psychology: MarketingPsychology
    reasoning: str
    recommendation: RecommendationCopy


class FocusCatalog(BaseModel):
    version: str
    focuses: Dict[DesignFocus, FocusCopy]

    @model_validator(mode="after")
    def _all_focuses(self) -> "FocusCatalog":
        missing = set(DESIGN_FOCUSES) - set(self.focuses)
        if missing:
            raise ValueError(f"missing focus copy for: {sorted(missing)}")
        return self


class MarketingTables(BaseModel):
    version: str
    pasona: Dict[str, Dict[str, str]]
    four_u: Dict[str, Dict[str, str]]
    cta: Dict[str, Dict[str, str]]

    @model_validator(mode="after")
    def _general_fallbacks(self) -> "MarketingTables":
        for section in (self.pasona, self.four_u):
            for name, copy in section.items():
                if "general" not in copy:
                    raise ValueError(f"marketing section {name!r} needs a 'general' entry")
        for goal, copy in self.cta.items():
            if "general" not in copy:
                raise ValueError(f"cta[{goal!r}] needs a 'general' entry")
        return self


class Tables(BaseModel):
    """All data tables loaded from one directory"""
    classification: ClassificationTables
    scoring: ScoringTables
    focus: FocusCatalog
    marketing: MarketingTables


# ============================================================================
# Loading
# ============================================================================

def load_yaml(filepath: Path) -> dict:
    """Load a YAML table file"""
    if not filepath.exists():
        raise ApplicationError(
            code=ErrorCode.TABLES_INVALID,
            message=f"Table file not found: {filepath}",
        )
    with open(filepath, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ApplicationError(
            code=ErrorCode.TABLES_INVALID,
            message=f"Table file {filepath.name} must contain a mapping",
        )
    return data


def _parse(model: type, filepath: Path):
    try:
        return model(**load_yaml(filepath))
    except ValidationError as e:
        raise ApplicationError(
            code=ErrorCode.TABLES_INVALID,
            message=f"Invalid table file {filepath.name}: {e}",
        )


@lru_cache(maxsize=8)
def _load_tables_cached(tables_dir: str) -> Tables:
    base = Path(tables_dir)
    tables = Tables(
        classification=_parse(ClassificationTables, base / CLASSIFICATION_FILE),
        scoring=_parse(ScoringTables, base / SCORING_FILE),
        focus=_parse(FocusCatalog, base / FOCUS_FILE),
        marketing=_parse(MarketingTables, base / MARKETING_FILE),
    )
    logger.info(
        f"[Tables] Loaded from {base} | "
        f"classification={tables.classification.version} | "
        f"scoring={tables.scoring.version} | "
        f"focus={tables.focus.version} | "
        f"marketing={tables.marketing.version}"
    )
    return tables


def load_tables(tables_dir: Optional[Union[str, Path]] = None) -> Tables:
    """Load and validate every table file, cached per directory"""
    directory = Path(tables_dir) if tables_dir else DEFAULT_TABLES_DIR
    return _load_tables_cached(str(directory.resolve()))
