"""Pipeline data model and API request/response schemas"""

from datetime import datetime
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


DesignFocus = Literal["modern-clean", "conversion-optimized", "content-rich"]
DesignStyle = Literal["modern", "minimalist", "corporate", "creative", "tech", "startup"]
Tone = Literal["professional", "friendly", "casual", "premium"]
Provenance = Literal["generated", "fallback"]

# Canonical order used when the caller does not constrain focus areas
DESIGN_FOCUSES: tuple = ("modern-clean", "conversion-optimized", "content-rich")
DESIGN_STYLES: tuple = ("modern", "minimalist", "corporate", "creative", "tech", "startup")

DEFAULT_INDUSTRY = "general"
DEFAULT_AUDIENCE = "general users"
DEFAULT_GOAL = "conversion improvement"
DEFAULT_TONE = "professional"

MAX_ADVANTAGES = 10
MAX_ADVANTAGE_CHARS = 100


class CamelModel(BaseModel):
    """Base model: snake_case in Python, camelCase on the wire"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FrozenCamelModel(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


# ============================================================================
# Business context
# ============================================================================

class Overrides(FrozenCamelModel):
    """User-supplied values that beat inferred ones"""
    target_audience: Optional[str] = None
    business_goal: Optional[str] = None
    industry: Optional[str] = None
    competitive_advantage: Optional[List[str]] = None
    design_style: Optional[DesignStyle] = None


class BusinessContext(FrozenCamelModel):
    """Structured summary inferred from a freeform business description"""
    industry: str = DEFAULT_INDUSTRY
    target_audience: str = DEFAULT_AUDIENCE
    business_goal: str = DEFAULT_GOAL
    competitive_advantage: List[str] = Field(default_factory=list)
    tone: Tone = DEFAULT_TONE

    @field_validator("competitive_advantage")
    @classmethod
    def _cap_advantages(cls, value: List[str]) -> List[str]:
        return [item[:MAX_ADVANTAGE_CHARS] for item in value[:MAX_ADVANTAGES]]

    def with_overrides(self, overrides: Optional[Overrides]) -> "BusinessContext":
        """Return a copy where every user-supplied field wins"""
        if overrides is None:
            return self
        update = {}
        if overrides.target_audience:
            update["target_audience"] = overrides.target_audience
        if overrides.business_goal:
            update["business_goal"] = overrides.business_goal
        if overrides.industry:
            update["industry"] = overrides.industry
        if overrides.competitive_advantage:
            update["competitive_advantage"] = list(overrides.competitive_advantage)
        if not update:
            return self
        return BusinessContext(**{**self.model_dump(), **update})


# ============================================================================
# Planning
# ============================================================================

class MarketingPsychology(FrozenCamelModel):
    """Which copywriting frameworks the generated page should follow"""
    pasona: bool = False
    four_u: bool = False


class VariantConfig(FrozenCamelModel):
    """Concrete per-variant configuration produced by the planner"""
    design_focus: DesignFocus
    topic: str
    enhanced_topic: str
    target_audience: str
    business_goal: str
    industry: str
    competitive_advantage: List[str] = Field(default_factory=list)
    tone: Tone = DEFAULT_TONE
    design_style: DesignStyle
    description: str
    features: List[str] = Field(default_factory=list)
    marketing_psychology: MarketingPsychology


class GenerationRequest(FrozenCamelModel):
    """Structured request sent to the content generation collaborator"""
    topic: str
    target_audience: str
    business_goal: str
    industry: str
    competitive_advantage: List[str] = Field(default_factory=list)
    design_style: DesignStyle
    marketing_psychology: MarketingPsychology
    tone: Tone = DEFAULT_TONE
    design_focus: DesignFocus

    @classmethod
    def from_config(cls, config: VariantConfig) -> "GenerationRequest":
        return cls(
            topic=config.enhanced_topic,
            target_audience=config.target_audience,
            business_goal=config.business_goal,
            industry=config.industry,
            competitive_advantage=list(config.competitive_advantage),
            design_style=config.design_style,
            marketing_psychology=config.marketing_psychology,
            tone=config.tone,
            design_focus=config.design_focus,
        )


# ============================================================================
# Candidates
# ============================================================================

class CandidateMetadata(FrozenCamelModel):
    generated_at: datetime
    model: str
    processing_time_ms: float = 0.0


class Candidate(FrozenCamelModel):
    """One generated (or locally synthesized fallback) page design"""
    success: bool
    html_content: str
    css_content: str = ""
    title: str
    structure: Optional[Any] = None
    metadata: CandidateMetadata
    provenance: Provenance = "generated"
    description: Optional[str] = None
    features: List[str] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.provenance == "fallback"


class ScoreBreakdown(FrozenCamelModel):
    business_alignment: int = Field(default=0, ge=0, le=30)
    industry_fit: int = Field(default=0, ge=0, le=25)
    design_quality: int = Field(default=0, ge=0, le=25)
    content_quality: int = Field(default=0, ge=0, le=20)


class Recommendation(FrozenCamelModel):
    reason: str
    target_use_case: str
    strengths: List[str] = Field(default_factory=list)


class ScoredCandidate(Candidate):
    """Candidate plus its score, breakdown and explanation"""
    variant_id: str
    score: int = Field(ge=0, le=100)
    breakdown: ScoreBreakdown
    reasoning: List[str] = Field(default_factory=list)
    design_focus: DesignFocus
    recommendation: Recommendation


class ScoringPreferences(FrozenCamelModel):
    """Caller preferences that add a flat bonus to matching design focuses"""
    prioritize_conversion: bool = False
    prioritize_design: bool = False
    prioritize_content: bool = False


# ============================================================================
# Results
# ============================================================================

class ResultMetadata(CamelModel):
    generated_at: datetime
    processing_time_ms: float = 0.0
    total_variants: int = 0
    version: str


class ComparisonSummary(CamelModel):
    """Which variant leads overall and on each quality axis"""
    best_overall: Optional[str] = None
    best_for_business: Optional[str] = None
    best_design: Optional[str] = None
    best_content: Optional[str] = None


class VariantGenerationResult(CamelModel):
    """Terminal pipeline result"""
    success: bool
    variants: List[ScoredCandidate] = Field(default_factory=list)
    recommended_variant_id: str = ""
    metadata: ResultMetadata
    error: Optional[str] = None
    analysis: Optional[BusinessContext] = None
    summary: Optional[ComparisonSummary] = None


# ============================================================================
# Caller request
# ============================================================================

class VariantRequest(CamelModel):
    """POST /api/variants request"""
    topic: str = Field(..., description="Freeform business description")
    target_audience: Optional[str] = None
    business_goal: Optional[str] = None
    industry: Optional[str] = None
    competitive_advantage: Optional[Union[str, List[str]]] = None
    design_style: Optional[DesignStyle] = None
    variant_count: int = Field(default=3, ge=1, le=3, strict=True)
    focus_areas: Optional[List[DesignFocus]] = None
    preferences: Optional[ScoringPreferences] = None

    @field_validator("topic")
    @classmethod
    def _topic_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("topic must be a non-empty string")
        return value.strip()

    def to_overrides(self) -> Overrides:
        advantage = self.competitive_advantage
        if isinstance(advantage, str):
            advantage = [advantage] if advantage.strip() else None
        return Overrides(
            target_audience=self.target_audience or None,
            business_goal=self.business_goal or None,
            industry=self.industry or None,
            competitive_advantage=advantage or None,
            design_style=self.design_style,
        )
