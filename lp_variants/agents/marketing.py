"""PASONA and 4U page outlines plus CTA suggestions for generation prompts

PASONA: Problem, Agitation, Solution, Offer, Narrow down, Action.
4U: Useful, Urgent, Unique, Ultra-specific.
"""

from typing import Dict, Optional

from lp_variants.core.tables import MarketingTables, load_tables
from lp_variants.models.schemas import GenerationRequest


def _pick(section: Dict[str, str], industry: str) -> str:
    return section.get(industry, section["general"])


def _strengths_line(request: GenerationRequest) -> str:
    if not request.competitive_advantage:
        return ""
    return f"Key strengths: {', '.join(request.competitive_advantage)}."


def apply_pasona(request: GenerationRequest, tables: Optional[MarketingTables] = None) -> str:
    """Outline the page as a PASONA sequence for the request's industry and audience"""
    copy = (tables or load_tables().marketing).pasona
    industry = request.industry
    audience = request.target_audience
    return "\n".join([
        "[Page structure: PASONA]",
        f"# Problem: {audience} struggle with {_pick(copy['problem'], industry)}",
        f"Around {request.topic}, {audience} face exactly this problem.",
        "# Agitation: what happens if nothing changes",
        _pick(copy["agitation"], industry),
        "# Solution: what we provide",
        _pick(copy["solution"], industry),
        "# Offer: the concrete proposal",
        _strengths_line(request),
        "# Narrow down: why act now",
        "Limited-time offers or first-order discounts are available.",
        "# Action: the next step",
        "Place clear calls to action such as a free consultation, a brochure request or a demo.",
    ])


def apply_four_u(request: GenerationRequest, tables: Optional[MarketingTables] = None) -> str:
    """Outline the page along the 4U principles"""
    copy = (tables or load_tables().marketing).four_u
    industry = request.industry
    lines = [
        "[Page structure: 4U]",
        f"# Useful: value for {request.target_audience}",
        f"{request.topic} delivers {_pick(copy['useful'], industry)}.",
        "# Urgent: why act now",
        _pick(copy["urgent"], industry),
        "# Unique: what no competitor offers",
        _pick(copy["unique"], industry),
    ]
    strengths = _strengths_line(request)
    if strengths:
        lines.append(strengths)
    lines.extend([
        "# Ultra-specific: numbers and case studies",
        _pick(copy["specific"], industry),
    ])
    return "\n".join(lines)


def suggest_cta(goal: str, industry: str, tables: Optional[MarketingTables] = None) -> str:
    """Call-to-action text for a goal and industry; unknown goals use lead generation copy"""
    cta = (tables or load_tables().marketing).cta
    by_industry = cta.get(goal) or cta.get("lead generation") or next(iter(cta.values()))
    return _pick(by_industry, industry)
