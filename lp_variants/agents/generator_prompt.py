"""Prompt for the landing page generation model"""

from typing import Any, Dict, Optional

from lp_variants.agents.marketing import apply_four_u, apply_pasona, suggest_cta
from lp_variants.core.tables import MarketingTables, PersonaTraits
from lp_variants.models.schemas import GenerationRequest


GENERATOR_SYSTEM_PROMPT = """You are a landing page generator. You receive a business brief and produce
one complete, self-contained marketing landing page.

Requirements:
- htmlContent: a full HTML document with semantic sections (header, main, section, footer), a viewport meta tag,
  2 to 6 headings, alt text on every image and data-editable-id attributes on editable text elements.
- cssContent: responsive styles using CSS custom properties, grid/flex layout and @media breakpoints.
  Tailwind-style utility classes in the markup are also acceptable.
- Follow the requested design style, tone and page structure outline.
- Use the suggested call to action text for the primary CTA.
- Address the persona's pain points and decision factors.
- No external scripts. No tracking.

Return JSON only, in the response schema. Do not truncate."""


# Response schema for the generator
GENERATOR_RESPONSE_SCHEMA = {
    "htmlContent": "<!DOCTYPE html><html lang='en'>...</html>",
    "cssContent": ":root { --primary: #0f766e; } ...",
    "title": "Page title",
    "structure": {"sections": ["hero", "features", "testimonials", "cta", "faq"]},
}


def build_user_message(
    request: GenerationRequest,
    persona: Optional[PersonaTraits] = None,
    tables: Optional[MarketingTables] = None,
) -> Dict[str, Any]:
    """Assemble the brief sent with the system prompt"""
    outline = []
    if request.marketing_psychology.pasona:
        outline.append(apply_pasona(request, tables))
    if request.marketing_psychology.four_u:
        outline.append(apply_four_u(request, tables))

    message: Dict[str, Any] = {
        "brief": request.model_dump(by_alias=True),
        "page_outline": "\n\n".join(outline),
        "call_to_action": suggest_cta(request.business_goal, request.industry, tables),
        "response_schema": GENERATOR_RESPONSE_SCHEMA,
    }
    if persona is not None:
        message["persona"] = persona.model_dump()
    return message
