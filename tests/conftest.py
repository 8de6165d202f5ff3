"""Shared fixtures: packaged tables and a scriptable content generation service"""

import asyncio
from typing import Any, Dict, List, Optional

import pytest

from lp_variants.agents.candidate_generator import CandidateGenerator
from lp_variants.agents.context_analyzer import ContextAnalyzer
from lp_variants.agents.orchestrator import VariantPipeline
from lp_variants.agents.ranker import Ranker
from lp_variants.agents.scorer import ScoringEngine
from lp_variants.agents.variant_planner import VariantPlanner
from lp_variants.core.tables import load_tables
from lp_variants.models.errors import GenerationError
from lp_variants.models.schemas import GenerationRequest


RICH_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>Organic Market</title>
</head>
<body>
  <header class="flex md:grid">
    <nav aria-label="Main"><a href="#features">Features</a></nav>
  </header>
  <main>
    <section id="hero">
      <h1 data-editable-id="hero-title">Fresh organic food delivered to your door</h1>
      <p data-editable-id="hero-sub">Seasonal vegetables, fruit and pantry staples sourced directly from
      certified organic farms and delivered within 24 hours of harvest.</p>
      <button data-editable-id="hero-cta">Buy now</button>
    </section>
    <section id="features">
      <h2 data-editable-id="features-title">Why customers love us</h2>
      <img src="vegetables.jpg" alt="A basket of fresh vegetables">
      <p data-editable-id="feature-1">Every product is traceable to the farm it came from.</p>
      <p data-editable-id="feature-2">Free delivery on every order over thirty dollars.</p>
    </section>
    <section id="testimonials">
      <h2 data-editable-id="testimonials-title">What customers say</h2>
      <p data-editable-id="testimonial-1">The best produce I have bought online, and it arrives fast.</p>
    </section>
    <form>
      <label for="email">Email</label>
      <input id="email" type="email">
    </form>
  </main>
  <footer><p>Organic Market</p></footer>
</body>
</html>"""

RICH_CSS = """:root { --primary: #0f766e; }
.features { display: grid; gap: 1rem; }
@media (min-width: 768px) { .hero { display: flex; } }"""

PLAIN_HTML = "<div><p>Hello</p></div>"


def page_response(title: str = "Generated page", html: str = RICH_HTML, css: str = RICH_CSS) -> Dict[str, Any]:
    return {
        "success": True,
        "htmlContent": html,
        "cssContent": css,
        "title": title,
        "metadata": {
            "generatedAt": "2024-06-01T12:00:00+00:00",
            "model": "fake-model",
            "processingTimeMs": 12.5,
        },
    }


class FakeContentService:
    """
    Scriptable stand-in for the generation collaborator.

    ``behaviors`` maps a design focus to a response dict, an exception to raise,
    or a number of seconds to sleep before answering.
    """

    def __init__(self, behaviors: Optional[Dict[str, Any]] = None, default: Optional[Dict[str, Any]] = None):
        self.behaviors = behaviors or {}
        self.default = default or page_response()
        self.requests: List[GenerationRequest] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def generate(self, request: GenerationRequest) -> Dict[str, Any]:
        self.requests.append(request)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            behavior = self.behaviors.get(request.design_focus, self.default)
            if isinstance(behavior, BaseException):
                raise behavior
            if isinstance(behavior, (int, float)):
                await asyncio.sleep(behavior)
                return self.default
            await asyncio.sleep(0)
            return behavior
        finally:
            self.in_flight -= 1


@pytest.fixture
def tables():
    return load_tables()


@pytest.fixture
def analyzer(tables):
    return ContextAnalyzer(tables.classification)


@pytest.fixture
def planner(tables):
    return VariantPlanner(tables.focus)


@pytest.fixture
def scorer(tables):
    return ScoringEngine(tables.scoring, tables.focus)


@pytest.fixture
def ranker():
    return Ranker()


@pytest.fixture
def fake_service():
    return FakeContentService()


@pytest.fixture
def failing_error():
    return GenerationError("upstream model unavailable")


@pytest.fixture
def make_pipeline(tables):
    def _make(service: FakeContentService, timeout_s: Optional[float] = None) -> VariantPipeline:
        generator = CandidateGenerator(service, timeout_s=timeout_s, model_name="fake-model")
        return VariantPipeline(generator, tables=tables)
    return _make
