"""Tests for concurrent candidate generation and fallback isolation"""

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from lp_variants.agents.candidate_generator import CandidateGenerator, build_fallback
from lp_variants.models.errors import GenerationError
from lp_variants.models.schemas import BusinessContext

from conftest import FakeContentService, page_response


@pytest.fixture
def configs(planner):
    context = BusinessContext(industry="ecommerce", business_goal="sales growth")
    return planner.plan(3, None, context, None, "Online organic grocery")


class TestGenerate:
    """All calls in flight together, order preserved"""

    @pytest.mark.asyncio
    async def test_all_success(self, configs):
        service = FakeContentService(behaviors={
            "modern-clean": page_response(title="A"),
            "conversion-optimized": page_response(title="B"),
            "content-rich": page_response(title="C"),
        })
        generator = CandidateGenerator(service)

        candidates = await generator.generate(configs)

        assert [c.title for c in candidates] == ["A", "B", "C"]
        assert all(c.provenance == "generated" for c in candidates)
        assert all(c.success for c in candidates)
        assert service.max_in_flight == 3

    @pytest.mark.asyncio
    async def test_request_uses_enhanced_topic(self, configs):
        service = FakeContentService()
        generator = CandidateGenerator(service)

        await generator.generate(configs[:1])

        request = service.requests[0]
        assert request.topic == configs[0].enhanced_topic
        assert request.design_style == configs[0].design_style
        assert request.marketing_psychology == configs[0].marketing_psychology

    @pytest.mark.asyncio
    async def test_order_preserved_when_completion_order_differs(self, configs):
        plan = {
            "modern-clean": (0.06, "A"),
            "conversion-optimized": (0.03, "B"),
            "content-rich": (0.0, "C"),
        }
        completed = []

        async def generate(request):
            delay, title = plan[request.design_focus]
            await asyncio.sleep(delay)
            completed.append(title)
            return page_response(title=title)

        service = Mock()
        service.generate = generate
        generator = CandidateGenerator(service)

        candidates = await generator.generate(configs)

        assert completed == ["C", "B", "A"]
        assert [c.title for c in candidates] == ["A", "B", "C"]
        assert all(not c.is_fallback for c in candidates)

    @pytest.mark.asyncio
    async def test_empty_configs(self):
        generator = CandidateGenerator(AsyncMock())

        assert await generator.generate([]) == []

    @pytest.mark.asyncio
    async def test_metadata_from_response(self, configs):
        generator = CandidateGenerator(FakeContentService())

        candidate = (await generator.generate(configs[:1]))[0]

        assert candidate.metadata.model == "fake-model"
        assert candidate.metadata.processing_time_ms == 12.5


class TestFailureIsolation:
    """A failing call only affects its own slot"""

    @pytest.mark.asyncio
    async def test_one_of_three_fails(self, configs):
        service = FakeContentService(behaviors={
            "conversion-optimized": GenerationError("upstream model unavailable"),
        })
        generator = CandidateGenerator(service)

        candidates = await generator.generate(configs)

        assert len(candidates) == 3
        assert [c.is_fallback for c in candidates] == [False, True, False]
        fallback = candidates[1]
        assert fallback.success is False
        assert fallback.error == "upstream model unavailable"
        assert fallback.description == configs[1].description
        assert fallback.features == configs[1].features

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_fallback(self, configs):
        service = FakeContentService(behaviors={"modern-clean": RuntimeError("boom")})
        generator = CandidateGenerator(service)

        candidates = await generator.generate(configs)

        assert candidates[0].is_fallback
        assert candidates[0].error == "boom"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [
        {"success": True, "cssContent": "", "title": "no markup"},
        {"success": True, "htmlContent": "   ", "title": "blank markup"},
        {"success": True, "htmlContent": None},
        {"success": False, "htmlContent": "<section><h1>Half-finished page</h1></section>"},
        "not a dict",
    ])
    async def test_malformed_response_becomes_fallback(self, configs, response):
        service = FakeContentService(behaviors={"content-rich": response})
        generator = CandidateGenerator(service)

        candidates = await generator.generate(configs)

        assert [c.is_fallback for c in candidates] == [False, False, True]

    @pytest.mark.asyncio
    async def test_all_fail(self, configs):
        service = AsyncMock()
        service.generate = AsyncMock(side_effect=GenerationError("down"))
        generator = CandidateGenerator(service)

        candidates = await generator.generate(configs)

        assert all(c.is_fallback for c in candidates)
        assert service.generate.call_count == 3


class TestTimeout:
    """Batch timeout replaces pending calls with fallbacks"""

    @pytest.mark.asyncio
    async def test_pending_calls_cancelled(self, configs):
        service = FakeContentService(behaviors={"content-rich": 5.0})
        generator = CandidateGenerator(service, timeout_s=0.2)

        candidates = await generator.generate(configs)

        assert [c.is_fallback for c in candidates] == [False, False, True]
        assert "timed out" in candidates[2].error
        assert service.in_flight == 0

    @pytest.mark.asyncio
    async def test_no_timeout_when_disabled(self, configs):
        service = FakeContentService(behaviors={"content-rich": 0.05})
        generator = CandidateGenerator(service, timeout_s=None)

        candidates = await generator.generate(configs)

        assert not any(c.is_fallback for c in candidates)


class TestBuildFallback:
    def test_markup_is_escaped(self, configs):
        config = configs[0].model_copy(update={"description": "<script>alert(1)</script>"})

        fallback = build_fallback(config, "failed")

        assert "<script>" not in fallback.html_content
        assert "&lt;script&gt;" in fallback.html_content
        assert fallback.provenance == "fallback"
