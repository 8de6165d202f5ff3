"""Tests for variant planning"""

import pytest

from lp_variants.models.errors import ErrorCode, InvalidRequestError
from lp_variants.models.schemas import BusinessContext, Overrides


TOPIC = "オーガニック食品のオンラインショップ"


@pytest.fixture
def context():
    return BusinessContext(
        industry="food",
        target_audience="consumers",
        business_goal="sales growth",
        competitive_advantage=["farm direct"],
        tone="friendly",
    )


class TestCounts:
    """Count validation and canonical focus order"""

    @pytest.mark.parametrize("count", [1, 2, 3])
    def test_unconstrained_plan_has_count_distinct_focuses(self, planner, context, count):
        configs = planner.plan(count, None, context, None, TOPIC)

        focuses = [c.design_focus for c in configs]
        assert len(configs) == count
        assert len(set(focuses)) == count
        assert focuses == ["modern-clean", "conversion-optimized", "content-rich"][:count]

    @pytest.mark.parametrize("count", [0, 4, -1, 2.5, True, "3"])
    def test_invalid_count_rejected(self, planner, context, count):
        with pytest.raises(InvalidRequestError) as exc_info:
            planner.plan(count, None, context, None, TOPIC)

        assert exc_info.value.code == ErrorCode.INVALID_REQUEST
        assert exc_info.value.http_status == 400

    def test_unknown_focus_rejected(self, planner, context):
        with pytest.raises(InvalidRequestError) as exc_info:
            planner.plan(2, ["modern-clean", "retro"], context, None, TOPIC)

        assert "retro" in exc_info.value.message

    def test_focus_areas_used_verbatim_and_truncated(self, planner, context):
        configs = planner.plan(2, ["content-rich", "modern-clean", "conversion-optimized"], context, None, TOPIC)

        assert [c.design_focus for c in configs] == ["content-rich", "modern-clean"]

    def test_focus_areas_not_padded(self, planner, context):
        configs = planner.plan(3, ["content-rich"], context, None, TOPIC)

        assert [c.design_focus for c in configs] == ["content-rich"]


class TestConfigContents:
    """Per-focus copy, style and psychology flags"""

    def test_fixed_mappings(self, planner, context):
        configs = {c.design_focus: c for c in planner.plan(3, None, context, None, TOPIC)}

        assert configs["modern-clean"].design_style == "modern"
        assert configs["conversion-optimized"].design_style == "startup"
        assert configs["content-rich"].design_style == "corporate"

        assert configs["modern-clean"].marketing_psychology.pasona is True
        assert configs["modern-clean"].marketing_psychology.four_u is False
        assert configs["conversion-optimized"].marketing_psychology.pasona is True
        assert configs["conversion-optimized"].marketing_psychology.four_u is True
        assert configs["content-rich"].marketing_psychology.pasona is False
        assert configs["content-rich"].marketing_psychology.four_u is True

    def test_enhanced_topic_appends_focus_clause(self, planner, context, tables):
        config = planner.plan(1, ["conversion-optimized"], context, None, TOPIC)[0]

        clause = tables.focus.focuses["conversion-optimized"].clause
        assert config.topic == TOPIC
        assert config.enhanced_topic == f"{TOPIC} {clause}"

    def test_description_and_features_from_catalog(self, planner, context, tables):
        config = planner.plan(1, ["content-rich"], context, None, TOPIC)[0]

        copy = tables.focus.focuses["content-rich"]
        assert config.description == copy.description
        assert config.features == copy.features

    def test_context_values_used_without_overrides(self, planner, context):
        config = planner.plan(1, None, context, None, TOPIC)[0]

        assert config.industry == "food"
        assert config.target_audience == "consumers"
        assert config.business_goal == "sales growth"
        assert config.competitive_advantage == ["farm direct"]
        assert config.tone == "friendly"


class TestOverrides:
    """Caller values beat inferred values"""

    def test_overrides_win(self, planner, context):
        overrides = Overrides(
            industry="ecommerce",
            target_audience="parents",
            business_goal="membership signup",
            competitive_advantage=["free returns"],
            design_style="minimalist",
        )
        configs = planner.plan(3, None, context, overrides, TOPIC)

        for config in configs:
            assert config.industry == "ecommerce"
            assert config.target_audience == "parents"
            assert config.business_goal == "membership signup"
            assert config.competitive_advantage == ["free returns"]
            assert config.design_style == "minimalist"

    def test_partial_overrides_keep_context(self, planner, context):
        config = planner.plan(1, None, context, Overrides(industry="ecommerce"), TOPIC)[0]

        assert config.industry == "ecommerce"
        assert config.business_goal == "sales growth"
        assert config.design_style == "modern"

    def test_context_is_not_mutated(self, planner, context):
        planner.plan(1, None, context, Overrides(industry="ecommerce"), TOPIC)

        assert context.industry == "food"
