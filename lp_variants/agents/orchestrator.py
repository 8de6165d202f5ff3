"""Variant pipeline orchestrator

analyze -> plan -> generate (concurrent) -> score -> rank
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from lp_variants.agents.candidate_generator import CandidateGenerator
from lp_variants.agents.client import ContentGenerationService, OpenAIContentService
from lp_variants.agents.context_analyzer import ContextAnalyzer
from lp_variants.agents.ranker import Ranker
from lp_variants.agents.scorer import ScoringEngine
from lp_variants.agents.variant_planner import VariantPlanner
from lp_variants.core.config import Settings, get_settings
from lp_variants.core.tables import Tables, load_tables
from lp_variants.models.errors import ApplicationError, InvalidRequestError
from lp_variants.models.schemas import (
    Overrides,
    ResultMetadata,
    VariantGenerationResult,
    VariantRequest,
)

logger = logging.getLogger(__name__)


def _describe_validation(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "request"
        parts.append(f"{location}: {item.get('msg', 'invalid value')}")
    return "; ".join(parts)


class VariantPipeline:
    """
    Entry point that turns one caller request into a ranked set of variants.

    Every collaborator is injected; ``from_settings`` wires the default ones.
    Fatal errors (invalid input or anything outside per-candidate recovery)
    come back as a failure result, never as an exception.
    """

    def __init__(
        self,
        generator: CandidateGenerator,
        analyzer: Optional[ContextAnalyzer] = None,
        planner: Optional[VariantPlanner] = None,
        scorer: Optional[ScoringEngine] = None,
        ranker: Optional[Ranker] = None,
        tables: Optional[Tables] = None,
        result_version: Optional[str] = None,
    ):
        tables = tables or load_tables()
        self.generator = generator
        self.analyzer = analyzer or ContextAnalyzer(tables.classification)
        self.planner = planner or VariantPlanner(tables.focus)
        self.scorer = scorer or ScoringEngine(tables.scoring, tables.focus)
        self.ranker = ranker or (Ranker(result_version) if result_version else Ranker())
        self.version = self.ranker.version

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        service: Optional[ContentGenerationService] = None,
    ) -> "VariantPipeline":
        """Wire the pipeline from settings, using OpenAI unless a service is given"""
        settings = settings or get_settings()
        tables = load_tables(settings.tables_dir)
        analyzer = ContextAnalyzer(tables.classification)
        service = service or OpenAIContentService(settings=settings, tables=tables, analyzer=analyzer)
        generator = CandidateGenerator(
            service,
            timeout_s=settings.generation_timeout_s,
            model_name=settings.generation_model,
        )
        return cls(generator, tables=tables, analyzer=analyzer, result_version=settings.result_version)

    def validate(self, payload: Union[VariantRequest, Dict[str, Any]]) -> VariantRequest:
        """
        Validate a caller request.

        Raises:
            InvalidRequestError: If any field is missing or out of range
        """
        if isinstance(payload, VariantRequest):
            return payload
        if not isinstance(payload, dict):
            raise InvalidRequestError("request body must be a JSON object")
        try:
            return VariantRequest.model_validate(payload)
        except ValidationError as e:
            raise InvalidRequestError(_describe_validation(e), hint="Check topic, variantCount and focusAreas")

    async def run(self, payload: Union[VariantRequest, Dict[str, Any]]) -> VariantGenerationResult:
        try:
            request = self.validate(payload)
            return await self._run(request)
        except ApplicationError as e:
            logger.warning(f"[Orchestrator] ✗ {e.code.value}: {e.message}")
            return self.failure(e.message)
        except Exception as e:
            logger.exception(f"[Orchestrator] ✗ Unexpected pipeline failure: {e}")
            return self.failure(str(e) or e.__class__.__name__)

    def failure(self, message: str) -> VariantGenerationResult:
        """Result shape for a pipeline that could not produce variants"""
        return VariantGenerationResult(
            success=False,
            variants=[],
            recommended_variant_id="",
            metadata=ResultMetadata(
                generated_at=datetime.now(timezone.utc),
                processing_time_ms=0.0,
                total_variants=0,
                version=self.version,
            ),
            error=message,
        )

    async def _run(self, request: VariantRequest) -> VariantGenerationResult:
        logger.info(f"[Orchestrator] Starting pipeline | variants: {request.variant_count}")

        # Step 1: Infer context from the topic
        context = self.analyzer.analyze(request.topic)

        # Step 2: Plan one config per focus
        overrides = self._normalize_overrides(request.to_overrides())
        configs = self.planner.plan(
            request.variant_count, request.focus_areas, context, overrides, request.topic
        )

        # Step 3: Generate concurrently; this is the only timed section
        start = time.perf_counter()
        candidates = await self.generator.generate(configs)
        processing_time_ms = (time.perf_counter() - start) * 1000

        # Step 4: Score against the same resolved context the planner used
        resolved = context.with_overrides(overrides)
        scored = [
            self.scorer.score(
                candidate,
                resolved,
                config.design_focus,
                index,
                config.description,
                config.features,
                request.preferences,
            )
            for index, (candidate, config) in enumerate(zip(candidates, configs))
        ]

        # Step 5: Rank
        result = self.ranker.aggregate(scored, processing_time_ms, analysis=resolved)
        logger.info(
            f"[Orchestrator] ✓ Pipeline complete in {processing_time_ms:.0f}ms | "
            f"recommended: {result.recommended_variant_id}"
        )
        return result

    def _normalize_overrides(self, overrides: Overrides) -> Overrides:
        return overrides.model_copy(update={
            "industry": self.analyzer.canonical_industry(overrides.industry),
            "business_goal": self.analyzer.canonical_goal(overrides.business_goal),
        })
