"""Concurrent candidate generation with per-candidate failure isolation"""

import asyncio
import html
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from lp_variants.agents.client import ContentGenerationService
from lp_variants.models.errors import GenerationError
from lp_variants.models.schemas import (
    Candidate,
    CandidateMetadata,
    GenerationRequest,
    VariantConfig,
)

logger = logging.getLogger(__name__)

FALLBACK_MODEL = "fallback"


def build_fallback(config: VariantConfig, reason: str) -> Candidate:
    """Placeholder candidate for a variant whose generation failed"""
    features = "".join(f"<li>{html.escape(feature)}</li>" for feature in config.features)
    markup = (
        f'<section class="variant-fallback" data-design-focus="{html.escape(config.design_focus)}">'
        f"<h2>{html.escape(config.description)}</h2>"
        f"<ul>{features}</ul>"
        '<p class="variant-fallback__notice">This variant could not be generated. Please try again.</p>'
        "</section>"
    )
    return Candidate(
        success=False,
        html_content=markup,
        css_content="",
        title=f"{config.design_focus} variant (unavailable)",
        metadata=CandidateMetadata(
            generated_at=datetime.now(timezone.utc),
            model=FALLBACK_MODEL,
            processing_time_ms=0.0,
        ),
        provenance="fallback",
        description=config.description,
        features=list(config.features),
        error=reason,
    )


class CandidateGenerator:
    """
    Runs one generation call per VariantConfig, all in flight at once.

    A failing or malformed call never affects its siblings: it is logged and
    replaced by a fallback candidate in the same position.
    """

    def __init__(
        self,
        service: ContentGenerationService,
        timeout_s: Optional[float] = None,
        model_name: str = "unknown",
    ):
        self.service = service
        self.timeout_s = timeout_s
        self.model_name = model_name

    # Dispatches every config concurrently and waits for all of them (or the batch timeout).
    # Output order always matches input order; pending calls at timeout become fallbacks.
    async def generate(self, configs: List[VariantConfig]) -> List[Candidate]:
        if not configs:
            return []

        tasks = [asyncio.create_task(self._generate_one(config)) for config in configs]
        logger.info(f"[CandidateGenerator] Dispatched {len(tasks)} generation calls")

        _, pending = await asyncio.wait(tasks, timeout=self.timeout_s)
        if pending:
            logger.warning(
                f"[CandidateGenerator] Batch timeout after {self.timeout_s}s, "
                f"cancelling {len(pending)} pending calls"
            )
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        candidates = []
        for task, config in zip(tasks, configs):
            if task in pending:
                candidates.append(build_fallback(config, f"generation timed out after {self.timeout_s}s"))
            else:
                candidates.append(task.result())

        fallbacks = sum(1 for c in candidates if c.is_fallback)
        logger.info(f"[CandidateGenerator] Completed {len(candidates)} candidates ({fallbacks} fallback)")
        return candidates

    async def _generate_one(self, config: VariantConfig) -> Candidate:
        start = time.perf_counter()
        try:
            response = await self.service.generate(GenerationRequest.from_config(config))
            candidate = self._to_candidate(response, (time.perf_counter() - start) * 1000)
            logger.info(f"[CandidateGenerator] ✓ {config.design_focus} generated")
            return candidate
        except Exception as e:
            logger.error(f"[CandidateGenerator] ✗ {config.design_focus} failed: {e}")
            return build_fallback(config, str(e) or e.__class__.__name__)

    def _to_candidate(self, response: Dict[str, Any], elapsed_ms: float) -> Candidate:
        if not isinstance(response, dict):
            raise GenerationError("generation response is not an object")
        if not response.get("success", True):
            raise GenerationError("generation response reported failure")
        html_content = response.get("htmlContent")
        if not isinstance(html_content, str) or not html_content.strip():
            raise GenerationError("generation response is missing htmlContent")

        meta = response.get("metadata") or {}
        return Candidate(
            success=True,
            html_content=html_content,
            css_content=response.get("cssContent") or "",
            title=response.get("title") or "",
            structure=response.get("structure"),
            metadata=CandidateMetadata(
                generated_at=meta.get("generatedAt") or datetime.now(timezone.utc),
                model=meta.get("model") or self.model_name,
                processing_time_ms=meta.get("processingTimeMs", elapsed_ms),
            ),
            provenance="generated",
        )
