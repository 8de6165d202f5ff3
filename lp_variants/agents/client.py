"""Content generation collaborator: protocol and OpenAI SDK implementation"""

import asyncio
import json
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Protocol

from openai import OpenAI

from lp_variants.agents.context_analyzer import ContextAnalyzer
from lp_variants.agents.generator_prompt import GENERATOR_SYSTEM_PROMPT, build_user_message
from lp_variants.core.config import Settings, get_settings
from lp_variants.core.tables import Tables, load_tables
from lp_variants.models.errors import GenerationError
from lp_variants.models.schemas import GenerationRequest

logger = logging.getLogger(__name__)


class ContentGenerationService(Protocol):
    """
    Anything that turns a GenerationRequest into page content.

    ``generate`` returns a dict shaped like
    ``{"success", "htmlContent", "cssContent", "title", "structure"?, "metadata"}``
    or raises. Callers treat both a raise and a missing ``htmlContent`` as failure.
    """

    async def generate(self, request: GenerationRequest) -> Dict[str, Any]:
        ...


class OpenAIContentService:
    """
    Generates landing pages with the OpenAI chat completions API.

    The SDK client is synchronous, so every call runs in a worker thread and is
    bounded by ``Settings.call_timeout_s``.
    """

    # Creates the SDK client only when an API key is configured.
    # Without a key every generate() call fails with a non-retryable GenerationError.
    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[OpenAI] = None,
        tables: Optional[Tables] = None,
        analyzer: Optional[ContextAnalyzer] = None,
    ):
        self.settings = settings or get_settings()
        self.tables = tables or load_tables(self.settings.tables_dir)
        self.analyzer = analyzer or ContextAnalyzer(self.tables.classification)
        if client is not None:
            self.client = client
        elif self.settings.openai_api_key:
            self.client = OpenAI(api_key=self.settings.openai_api_key)
        else:
            logger.warning("[OpenAI] LP_VARIANTS_OPENAI_API_KEY not set; generation will fall back")
            self.client = None
        self.model = self.settings.generation_model
        self.temperature = self.settings.generation_temperature
        self.timeout = self.settings.call_timeout_s

    async def generate(self, request: GenerationRequest) -> Dict[str, Any]:
        """
        Generate one landing page.

        Raises:
            GenerationError: If the key is missing, the call fails or times out,
                or the response is not a JSON object
        """
        if self.client is None:
            raise GenerationError(
                "OpenAI API key not configured. Set LP_VARIANTS_OPENAI_API_KEY in .env file.",
                retryable=False,
            )

        persona = self.analyzer.persona_traits(request.industry)
        user_message = build_user_message(request, persona, self.tables.marketing)

        kwargs = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": GENERATOR_SYSTEM_PROMPT},
                {"role": "user", "content": json.dumps(user_message, ensure_ascii=False, indent=2)},
            ],
            "temperature": self.temperature,
            "response_format": {"type": "json_object"},
        }

        start = time.perf_counter()
        try:
            logger.info(f"[OpenAI] Calling {self.model} | focus: {request.design_focus}")
            response = await asyncio.wait_for(
                asyncio.to_thread(self.client.chat.completions.create, **kwargs),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            raise GenerationError(f"OpenAI call timed out after {self.timeout}s")
        except Exception as e:
            raise GenerationError(f"OpenAI API call failed: {str(e)}")

        result_text = response.choices[0].message.content or ""
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(f"[OpenAI] Response received ({len(result_text)} chars, {elapsed_ms:.0f}ms)")

        try:
            parsed = json.loads(result_text)
        except json.JSONDecodeError as e:
            raise GenerationError(f"OpenAI response is not valid JSON: {e}")
        if not isinstance(parsed, dict):
            raise GenerationError("OpenAI response is not a JSON object")

        parsed.setdefault("success", True)
        parsed.setdefault("metadata", {
            "generatedAt": datetime.now(timezone.utc).isoformat(),
            "model": self.model,
            "processingTimeMs": elapsed_ms,
        })
        return parsed
