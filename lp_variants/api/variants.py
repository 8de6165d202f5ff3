"""POST /api/variants endpoint"""

import logging
from functools import lru_cache
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from lp_variants.agents.orchestrator import VariantPipeline
from lp_variants.models.errors import InvalidRequestError

logger = logging.getLogger(__name__)

router = APIRouter()


@lru_cache(maxsize=1)
def get_pipeline() -> VariantPipeline:
    """Shared pipeline wired from settings; override in tests via dependency_overrides"""
    return VariantPipeline.from_settings()


@router.post("/variants")
async def create_variants(
    payload: Dict[str, Any] = Body(...),
    pipeline: VariantPipeline = Depends(get_pipeline),
) -> JSONResponse:
    """
    Generate, score and rank landing page variants.

    Invalid requests answer 400 with the failure result shape; everything
    else answers 200 with ``success`` telling whether variants were produced.
    """
    try:
        request = pipeline.validate(payload)
    except InvalidRequestError as e:
        logger.info(f"[API] Rejected variant request: {e.message}")
        result = pipeline.failure(e.message)
        return JSONResponse(status_code=e.http_status, content=result.model_dump(mode="json", by_alias=True))

    result = await pipeline.run(request)
    return JSONResponse(content=result.model_dump(mode="json", by_alias=True))
