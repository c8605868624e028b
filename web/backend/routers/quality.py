#!/usr/bin/env python3
"""
Admin quality endpoints - inspect and force-recompute an answer's AQS.
"""

import logging
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from ..dependencies import get_debug_service
from ..services.quality_debug_service import QualityDebugService
from ..models.responses import AnswerDebugResponse
from ..utils import validate_uuid

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)

router = APIRouter(prefix="/api/admin/qa", tags=["quality"])


def add_rate_limit_handlers(app):
    """Add rate limit exception handlers to the FastAPI app."""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


async def _rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "error": str(exc),
            "type": "RateLimitExceeded"
        }
    )


@router.get("/answers/{answer_id}/debug", response_model=AnswerDebugResponse)
def get_answer_debug(
    answer_id: str,
    service: QualityDebugService = Depends(get_debug_service)
):
    """
    Show an answer together with its stored quality metrics, reactions and flags.

    `metrics` is null when the answer has never been scored.
    """
    return service.get_debug_view(validate_uuid(answer_id, "answer_id"))


@router.post("/answers/{answer_id}/debug", response_model=AnswerDebugResponse)
@limiter.limit("20/minute")
def force_recompute_answer(
    request: Request,
    answer_id: str,
    service: QualityDebugService = Depends(get_debug_service)
):
    """
    Force a recompute of the answer's AQS (trigger MANUAL) and return the
    refreshed debug view.
    """
    return service.force_recompute(validate_uuid(answer_id, "answer_id"))
