#!/usr/bin/env python3
"""
Cron endpoints - scheduled maintenance jobs.
"""

import hmac
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query

from core.quality import AnswerQualityService
from ..config import get_config
from ..dependencies import get_quality_service
from ..exceptions import UnauthorizedException, CronNotConfiguredException
from ..models.responses import CronRecomputeResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cron", tags=["cron"])


def verify_cron_token(authorization: Optional[str] = Header(None)) -> None:
    """Require `Authorization: Bearer <cron.token>`."""
    expected = get_config().cron.token
    if not expected:
        logger.error("Cron endpoint called but no cron token is configured")
        raise CronNotConfiguredException("Cron token is not configured")

    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not hmac.compare_digest(token.strip(), expected):
        raise UnauthorizedException("Unauthorized")


@router.post(
    "/recompute-quality",
    response_model=CronRecomputeResponse,
    dependencies=[Depends(verify_cron_token)]
)
def recompute_stale_quality(
    max_age_days: Optional[int] = Query(default=None, alias="maxAgeDays", ge=0),
    limit: Optional[int] = Query(default=None, ge=1, le=1000),
    quality: AnswerQualityService = Depends(get_quality_service)
):
    """
    Recompute AQS for answers without metrics or with metrics older than
    `maxAgeDays` (config default 7), at most `limit` answers per call.
    """
    cron_config = get_config().cron
    outcome = quality.batch_recompute_stale(
        max_age_days=max_age_days if max_age_days is not None else cron_config.max_age_days,
        limit=limit if limit is not None else cron_config.limit
    )

    return CronRecomputeResponse(
        success=True,
        processed=outcome['processed'],
        updated=outcome['updated'],
        failed=outcome['failed'],
        timestamp=datetime.now(timezone.utc).isoformat()
    )
