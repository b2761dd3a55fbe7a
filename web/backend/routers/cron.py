#!/usr/bin/env python3
"""
Cron endpoints - scheduled batch recompute of stale quality metrics.
"""

import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from core.config_loader import AppConfig
from core.quality.models import ComputedBy
from core.quality.service import AnswerQualityService
from core.utils import utcnow
from ..config import get_config
from ..dependencies import get_quality_service
from ..models.responses import BatchRecomputeResponse, CronEndpointInfoResponse

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)

router = APIRouter(prefix="/api/cron", tags=["cron"])


def add_rate_limit_handlers(app):
    """Add rate limit exception handlers to the FastAPI app."""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


async def _rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={"detail": str(exc)}
    )


def _cron_rate_limit() -> str:
    return get_config().cron.rate_limit


def verify_cron_token(
    authorization: Optional[str] = Header(default=None),
    config: AppConfig = Depends(get_config)
) -> None:
    """
    Require `Authorization: Bearer <CRON_TOKEN>`.

    The token is compared whole and in constant time. No token configured
    means the endpoint is disabled (500), a missing or wrong token is 401.
    """
    expected = config.cron.token
    if not expected:
        logger.warning("CRON_TOKEN not set, rejecting request")
        raise HTTPException(status_code=500, detail="Cron not configured")

    scheme, _, provided = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not hmac.compare_digest(
        provided.encode("utf-8"), expected.encode("utf-8")
    ):
        raise HTTPException(status_code=401, detail="Unauthorized")


@router.post(
    "/recompute-quality",
    response_model=BatchRecomputeResponse,
    dependencies=[Depends(verify_cron_token)]
)
@limiter.limit(_cron_rate_limit)
def recompute_quality(
    request: Request,
    max_age_days: Optional[int] = Query(default=None, alias="maxAgeDays", description="Maximum age of metrics before recompute"),
    limit: Optional[int] = Query(default=None, description="Maximum number of answers to process"),
    service: AnswerQualityService = Depends(get_quality_service)
):
    """
    Batch recompute stale answer quality metrics.

    Selects answers with no metrics or metrics older than maxAgeDays
    (default from config, 7) and recomputes up to `limit` of them
    (default 100).
    """
    result = service.batch_recompute_stale(max_age_days, limit, ComputedBy.CRON)
    logger.info(f"[Cron] Recomputed {result.processed} answers, {result.updated} changed, {result.failed} failed")

    return BatchRecomputeResponse(
        success=True,
        processed=result.processed,
        updated=result.updated,
        failed=result.failed,
        timestamp=utcnow().isoformat()
    )


@router.get("/recompute-quality", response_model=CronEndpointInfoResponse)
def describe_recompute_quality(config: AppConfig = Depends(get_config)):
    """Describe the batch recompute endpoint."""
    recompute = config.quality.recompute
    return CronEndpointInfoResponse(
        endpoint="/api/cron/recompute-quality",
        method="POST",
        description="Batch recompute stale answer quality metrics",
        parameters={
            "maxAgeDays": f"Maximum age of metrics before recompute (default: {recompute.default_max_age_days})",
            "limit": f"Maximum number of answers to process (default: {recompute.default_limit}, max: {recompute.max_limit})",
        },
        authentication="Bearer token in Authorization header (CRON_TOKEN)"
    )
