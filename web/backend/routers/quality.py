#!/usr/bin/env python3
"""
Answer quality endpoints - read scores, rank answers, inspect signals, force recompute.

Admin routes assume authentication/authorization is enforced in front of the
app (reverse proxy or gateway).
"""

import logging
from fastapi import APIRouter, Depends, Query

from core.quality.models import ComputedBy
from core.quality.service import AnswerQualityService
from ..dependencies import get_quality_service
from ..models.responses import (
    AnswerQualityItemResponse,
    AnswerQualityListResponse,
    QualityMetricsResponse,
    QualityDebugResponse,
    RecomputeResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/quality", tags=["quality"])
admin_router = APIRouter(prefix="/api/admin/quality", tags=["admin"])


@router.get("/answers/{answer_id}", response_model=QualityMetricsResponse)
def get_answer_quality(
    answer_id: str,
    service: AnswerQualityService = Depends(get_quality_service)
):
    """
    Get the stored quality score of an answer.

    Returns 404 if the answer has never been scored.
    """
    return service.get_metrics(answer_id).to_dict()


@admin_router.get("/answers/{answer_id}/debug", response_model=QualityDebugResponse)
def get_answer_quality_debug(
    answer_id: str,
    service: AnswerQualityService = Depends(get_quality_service)
):
    """
    Get the signal snapshot and scoring breakdown stored at the last recompute.

    Never recomputes.
    """
    return service.get_debug(answer_id).to_dict()


@admin_router.post("/answers/{answer_id}/recompute", response_model=RecomputeResponse)
def force_recompute_answer_quality(
    answer_id: str,
    service: AnswerQualityService = Depends(get_quality_service)
):
    """Recompute the score of one answer now, tagged ADMIN."""
    metrics = service.recompute_one(answer_id, ComputedBy.ADMIN)
    logger.info(f"Admin recompute for answer {answer_id}: AQS {metrics.aqs} ({metrics.label.value})")

    return RecomputeResponse(
        success=True,
        message="Quality recomputed",
        metrics=QualityMetricsResponse(**metrics.to_dict())
    )


@router.get("/questions/{question_id}/answers", response_model=AnswerQualityListResponse)
def get_ranked_answers(
    question_id: str,
    service: AnswerQualityService = Depends(get_quality_service)
):
    """
    Get the visible answers of a question, best first.

    Order: accepted answers, then higher AQS, then newer answers. Hidden
    answers are left out; answers never scored rank as AQS 0.
    """
    rows = service.get_ranked_answers(question_id)
    return AnswerQualityListResponse(
        answers=[AnswerQualityItemResponse(**row.to_dict()) for row in rows],
        count=len(rows)
    )


@admin_router.get("/answers", response_model=AnswerQualityListResponse)
def list_answers_with_quality(
    limit: int = Query(default=50, description="Maximum number of answers to return"),
    service: AnswerQualityService = Depends(get_quality_service)
):
    """List the newest answers, hidden ones included, with their stored scores."""
    rows = service.list_answers(limit)
    return AnswerQualityListResponse(
        answers=[AnswerQualityItemResponse(**row.to_dict()) for row in rows],
        count=len(rows)
    )
