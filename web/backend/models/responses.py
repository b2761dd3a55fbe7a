#!/usr/bin/env python3
"""
Response models for API endpoints.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict, Any


class SubscoresResponse(BaseModel):
    content: float = Field(ge=0, le=100)
    behavior: float = Field(ge=0, le=100)
    expert: float = Field(ge=0, le=100)
    trust: float = Field(ge=0, le=100)


class QualityMetricsResponse(BaseModel):
    """Current quality score of an answer."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "answer_id": "550e8400-e29b-41d4-a716-446655440000",
                "aqs": 82.4,
                "label": "HIGH",
                "subscores": {"content": 79.0, "behavior": 95.5, "expert": 70.0, "trust": 80.0},
                "computed_at": "2026-02-01T12:00:00+00:00",
                "computed_by": "CRON",
                "engine_version": "aqs-1.0"
            }
        }
    )

    answer_id: str
    aqs: float = Field(ge=0, le=100)
    label: str
    subscores: SubscoresResponse
    computed_at: Optional[str]
    computed_by: str
    engine_version: str


class QualityDebugResponse(QualityMetricsResponse):
    """Stored signal snapshot and per-group scoring breakdown."""
    signals: Dict[str, Any] = Field(default_factory=dict)
    breakdown: Dict[str, Dict[str, float]] = Field(default_factory=dict)
    degraded: List[str] = Field(default_factory=list)


class RecomputeResponse(BaseModel):
    success: bool = True
    message: str
    metrics: QualityMetricsResponse


class BatchRecomputeResponse(BaseModel):
    """Result of a batch recompute run."""
    success: bool = True
    processed: int = Field(ge=0)
    updated: int = Field(ge=0)
    failed: int = Field(ge=0)
    timestamp: str


class CronEndpointInfoResponse(BaseModel):
    endpoint: str
    method: str
    description: str
    parameters: Dict[str, str]
    authentication: str


class AnswerQualityItemResponse(BaseModel):
    """An answer with its stored score. Unscored answers report aqs 0 and NORMAL."""
    answer_id: str
    question_id: str
    author_id: str
    body: str
    is_accepted: bool
    is_hidden: bool
    created_at: Optional[str]
    helpful_count: int = Field(ge=0)
    aqs: float = Field(ge=0, le=100)
    label: str
    scored: bool
    author_name: Optional[str] = None
    question_title: Optional[str] = None


class AnswerQualityListResponse(BaseModel):
    success: bool = True
    answers: List[AnswerQualityItemResponse]
    count: int = Field(ge=0)
