#!/usr/bin/env python3
"""
Metrics Store - Persistence of the one-per-answer quality record.

Wraps QualityMetricsRepository in a unit of work per call, and serves the
scored answer listings. Any database failure is raised as MetricsStoreError.
"""

import uuid
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from core.utils import utcnow, as_utc
from core.quality.errors import MetricsStoreError, NotFoundError
from core.quality.models import (
    AllSignals,
    AnswerQualityRow,
    AQSResult,
    ComputedBy,
    QualityLabel,
    QualityMetrics,
    Subscores,
)
from database.models import AnswerQualityMetrics
from database.repositories.answer import AnswerRepository
from database.repositories.quality_metrics import QualityMetricsRepository
from database.uow import SessionFactory, quality_uow

logger = logging.getLogger(__name__)


def build_snapshot(signals: Optional[AllSignals], result: AQSResult) -> Dict[str, Any]:
    """Raw signals plus per-group scoring breakdown, as stored in the signals column."""
    return {
        'signals': signals.to_dict() if signals is not None else {},
        'breakdown': result.breakdown,
    }


def to_quality_metrics(row: AnswerQualityMetrics) -> QualityMetrics:
    return QualityMetrics(
        answer_id=row.answer_id,
        aqs=float(row.aqs),
        label=QualityLabel(row.label),
        subscores=Subscores(
            content=float(row.content_score),
            behavior=float(row.behavior_score),
            expert=float(row.expert_score),
            trust=float(row.trust_score),
        ),
        signals=dict(row.signals or {}),
        computed_at=as_utc(row.computed_at),
        computed_by=ComputedBy(row.computed_by),
        engine_version=row.engine_version,
    )


class MetricsStore:
    def __init__(
        self,
        session_factory: Optional[SessionFactory] = None,
        clock: Callable[[], datetime] = utcnow
    ):
        self.session_factory = session_factory
        self.clock = clock

    def upsert(
        self,
        answer_id: uuid.UUID,
        result: AQSResult,
        source: ComputedBy,
        signals: Optional[AllSignals] = None
    ) -> QualityMetrics:
        """Create or overwrite the metrics row, stamping computed_at=now and computed_by=source."""
        source = ComputedBy.parse(source)
        try:
            with quality_uow(self.session_factory) as session:
                row = QualityMetricsRepository(session).upsert(
                    answer_id=answer_id,
                    aqs=result.aqs,
                    label=result.label.value,
                    subscores=result.subscores.to_dict(),
                    signals=build_snapshot(signals, result),
                    computed_at=self.clock(),
                    computed_by=source.value,
                    engine_version=result.engine_version,
                )
                metrics = to_quality_metrics(row)
        except SQLAlchemyError as e:
            raise MetricsStoreError(f"Failed to upsert metrics for answer {answer_id}: {e}") from e

        logger.debug(f"Stored AQS {metrics.aqs} ({metrics.label.value}) for answer {answer_id} by {source.value}")
        return metrics

    def find(self, answer_id: uuid.UUID) -> Optional[QualityMetrics]:
        try:
            with quality_uow(self.session_factory) as session:
                row = QualityMetricsRepository(session).get_by_answer_id(answer_id)
                return to_quality_metrics(row) if row is not None else None
        except SQLAlchemyError as e:
            raise MetricsStoreError(f"Failed to read metrics for answer {answer_id}: {e}") from e

    def get(self, answer_id: uuid.UUID) -> QualityMetrics:
        metrics = self.find(answer_id)
        if metrics is None:
            raise NotFoundError(f"No quality metrics for answer {answer_id}")
        return metrics

    def list_stale(self, max_age_days: float, limit: int) -> List[uuid.UUID]:
        try:
            with quality_uow(self.session_factory) as session:
                return QualityMetricsRepository(session).list_stale_answer_ids(
                    now=self.clock(),
                    max_age_days=max_age_days,
                    limit=limit,
                )
        except SQLAlchemyError as e:
            raise MetricsStoreError(f"Failed to list stale metrics: {e}") from e

    def rank_for_question(self, question_id: uuid.UUID) -> List[AnswerQualityRow]:
        try:
            with quality_uow(self.session_factory) as session:
                return AnswerRepository(session).list_ranked_for_question(question_id)
        except SQLAlchemyError as e:
            raise MetricsStoreError(f"Failed to rank answers for question {question_id}: {e}") from e

    def list_recent(self, limit: int) -> List[AnswerQualityRow]:
        try:
            with quality_uow(self.session_factory) as session:
                return AnswerRepository(session).list_recent_with_quality(limit)
        except SQLAlchemyError as e:
            raise MetricsStoreError(f"Failed to list answers: {e}") from e
