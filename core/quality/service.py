#!/usr/bin/env python3
"""
Answer Quality Service - Public entry point of the engine.

Wires the extractor, calculator, store, orchestrator and inspector from an
AppConfig and exposes the operations used by the web layer and the CLI.
"""

import logging
import uuid
from datetime import datetime
from typing import Callable, List, Optional, Union

from core.config_loader import AppConfig
from core.utils import utcnow
from core.quality.calculator import ScoreCalculator
from core.quality.debug import DebugInspector
from core.quality.errors import ValidationError
from core.quality.keywords import KeywordIndex
from core.quality.models import (
    AnswerQualityRow,
    BatchRecomputeResult,
    ComputedBy,
    DebugPayload,
    QualityMetrics,
    parse_answer_id,
)
from core.quality.orchestrator import RecomputeOrchestrator
from core.quality.signals import SignalExtractor
from core.quality.sources import AnswerSource, EngagementSource, ExpertiseSource, TrustSource
from core.quality.store import MetricsStore
from database.repositories.sources import (
    SqlAnswerSource,
    SqlEngagementSource,
    SqlExpertiseSource,
    SqlTrustSource,
)
from database.uow import SessionFactory

logger = logging.getLogger(__name__)

IdLike = Union[str, uuid.UUID]

DEFAULT_LIST_LIMIT = 50


class AnswerQualityService:
    def __init__(
        self,
        orchestrator: RecomputeOrchestrator,
        inspector: DebugInspector,
        store: MetricsStore,
        config: Optional[AppConfig] = None
    ):
        self.orchestrator = orchestrator
        self.inspector = inspector
        self.store = store
        self.config = config or AppConfig()

    @classmethod
    def build(
        cls,
        config: AppConfig,
        session_factory: Optional[SessionFactory] = None,
        clock: Callable[[], datetime] = utcnow,
        answers: Optional[AnswerSource] = None,
        engagement: Optional[EngagementSource] = None,
        expertise: Optional[ExpertiseSource] = None,
        trust: Optional[TrustSource] = None
    ) -> "AnswerQualityService":
        """Assemble the engine. Sources default to the SQL-backed repositories."""
        quality = config.quality

        extractor = SignalExtractor(
            answers=answers or SqlAnswerSource(session_factory),
            engagement=engagement or SqlEngagementSource(session_factory),
            expertise=expertise or SqlExpertiseSource(session_factory),
            trust=trust or SqlTrustSource(session_factory),
            keyword_index=KeywordIndex(quality.keywords.keywords),
            clock=clock,
        )
        calculator = ScoreCalculator(quality.scoring)
        store = MetricsStore(session_factory, clock=clock)
        orchestrator = RecomputeOrchestrator(
            extractor,
            calculator,
            store,
            max_workers=quality.recompute.max_workers,
            max_limit=quality.recompute.max_limit,
        )

        logger.info(
            f"AnswerQualityService ready: engine={calculator.engine_version}, "
            f"keywords={len(extractor.keyword_index)}, workers={orchestrator.max_workers}"
        )
        return cls(orchestrator, DebugInspector(store), store, config)

    def recompute_one(self, answer_id: IdLike, source: Union[str, ComputedBy] = ComputedBy.SYSTEM) -> QualityMetrics:
        return self.orchestrator.recompute_one(answer_id, source)

    def batch_recompute_stale(
        self,
        max_age_days: Optional[float] = None,
        limit: Optional[int] = None,
        source: Union[str, ComputedBy] = ComputedBy.CRON
    ) -> BatchRecomputeResult:
        recompute = self.config.quality.recompute
        if max_age_days is None:
            max_age_days = recompute.default_max_age_days
        if limit is None:
            limit = recompute.default_limit
        return self.orchestrator.batch_recompute_stale(max_age_days, limit, source)

    def recompute_question(self, question_id: IdLike, source: Union[str, ComputedBy] = ComputedBy.SYSTEM) -> BatchRecomputeResult:
        return self.orchestrator.recompute_question(question_id, source)

    def recompute_author(self, author_id: IdLike, source: Union[str, ComputedBy] = ComputedBy.SYSTEM) -> BatchRecomputeResult:
        return self.orchestrator.recompute_author(author_id, source)

    def get_debug(self, answer_id: IdLike) -> DebugPayload:
        return self.inspector.get_debug(answer_id)

    def get_metrics(self, answer_id: IdLike) -> QualityMetrics:
        return self.store.get(parse_answer_id(answer_id))

    def get_ranked_answers(self, question_id: IdLike) -> List[AnswerQualityRow]:
        """Visible answers of a question ordered for display."""
        return self.store.rank_for_question(parse_answer_id(question_id, name="question_id"))

    def list_answers(self, limit: int = DEFAULT_LIST_LIMIT) -> List[AnswerQualityRow]:
        """Newest answers with their scores, for the admin overview."""
        max_limit = self.config.quality.recompute.max_limit
        if limit < 1 or limit > max_limit:
            raise ValidationError(f"limit must be between 1 and {max_limit}, got {limit}")
        return self.store.list_recent(limit)
