import logging
import uuid
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import select, or_, func
from sqlalchemy.dialects import postgresql, sqlite

from database.models import Answer, AnswerQualityMetrics
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class QualityMetricsRepository(BaseRepository):
    def _insert(self):
        # ON CONFLICT is dialect-specific; SQLite backs the test suite
        if self.db.get_bind().dialect.name == 'sqlite':
            return sqlite.insert(AnswerQualityMetrics)
        return postgresql.insert(AnswerQualityMetrics)

    def upsert(
        self,
        answer_id: uuid.UUID,
        aqs: float,
        label: str,
        subscores: Dict[str, float],
        signals: Dict[str, Any],
        computed_at: datetime,
        computed_by: str,
        engine_version: str
    ) -> AnswerQualityMetrics:
        """Insert or overwrite the single metrics row for answer_id in one statement."""
        values = {
            'aqs': aqs,
            'label': label,
            'content_score': subscores['content'],
            'behavior_score': subscores['behavior'],
            'expert_score': subscores['expert'],
            'trust_score': subscores['trust'],
            'signals': signals,
            'computed_at': computed_at,
            'computed_by': computed_by,
            'engine_version': engine_version,
        }
        stmt = self._insert().values(
            id=uuid.uuid4(),
            answer_id=answer_id,
            **values
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=['answer_id'],
            set_=values
        )
        self.db.execute(stmt)
        self.db.expire_all()
        return self.get_by_answer_id(answer_id)

    def get_by_answer_id(self, answer_id: uuid.UUID) -> Optional[AnswerQualityMetrics]:
        stmt = select(AnswerQualityMetrics).where(
            AnswerQualityMetrics.answer_id == answer_id
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def list_stale_answer_ids(
        self,
        now: datetime,
        max_age_days: float,
        limit: int
    ) -> List[uuid.UUID]:
        """
        Answer ids with no metrics row or a row older than max_age_days.

        Never-computed answers come first, then the oldest computed_at, then
        answer creation time and id, so consecutive runs move forward.
        """
        cutoff = now - timedelta(days=max_age_days)
        stmt = select(Answer.id).outerjoin(
            AnswerQualityMetrics, AnswerQualityMetrics.answer_id == Answer.id
        ).where(
            or_(
                AnswerQualityMetrics.id.is_(None),
                AnswerQualityMetrics.computed_at < cutoff
            )
        ).order_by(
            AnswerQualityMetrics.computed_at.asc().nulls_first(),
            Answer.created_at.asc(),
            Answer.id.asc()
        ).limit(limit)
        return list(self.db.execute(stmt).scalars().all())

    def count(self) -> int:
        return self.db.execute(select(func.count(AnswerQualityMetrics.id))).scalar_one()
