import logging
import uuid
from typing import List, Optional

from sqlalchemy import select, func, case

from database.models import Answer, AnswerQualityMetrics, AnswerReaction, Question, User
from database.repositories.base import BaseRepository
from core.quality.models import AnswerQualityRow, QualityLabel
from core.quality.sources import AnswerRecord, EngagementRecord

logger = logging.getLogger(__name__)

HELPFUL = 'helpful'
NOT_HELPFUL = 'not_helpful'


class AnswerRepository(BaseRepository):
    def get_answer(self, answer_id: uuid.UUID) -> Optional[AnswerRecord]:
        stmt = select(
            Answer,
            Question.category,
            Question.created_at
        ).select_from(Answer).join(
            Question, Question.id == Answer.question_id
        ).where(
            Answer.id == answer_id
        )
        row = self.db.execute(stmt).first()
        if row is None:
            return None

        answer, category, question_created_at = row
        return AnswerRecord(
            id=answer.id,
            body=answer.body or "",
            author_id=answer.author_id,
            question_id=answer.question_id,
            created_at=answer.created_at,
            is_accepted=bool(answer.is_accepted),
            is_hidden=bool(answer.is_hidden),
            question_category=category,
            question_created_at=question_created_at
        )

    def list_answer_ids_for_question(self, question_id: uuid.UUID) -> List[uuid.UUID]:
        stmt = select(Answer.id).where(
            Answer.question_id == question_id
        ).order_by(Answer.created_at.asc(), Answer.id.asc())
        return list(self.db.execute(stmt).scalars().all())

    def list_answer_ids_for_author(self, author_id: uuid.UUID) -> List[uuid.UUID]:
        stmt = select(Answer.id).where(
            Answer.author_id == author_id
        ).order_by(Answer.created_at.asc(), Answer.id.asc())
        return list(self.db.execute(stmt).scalars().all())

    def get_engagement(self, answer_id: uuid.UUID) -> Optional[EngagementRecord]:
        """
        Aggregate views, reactions and acceptance for one answer.

        Returns None for a missing answer, and for an answer nobody has
        engaged with yet (no reactions, no views, not accepted).
        """
        answer_row = self.db.execute(
            select(Answer.view_count, Answer.is_accepted, Question.author_id)
            .select_from(Answer)
            .join(Question, Question.id == Answer.question_id)
            .where(Answer.id == answer_id)
        ).first()
        if answer_row is None:
            return None

        view_count, is_accepted, asker_id = answer_row
        is_helpful = AnswerReaction.reaction_type == HELPFUL

        stmt = select(
            func.count(AnswerReaction.id),
            func.sum(case((is_helpful, 1), else_=0)),
            func.sum(case((AnswerReaction.reaction_type == NOT_HELPFUL, 1), else_=0)),
            func.sum(case(((AnswerReaction.user_id == asker_id) & is_helpful, 1), else_=0)),
            func.min(case((is_helpful, AnswerReaction.created_at), else_=None))
        ).where(AnswerReaction.answer_id == answer_id)
        total, helpful, not_helpful, asker_helpful, first_helpful_at = self.db.execute(stmt).one()

        if not total and not view_count and not is_accepted:
            return None

        return EngagementRecord(
            views=view_count or 0,
            reaction_count=total or 0,
            accepted=bool(is_accepted),
            helpful_count=helpful or 0,
            not_helpful_count=not_helpful or 0,
            asker_helpful=bool(asker_helpful),
            first_reaction_at=first_helpful_at
        )

    def _quality_rows_query(self):
        helpful_count = (
            select(func.count(AnswerReaction.id))
            .where(AnswerReaction.answer_id == Answer.id, AnswerReaction.reaction_type == HELPFUL)
            .correlate(Answer)
            .scalar_subquery()
        )
        return select(
            Answer,
            helpful_count.label('helpful_count'),
            AnswerQualityMetrics.aqs,
            AnswerQualityMetrics.label,
            User.display_name,
            Question.title
        ).select_from(Answer).outerjoin(
            AnswerQualityMetrics, AnswerQualityMetrics.answer_id == Answer.id
        ).outerjoin(
            User, User.id == Answer.author_id
        ).outerjoin(
            Question, Question.id == Answer.question_id
        )

    @staticmethod
    def _to_quality_row(row) -> AnswerQualityRow:
        answer, helpful_count, aqs, label, author_name, question_title = row
        return AnswerQualityRow(
            answer_id=answer.id,
            question_id=answer.question_id,
            author_id=answer.author_id,
            body=answer.body or "",
            is_accepted=bool(answer.is_accepted),
            is_hidden=bool(answer.is_hidden),
            created_at=answer.created_at,
            helpful_count=helpful_count or 0,
            aqs=float(aqs) if aqs is not None else 0.0,
            label=QualityLabel(label) if label else QualityLabel.NORMAL,
            scored=aqs is not None,
            author_name=author_name,
            question_title=question_title
        )

    def list_ranked_for_question(self, question_id: uuid.UUID) -> List[AnswerQualityRow]:
        """
        Visible answers of a question, best first: accepted, then AQS, then newest.

        Unscored answers rank as AQS 0.
        """
        stmt = self._quality_rows_query().where(
            Answer.question_id == question_id,
            Answer.is_hidden.is_(False)
        ).order_by(
            Answer.is_accepted.desc(),
            func.coalesce(AnswerQualityMetrics.aqs, 0).desc(),
            Answer.created_at.desc(),
            Answer.id.asc()
        )
        return [self._to_quality_row(row) for row in self.db.execute(stmt).all()]

    def list_recent_with_quality(self, limit: int = 50) -> List[AnswerQualityRow]:
        """Newest answers first, hidden ones included, with their stored score."""
        stmt = self._quality_rows_query().order_by(
            Answer.created_at.desc(),
            Answer.id.asc()
        ).limit(limit)
        return [self._to_quality_row(row) for row in self.db.execute(stmt).all()]
