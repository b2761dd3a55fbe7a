import uuid
from typing import Optional

from sqlalchemy import select, func

from database.models import Answer, AnswerFlag, User, UserExpertiseStats
from database.repositories.base import BaseRepository
from core.quality.sources import ExpertiseRecord, TrustRecord


class UserRepository(BaseRepository):
    def get_author_expertise(self, author_id: uuid.UUID) -> Optional[ExpertiseRecord]:
        stats = self.db.execute(
            select(UserExpertiseStats).where(UserExpertiseStats.user_id == author_id)
        ).scalar_one_or_none()
        if stats is None:
            return None

        return ExpertiseRecord(
            total_answers=stats.total_answers or 0,
            accepted_answers=stats.accepted_answers or 0,
            top_category=stats.top_category,
            first_answer_at=stats.first_answer_at
        )

    def get_account_trust(self, author_id: uuid.UUID) -> Optional[TrustRecord]:
        """Verification, account age and flags raised against the author's answers."""
        user = self.db.execute(
            select(User).where(User.id == author_id, User.deleted_at.is_(None))
        ).scalar_one_or_none()
        if user is None:
            return None

        flag_count = self.db.execute(
            select(func.count(AnswerFlag.id))
            .select_from(AnswerFlag)
            .join(Answer, Answer.id == AnswerFlag.answer_id)
            .where(Answer.author_id == author_id)
        ).scalar_one()

        return TrustRecord(
            is_verified=bool(user.is_verified),
            created_at=user.created_at,
            flag_count=flag_count or 0
        )
