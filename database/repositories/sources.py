#!/usr/bin/env python3
"""
SQL-backed signal sources.

Each source opens its own unit of work per lookup, so one instance can be
shared by every batch worker thread. Transient OperationalErrors are retried
with tenacity; when retries run out (or any other database error occurs) the
failure is raised as UpstreamReadError so the extractor can degrade the group.
"""

import logging
import uuid
from typing import Callable, List, Optional, TypeVar

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session
from tenacity import (
    retry,
    stop_after_attempt,
    wait_fixed,
    retry_if_exception_type,
    before_sleep_log
)

from core.quality.errors import UpstreamReadError
from core.quality.sources import AnswerRecord, EngagementRecord, ExpertiseRecord, TrustRecord
from database.repositories.answer import AnswerRepository
from database.repositories.user import UserRepository
from database.uow import SessionFactory, quality_uow

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _SqlSource:
    name = "sql"

    def __init__(self, session_factory: Optional[SessionFactory] = None):
        self.session_factory = session_factory

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_fixed(0.5),
        retry=retry_if_exception_type(OperationalError),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True
    )
    def _query(self, read: Callable[[Session], T]) -> T:
        with quality_uow(self.session_factory) as session:
            return read(session)

    def _read(self, read: Callable[[Session], T]) -> T:
        try:
            return self._query(read)
        except SQLAlchemyError as e:
            raise UpstreamReadError(self.name, str(e)) from e


class SqlAnswerSource(_SqlSource):
    name = "answers"

    def get_answer(self, answer_id: uuid.UUID) -> Optional[AnswerRecord]:
        return self._read(lambda db: AnswerRepository(db).get_answer(answer_id))

    def list_answer_ids_for_question(self, question_id: uuid.UUID) -> List[uuid.UUID]:
        return self._read(lambda db: AnswerRepository(db).list_answer_ids_for_question(question_id))

    def list_answer_ids_for_author(self, author_id: uuid.UUID) -> List[uuid.UUID]:
        return self._read(lambda db: AnswerRepository(db).list_answer_ids_for_author(author_id))


class SqlEngagementSource(_SqlSource):
    name = "engagement"

    def get_engagement(self, answer_id: uuid.UUID) -> Optional[EngagementRecord]:
        return self._read(lambda db: AnswerRepository(db).get_engagement(answer_id))


class SqlExpertiseSource(_SqlSource):
    name = "expertise"

    def get_author_expertise(self, author_id: uuid.UUID) -> Optional[ExpertiseRecord]:
        return self._read(lambda db: UserRepository(db).get_author_expertise(author_id))


class SqlTrustSource(_SqlSource):
    name = "trust"

    def get_account_trust(self, author_id: uuid.UUID) -> Optional[TrustRecord]:
        return self._read(lambda db: UserRepository(db).get_account_trust(author_id))
