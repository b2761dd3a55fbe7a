#!/usr/bin/env python3
"""
Signal Sources - Interfaces to the repositories the engine reads from.

The Q&A, engagement, expertise and account subsystems are external to the
engine. Each source returns None when it has no data for the id, and raises
UpstreamReadError when the lookup itself fails. SQL-backed implementations
live in database/repositories/.
"""

import uuid
from datetime import datetime
from dataclasses import dataclass
from typing import List, Optional, Protocol, runtime_checkable


@dataclass(frozen=True)
class AnswerRecord:
    id: uuid.UUID
    body: str
    author_id: uuid.UUID
    question_id: uuid.UUID
    created_at: datetime
    is_accepted: bool = False
    is_hidden: bool = False
    question_category: Optional[str] = None
    question_created_at: Optional[datetime] = None


@dataclass(frozen=True)
class EngagementRecord:
    views: int = 0
    reaction_count: int = 0
    accepted: bool = False
    helpful_count: int = 0
    not_helpful_count: int = 0
    asker_helpful: bool = False
    # First helpful reaction
    first_reaction_at: Optional[datetime] = None


@dataclass(frozen=True)
class ExpertiseRecord:
    total_answers: int = 0
    accepted_answers: int = 0
    top_category: Optional[str] = None
    first_answer_at: Optional[datetime] = None


@dataclass(frozen=True)
class TrustRecord:
    is_verified: bool = False
    created_at: Optional[datetime] = None
    flag_count: int = 0


@runtime_checkable
class AnswerSource(Protocol):
    def get_answer(self, answer_id: uuid.UUID) -> Optional[AnswerRecord]:
        ...

    def list_answer_ids_for_question(self, question_id: uuid.UUID) -> List[uuid.UUID]:
        ...

    def list_answer_ids_for_author(self, author_id: uuid.UUID) -> List[uuid.UUID]:
        ...


@runtime_checkable
class EngagementSource(Protocol):
    def get_engagement(self, answer_id: uuid.UUID) -> Optional[EngagementRecord]:
        ...


@runtime_checkable
class ExpertiseSource(Protocol):
    def get_author_expertise(self, author_id: uuid.UUID) -> Optional[ExpertiseRecord]:
        ...


@runtime_checkable
class TrustSource(Protocol):
    def get_account_trust(self, author_id: uuid.UUID) -> Optional[TrustRecord]:
        ...
