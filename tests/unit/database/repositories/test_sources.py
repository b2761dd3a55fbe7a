#!/usr/bin/env python3
"""
Tests for the SQL-backed signal sources and the repositories behind them.
"""

import uuid
from datetime import timedelta
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from core.quality.errors import UpstreamReadError
from database.models import AnswerFlag, AnswerReaction, User, UserExpertiseStats
from database.repositories.sources import (
    SqlAnswerSource,
    SqlEngagementSource,
    SqlExpertiseSource,
    SqlTrustSource,
)
from tests import FIXED_NOW, seed_answer


def _user(session, **kwargs):
    user = User(id=uuid.uuid4(), email=f"{uuid.uuid4().hex}@example.com", created_at=FIXED_NOW, **kwargs)
    session.add(user)
    session.flush()
    return user


def test_get_answer_includes_question_context(session_factory):
    with session_factory() as session:
        answer = seed_answer(session, category="Legal", is_accepted=True)
        session.commit()
        expected = (answer.id, answer.author_id, answer.question_id)
        question_created_at = answer.question.created_at

    record = SqlAnswerSource(session_factory).get_answer(expected[0])

    assert (record.id, record.author_id, record.question_id) == expected
    assert record.question_category == "Legal"
    assert record.question_created_at.replace(tzinfo=None) == question_created_at.replace(tzinfo=None)
    assert record.is_accepted is True
    assert record.is_hidden is False
    assert SqlAnswerSource(session_factory).get_answer(uuid.uuid4()) is None


def test_list_answer_ids(session_factory):
    with session_factory() as session:
        first = seed_answer(session, created_at=FIXED_NOW - timedelta(days=2))
        second = seed_answer(session, question=first.question, created_at=FIXED_NOW - timedelta(days=1))
        session.commit()
        question_id, author_id = first.question_id, first.author_id
        ids = [first.id, second.id]

    source = SqlAnswerSource(session_factory)
    assert source.list_answer_ids_for_question(question_id) == ids
    assert source.list_answer_ids_for_author(author_id) == ids[:1]
    assert source.list_answer_ids_for_question(uuid.uuid4()) == []


def test_engagement_aggregates_reactions(session_factory):
    with session_factory() as session:
        answer = seed_answer(session, view_count=42)
        asker_id = answer.question.author_id
        other = _user(session)
        session.add_all([
            AnswerReaction(answer_id=answer.id, user_id=asker_id, reaction_type="helpful",
                           created_at=FIXED_NOW - timedelta(days=1)),
            AnswerReaction(answer_id=answer.id, user_id=other.id, reaction_type="not_helpful",
                           created_at=FIXED_NOW - timedelta(days=3)),
        ])
        session.commit()
        answer_id = answer.id

    engagement = SqlEngagementSource(session_factory).get_engagement(answer_id)

    assert engagement.views == 42
    assert engagement.reaction_count == 2
    assert engagement.helpful_count == 1
    assert engagement.not_helpful_count == 1
    assert engagement.asker_helpful is True
    # Earlier not-helpful reaction does not count as the first reaction
    assert engagement.first_reaction_at.replace(tzinfo=None) == (FIXED_NOW - timedelta(days=1)).replace(tzinfo=None)


def test_engagement_only_not_helpful(session_factory):
    with session_factory() as session:
        answer = seed_answer(session)
        voter = _user(session)
        session.add(AnswerReaction(answer_id=answer.id, user_id=voter.id, reaction_type="not_helpful"))
        session.commit()
        answer_id = answer.id

    engagement = SqlEngagementSource(session_factory).get_engagement(answer_id)

    assert engagement.not_helpful_count == 1
    assert engagement.helpful_count == 0
    assert engagement.first_reaction_at is None


def test_untouched_answer_has_no_engagement(session_factory):
    with session_factory() as session:
        answer_id = seed_answer(session).id
        session.commit()

    assert SqlEngagementSource(session_factory).get_engagement(answer_id) is None
    assert SqlEngagementSource(session_factory).get_engagement(uuid.uuid4()) is None


def test_views_or_acceptance_alone_count_as_engagement(session_factory):
    with session_factory() as session:
        viewed_id = seed_answer(session, view_count=3).id
        accepted_id = seed_answer(session, is_accepted=True).id
        session.commit()

    viewed = SqlEngagementSource(session_factory).get_engagement(viewed_id)
    accepted = SqlEngagementSource(session_factory).get_engagement(accepted_id)

    assert (viewed.views, viewed.reaction_count, viewed.accepted) == (3, 0, False)
    assert (accepted.views, accepted.accepted) == (0, True)


def test_expertise(session_factory):
    with session_factory() as session:
        user = _user(session)
        session.add(UserExpertiseStats(user_id=user.id, total_answers=12, accepted_answers=3, top_category="tax"))
        session.commit()
        user_id = user.id

    expertise = SqlExpertiseSource(session_factory).get_author_expertise(user_id)

    assert expertise.total_answers == 12
    assert expertise.accepted_answers == 3
    assert expertise.top_category == "tax"
    assert SqlExpertiseSource(session_factory).get_author_expertise(uuid.uuid4()) is None


def test_trust_counts_flags_on_all_author_answers(session_factory):
    with session_factory() as session:
        first = seed_answer(session)
        author = session.get(User, first.author_id)
        author.is_verified = True
        second = seed_answer(session, author=author)
        reporter = _user(session)
        session.add_all([
            AnswerFlag(answer_id=first.id, user_id=reporter.id, reason="spam"),
            AnswerFlag(answer_id=second.id, user_id=reporter.id, reason="off-topic"),
        ])
        session.commit()
        author_id = author.id

    trust = SqlTrustSource(session_factory).get_account_trust(author_id)

    assert trust.is_verified is True
    assert trust.flag_count == 2
    assert trust.created_at is not None


def test_trust_ignores_deleted_accounts(session_factory):
    with session_factory() as session:
        user = _user(session, deleted_at=FIXED_NOW)
        session.commit()
        user_id = user.id

    assert SqlTrustSource(session_factory).get_account_trust(user_id) is None


@patch("tenacity.nap.time.sleep", MagicMock())
def test_operational_errors_are_retried_then_raised_as_upstream(session_factory):
    broken = MagicMock(side_effect=OperationalError("SELECT 1", {}, Exception("server closed the connection")))
    source = SqlExpertiseSource(broken)

    with pytest.raises(UpstreamReadError) as excinfo:
        source.get_author_expertise(uuid.uuid4())

    assert broken.call_count == 3
    assert excinfo.value.source == "expertise"


@patch("tenacity.nap.time.sleep", MagicMock())
def test_transient_error_recovers(session_factory):
    calls = {"n": 0}

    def flaky():
        calls["n"] += 1
        if calls["n"] == 1:
            raise OperationalError("SELECT 1", {}, Exception("connection reset"))
        return session_factory()

    with session_factory() as session:
        user = _user(session)
        session.add(UserExpertiseStats(user_id=user.id, total_answers=1))
        session.commit()
        user_id = user.id

    expertise = SqlExpertiseSource(flaky).get_author_expertise(user_id)

    assert expertise.total_answers == 1
    assert calls["n"] == 2
