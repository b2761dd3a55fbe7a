#!/usr/bin/env python3
"""
AnswerRepository listing tests: per-question ranking and the admin overview.
"""

import uuid
from datetime import timedelta

from core.quality.models import QualityLabel
from database.models import Answer, AnswerReaction, User
from database.repositories.answer import AnswerRepository
from database.repositories.quality_metrics import QualityMetricsRepository
from tests import FIXED_NOW, seed_answer

SUBSCORES = {'content': 50.0, 'behavior': 50.0, 'expert': 50.0, 'trust': 50.0}


def _score(session, answer_id, aqs, label):
    QualityMetricsRepository(session).upsert(
        answer_id=answer_id,
        aqs=aqs,
        label=label,
        subscores=SUBSCORES,
        signals={'signals': {}, 'breakdown': {}},
        computed_at=FIXED_NOW,
        computed_by="SYSTEM",
        engine_version="aqs-1.0",
    )


def _seed_question(session):
    """One question with answers covering every ranking rule. Returns ids by role."""
    accepted = seed_answer(session, is_accepted=True, created_at=FIXED_NOW - timedelta(days=5))
    question = accepted.question

    def answer(days_ago):
        return seed_answer(session, question=question, created_at=FIXED_NOW - timedelta(days=days_ago))

    high = answer(4)
    tie_old = answer(3)
    tie_new = answer(2)
    low = answer(1)
    unscored = answer(0.5)
    hidden = answer(0.25)
    hidden.is_hidden = True
    session.flush()

    _score(session, accepted.id, 40.0, "NORMAL")
    _score(session, high.id, 90.0, "HIGH")
    _score(session, tie_old.id, 50.0, "NORMAL")
    _score(session, tie_new.id, 50.0, "NORMAL")
    _score(session, low.id, 20.0, "LOW")
    _score(session, hidden.id, 99.0, "HIGH")

    for reaction_type in ("helpful", "helpful", "not_helpful"):
        voter = User(id=uuid.uuid4(), email=f"{uuid.uuid4().hex}@example.com", created_at=FIXED_NOW)
        session.add(voter)
        session.flush()
        session.add(AnswerReaction(answer_id=high.id, user_id=voter.id, reaction_type=reaction_type))

    session.commit()
    return question.id, {
        'accepted': accepted.id,
        'high': high.id,
        'tie_old': tie_old.id,
        'tie_new': tie_new.id,
        'low': low.id,
        'unscored': unscored.id,
        'hidden': hidden.id,
    }


def test_ranked_answers_order(session_factory):
    with session_factory() as session:
        question_id, ids = _seed_question(session)

    with session_factory() as session:
        rows = AnswerRepository(session).list_ranked_for_question(question_id)

    assert [row.answer_id for row in rows] == [
        ids['accepted'], ids['high'], ids['tie_new'], ids['tie_old'], ids['low'], ids['unscored'],
    ]
    assert ids['hidden'] not in {row.answer_id for row in rows}


def test_ranked_answers_defaults_and_counts(session_factory):
    with session_factory() as session:
        question_id, ids = _seed_question(session)

    with session_factory() as session:
        rows = {row.answer_id: row for row in AnswerRepository(session).list_ranked_for_question(question_id)}

    unscored = rows[ids['unscored']]
    assert (unscored.aqs, unscored.label, unscored.scored) == (0.0, QualityLabel.NORMAL, False)

    high = rows[ids['high']]
    assert (high.aqs, high.label, high.scored) == (90.0, QualityLabel.HIGH, True)
    assert high.helpful_count == 2
    assert rows[ids['low']].helpful_count == 0


def test_ranked_answers_unknown_question(session_factory):
    with session_factory() as session:
        assert AnswerRepository(session).list_ranked_for_question(uuid.uuid4()) == []


def test_recent_answers_listing(session_factory):
    with session_factory() as session:
        _, ids = _seed_question(session)
        low_author_id = session.get(Answer, ids['low']).author_id
        session.get(User, low_author_id).display_name = "Sara"
        session.commit()

    with session_factory() as session:
        rows = AnswerRepository(session).list_recent_with_quality(limit=3)

    # Newest first, hidden answers included
    assert [row.answer_id for row in rows] == [ids['hidden'], ids['unscored'], ids['low']]
    assert rows[0].is_hidden is True
    assert rows[0].aqs == 99.0
    assert rows[1].scored is False
    assert rows[2].question_title == "How should I negotiate?"
    assert rows[2].author_name == "Sara"
    assert rows[1].author_name is None
