#!/usr/bin/env python3
"""
Unit tests for RecomputeOrchestrator: single recompute, batch isolation and abort.
"""

import threading
import unittest
import uuid
from datetime import datetime, timezone
from unittest.mock import MagicMock

from core.quality.calculator import ScoreCalculator
from core.quality.errors import (
    MetricsStoreError,
    NotFoundError,
    UpstreamReadError,
    ValidationError,
)
from core.quality.models import (
    AllSignals,
    ComputedBy,
    ContentSignals,
    QualityLabel,
    QualityMetrics,
)
from core.quality.orchestrator import RecomputeOrchestrator
from core.quality.sources import AnswerRecord

NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


class InMemoryStore:
    """Dict-backed stand-in for MetricsStore."""

    def __init__(self, stale=None):
        self.rows = {}
        self.stale = list(stale or [])
        self.upserts = []
        self.lock = threading.Lock()

    def find(self, answer_id):
        return self.rows.get(answer_id)

    def upsert(self, answer_id, result, source, signals=None):
        metrics = QualityMetrics(
            answer_id=answer_id,
            aqs=result.aqs,
            label=result.label,
            subscores=result.subscores,
            signals={'signals': signals.to_dict() if signals else {}, 'breakdown': result.breakdown},
            computed_at=NOW,
            computed_by=source,
            engine_version=result.engine_version,
        )
        with self.lock:
            self.rows[answer_id] = metrics
            self.upserts.append((answer_id, source))
        return metrics

    def list_stale(self, max_age_days, limit):
        return self.stale[:limit]


def make_extractor(fail_ids=(), missing_ids=()):
    extractor = MagicMock()

    def load_answer(answer_id):
        if answer_id in missing_ids:
            raise NotFoundError(f"Answer {answer_id} not found")
        if answer_id in fail_ids:
            raise UpstreamReadError("answers", "connection reset")
        return AnswerRecord(
            id=answer_id,
            body="body",
            author_id=uuid.uuid4(),
            question_id=uuid.uuid4(),
            created_at=NOW,
        )

    extractor.load_answer.side_effect = load_answer
    extractor.extract.return_value = AllSignals(content=ContentSignals(word_count=5))
    return extractor


class TestRecomputeOne(unittest.TestCase):

    def setUp(self):
        self.store = InMemoryStore()
        self.extractor = make_extractor()
        self.orchestrator = RecomputeOrchestrator(self.extractor, ScoreCalculator(), self.store, max_workers=2)

    def test_recompute_one_stores_metrics_tagged_with_source(self):
        answer_id = uuid.uuid4()

        metrics = self.orchestrator.recompute_one(str(answer_id), "admin")

        self.assertEqual(metrics.answer_id, answer_id)
        self.assertEqual(metrics.computed_by, ComputedBy.ADMIN)
        self.assertEqual(metrics.label, QualityLabel.LOW)
        self.assertEqual(self.store.upserts, [(answer_id, ComputedBy.ADMIN)])

    def test_recompute_one_rejects_invalid_id(self):
        for bad in ("", "   ", "not-a-uuid", None):
            with self.assertRaises(ValidationError):
                self.orchestrator.recompute_one(bad)
        self.extractor.load_answer.assert_not_called()

    def test_recompute_one_rejects_unknown_source(self):
        with self.assertRaises(ValidationError):
            self.orchestrator.recompute_one(uuid.uuid4(), "USER")

    def test_recompute_one_missing_answer(self):
        missing = uuid.uuid4()
        orchestrator = RecomputeOrchestrator(make_extractor(missing_ids={missing}), ScoreCalculator(), self.store)
        with self.assertRaises(NotFoundError):
            orchestrator.recompute_one(missing)
        self.assertEqual(self.store.rows, {})


class TestBatchRecompute(unittest.TestCase):

    def test_01_counts_processed_and_updated(self):
        """First run creates every row (all updated); second run changes nothing."""
        print("\n📊 UNIT Test 1: Batch processed/updated counters")

        ids = [uuid.uuid4() for _ in range(5)]
        store = InMemoryStore(stale=ids)
        orchestrator = RecomputeOrchestrator(make_extractor(), ScoreCalculator(), store, max_workers=3)

        first = orchestrator.batch_recompute_stale(7, 100)
        self.assertEqual((first.processed, first.updated, first.failed), (5, 5, 0))

        second = orchestrator.batch_recompute_stale(7, 100)
        self.assertEqual((second.processed, second.updated, second.failed), (5, 0, 0))

        print(f"  ✓ First run: {first.to_dict()}")
        print(f"  ✓ Second run: {second.to_dict()}")

    def test_02_failing_item_is_isolated(self):
        """One failing answer is counted as failed and the rest still run."""
        print("\n📊 UNIT Test 2: Per-item failure isolation")

        ids = [uuid.uuid4() for _ in range(4)]
        bad = {ids[1], ids[3]}
        store = InMemoryStore(stale=ids)
        orchestrator = RecomputeOrchestrator(make_extractor(fail_ids=bad), ScoreCalculator(), store, max_workers=2)

        result = orchestrator.batch_recompute_stale(7, 100)

        self.assertEqual(result.processed, 2)
        self.assertEqual(result.updated, 2)
        self.assertEqual(result.failed, 2)
        self.assertEqual(set(store.rows), set(ids) - bad)

        print(f"  ✓ Result: {result.to_dict()}")

    def test_03_store_failure_aborts_batch(self):
        ids = [uuid.uuid4() for _ in range(3)]
        store = InMemoryStore(stale=ids)
        store.upsert = MagicMock(side_effect=MetricsStoreError("disk full"))
        orchestrator = RecomputeOrchestrator(make_extractor(), ScoreCalculator(), store, max_workers=1)

        with self.assertRaises(MetricsStoreError):
            orchestrator.batch_recompute_stale(7, 100)

    def test_04_processed_never_exceeds_limit(self):
        ids = [uuid.uuid4() for _ in range(10)]
        store = InMemoryStore(stale=ids)
        orchestrator = RecomputeOrchestrator(make_extractor(), ScoreCalculator(), store)

        result = orchestrator.batch_recompute_stale(7, 4)

        self.assertLessEqual(result.processed, 4)
        self.assertEqual(set(store.rows), set(ids[:4]))

    def test_05_batch_is_tagged_cron(self):
        ids = [uuid.uuid4()]
        store = InMemoryStore(stale=ids)
        orchestrator = RecomputeOrchestrator(make_extractor(), ScoreCalculator(), store)

        orchestrator.batch_recompute_stale(7, 10)

        self.assertEqual(store.upserts, [(ids[0], ComputedBy.CRON)])

    def test_06_empty_batch(self):
        orchestrator = RecomputeOrchestrator(make_extractor(), ScoreCalculator(), InMemoryStore())
        result = orchestrator.batch_recompute_stale(7, 100)
        self.assertEqual(result.to_dict(), {'processed': 0, 'updated': 0, 'failed': 0})

    def test_07_invalid_parameters(self):
        orchestrator = RecomputeOrchestrator(make_extractor(), ScoreCalculator(), InMemoryStore(), max_limit=50)
        with self.assertRaises(ValidationError):
            orchestrator.batch_recompute_stale(-1, 10)
        with self.assertRaises(ValidationError):
            orchestrator.batch_recompute_stale(7, 0)
        with self.assertRaises(ValidationError):
            orchestrator.batch_recompute_stale(7, 51)

    def test_08_label_change_counts_as_update(self):
        answer_id = uuid.uuid4()
        store = InMemoryStore(stale=[answer_id])
        extractor = make_extractor()
        orchestrator = RecomputeOrchestrator(extractor, ScoreCalculator(), store)

        orchestrator.batch_recompute_stale(7, 10)
        extractor.extract.return_value = AllSignals(content=ContentSignals(word_count=150))
        result = orchestrator.batch_recompute_stale(7, 10)

        self.assertEqual(result.updated, 1)


class TestRecomputeGroups(unittest.TestCase):

    def setUp(self):
        self.ids = [uuid.uuid4() for _ in range(3)]
        self.extractor = make_extractor()
        self.extractor.answers.list_answer_ids_for_question.return_value = self.ids
        self.extractor.answers.list_answer_ids_for_author.return_value = self.ids[:2]
        self.store = InMemoryStore()
        self.orchestrator = RecomputeOrchestrator(self.extractor, ScoreCalculator(), self.store)

    def test_recompute_question(self):
        question_id = uuid.uuid4()
        result = self.orchestrator.recompute_question(str(question_id))

        self.extractor.answers.list_answer_ids_for_question.assert_called_once_with(question_id)
        self.assertEqual(result.processed, 3)
        self.assertEqual(set(self.store.rows), set(self.ids))

    def test_recompute_author(self):
        author_id = uuid.uuid4()
        result = self.orchestrator.recompute_author(author_id, ComputedBy.ADMIN)

        self.extractor.answers.list_answer_ids_for_author.assert_called_once_with(author_id)
        self.assertEqual(result.processed, 2)
        self.assertTrue(all(source == ComputedBy.ADMIN for _, source in self.store.upserts))

    def test_invalid_question_id(self):
        with self.assertRaises(ValidationError):
            self.orchestrator.recompute_question("nope")


if __name__ == '__main__':
    unittest.main()
