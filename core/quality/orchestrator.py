#!/usr/bin/env python3
"""
Recompute Orchestrator - Drives single-answer and batch recomputation.

Single recompute: validate id -> load answer -> extract -> score -> upsert.

Batch recompute runs the same pipeline for every selected answer on a
bounded thread pool. A failing answer is logged and counted as failed; it
never stops the rest of the batch. A MetricsStoreError is different: the
store itself is broken, so the batch aborts and the error propagates to the
caller (cron or CLI).
"""

import logging
import uuid
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Iterable, Union

from core.quality.calculator import ScoreCalculator
from core.quality.errors import MetricsStoreError, ValidationError
from core.quality.models import (
    BatchRecomputeResult,
    ComputedBy,
    QualityMetrics,
    RecomputeOutcome,
    parse_answer_id,
)
from core.quality.signals import SignalExtractor
from core.quality.store import MetricsStore

logger = logging.getLogger(__name__)

IdLike = Union[str, uuid.UUID]


class RecomputeOrchestrator:
    def __init__(
        self,
        extractor: SignalExtractor,
        calculator: ScoreCalculator,
        store: MetricsStore,
        max_workers: int = 4,
        max_limit: int = 1000
    ):
        self.extractor = extractor
        self.calculator = calculator
        self.store = store
        self.max_workers = max(1, max_workers)
        self.max_limit = max_limit

    def recompute_one(self, answer_id: IdLike, source: Union[str, ComputedBy] = ComputedBy.SYSTEM) -> QualityMetrics:
        """
        Recompute and store the AQS for one answer.

        Raises:
            ValidationError: malformed id or source
            NotFoundError: the answer does not exist
            MetricsStoreError: the metrics store failed
        """
        return self._recompute(parse_answer_id(answer_id), ComputedBy.parse(source)).metrics

    def batch_recompute_stale(
        self,
        max_age_days: float,
        limit: int,
        source: Union[str, ComputedBy] = ComputedBy.CRON
    ) -> BatchRecomputeResult:
        """Recompute up to `limit` answers whose metrics are missing or older than max_age_days."""
        if max_age_days is None or max_age_days < 0:
            raise ValidationError(f"max_age_days must be >= 0, got {max_age_days}")
        if limit is None or limit < 1 or limit > self.max_limit:
            raise ValidationError(f"limit must be between 1 and {self.max_limit}, got {limit}")
        source = ComputedBy.parse(source)

        answer_ids = self.store.list_stale(max_age_days, limit)
        logger.info(f"Found {len(answer_ids)} stale answers (max_age_days={max_age_days}, limit={limit})")
        return self._run_batch(answer_ids, source)

    def recompute_question(
        self,
        question_id: IdLike,
        source: Union[str, ComputedBy] = ComputedBy.SYSTEM
    ) -> BatchRecomputeResult:
        """Recompute every answer of a question, e.g. after one of them is accepted."""
        question_id = parse_answer_id(question_id, name="question_id")
        answer_ids = self.extractor.answers.list_answer_ids_for_question(question_id)
        logger.info(f"Recomputing {len(answer_ids)} answers for question {question_id}")
        return self._run_batch(answer_ids, ComputedBy.parse(source))

    def recompute_author(
        self,
        author_id: IdLike,
        source: Union[str, ComputedBy] = ComputedBy.SYSTEM
    ) -> BatchRecomputeResult:
        """Recompute every answer by an author, e.g. after verification or a new flag."""
        author_id = parse_answer_id(author_id, name="author_id")
        answer_ids = self.extractor.answers.list_answer_ids_for_author(author_id)
        logger.info(f"Recomputing {len(answer_ids)} answers for author {author_id}")
        return self._run_batch(answer_ids, ComputedBy.parse(source))

    def _recompute(self, answer_id: uuid.UUID, source: ComputedBy) -> RecomputeOutcome:
        answer = self.extractor.load_answer(answer_id)
        signals = self.extractor.extract(answer)
        result = self.calculator.compute(signals)

        previous = self.store.find(answer_id)
        metrics = self.store.upsert(answer_id, result, source, signals)

        return RecomputeOutcome(
            metrics=metrics,
            previous_aqs=previous.aqs if previous else None,
            previous_label=previous.label if previous else None,
        )

    def _run_batch(self, answer_ids: Iterable[uuid.UUID], source: ComputedBy) -> BatchRecomputeResult:
        answer_ids = list(answer_ids)
        result = BatchRecomputeResult()
        if not answer_ids:
            return result

        workers = min(self.max_workers, len(answer_ids))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="aqs-recompute") as executor:
            futures = {
                executor.submit(self._recompute, answer_id, source): answer_id
                for answer_id in answer_ids
            }
            for future in as_completed(futures):
                answer_id = futures[future]
                try:
                    outcome = future.result()
                except MetricsStoreError:
                    logger.error(f"Metrics store failed while recomputing answer {answer_id}; aborting batch")
                    for pending in futures:
                        pending.cancel()
                    raise
                except Exception as e:
                    result.failed += 1
                    logger.error(f"Failed to recompute answer {answer_id}: {e}", exc_info=True)
                    continue

                result.processed += 1
                if outcome.changed:
                    result.updated += 1

        logger.info(
            f"Batch recompute ({source.value}) complete: processed={result.processed}, "
            f"updated={result.updated}, failed={result.failed}"
        )
        return result
