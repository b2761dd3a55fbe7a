#!/usr/bin/env python3
"""
Signal Extraction - Builds the four signal groups for one answer.

Each group has its own extractor function that never raises on missing data:
a source returning None yields the group's default set, and a source raising
UpstreamReadError degrades only that group. The degraded group names travel
with the signals into the stored snapshot.
"""

import re
import uuid
import logging
from typing import Callable, List, Optional, TypeVar
from datetime import datetime

from core.utils import utcnow, as_utc, days_between
from core.quality.errors import NotFoundError, UpstreamReadError
from core.quality.keywords import KeywordIndex, normalize
from core.quality.models import (
    AllSignals,
    BehaviorSignals,
    ContentSignals,
    ExpertSignals,
    TrustSignals,
)
from core.quality.sources import (
    AnswerRecord,
    AnswerSource,
    EngagementRecord,
    EngagementSource,
    ExpertiseRecord,
    ExpertiseSource,
    TrustRecord,
    TrustSource,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# ----------------------------
# Content patterns
# ----------------------------
_LIST_LINE_RE = re.compile(r"^\s*(?:[-*•●○▪]|\d+[.)])\s+\S", re.MULTILINE)
_NUMBERED_LINE_RE = re.compile(r"^\s*\d+[.)]\s+\S", re.MULTILINE)
_STEP_WORD_RE = re.compile(r"\b(?:step|stage|phase)\s*\d+", re.IGNORECASE)
_ORDINAL_RE = re.compile(r"\bfirst(?:ly)?\b.*\bsecond(?:ly)?\b", re.IGNORECASE | re.DOTALL)

PUNCTUATION_KINDS = frozenset(".,;:?!()\"'")

EXAMPLE_MARKERS = (
    "for example",
    "for instance",
    "e.g.",
    "such as",
    "suppose",
    "imagine",
    "example:",
    "in my case",
)

GENERIC_PHRASES = (
    "it depends",
    "hard to say",
    "good question",
    "you should check",
    "consult a professional",
    "in my personal opinion",
    "not sure",
    "can't say",
)

GENERIC_MAX_CHARS = 300


def extract_content_signals(body: Optional[str], keyword_index: KeywordIndex) -> ContentSignals:
    """Content signals are a pure function of the answer body."""
    body = body or ""
    lowered = normalize(body)

    char_count = len(body)
    word_count = len(body.split())

    match = keyword_index.match(body)

    has_list = bool(_LIST_LINE_RE.search(body))
    has_paragraphs = "\n\n" in body.strip() or body.strip().count("\n") >= 2
    punctuation_kinds = len(PUNCTUATION_KINDS.intersection(body))

    has_example = any(marker in lowered for marker in EXAMPLE_MARKERS)
    has_steps = (
        bool(_STEP_WORD_RE.search(body))
        or bool(_ORDINAL_RE.search(body))
        or len(_NUMBERED_LINE_RE.findall(body)) >= 2
    )

    has_generic_phrase = any(phrase in lowered for phrase in GENERIC_PHRASES)
    is_generic = (
        has_generic_phrase
        and char_count < GENERIC_MAX_CHARS
        and not has_steps
        and not has_example
    )

    return ContentSignals(
        char_count=char_count,
        word_count=word_count,
        keyword_hits=match.hits,
        distinct_keywords=match.distinct,
        keyword_density=round(match.density, 4),
        has_domain_keyword=match.hits > 0,
        matched_keywords=tuple(sorted(match.counts)),
        has_list=has_list,
        has_paragraphs=has_paragraphs,
        punctuation_kinds=punctuation_kinds,
        has_example=has_example,
        has_steps=has_steps,
        is_generic=is_generic,
    )


def extract_behavior_signals(
    answer: AnswerRecord,
    engagement: Optional[EngagementRecord]
) -> BehaviorSignals:
    """No engagement record means a neutral default, not a zero."""
    if engagement is None:
        return BehaviorSignals(has_data=False, is_accepted=answer.is_accepted)

    minutes_to_first_reaction = None
    if engagement.first_reaction_at is not None:
        delta = as_utc(engagement.first_reaction_at) - as_utc(answer.created_at)
        minutes_to_first_reaction = round(max(0.0, delta.total_seconds() / 60.0), 2)

    return BehaviorSignals(
        has_data=True,
        is_accepted=bool(engagement.accepted or answer.is_accepted),
        reaction_count=max(0, int(engagement.reaction_count or 0)),
        helpful_count=max(0, int(engagement.helpful_count or 0)),
        not_helpful_count=max(0, int(engagement.not_helpful_count or 0)),
        asker_helpful=bool(engagement.asker_helpful),
        view_count=max(0, int(engagement.views or 0)),
        minutes_to_first_reaction=minutes_to_first_reaction,
    )


def extract_expert_signals(
    answer: AnswerRecord,
    expertise: Optional[ExpertiseRecord],
    now: datetime
) -> ExpertSignals:
    """A new author (no record, no answers) gets the baseline set."""
    if expertise is None or (
        not expertise.total_answers and expertise.first_answer_at is None
    ):
        return ExpertSignals(is_baseline=True)

    category_match = False
    if expertise.top_category and answer.question_category:
        category_match = (
            normalize(expertise.top_category).strip()
            == normalize(answer.question_category).strip()
        )

    total_answers = max(0, int(expertise.total_answers or 0))
    accepted_answers = min(total_answers, max(0, int(expertise.accepted_answers or 0)))

    return ExpertSignals(
        is_baseline=False,
        total_answers=total_answers,
        accepted_answers=accepted_answers,
        category_match=category_match,
        tenure_days=round(days_between(expertise.first_answer_at, now), 2),
    )


def response_time_minutes(answer: AnswerRecord) -> Optional[float]:
    if answer.question_created_at is None:
        return None
    delta = as_utc(answer.created_at) - as_utc(answer.question_created_at)
    return round(max(0.0, delta.total_seconds() / 60.0), 2)


def extract_trust_signals(
    trust: Optional[TrustRecord],
    now: datetime,
    answer: Optional[AnswerRecord] = None
) -> TrustSignals:
    response_time = response_time_minutes(answer) if answer is not None else None
    if trust is None:
        return TrustSignals(is_baseline=True, response_time_minutes=response_time)

    return TrustSignals(
        is_baseline=False,
        is_verified=bool(trust.is_verified),
        account_age_days=round(days_between(trust.created_at, now), 2),
        flag_count=max(0, int(trust.flag_count or 0)),
        response_time_minutes=response_time,
    )


class SignalExtractor:
    """
    Pulls the four signal groups for one answer from the source repositories.

    The clock is injected so account ages and tenure are reproducible in tests.
    """

    def __init__(
        self,
        answers: AnswerSource,
        engagement: EngagementSource,
        expertise: ExpertiseSource,
        trust: TrustSource,
        keyword_index: KeywordIndex,
        clock: Callable[[], datetime] = utcnow
    ):
        self.answers = answers
        self.engagement = engagement
        self.expertise = expertise
        self.trust = trust
        self.keyword_index = keyword_index
        self.clock = clock

    def load_answer(self, answer_id: uuid.UUID) -> AnswerRecord:
        """Load the answer or raise NotFoundError. The answer body is not optional."""
        answer = self.answers.get_answer(answer_id)
        if answer is None:
            raise NotFoundError(f"Answer {answer_id} not found")
        return answer

    def extract(self, answer: AnswerRecord) -> AllSignals:
        now = self.clock()
        degraded: List[str] = []

        content = extract_content_signals(answer.body, self.keyword_index)

        engagement = self._read_group(
            "behavior", answer.id, degraded,
            lambda: self.engagement.get_engagement(answer.id)
        )
        expertise = self._read_group(
            "expert", answer.id, degraded,
            lambda: self.expertise.get_author_expertise(answer.author_id)
        )
        trust = self._read_group(
            "trust", answer.id, degraded,
            lambda: self.trust.get_account_trust(answer.author_id)
        )

        return AllSignals(
            content=content,
            behavior=extract_behavior_signals(answer, engagement),
            expert=extract_expert_signals(answer, expertise, now),
            trust=extract_trust_signals(trust, now, answer),
            degraded=tuple(degraded),
        )

    def extract_for(self, answer_id: uuid.UUID) -> AllSignals:
        return self.extract(self.load_answer(answer_id))

    @staticmethod
    def _read_group(
        group: str,
        answer_id: uuid.UUID,
        degraded: List[str],
        read: Callable[[], Optional[T]]
    ) -> Optional[T]:
        try:
            return read()
        except UpstreamReadError as e:
            logger.warning(f"Degrading {group} signals for answer {answer_id}: {e}")
            degraded.append(group)
            return None
