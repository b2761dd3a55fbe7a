#!/usr/bin/env python3
"""
Quality Models - Data structures for signals, scores and stored metrics.
"""

import uuid
from enum import Enum
from datetime import datetime
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Optional, Tuple

from core.quality.errors import ValidationError


class QualityLabel(str, Enum):
    LOW = "LOW"
    NORMAL = "NORMAL"
    HIGH = "HIGH"


class ComputedBy(str, Enum):
    """Who triggered a recompute. Persisted as computed_by for audit."""
    SYSTEM = "SYSTEM"
    CRON = "CRON"
    ADMIN = "ADMIN"

    @classmethod
    def parse(cls, value: Any) -> "ComputedBy":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        raise ValidationError(
            f"Invalid recompute source: {value!r}. Must be one of {[m.value for m in cls]}"
        )


SIGNAL_GROUPS = ("content", "behavior", "expert", "trust")


@dataclass(frozen=True)
class ContentSignals:
    char_count: int = 0
    word_count: int = 0
    keyword_hits: int = 0
    distinct_keywords: int = 0
    keyword_density: float = 0.0
    has_domain_keyword: bool = False
    matched_keywords: Tuple[str, ...] = ()
    has_list: bool = False
    has_paragraphs: bool = False
    punctuation_kinds: int = 0
    has_example: bool = False
    has_steps: bool = False
    is_generic: bool = False


@dataclass(frozen=True)
class BehaviorSignals:
    """Engagement on the answer. has_data=False is the neutral default set."""
    has_data: bool = False
    is_accepted: bool = False
    reaction_count: int = 0
    helpful_count: int = 0
    not_helpful_count: int = 0
    asker_helpful: bool = False
    view_count: int = 0
    minutes_to_first_reaction: Optional[float] = None


@dataclass(frozen=True)
class ExpertSignals:
    """Author track record. is_baseline=True is the new-author baseline set."""
    is_baseline: bool = True
    total_answers: int = 0
    accepted_answers: int = 0
    category_match: bool = False
    tenure_days: float = 0.0


@dataclass(frozen=True)
class TrustSignals:
    """Account trust. is_baseline=True when no account data was available."""
    is_baseline: bool = True
    is_verified: bool = False
    account_age_days: float = 0.0
    flag_count: int = 0
    # Minutes from question to answer; read from the answer, so never degraded
    response_time_minutes: Optional[float] = None


@dataclass(frozen=True)
class AllSignals:
    content: ContentSignals = field(default_factory=ContentSignals)
    behavior: BehaviorSignals = field(default_factory=BehaviorSignals)
    expert: ExpertSignals = field(default_factory=ExpertSignals)
    trust: TrustSignals = field(default_factory=TrustSignals)
    # Groups filled with defaults because their source failed
    degraded: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['content']['matched_keywords'] = list(self.content.matched_keywords)
        data['degraded'] = list(self.degraded)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AllSignals":
        content = dict(data.get('content') or {})
        content['matched_keywords'] = tuple(content.get('matched_keywords') or ())
        return cls(
            content=ContentSignals(**content),
            behavior=BehaviorSignals(**(data.get('behavior') or {})),
            expert=ExpertSignals(**(data.get('expert') or {})),
            trust=TrustSignals(**(data.get('trust') or {})),
            degraded=tuple(data.get('degraded') or ()),
        )


@dataclass(frozen=True)
class Subscores:
    content: float = 0.0
    behavior: float = 0.0
    expert: float = 0.0
    trust: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class AQSResult:
    """Output of the ScoreCalculator."""
    aqs: float
    label: QualityLabel
    subscores: Subscores
    engine_version: str
    breakdown: Dict[str, Dict[str, float]] = field(default_factory=dict)


@dataclass
class QualityMetrics:
    """The stored quality record for one answer."""
    answer_id: uuid.UUID
    aqs: float
    label: QualityLabel
    subscores: Subscores
    signals: Dict[str, Any]
    computed_at: datetime
    computed_by: ComputedBy
    engine_version: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'answer_id': str(self.answer_id),
            'aqs': self.aqs,
            'label': self.label.value,
            'subscores': self.subscores.to_dict(),
            'computed_at': self.computed_at.isoformat() if self.computed_at else None,
            'computed_by': self.computed_by.value,
            'engine_version': self.engine_version,
        }


@dataclass
class RecomputeOutcome:
    metrics: QualityMetrics
    previous_aqs: Optional[float] = None
    previous_label: Optional[QualityLabel] = None

    @property
    def changed(self) -> bool:
        return (
            self.previous_aqs != self.metrics.aqs
            or self.previous_label != self.metrics.label
        )


@dataclass
class BatchRecomputeResult:
    processed: int = 0
    updated: int = 0
    failed: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass
class DebugPayload:
    """Stored signal breakdown for one answer, as last computed."""
    answer_id: uuid.UUID
    aqs: float
    label: QualityLabel
    subscores: Subscores
    signals: Dict[str, Any]
    breakdown: Dict[str, Any]
    degraded: Tuple[str, ...]
    computed_at: datetime
    computed_by: ComputedBy
    engine_version: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'answer_id': str(self.answer_id),
            'aqs': self.aqs,
            'label': self.label.value,
            'subscores': self.subscores.to_dict(),
            'signals': self.signals,
            'breakdown': self.breakdown,
            'degraded': list(self.degraded),
            'computed_at': self.computed_at.isoformat() if self.computed_at else None,
            'computed_by': self.computed_by.value,
            'engine_version': self.engine_version,
        }


@dataclass
class AnswerQualityRow:
    """An answer joined with its stored score, for listings. Unscored answers read as 0/NORMAL."""
    answer_id: uuid.UUID
    question_id: uuid.UUID
    author_id: uuid.UUID
    body: str
    is_accepted: bool
    is_hidden: bool
    created_at: datetime
    helpful_count: int = 0
    aqs: float = 0.0
    label: QualityLabel = QualityLabel.NORMAL
    scored: bool = False
    author_name: Optional[str] = None
    question_title: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'answer_id': str(self.answer_id),
            'question_id': str(self.question_id),
            'author_id': str(self.author_id),
            'body': self.body,
            'is_accepted': self.is_accepted,
            'is_hidden': self.is_hidden,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'helpful_count': self.helpful_count,
            'aqs': self.aqs,
            'label': self.label.value,
            'scored': self.scored,
            'author_name': self.author_name,
            'question_title': self.question_title,
        }


def parse_answer_id(value: Any, name: str = "answer_id") -> uuid.UUID:
    """Validate and normalize an identifier to a UUID."""
    if isinstance(value, uuid.UUID):
        return value
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{name} must not be empty")
    try:
        return uuid.UUID(str(value).strip())
    except ValueError:
        raise ValidationError(f"Invalid {name} format: {value}. Must be a valid UUID.")
