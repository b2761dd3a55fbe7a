#!/usr/bin/env python3
"""
Answer Quality Score (AQS) v1.0

Key behavior:
- Each signal group is normalized to a 0-100 subscore by saturating rules:
  a quantity earns points linearly up to its cap, then stays flat.
- Content keyword points count distinct keywords only; keyword density above
  the stuffing ceiling costs points instead of earning them.
- Behavior with no engagement data scores the neutral subscore (or the
  accepted bonus if higher), never zero. With data, helpful reactions earn
  points and not-helpful reactions cost points, up to a cap.
- aqs = sum(weight_g * subscore_g), rounded to 2 decimals, clamped to [0, 100].
- label: HIGH if aqs >= high, LOW if aqs <= low, NORMAL otherwise.

Everything here is deterministic: no I/O, no clock, no randomness. All
constants come from the ScoringProfile passed at construction.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

from core.config_loader import (
    BehaviorRules,
    ContentRules,
    ExpertRules,
    ScoringProfile,
    TrustRules,
)
from core.utils import clamp
from core.quality.models import (
    AllSignals,
    AQSResult,
    BehaviorSignals,
    ContentSignals,
    ExpertSignals,
    QualityLabel,
    Subscores,
    TrustSignals,
)

logger = logging.getLogger(__name__)

Breakdown = Dict[str, float]


# ----------------------------
# Helpers
# ----------------------------
def _saturate(value: float, cap: float) -> float:
    """Fraction of the cap reached, in [0, 1]."""
    if cap <= 0:
        return 0.0
    return clamp(float(value) / float(cap), 0.0, 1.0)


def _clamp100(x: float) -> float:
    return clamp(x, 0.0, 100.0)


def _finish(parts: Breakdown) -> Tuple[float, Breakdown]:
    score = round(_clamp100(sum(parts.values())), 2)
    return score, {k: round(v, 2) for k, v in parts.items()}


# ----------------------------
# Group scores
# ----------------------------
def score_content(signals: ContentSignals, rules: ContentRules) -> Tuple[float, Breakdown]:
    parts = {
        'length': rules.length_points * _saturate(signals.word_count, rules.length_cap_words),
        'keywords': rules.keyword_points * _saturate(signals.distinct_keywords, rules.keyword_cap),
        'keyword_stuffing': -rules.stuffing_penalty if signals.keyword_density > rules.stuffing_density else 0.0,
        'list': rules.list_points if signals.has_list else 0.0,
        'paragraphs': rules.paragraph_points if signals.has_paragraphs else 0.0,
        'punctuation': rules.punctuation_points if signals.punctuation_kinds >= rules.punctuation_kinds else 0.0,
        'example': rules.example_points if signals.has_example else 0.0,
        'steps': rules.steps_points if signals.has_steps else 0.0,
        'generic': -rules.generic_penalty if signals.is_generic else 0.0,
    }
    return _finish(parts)


def score_behavior(signals: BehaviorSignals, rules: BehaviorRules) -> Tuple[float, Breakdown]:
    accepted = rules.accepted_points if signals.is_accepted else 0.0

    if not signals.has_data:
        # Missing engagement is not evidence of low quality
        neutral = max(rules.neutral_score, accepted)
        return _finish({'neutral': neutral})

    first_reaction = 0.0
    if signals.helpful_count and signals.minutes_to_first_reaction is not None:
        remaining = 1.0 - signals.minutes_to_first_reaction / rules.first_reaction_window_minutes
        first_reaction = rules.first_reaction_points * clamp(remaining, 0.0, 1.0)

    parts = {
        'accepted': accepted,
        'helpful': rules.helpful_points * _saturate(signals.helpful_count, rules.helpful_cap),
        'not_helpful': (
            -min(signals.not_helpful_count * rules.not_helpful_penalty, rules.not_helpful_penalty_cap)
            if signals.not_helpful_count else 0.0
        ),
        'asker_helpful': rules.asker_helpful_points if signals.asker_helpful else 0.0,
        'views': rules.view_points * _saturate(signals.view_count, rules.view_cap),
        'first_reaction': first_reaction,
    }
    return _finish(parts)


def score_expert(signals: ExpertSignals, rules: ExpertRules) -> Tuple[float, Breakdown]:
    acceptance_rate = 0.0
    if signals.total_answers > 0:
        acceptance_rate = signals.accepted_answers / signals.total_answers

    parts = {
        'volume': rules.volume_points * _saturate(signals.total_answers, rules.volume_cap),
        'category_match': rules.category_match_points if signals.category_match else 0.0,
        'tenure': rules.tenure_points * _saturate(signals.tenure_days, rules.tenure_cap_days),
        'acceptance_rate': rules.acceptance_points * _saturate(acceptance_rate, rules.acceptance_rate_cap),
    }
    return _finish(parts)


def score_response_time(minutes: Optional[float], rules: TrustRules) -> float:
    if minutes is None:
        return 0.0
    if minutes < rules.fast_response_minutes:
        return rules.fast_response_points
    if minutes < rules.medium_response_minutes:
        return rules.medium_response_points
    return 0.0


def score_trust(signals: TrustSignals, rules: TrustRules) -> Tuple[float, Breakdown]:
    parts = {
        'verified': rules.verified_points if signals.is_verified else 0.0,
        'account_age': rules.age_points * _saturate(signals.account_age_days, rules.age_cap_days),
        'clean_record': rules.clean_record_points if signals.flag_count == 0 else 0.0,
        'flags': -min(signals.flag_count * rules.flag_penalty, rules.flag_penalty_cap) if signals.flag_count else 0.0,
        'response_time': score_response_time(signals.response_time_minutes, rules),
    }
    return _finish(parts)


class ScoreCalculator:
    """
    Combines the four signal groups into an AQS and a label.

    The profile is immutable; use a different ScoreCalculator instance for a
    different profile.
    """

    def __init__(self, profile: Optional[ScoringProfile] = None):
        self.profile = profile if profile is not None else ScoringProfile()

    @property
    def engine_version(self) -> str:
        return self.profile.version

    def label_for(self, aqs: float) -> QualityLabel:
        thresholds = self.profile.thresholds
        if aqs >= thresholds.high:
            return QualityLabel.HIGH
        if aqs <= thresholds.low:
            return QualityLabel.LOW
        return QualityLabel.NORMAL

    def compute(self, signals: AllSignals) -> AQSResult:
        profile = self.profile

        content, content_parts = score_content(signals.content, profile.content)
        behavior, behavior_parts = score_behavior(signals.behavior, profile.behavior)
        expert, expert_parts = score_expert(signals.expert, profile.expert)
        trust, trust_parts = score_trust(signals.trust, profile.trust)

        subscores = Subscores(content=content, behavior=behavior, expert=expert, trust=trust)

        weights = profile.weights
        weighted = (
            weights.content * content
            + weights.behavior * behavior
            + weights.expert * expert
            + weights.trust * trust
        )
        aqs = round(_clamp100(weighted), 2)
        label = self.label_for(aqs)

        logger.debug(
            f"AQS={aqs:.2f} ({label.value}): content={content:.1f}, behavior={behavior:.1f}, "
            f"expert={expert:.1f}, trust={trust:.1f}"
        )

        return AQSResult(
            aqs=aqs,
            label=label,
            subscores=subscores,
            engine_version=profile.version,
            breakdown={
                'content': content_parts,
                'behavior': behavior_parts,
                'expert': expert_parts,
                'trust': trust_parts,
            },
        )
