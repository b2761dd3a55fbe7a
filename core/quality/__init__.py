#!/usr/bin/env python3
"""
Answer Quality Module - Answer Quality Score (AQS) engine.

Public API:
- AnswerQualityService (core.quality.service): Facade wiring the engine
  from configuration; imported from its module since it pulls in the
  database package
- ScoreCalculator: Pure scoring of extracted signals
- QualityMetrics / DebugPayload / BatchRecomputeResult: Operation results

Modules:

- models.py: Data structures (signals, subscores, metrics, payloads)
- keywords.py: Normalized domain keyword lookup
- sources.py: Interfaces to the repositories signals are read from
- signals.py: Per-group signal extraction with degradation
- calculator.py: Subscores, weighted AQS and label
- store.py: Metrics persistence (one row per answer)
- orchestrator.py: Single and batch recomputation
- debug.py: Stored signal breakdown for introspection
- service.py: AnswerQualityService facade
"""

from core.quality.errors import (
    QualityError,
    ValidationError,
    NotFoundError,
    UpstreamReadError,
    MetricsStoreError,
)
from core.quality.models import (
    QualityLabel,
    ComputedBy,
    AllSignals,
    QualityMetrics,
    BatchRecomputeResult,
    DebugPayload,
)
from core.quality.calculator import ScoreCalculator

__all__ = [
    'ScoreCalculator',
    'QualityLabel',
    'ComputedBy',
    'AllSignals',
    'QualityMetrics',
    'BatchRecomputeResult',
    'DebugPayload',
    'QualityError',
    'ValidationError',
    'NotFoundError',
    'UpstreamReadError',
    'MetricsStoreError',
]
