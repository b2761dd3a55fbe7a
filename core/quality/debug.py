#!/usr/bin/env python3
"""
Debug Inspector - Read-only view of the stored signal breakdown.

Returns what was persisted at the last recompute. It never recomputes, so the
payload always matches the stored aqs and label.
"""

from typing import Union
import uuid

from core.quality.models import DebugPayload, parse_answer_id
from core.quality.store import MetricsStore


class DebugInspector:
    def __init__(self, store: MetricsStore):
        self.store = store

    def get_debug(self, answer_id: Union[str, uuid.UUID]) -> DebugPayload:
        metrics = self.store.get(parse_answer_id(answer_id))
        snapshot = metrics.signals or {}
        signals = snapshot.get('signals') or {}

        return DebugPayload(
            answer_id=metrics.answer_id,
            aqs=metrics.aqs,
            label=metrics.label,
            subscores=metrics.subscores,
            signals=signals,
            breakdown=snapshot.get('breakdown') or {},
            degraded=tuple(signals.get('degraded') or ()),
            computed_at=metrics.computed_at,
            computed_by=metrics.computed_by,
            engine_version=metrics.engine_version,
        )
