#!/usr/bin/env python3
"""
Exceptions raised by the answer quality engine.

The web layer maps these to HTTP status codes in web/backend/exceptions.py.
"""


class QualityError(Exception):
    """Base exception for answer quality errors."""
    pass


class ValidationError(QualityError):
    """Raised on malformed input, e.g. an empty or non-UUID answer id."""
    pass


class NotFoundError(QualityError):
    """Raised when an answer or its metrics record does not exist."""
    pass


class UpstreamReadError(QualityError):
    """Raised when a signal source lookup fails transiently."""

    def __init__(self, source: str, message: str):
        super().__init__(f"{source}: {message}")
        self.source = source


class MetricsStoreError(QualityError):
    """Raised when the metrics store itself cannot be read or written.

    Fatal for batch runs: the batch aborts and the error reaches the scheduler.
    """
    pass
