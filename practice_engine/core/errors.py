"""
Exception hierarchy for the practice engine.

Only InvalidInputError ever reaches a caller. ExternalClassifierError is
raised inside the topic classifier fallback chain and recovered there.
"""

from __future__ import annotations


class PracticeEngineError(Exception):
    """Base class for all practice engine errors."""
    pass


class InvalidInputError(PracticeEngineError, ValueError):
    """Raised when a caller passes a value outside the accepted domain."""
    pass


class ExternalClassifierError(PracticeEngineError):
    """Raised when the semantic topic classifier cannot produce a valid topic."""

    def __init__(self, message: str, reason: str = "unknown"):
        super().__init__(message)
        self.reason = reason
