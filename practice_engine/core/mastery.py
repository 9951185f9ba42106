"""
Core Mastery Module.

Discrete outcome labels shared by every component of the engine.

Design:
- MasteryLevel: Enum for the outcome of a single attempt
- PerformanceTier: Enum for the learner's overall historical performance
- MASTERY_QUALITY_SCORES / MASTERY_STRENGTH_SCORES: closed lookup tables
- Time helpers that tolerate naive and aware timestamps
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from enum import Enum


class MasteryLevel(str, Enum):
    """
    Mastery level for one completed attempt.

    Ordered by decreasing performance.
    """

    MASTERED = "mastered"
    COMPETENT = "competent"
    STRUGGLING = "struggling"

    @property
    def quality(self) -> int:
        """SM-2 quality rating (0-5) for this outcome."""
        return MASTERY_QUALITY_SCORES[self]

    @property
    def strength_score(self) -> float:
        """Retention estimate (0-1) attributed to this outcome."""
        return MASTERY_STRENGTH_SCORES[self]

    def downgrade(self) -> MasteryLevel:
        """One level worse; struggling stays struggling."""
        return {
            MasteryLevel.MASTERED: MasteryLevel.COMPETENT,
            MasteryLevel.COMPETENT: MasteryLevel.STRUGGLING,
            MasteryLevel.STRUGGLING: MasteryLevel.STRUGGLING,
        }[self]

    @property
    def display_name(self) -> str:
        """Human-readable name."""
        return self.value.title()

    @property
    def color(self) -> str:
        """Rich color for CLI display."""
        return {
            MasteryLevel.MASTERED: "green",
            MasteryLevel.COMPETENT: "yellow",
            MasteryLevel.STRUGGLING: "red",
        }[self]


class PerformanceTier(str, Enum):
    """Coarse classification of a learner across all topics."""

    HIGH_PERFORMER = "high-performer"
    AVERAGE = "average"
    STRUGGLING = "struggling"


# Perfect response / correct with hesitation / incorrect but remembered
MASTERY_QUALITY_SCORES: dict[MasteryLevel, int] = {
    MasteryLevel.MASTERED: 5,
    MasteryLevel.COMPETENT: 3,
    MasteryLevel.STRUGGLING: 1,
}

MASTERY_STRENGTH_SCORES: dict[MasteryLevel, float] = {
    MasteryLevel.MASTERED: 1.0,
    MasteryLevel.COMPETENT: 0.6,
    MasteryLevel.STRUGGLING: 0.3,
}


# ============================================================================
# Validation Helpers
# ============================================================================


def is_valid_strength(strength: float) -> bool:
    return 0.0 <= strength <= 1.0


def is_valid_quality(quality: int) -> bool:
    return 0 <= quality <= 5


def is_valid_ease_factor(ease_factor: float, minimum: float = 1.3) -> bool:
    return ease_factor >= minimum


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (6.5 -> 7)."""
    return math.floor(value + 0.5)


# ============================================================================
# Time Helpers
# ============================================================================


def utc_now() -> datetime:
    return datetime.now(UTC)


def ensure_aware(moment: datetime) -> datetime:
    """Treat naive timestamps as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment


def calculate_days_between(earlier: datetime, later: datetime) -> float:
    """
    Days elapsed from ``earlier`` to ``later`` as a float.

    Negative when ``earlier`` lies in the future. Timestamps can be naive
    or aware.
    """
    delta = ensure_aware(later) - ensure_aware(earlier)
    return delta.total_seconds() / 86400.0
