"""
Strength Estimator.

Retention strength is a 0-1 estimate per topic. Two forms:
- update_strength: single-step smoothing applied after every attempt
- compute_strength_from_history: recency-weighted average over all attempts
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from loguru import logger

from practice_engine.config import get_settings
from practice_engine.core.mastery import MasteryLevel, clamp
from practice_engine.core.models import Attempt

# Smoothing weights for the per-attempt update
CURRENT_WEIGHT = 0.7
NEW_WEIGHT = 0.3


def update_strength(prior_strength: float | None, mastery: MasteryLevel) -> float:
    """
    Blend the prior strength with the attempt's normalized quality.

    new = prior * 0.7 + (quality / 5) * 0.3, clamped to [0, 1].
    A missing prior uses the configured default strength.
    """
    if prior_strength is None:
        prior_strength = get_settings().default_strength

    target = mastery.quality / 5
    return clamp(prior_strength * CURRENT_WEIGHT + target * NEW_WEIGHT)


def compute_strength_from_history(
    attempts: Iterable[Attempt],
    decay_factor: float | None = None,
) -> float:
    """
    Recency-weighted strength over an attempt history.

    The newest attempt gets weight 1, the next exp(-decay), then exp(-2*decay)
    and so on. Empty history returns the default strength.
    """
    settings = get_settings()
    ordered = sorted(attempts, key=lambda a: a.created_at, reverse=True)
    if not ordered:
        return settings.default_strength

    decay = settings.strength_decay_factor if decay_factor is None else decay_factor

    weighted_sum = 0.0
    weight_sum = 0.0
    for index, attempt in enumerate(ordered):
        weight = math.exp(-index * decay)
        weighted_sum += attempt.mastery_level.strength_score * weight
        weight_sum += weight

    strength = clamp(weighted_sum / weight_sum)
    logger.debug(
        "History strength for {}: {} attempts -> {:.2f}",
        ordered[0].topic.value, len(ordered), strength,
    )
    return strength
