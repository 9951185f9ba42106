"""
Adaptive Initial Intervals.

Biases the very first schedule of a topic by the learner's overall
performance. High performers skip straight to a 3-day first interval and a
faster-growing ease factor; struggling learners get a slower ease factor.
Only first-time topics are affected; later reviews follow plain SM-2.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from loguru import logger

from practice_engine.core.mastery import MasteryLevel, PerformanceTier
from practice_engine.core.models import INITIAL_EASE_FACTOR, Attempt, TopicProgress

MIN_ATTEMPTS_FOR_TIER = 5
MIN_TOPICS_FOR_ADAPTIVE = 2

HIGH_PERFORMER_MIN_STRENGTH = 0.75
HIGH_PERFORMER_MIN_MASTERY_RATE = 0.7
STRUGGLING_MAX_STRENGTH = 0.5
STRUGGLING_MIN_STRUGGLE_RATE = 0.5

HIGH_PERFORMER_INTERVAL = 3
STANDARD_INTERVAL = 1
ADJUSTED_INTERVAL = 2

STRONG_TOPIC_STRENGTH = 0.8
WEAK_TOPIC_STRENGTH = 0.4

EASE_BONUS = 0.3
EASE_PENALTY = 0.2


@dataclass(frozen=True)
class NewTopicSchedule:
    """First schedule for a topic with no prior progress."""

    interval: int
    ease_factor: float
    review_count: int


def calculate_performance_tier(
    topic_progress: Sequence[TopicProgress],
    attempts: Sequence[Attempt],
) -> PerformanceTier:
    """
    Classify the learner from history across all topics.

    High performer: average strength >= 0.75 and >= 70% mastered attempts.
    Struggling: average strength < 0.5 or > 50% struggling attempts.
    Fewer than 5 attempts always yields average.
    """
    if len(attempts) < MIN_ATTEMPTS_FOR_TIER:
        logger.debug(
            "Insufficient history ({} attempts) for a performance tier, using average",
            len(attempts),
        )
        return PerformanceTier.AVERAGE

    if topic_progress:
        avg_strength = sum(p.strength for p in topic_progress) / len(topic_progress)
    else:
        avg_strength = 0.5

    mastered = sum(1 for a in attempts if a.mastery_level is MasteryLevel.MASTERED)
    struggling = sum(1 for a in attempts if a.mastery_level is MasteryLevel.STRUGGLING)
    mastery_rate = mastered / len(attempts)
    struggling_rate = struggling / len(attempts)

    if avg_strength >= HIGH_PERFORMER_MIN_STRENGTH and mastery_rate >= HIGH_PERFORMER_MIN_MASTERY_RATE:
        tier = PerformanceTier.HIGH_PERFORMER
    elif avg_strength < STRUGGLING_MAX_STRENGTH or struggling_rate > STRUGGLING_MIN_STRUGGLE_RATE:
        tier = PerformanceTier.STRUGGLING
    else:
        tier = PerformanceTier.AVERAGE

    logger.debug(
        "Performance tier: {} attempts, avg strength {:.2f}, mastery rate {:.0%}, "
        "struggling rate {:.0%} -> {}",
        len(attempts), avg_strength, mastery_rate, struggling_rate, tier.value,
    )
    return tier


def should_use_adaptive_intervals(
    topic_progress: Sequence[TopicProgress],
    attempts: Sequence[Attempt],
) -> bool:
    """Adaptive intervals need at least 5 attempts spread over 2 topics."""
    return (
        len(attempts) >= MIN_ATTEMPTS_FOR_TIER
        and len(topic_progress) >= MIN_TOPICS_FOR_ADAPTIVE
    )


def get_adaptive_initial_interval(
    tier: PerformanceTier,
    topic_strength: float | None = None,
) -> int:
    """
    First interval in days for a tier.

    An optional topic-specific strength fine-tunes the result: a strong topic
    lifts a 1-day interval to 2, a weak topic trims a 3-day interval to 2.
    """
    if tier is PerformanceTier.HIGH_PERFORMER:
        interval = HIGH_PERFORMER_INTERVAL
    else:
        interval = STANDARD_INTERVAL

    if topic_strength is not None:
        if topic_strength >= STRONG_TOPIC_STRENGTH and interval == STANDARD_INTERVAL:
            interval = ADJUSTED_INTERVAL
        elif topic_strength < WEAK_TOPIC_STRENGTH and interval == HIGH_PERFORMER_INTERVAL:
            interval = ADJUSTED_INTERVAL

    return interval


def get_adaptive_ease_factor(tier: PerformanceTier) -> float:
    """Starting ease factor: 2.8 high performer, 2.5 average, 2.3 struggling."""
    if tier is PerformanceTier.HIGH_PERFORMER:
        return INITIAL_EASE_FACTOR + EASE_BONUS
    if tier is PerformanceTier.STRUGGLING:
        return INITIAL_EASE_FACTOR - EASE_PENALTY
    return INITIAL_EASE_FACTOR


def get_adaptive_new_topic_schedule(
    tier: PerformanceTier,
    mastery: MasteryLevel,
    topic_strength: float | None = None,
) -> NewTopicSchedule:
    """
    Combine the adaptive interval and ease factor for a first attempt.

    A struggling first attempt always resets the interval to 1 day and the
    review count to 0, whatever the tier.
    """
    interval = get_adaptive_initial_interval(tier, topic_strength)
    ease_factor = get_adaptive_ease_factor(tier)

    if mastery is MasteryLevel.STRUGGLING:
        logger.debug("Struggled on first attempt, first interval reset to 1 day")
        return NewTopicSchedule(interval=STANDARD_INTERVAL, ease_factor=ease_factor, review_count=0)

    if mastery is MasteryLevel.MASTERED and tier is PerformanceTier.HIGH_PERFORMER:
        interval = max(interval, HIGH_PERFORMER_INTERVAL)

    logger.debug(
        "Adaptive schedule for tier {}: interval {} days, ease {:.2f}",
        tier.value, interval, ease_factor,
    )
    return NewTopicSchedule(interval=interval, ease_factor=ease_factor, review_count=1)
