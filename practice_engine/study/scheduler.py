"""
Review Scheduler - SuperMemo 2 (SM-2) recurrence over topic progress.

State per topic: (interval_days, ease_factor, review_count). Every attempt is
converted to an SM-2 quality (mastered 5, competent 3, struggling 1) and the
classic recurrence is applied:

    q < 3  : interval = 1, review_count = 0
    q >= 3 : EF' = max(1.3, EF + (0.1 - (5-q) * (0.08 + (5-q) * 0.02)))
             interval = 1, 6, then round(interval * EF')
             review_count += 1

Based on: Wozniak (1990), "Optimization of learning", SM-2 algorithm.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta

from loguru import logger

from practice_engine.core.errors import InvalidInputError
from practice_engine.core.mastery import (
    MasteryLevel,
    PerformanceTier,
    calculate_days_between,
    ensure_aware,
    is_valid_quality,
    round_half_up,
    utc_now,
)
from practice_engine.core.models import (
    FIRST_INTERVAL,
    INITIAL_EASE_FACTOR,
    MIN_EASE_FACTOR,
    SECOND_INTERVAL,
    ReviewSchedule,
    SpacedRepetitionCard,
    TopicProgress,
)
from practice_engine.core.topics import Topic
from practice_engine.study.adaptive_intervals import get_adaptive_new_topic_schedule
from practice_engine.study.strength import update_strength

SUCCESS_QUALITY_THRESHOLD = 3

LAPSE_MULTIPLIER = 2.0

MAX_SESSION_FROM_DUE = 10
MAINTENANCE_SESSION_LENGTH = 3
MIN_SESSION_LENGTH = 1
MAX_SESSION_LENGTH = 15


def calculate_ease_factor(current_ease: float, quality: int) -> float:
    """SM-2 ease update, floored at 1.3."""
    miss = 5 - quality
    return max(MIN_EASE_FACTOR, current_ease + (0.1 - miss * (0.08 + miss * 0.02)))


def calculate_next_review(
    current_interval: int,
    current_ease: float,
    quality: int,
    review_count: int,
    now: datetime | None = None,
) -> ReviewSchedule:
    """
    Calculate the next review schedule with SM-2.

    Args:
        current_interval: Current interval in days
        current_ease: Current ease factor
        quality: Quality of recall (0-5)
        review_count: Successful reviews so far
        now: Reference time (defaults to UTC now)

    Returns:
        ReviewSchedule with next_review, interval, ease_factor, review_count
    """
    if not is_valid_quality(quality):
        raise InvalidInputError(f"quality must be between 0 and 5, got {quality}")
    if review_count < 0:
        raise InvalidInputError(f"review_count must be non-negative, got {review_count}")

    now = ensure_aware(now) if now is not None else utc_now()

    if quality < SUCCESS_QUALITY_THRESHOLD:
        # Failed recall: start over without touching the ease factor
        ease_factor = max(MIN_EASE_FACTOR, current_ease)
        interval = FIRST_INTERVAL
        new_count = 0
    else:
        ease_factor = calculate_ease_factor(current_ease, quality)
        if review_count == 0:
            interval = FIRST_INTERVAL
        elif review_count == 1:
            interval = SECOND_INTERVAL
        else:
            interval = max(FIRST_INTERVAL, round_half_up(current_interval * ease_factor))
        new_count = review_count + 1

    return ReviewSchedule(
        next_review=now + timedelta(days=interval),
        interval=interval,
        ease_factor=ease_factor,
        review_count=new_count,
    )


def update_topic_progress_after_attempt(
    topic: Topic,
    mastery: MasteryLevel,
    current: TopicProgress | None,
    now: datetime | None = None,
    tier: PerformanceTier | None = None,
    topic_strength: float | None = None,
) -> TopicProgress:
    """
    Apply one attempt to a topic's progress.

    Args:
        topic: Topic the attempt belongs to
        mastery: Classified outcome of the attempt
        current: Existing progress, or None for a first attempt
        now: Reference time (defaults to UTC now)
        tier: Learner performance tier; only used for first attempts
        topic_strength: Optional topic-specific strength for adaptive tuning

    Returns:
        New TopicProgress (the input is never modified)
    """
    now = ensure_aware(now) if now is not None else utc_now()
    quality = mastery.quality
    prior_strength = current.strength if current is not None else None
    new_strength = update_strength(prior_strength, mastery)

    if current is None and tier is not None:
        adaptive = get_adaptive_new_topic_schedule(tier, mastery, topic_strength)
        interval = adaptive.interval
        ease_factor = adaptive.ease_factor
        review_count = adaptive.review_count
        previous_interval = FIRST_INTERVAL
        previous_ease = INITIAL_EASE_FACTOR
    else:
        previous_interval = current.interval_days if current is not None else FIRST_INTERVAL
        previous_ease = current.ease_factor if current is not None else INITIAL_EASE_FACTOR
        previous_count = current.review_count if current is not None else 0

        schedule = calculate_next_review(previous_interval, previous_ease, quality, previous_count, now)
        interval = schedule.interval
        ease_factor = schedule.ease_factor
        review_count = schedule.review_count

    logger.debug(
        "SM-2 update for {}: mastery {} (q={}), ease {:.2f} -> {:.2f}, "
        "interval {} -> {} days, strength {} -> {:.2f}",
        topic.value, mastery.value, quality, previous_ease, ease_factor,
        previous_interval, interval,
        f"{prior_strength:.2f}" if prior_strength is not None else "new",
        new_strength,
    )

    base = current if current is not None else TopicProgress(topic=topic)
    return base.with_updates(
        topic=topic,
        strength=new_strength,
        review_count=review_count,
        ease_factor=ease_factor,
        interval_days=interval,
        last_reviewed=now,
        next_review=now + timedelta(days=interval),
    )


def get_topics_due_for_review(
    all_progress: Iterable[TopicProgress],
    now: datetime | None = None,
) -> list[TopicProgress]:
    """Topics with next_review <= now, most overdue first."""
    now = ensure_aware(now) if now is not None else utc_now()
    due = [
        p for p in all_progress
        if p.next_review is not None and ensure_aware(p.next_review) <= now
    ]
    due.sort(key=lambda p: ensure_aware(p.next_review))
    return due


def get_upcoming_reviews(
    all_progress: Iterable[TopicProgress],
    days_ahead: int = 7,
    now: datetime | None = None,
) -> list[TopicProgress]:
    """Topics that become due within the next ``days_ahead`` days, soonest first."""
    now = ensure_aware(now) if now is not None else utc_now()
    horizon = now + timedelta(days=days_ahead)
    upcoming = [
        p for p in all_progress
        if p.next_review is not None and now < ensure_aware(p.next_review) <= horizon
    ]
    upcoming.sort(key=lambda p: ensure_aware(p.next_review))
    return upcoming


def calculate_optimal_session_length(
    due_topics: Sequence[TopicProgress],
    total_problems: int = 0,
    average_session_length: float = 0.0,
) -> int:
    """
    Number of problems to propose for the next session.

    Starts from the due count (capped at 10, or a 3-problem maintenance
    session when nothing is due), averages with the learner's usual session
    length when known, and clamps to 1-15.
    """
    length = min(len(due_topics), MAX_SESSION_FROM_DUE)
    if length == 0:
        length = MAINTENANCE_SESSION_LENGTH

    if average_session_length > 0:
        length = round_half_up((length + average_session_length) / 2)

    return max(MIN_SESSION_LENGTH, min(MAX_SESSION_LENGTH, length))


def approximate_last_interval(review_count: int) -> float:
    """
    Reconstruct the previous interval from the review count alone.

    0 -> 1, 1 -> 6, n -> 6 * 2.5^(n-1). This ignores the learner's actual
    ease factor, so it overestimates intervals for hard topics.
    """
    if review_count <= 0:
        return float(FIRST_INTERVAL)
    if review_count == 1:
        return float(SECOND_INTERVAL)
    return SECOND_INTERVAL * INITIAL_EASE_FACTOR ** (review_count - 1)


def is_topic_lapsed(progress: TopicProgress, now: datetime | None = None) -> bool:
    """A topic is lapsed when overdue by more than twice its last interval."""
    if progress.next_review is None:
        return False

    now = ensure_aware(now) if now is not None else utc_now()
    overdue_days = calculate_days_between(progress.next_review, now)
    return overdue_days > approximate_last_interval(progress.review_count) * LAPSE_MULTIPLIER


def create_sr_card(progress: TopicProgress) -> SpacedRepetitionCard:
    """Display snapshot of a topic's stored schedule."""
    return SpacedRepetitionCard(
        topic=progress.topic,
        strength=progress.strength,
        interval=progress.interval_days,
        ease_factor=progress.ease_factor,
        last_review=progress.last_reviewed,
        next_review=progress.next_review,
        review_count=progress.review_count,
    )
