"""
Plain records exchanged with the caller.

The engine never persists anything: it receives these records, computes new
values and hands them back. ``to_dict``/``from_dict`` use ISO-8601 strings for
timestamps so callers can move them through JSON or a database row as-is.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from practice_engine.core.errors import InvalidInputError
from practice_engine.core.mastery import MasteryLevel, ensure_aware, utc_now
from practice_engine.core.topics import Topic

MIN_EASE_FACTOR = 1.3
INITIAL_EASE_FACTOR = 2.5
FIRST_INTERVAL = 1
SECOND_INTERVAL = 6


def _parse_timestamp(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_aware(value)
    try:
        return ensure_aware(datetime.fromisoformat(str(value)))
    except ValueError:
        raise InvalidInputError(f"Invalid timestamp: {value!r}") from None


def _format_timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


@dataclass(frozen=True)
class Attempt:
    """One completed practice problem."""

    problem_text: str
    topic: Topic
    mastery_level: MasteryLevel
    turns_taken: int
    created_at: datetime = field(default_factory=utc_now)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Attempt:
        return cls(
            problem_text=data.get("problem_text", ""),
            topic=Topic.parse(data["topic"]),
            mastery_level=MasteryLevel(data["mastery_level"]),
            turns_taken=int(data.get("turns_taken", 0)),
            created_at=_parse_timestamp(data.get("created_at")) or utc_now(),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "problem_text": self.problem_text,
            "topic": self.topic.value,
            "mastery_level": self.mastery_level.value,
            "turns_taken": self.turns_taken,
            "created_at": _format_timestamp(self.created_at),
        }


@dataclass(frozen=True)
class TopicProgress:
    """
    Scheduling and retention state for one (learner, topic) pair.

    Invariants maintained by the scheduler:
        0 <= strength <= 1
        ease_factor >= 1.3
        interval_days >= 1
        next_review == last_reviewed + interval_days
    """

    topic: Topic
    strength: float = 0.5
    review_count: int = 0
    ease_factor: float = INITIAL_EASE_FACTOR
    interval_days: int = FIRST_INTERVAL
    last_reviewed: datetime | None = None
    next_review: datetime | None = None
    user_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TopicProgress:
        return cls(
            topic=Topic.parse(data["topic"]),
            strength=float(data.get("strength", 0.5)),
            review_count=int(data.get("review_count", 0)),
            ease_factor=float(data.get("ease_factor") or INITIAL_EASE_FACTOR),
            interval_days=int(data.get("interval_days") or FIRST_INTERVAL),
            last_reviewed=_parse_timestamp(data.get("last_reviewed")),
            next_review=_parse_timestamp(data.get("next_review")),
            user_id=data.get("user_id"),
        )

    def to_dict(self) -> dict[str, Any]:
        result = {
            "topic": self.topic.value,
            "strength": self.strength,
            "review_count": self.review_count,
            "ease_factor": self.ease_factor,
            "interval_days": self.interval_days,
            "last_reviewed": _format_timestamp(self.last_reviewed),
            "next_review": _format_timestamp(self.next_review),
        }
        if self.user_id is not None:
            result["user_id"] = self.user_id
        return result

    def with_updates(self, **changes: Any) -> TopicProgress:
        return replace(self, **changes)


@dataclass(frozen=True)
class ReviewSchedule:
    """Output of one SM-2 step."""

    next_review: datetime
    interval: int
    ease_factor: float
    review_count: int


@dataclass(frozen=True)
class StruggleSignals:
    """Struggle indicators collected while the learner worked a problem."""

    hints_requested: int = 0
    incorrect_attempts: int = 0
    clarification_requests: int = 0
    time_spent_seconds: float | None = None

    def __post_init__(self):
        for name in ("hints_requested", "incorrect_attempts", "clarification_requests"):
            if getattr(self, name) < 0:
                raise InvalidInputError(f"{name} must be non-negative")


@dataclass
class TopicLearningProgress:
    """Analytics view of one topic."""

    topic: Topic
    strength: float
    last_reviewed: datetime | None
    next_review: datetime | None
    review_count: int
    recent_attempts: list[Attempt] = field(default_factory=list)
    average_turns: float = 0.0
    mastery_trend: str = "stable"  # 'improving', 'stable', 'declining'


@dataclass(frozen=True)
class SpacedRepetitionCard:
    """Display-oriented snapshot of a topic's schedule."""

    topic: Topic
    strength: float
    interval: int
    ease_factor: float
    last_review: datetime | None
    next_review: datetime | None
    review_count: int


@dataclass
class SessionStats:
    """Summary of a finished practice session."""

    problems_completed: int
    average_turns: float
    topics_covered: list[Topic]
    mastery_breakdown: dict[str, int]

    def to_dict(self) -> dict[str, Any]:
        return {
            "problems_completed": self.problems_completed,
            "average_turns": self.average_turns,
            "topics_covered": [t.value for t in self.topics_covered],
            "mastery_breakdown": dict(self.mastery_breakdown),
        }
