"""
Interleaved practice selection.

Builds the topic list for a mixed practice session from:
- Topics due for review (up to half the session, most overdue first)
- Weak topics (lowest strength first)
- Random remaining topics for variety

The final list is shuffled so the learner cannot infer due -> weak -> random
from the order. Interference-group spacing is applied by ``plan_mixed_session``.
"""
from __future__ import annotations

import math
import random
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime

from loguru import logger

from practice_engine.config import get_settings
from practice_engine.core.errors import InvalidInputError
from practice_engine.core.models import TopicProgress
from practice_engine.core.topics import FOUNDATIONAL_TOPICS, Topic
from practice_engine.study.interference import optimize_topic_spacing
from practice_engine.study.scheduler import get_topics_due_for_review


@dataclass
class InterleaveConfig:
    """Configuration for mixed session composition."""
    due_review_ratio: float = 0.5
    min_session_topics: int = 5
    max_session_topics: int = 8
    weak_threshold: float | None = None  # None -> settings.weak_topic_threshold


@dataclass
class PracticeSelection:
    """Topics picked for a session, grouped by why they were picked."""
    due: list[Topic] = field(default_factory=list)
    weak: list[Topic] = field(default_factory=list)
    variety: list[Topic] = field(default_factory=list)
    ordered: list[Topic] = field(default_factory=list)

    @property
    def total_topics(self) -> int:
        return len(self.ordered)


@dataclass
class MixedSessionPlan:
    """Ordered topics for a mixed practice session."""
    topics: list[Topic]
    is_new_learner: bool = False


class PracticeInterleaver:
    """
    Selects topics for interleaved (mixed) practice.

    The algorithm:
    1. Take due topics, capped at ceil(target * due_review_ratio)
    2. Add weak topics not already selected
    3. Fill with random remaining topics until target or pool exhaustion
    4. Shuffle (Fisher-Yates)
    """

    def __init__(self, config: InterleaveConfig | None = None, rng: random.Random | None = None):
        """
        Initialize interleaver.

        Args:
            config: InterleaveConfig or None for defaults
            rng: Random source; pass a seeded Random for reproducible sessions
        """
        self.config = config or InterleaveConfig()
        self.rng = rng or random.Random()

    @property
    def weak_threshold(self) -> float:
        if self.config.weak_threshold is not None:
            return self.config.weak_threshold
        return get_settings().weak_topic_threshold

    def select(
        self,
        all_progress: Sequence[TopicProgress],
        target_count: int,
        now: datetime | None = None,
    ) -> PracticeSelection:
        """
        Build a selection of at most ``target_count`` distinct topics.

        Args:
            all_progress: Every progress record for the learner (read-only)
            target_count: Desired number of topics
            now: Reference time for due checks

        Returns:
            PracticeSelection whose ``ordered`` list is shuffled
        """
        if target_count < 0:
            raise InvalidInputError(f"target_count must be non-negative, got {target_count}")

        selection = PracticeSelection()
        if target_count == 0 or not all_progress:
            return selection

        chosen: set[Topic] = set()

        def take(topic: Topic, bucket: list[Topic]) -> None:
            chosen.add(topic)
            bucket.append(topic)

        # 1. Due topics, up to the due share of the session
        due_cap = min(target_count, math.ceil(target_count * self.config.due_review_ratio))
        for progress in get_topics_due_for_review(all_progress, now):
            if len(selection.due) >= due_cap:
                break
            if progress.topic not in chosen:
                take(progress.topic, selection.due)

        # 2. Weak topics, weakest first
        weak = sorted(
            (p for p in all_progress if p.strength < self.weak_threshold),
            key=lambda p: p.strength,
        )
        for progress in weak:
            if len(chosen) >= target_count:
                break
            if progress.topic not in chosen:
                take(progress.topic, selection.weak)

        # 3. Random variety from whatever is left
        remaining = list(dict.fromkeys(p.topic for p in all_progress if p.topic not in chosen))
        while len(chosen) < target_count and remaining:
            take(remaining.pop(self.rng.randrange(len(remaining))), selection.variety)

        ordered = selection.due + selection.weak + selection.variety
        self.rng.shuffle(ordered)
        selection.ordered = ordered

        logger.info(
            "Selected practice topics: {} due, {} weak, {} variety (target {})",
            len(selection.due), len(selection.weak), len(selection.variety), target_count,
        )
        return selection

    def session_size(self, tracked_topics: int) -> int:
        """Topics per mixed session: half the tracked topics, clamped to 5-8."""
        return min(
            self.config.max_session_topics,
            max(self.config.min_session_topics, math.ceil(tracked_topics / 2)),
        )

    def plan_session(
        self,
        all_progress: Sequence[TopicProgress],
        now: datetime | None = None,
    ) -> MixedSessionPlan:
        """
        Plan a mixed practice session.

        New learners get the foundational topic set. Otherwise topics are
        selected, then arranged to keep interference groups apart.
        """
        if not all_progress:
            logger.info("No progress yet, using foundational topics")
            return MixedSessionPlan(topics=list(FOUNDATIONAL_TOPICS), is_new_learner=True)

        selection = self.select(all_progress, self.session_size(len(all_progress)), now)
        return MixedSessionPlan(topics=optimize_topic_spacing(selection.ordered))

    def get_session_summary(self, selection: PracticeSelection) -> dict:
        """
        Get summary of a selection.

        Args:
            selection: PracticeSelection to summarize

        Returns:
            Dictionary with selection stats
        """
        return {
            "total_topics": selection.total_topics,
            "due_topics": len(selection.due),
            "weak_topics": len(selection.weak),
            "variety_topics": len(selection.variety),
            "topics": [t.value for t in selection.ordered],
        }


def select_practice_set(
    all_progress: Sequence[TopicProgress],
    target_count: int,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> list[Topic]:
    """Ordered, duplicate-free topic list of length <= target_count."""
    return PracticeInterleaver(rng=rng).select(all_progress, target_count, now).ordered


prioritize_topics_for_practice = select_practice_set


def plan_mixed_session(
    all_progress: Sequence[TopicProgress],
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> MixedSessionPlan:
    return PracticeInterleaver(rng=rng).plan_session(all_progress, now)
