"""
Interference groups for topic spacing.

Topics in the same group share procedures or notation closely enough that
practising them back-to-back invites confusion (Rohrer & Taylor, 2007).
Groups are only a spacing constraint; they are never persisted per learner.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from loguru import logger

from practice_engine.core.topics import Topic

INTERFERENCE_GROUPS: dict[str, tuple[Topic, ...]] = {
    # Similar procedural steps
    "equation-solving": (
        Topic.LINEAR_EQUATIONS,
        Topic.QUADRATIC_EQUATIONS,
        Topic.SYSTEMS_OF_EQUATIONS,
        Topic.RATIONAL_EXPRESSIONS,
    ),
    # Comparison concepts
    "inequalities-group": (Topic.INEQUALITIES, Topic.ABSOLUTE_VALUE),
    # Algebraic manipulation
    "polynomial-operations": (Topic.POLYNOMIALS, Topic.EXPONENTS, Topic.RADICALS),
    # Graphing and evaluation
    "function-analysis": (Topic.FUNCTIONS, Topic.GRAPHING),
    # Distinct enough to stand alone
    "calculus-group": (Topic.CALCULUS,),
    "trigonometry-group": (Topic.TRIGONOMETRY,),
    "geometry-group": (Topic.GEOMETRY,),
    "word-problems-group": (Topic.WORD_PROBLEMS,),
}

_GROUP_BY_TOPIC: dict[Topic, str] = {
    topic: group for group, topics in INTERFERENCE_GROUPS.items() for topic in topics
}

MIN_GROUP_SPACING = 2


@dataclass
class SequenceAnalysis:
    """Interference statistics for an ordered topic sequence."""

    group_counts: dict[str, int] = field(default_factory=dict)
    min_spacing: int = -1  # -1 when no group repeats
    violations: int = 0


def get_interference_group(topic: Topic) -> str | None:
    return _GROUP_BY_TOPIC.get(topic)


def are_topics_in_same_group(first: Topic, second: Topic) -> bool:
    group = get_interference_group(first)
    return group is not None and group == get_interference_group(second)


def filter_interfering_topics(
    candidates: Sequence[Topic],
    recent_topics: Sequence[Topic],
    min_spacing: int = MIN_GROUP_SPACING,
) -> list[Topic]:
    """
    Drop candidates that share a group with any of the last ``min_spacing`` topics.

    If every candidate would be dropped, the unfiltered candidates are
    returned instead so selection is never blocked.
    """
    if not recent_topics or min_spacing <= 0:
        return list(candidates)

    recent_groups = {
        get_interference_group(topic) for topic in recent_topics[-min_spacing:]
    }
    recent_groups.discard(None)

    filtered = [
        candidate for candidate in candidates
        if get_interference_group(candidate) not in recent_groups
    ]

    logger.debug(
        "Interference filter: {} -> {} candidates ({} removed)",
        len(candidates), len(filtered), len(candidates) - len(filtered),
    )
    return filtered if filtered else list(candidates)


def optimize_topic_spacing(topics: Sequence[Topic]) -> list[Topic]:
    """
    Greedily order topics so same-group topics sit as far apart as possible.

    The first topic stays first. Each following slot takes the remaining topic
    whose most recent same-group predecessor is furthest back; topics with no
    predecessor count as maximally distant. Ties keep input order.
    """
    if len(topics) <= 2:
        return list(topics)

    remaining = list(topics)
    result = [remaining.pop(0)]

    while remaining:
        best_index = 0
        best_distance = -1
        for index, candidate in enumerate(remaining):
            distance = len(result) + 1
            for position in range(len(result) - 1, -1, -1):
                if are_topics_in_same_group(candidate, result[position]):
                    distance = len(result) - position
                    break
            if distance > best_distance:
                best_distance = distance
                best_index = index
        result.append(remaining.pop(best_index))

    return result


def analyze_topic_sequence(topics: Sequence[Topic]) -> SequenceAnalysis:
    """Count group occurrences and spacing violations (spacing < 2) in a sequence."""
    analysis = SequenceAnalysis()
    last_seen: dict[str, int] = {}
    min_spacing: int | None = None

    for index, topic in enumerate(topics):
        group = get_interference_group(topic)
        if group is None:
            continue

        analysis.group_counts[group] = analysis.group_counts.get(group, 0) + 1
        if group in last_seen:
            spacing = index - last_seen[group]
            min_spacing = spacing if min_spacing is None else min(min_spacing, spacing)
            if spacing < MIN_GROUP_SPACING:
                analysis.violations += 1
        last_seen[group] = index

    analysis.min_spacing = -1 if min_spacing is None else min_spacing
    return analysis
