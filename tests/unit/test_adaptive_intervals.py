"""
Unit tests for adaptive first-review intervals.
"""

import pytest

from practice_engine.core.mastery import MasteryLevel, PerformanceTier
from practice_engine.core.topics import Topic
from practice_engine.study.adaptive_intervals import (
    calculate_performance_tier,
    get_adaptive_ease_factor,
    get_adaptive_initial_interval,
    get_adaptive_new_topic_schedule,
    should_use_adaptive_intervals,
)


@pytest.fixture
def strong_progress(make_progress):
    return [
        make_progress(Topic.LINEAR_EQUATIONS, strength=0.85),
        make_progress(Topic.POLYNOMIALS, strength=0.8),
    ]


def _attempts(make_attempt, levels):
    return [make_attempt(Topic.LINEAR_EQUATIONS, level, age_days=i) for i, level in enumerate(levels)]


class TestPerformanceTier:
    def test_short_history_is_average(self, strong_progress, make_attempt):
        attempts = _attempts(make_attempt, [MasteryLevel.MASTERED] * 4)
        assert calculate_performance_tier(strong_progress, attempts) is PerformanceTier.AVERAGE

    def test_high_performer(self, strong_progress, make_attempt):
        levels = [MasteryLevel.MASTERED] * 4 + [MasteryLevel.COMPETENT]
        attempts = _attempts(make_attempt, levels)
        assert calculate_performance_tier(strong_progress, attempts) is PerformanceTier.HIGH_PERFORMER

    def test_low_strength_is_struggling(self, make_progress, make_attempt):
        progress = [make_progress(Topic.GEOMETRY, strength=0.3), make_progress(Topic.CALCULUS, strength=0.4)]
        attempts = _attempts(make_attempt, [MasteryLevel.COMPETENT] * 5)
        assert calculate_performance_tier(progress, attempts) is PerformanceTier.STRUGGLING

    def test_mostly_struggling_attempts_is_struggling(self, strong_progress, make_attempt):
        levels = [MasteryLevel.STRUGGLING] * 3 + [MasteryLevel.MASTERED] * 2
        attempts = _attempts(make_attempt, levels)
        assert calculate_performance_tier(strong_progress, attempts) is PerformanceTier.STRUGGLING

    def test_middle_of_the_road_is_average(self, make_progress, make_attempt):
        progress = [make_progress(Topic.GEOMETRY, strength=0.6), make_progress(Topic.CALCULUS, strength=0.65)]
        levels = [MasteryLevel.MASTERED, MasteryLevel.COMPETENT] * 3
        attempts = _attempts(make_attempt, levels)
        assert calculate_performance_tier(progress, attempts) is PerformanceTier.AVERAGE


class TestAdaptiveGate:
    def test_requires_five_attempts_and_two_topics(self, strong_progress, make_attempt):
        five = _attempts(make_attempt, [MasteryLevel.MASTERED] * 5)
        assert should_use_adaptive_intervals(strong_progress, five)
        assert not should_use_adaptive_intervals(strong_progress, five[:4])
        assert not should_use_adaptive_intervals(strong_progress[:1], five)


class TestInitialInterval:
    def test_tier_defaults(self):
        assert get_adaptive_initial_interval(PerformanceTier.HIGH_PERFORMER) == 3
        assert get_adaptive_initial_interval(PerformanceTier.AVERAGE) == 1
        assert get_adaptive_initial_interval(PerformanceTier.STRUGGLING) == 1

    def test_topic_strength_fine_tuning(self):
        assert get_adaptive_initial_interval(PerformanceTier.AVERAGE, topic_strength=0.85) == 2
        assert get_adaptive_initial_interval(PerformanceTier.HIGH_PERFORMER, topic_strength=0.3) == 2
        assert get_adaptive_initial_interval(PerformanceTier.HIGH_PERFORMER, topic_strength=0.9) == 3

    def test_ease_factors(self):
        assert get_adaptive_ease_factor(PerformanceTier.HIGH_PERFORMER) == pytest.approx(2.8)
        assert get_adaptive_ease_factor(PerformanceTier.AVERAGE) == pytest.approx(2.5)
        assert get_adaptive_ease_factor(PerformanceTier.STRUGGLING) == pytest.approx(2.3)


class TestNewTopicSchedule:
    @pytest.mark.parametrize("tier", list(PerformanceTier))
    def test_struggling_first_attempt_always_resets(self, tier):
        schedule = get_adaptive_new_topic_schedule(tier, MasteryLevel.STRUGGLING, topic_strength=0.9)
        assert schedule.interval == 1
        assert schedule.review_count == 0

    def test_high_performer_mastery_keeps_at_least_three_days(self):
        schedule = get_adaptive_new_topic_schedule(
            PerformanceTier.HIGH_PERFORMER, MasteryLevel.MASTERED, topic_strength=0.2
        )
        assert schedule.interval == 3
        assert schedule.ease_factor == pytest.approx(2.8)
        assert schedule.review_count == 1

    def test_average_competent(self):
        schedule = get_adaptive_new_topic_schedule(PerformanceTier.AVERAGE, MasteryLevel.COMPETENT)
        assert schedule.interval == 1
        assert schedule.ease_factor == pytest.approx(2.5)
        assert schedule.review_count == 1
