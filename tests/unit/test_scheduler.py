"""
Unit tests for the SM-2 review scheduler.
"""

from datetime import timedelta

import pytest

from practice_engine.core.errors import InvalidInputError
from practice_engine.core.mastery import MasteryLevel, PerformanceTier
from practice_engine.core.models import TopicProgress
from practice_engine.core.topics import Topic
from practice_engine.study.scheduler import (
    approximate_last_interval,
    calculate_ease_factor,
    calculate_next_review,
    calculate_optimal_session_length,
    create_sr_card,
    get_topics_due_for_review,
    get_upcoming_reviews,
    is_topic_lapsed,
    update_topic_progress_after_attempt,
)


class TestCalculateNextReview:
    def test_first_success_schedules_one_day(self, now):
        schedule = calculate_next_review(0, 2.5, 5, 0, now=now)
        assert schedule.interval == 1
        assert schedule.review_count == 1
        assert schedule.next_review == now + timedelta(days=1)

    def test_second_success_schedules_six_days(self, now):
        schedule = calculate_next_review(1, 2.5, 5, 1, now=now)
        assert schedule.interval == 6
        assert schedule.review_count == 2

    def test_third_success_multiplies_by_new_ease(self, now):
        schedule = calculate_next_review(6, 2.5, 5, 2, now=now)
        assert schedule.ease_factor == pytest.approx(2.6)
        assert schedule.interval == 16  # round(6 * 2.6) = round(15.6)
        assert schedule.review_count == 3

    def test_half_day_products_round_up(self, now):
        # 5 * 2.5 = 12.5 with q=4 leaving the ease at 2.5
        schedule = calculate_next_review(5, 2.5, 4, 3, now=now)
        assert schedule.ease_factor == pytest.approx(2.5)
        assert schedule.interval == 13

    @pytest.mark.parametrize("quality", [0, 1, 2])
    def test_failed_recall_resets(self, now, quality):
        schedule = calculate_next_review(40, 2.2, quality, 7, now=now)
        assert schedule.interval == 1
        assert schedule.review_count == 0
        assert schedule.ease_factor == pytest.approx(2.2)
        assert schedule.next_review == now + timedelta(days=1)

    def test_ease_factor_floor(self, now):
        schedule = calculate_next_review(10, 1.3, 3, 4, now=now)
        assert schedule.ease_factor == pytest.approx(1.3)
        assert calculate_ease_factor(1.35, 3) == pytest.approx(1.3)

    def test_competent_lowers_ease(self):
        assert calculate_ease_factor(2.5, 3) == pytest.approx(2.36)

    @pytest.mark.parametrize("quality", [-1, 6])
    def test_rejects_quality_out_of_range(self, quality):
        with pytest.raises(InvalidInputError):
            calculate_next_review(1, 2.5, quality, 0)

    def test_rejects_negative_review_count(self):
        with pytest.raises(InvalidInputError):
            calculate_next_review(1, 2.5, 5, -1)

    def test_naive_now_is_treated_as_utc(self, now):
        schedule = calculate_next_review(0, 2.5, 5, 0, now=now.replace(tzinfo=None))
        assert schedule.next_review == now + timedelta(days=1)


class TestUpdateTopicProgress:
    def test_first_attempt_creates_progress(self, now):
        progress = update_topic_progress_after_attempt(
            Topic.RADICALS, MasteryLevel.MASTERED, None, now=now
        )
        assert progress.topic is Topic.RADICALS
        assert progress.strength == pytest.approx(0.65)
        assert progress.review_count == 1
        assert progress.interval_days == 1
        assert progress.last_reviewed == now
        assert progress.next_review == now + timedelta(days=1)

    def test_existing_progress_is_not_mutated(self, now, make_progress):
        current = make_progress(Topic.RADICALS, strength=0.7, review_count=1, interval_days=1)
        updated = update_topic_progress_after_attempt(
            Topic.RADICALS, MasteryLevel.MASTERED, current, now=now
        )
        assert current.review_count == 1
        assert updated.review_count == 2
        assert updated.interval_days == 6

    def test_struggling_resets_interval(self, now, make_progress):
        current = make_progress(Topic.RADICALS, review_count=4, interval_days=30, ease_factor=2.4)
        updated = update_topic_progress_after_attempt(
            Topic.RADICALS, MasteryLevel.STRUGGLING, current, now=now
        )
        assert updated.interval_days == 1
        assert updated.review_count == 0
        assert updated.ease_factor == pytest.approx(2.4)

    def test_next_review_is_last_reviewed_plus_interval(self, now, make_progress):
        current = make_progress(Topic.RADICALS, review_count=3, interval_days=15, ease_factor=2.6)
        updated = update_topic_progress_after_attempt(
            Topic.RADICALS, MasteryLevel.COMPETENT, current, now=now
        )
        assert updated.next_review == updated.last_reviewed + timedelta(days=updated.interval_days)
        assert updated.ease_factor >= 1.3
        assert updated.interval_days >= 1

    def test_tier_applies_to_first_attempt_only(self, now, make_progress):
        fresh = update_topic_progress_after_attempt(
            Topic.GEOMETRY, MasteryLevel.MASTERED, None, now=now,
            tier=PerformanceTier.HIGH_PERFORMER,
        )
        assert fresh.interval_days == 3
        assert fresh.ease_factor == pytest.approx(2.8)

        current = make_progress(Topic.GEOMETRY, review_count=0, interval_days=1)
        later = update_topic_progress_after_attempt(
            Topic.GEOMETRY, MasteryLevel.MASTERED, current, now=now,
            tier=PerformanceTier.HIGH_PERFORMER,
        )
        assert later.interval_days == 1
        assert later.ease_factor == pytest.approx(2.6)


class TestDueAndUpcoming:
    def test_due_topics_sorted_most_overdue_first(self, now, make_progress):
        progress = [
            make_progress(Topic.GEOMETRY, due_in_days=-1),
            make_progress(Topic.CALCULUS, due_in_days=-5),
            make_progress(Topic.FUNCTIONS, due_in_days=2),
            make_progress(Topic.GRAPHING, due_in_days=0),
            TopicProgress(topic=Topic.RADICALS),
        ]
        due = get_topics_due_for_review(progress, now=now)
        assert [p.topic for p in due] == [Topic.CALCULUS, Topic.GEOMETRY, Topic.GRAPHING]

    def test_upcoming_within_horizon(self, now, make_progress):
        progress = [
            make_progress(Topic.GEOMETRY, due_in_days=-1),
            make_progress(Topic.CALCULUS, due_in_days=6),
            make_progress(Topic.FUNCTIONS, due_in_days=2),
            make_progress(Topic.GRAPHING, due_in_days=9),
        ]
        upcoming = get_upcoming_reviews(progress, days_ahead=7, now=now)
        assert [p.topic for p in upcoming] == [Topic.FUNCTIONS, Topic.CALCULUS]


class TestSessionLength:
    def test_nothing_due_gives_maintenance_session(self):
        assert calculate_optimal_session_length([]) == 3

    def test_due_count_capped_at_ten(self, make_progress):
        due = [make_progress(Topic.GEOMETRY, due_in_days=-1)] * 12
        assert calculate_optimal_session_length(due) == 10

    def test_blends_with_usual_length_and_clamps(self, make_progress):
        due = [make_progress(Topic.GEOMETRY, due_in_days=-1)] * 4
        assert calculate_optimal_session_length(due, 50, 8.0) == 6
        assert calculate_optimal_session_length(due * 3, 50, 30.0) == 15

    def test_half_blend_rounds_up(self, make_progress):
        assert calculate_optimal_session_length([], 10, 2) == 3
        due = [make_progress(Topic.GEOMETRY, due_in_days=-1)] * 4
        assert calculate_optimal_session_length(due, 50, 5.0) == 5


class TestLapse:
    def test_approximate_interval(self):
        assert approximate_last_interval(0) == 1
        assert approximate_last_interval(1) == 6
        assert approximate_last_interval(3) == pytest.approx(37.5)

    def test_not_lapsed_without_schedule(self):
        assert is_topic_lapsed(TopicProgress(topic=Topic.GEOMETRY)) is False

    def test_lapsed_when_overdue_beyond_twice_interval(self, now, make_progress):
        # review_count 1 -> approximate interval 6 -> lapsed past 12 days overdue
        assert is_topic_lapsed(make_progress(Topic.GEOMETRY, due_in_days=-13, review_count=1), now=now)
        assert not is_topic_lapsed(make_progress(Topic.GEOMETRY, due_in_days=-11, review_count=1), now=now)

    def test_future_review_is_never_lapsed(self, now, make_progress):
        assert not is_topic_lapsed(make_progress(Topic.GEOMETRY, due_in_days=3, review_count=0), now=now)


def test_create_sr_card_mirrors_stored_schedule(make_progress):
    progress = make_progress(Topic.EXPONENTS, strength=0.8, due_in_days=2, review_count=3,
                             interval_days=15, ease_factor=2.6)
    card = create_sr_card(progress)
    assert card.topic is Topic.EXPONENTS
    assert card.interval == 15
    assert card.ease_factor == 2.6
    assert card.next_review == progress.next_review
    assert card.review_count == 3
