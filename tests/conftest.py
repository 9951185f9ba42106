"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from practice_engine.classification.topic_classifier import reset_shared_cache  # noqa: E402
from practice_engine.config import get_settings  # noqa: E402
from practice_engine.core.mastery import MasteryLevel  # noqa: E402
from practice_engine.core.models import Attempt, TopicProgress  # noqa: E402
from practice_engine.core.topics import Topic  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests across components")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Fresh settings per test, never talking to a real classifier API."""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    get_settings.cache_clear()
    reset_shared_cache()
    yield
    get_settings.cache_clear()


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def now():
    """Fixed reference time."""
    return datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def make_progress(now):
    """Factory for TopicProgress records relative to ``now``."""

    def _make(
        topic: Topic,
        strength: float = 0.5,
        due_in_days: float | None = None,
        review_count: int = 1,
        interval_days: int = 1,
        ease_factor: float = 2.5,
    ) -> TopicProgress:
        next_review = now + timedelta(days=due_in_days) if due_in_days is not None else None
        last_reviewed = next_review - timedelta(days=interval_days) if next_review else None
        return TopicProgress(
            topic=topic,
            strength=strength,
            review_count=review_count,
            ease_factor=ease_factor,
            interval_days=interval_days,
            last_reviewed=last_reviewed,
            next_review=next_review,
        )

    return _make


@pytest.fixture
def make_attempt(now):
    """Factory for Attempt records; ``age_days`` counts back from ``now``."""

    def _make(
        topic: Topic,
        mastery: MasteryLevel,
        turns: int = 4,
        age_days: float = 0.0,
        text: str = "Solve 2x + 3 = 7",
    ) -> Attempt:
        return Attempt(
            problem_text=text,
            topic=topic,
            mastery_level=mastery,
            turns_taken=turns,
            created_at=now - timedelta(days=age_days),
        )

    return _make
