"""
Math topic tags.

The set is closed: every attempt and every progress record references one of
these fifteen values.
"""

from __future__ import annotations

from enum import Enum

from practice_engine.core.errors import InvalidInputError


class Topic(str, Enum):
    """Topic identifier for a math problem."""

    LINEAR_EQUATIONS = "linear-equations"
    QUADRATIC_EQUATIONS = "quadratic-equations"
    SYSTEMS_OF_EQUATIONS = "systems-of-equations"
    POLYNOMIALS = "polynomials"
    EXPONENTS = "exponents"
    RADICALS = "radicals"
    RATIONAL_EXPRESSIONS = "rational-expressions"
    INEQUALITIES = "inequalities"
    ABSOLUTE_VALUE = "absolute-value"
    FUNCTIONS = "functions"
    GRAPHING = "graphing"
    WORD_PROBLEMS = "word-problems"
    GEOMETRY = "geometry"
    TRIGONOMETRY = "trigonometry"
    CALCULUS = "calculus"

    @classmethod
    def parse(cls, value: str | Topic) -> Topic:
        """Accept a Topic or its tag, case-insensitively."""
        if isinstance(value, Topic):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidInputError(f"Unknown topic: {value!r}") from None

    @property
    def display_name(self) -> str:
        return self.value.replace("-", " ").title()


DEFAULT_TOPIC = Topic.LINEAR_EQUATIONS

# Starting set for learners with no progress yet
FOUNDATIONAL_TOPICS: tuple[Topic, ...] = (
    Topic.LINEAR_EQUATIONS,
    Topic.POLYNOMIALS,
    Topic.EXPONENTS,
    Topic.INEQUALITIES,
    Topic.FUNCTIONS,
)
