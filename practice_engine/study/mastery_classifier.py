"""
Mastery Classifier for practice attempts.

Turns the effort a learner spent on one problem into a MasteryLevel.
Three strategies, most specific first:
- Step-based: compares turns with ~2 turns per solution step
- Type-adjusted: scales the turn thresholds by problem difficulty
- Basic: fixed turn thresholds (5 mastered / 10 competent)

Struggle signals (hints, mistakes, clarifications) are applied afterwards as
a separate downgrade-only pass.
"""

from __future__ import annotations

from loguru import logger

from practice_engine.config import get_settings
from practice_engine.core.errors import InvalidInputError
from practice_engine.core.mastery import MasteryLevel, round_half_up
from practice_engine.core.models import StruggleSignals

# Turn threshold multipliers keyed by problem-type label, range [1.0, 2.0]
DIFFICULTY_MULTIPLIERS: dict[str, float] = {
    "Linear Equation": 1.0,
    "Quadratic Equation": 1.3,
    "System of Equations": 1.5,
    "System of Linear Equations": 1.5,
    "Polynomial": 1.4,
    "Rational Expression": 1.6,
    "Inequality": 1.2,
    "Absolute Value": 1.3,
    "Function": 1.4,
    "Graphing": 1.5,
    "Word Problem": 1.7,
    "Geometry": 1.6,
    "Trigonometry": 1.8,
    "Calculus": 2.0,
}

TURNS_PER_STEP = 2

# Struggle penalties per event
HINT_PENALTY = 0.15
MISTAKE_PENALTY = 0.20
CLARIFICATION_PENALTY = 0.10


def get_difficulty_multiplier(problem_type: str) -> float:
    """Multiplier for a problem-type label; unknown labels get 1.0."""
    return DIFFICULTY_MULTIPLIERS.get(problem_type, 1.0)


def calculate_struggle_score(signals: StruggleSignals) -> float:
    """Combined struggle score, 0 (none) to 1 (maximum)."""
    raw = (
        signals.hints_requested * HINT_PENALTY
        + signals.incorrect_attempts * MISTAKE_PENALTY
        + signals.clarification_requests * CLARIFICATION_PENALTY
    )
    return min(1.0, raw)


class MasteryClassifier:
    """
    Classifies attempts into mastered / competent / struggling.

    Evidence-based thresholds:
    - Step-based: efficiency >= 0.8 mastered, >= 0.5 competent
    - Struggle: score >= 0.6 forces struggling, >= 0.3 drops one level
    """

    EFFICIENCY_MASTERED = 0.8
    EFFICIENCY_COMPETENT = 0.5

    STRUGGLE_SEVERE = 0.6
    STRUGGLE_MODERATE = 0.3

    def __init__(
        self,
        mastered_threshold: int | None = None,
        competent_threshold: int | None = None,
    ):
        """
        Initialize classifier with turn thresholds.

        Args:
            mastered_threshold: Max turns for mastered (default from config)
            competent_threshold: Max turns for competent (default from config)
        """
        settings = get_settings()
        self.mastered_threshold = mastered_threshold or settings.mastery_turn_threshold
        self.competent_threshold = competent_threshold or settings.competent_turn_threshold

    @staticmethod
    def _validate_turns(turns_taken: int) -> None:
        if isinstance(turns_taken, bool) or not isinstance(turns_taken, int):
            raise InvalidInputError(f"turns_taken must be an integer, got {turns_taken!r}")
        if turns_taken < 1:
            raise InvalidInputError(f"turns_taken must be at least 1, got {turns_taken}")

    def classify_by_steps(self, turns_taken: int, step_count: int) -> MasteryLevel:
        """
        Compare turns taken with the turns a clean solution should need.

        Args:
            turns_taken: Learner-side exchanges (>= 1)
            step_count: Steps in the reference solution (>= 1)

        Returns:
            MasteryLevel from efficiency = (step_count * 2) / turns_taken
        """
        self._validate_turns(turns_taken)
        if step_count < 1:
            raise InvalidInputError(f"step_count must be at least 1, got {step_count}")

        expected_turns = step_count * TURNS_PER_STEP
        efficiency = expected_turns / turns_taken

        if efficiency >= self.EFFICIENCY_MASTERED:
            mastery = MasteryLevel.MASTERED
        elif efficiency >= self.EFFICIENCY_COMPETENT:
            mastery = MasteryLevel.COMPETENT
        else:
            mastery = MasteryLevel.STRUGGLING

        logger.debug(
            "Step-based mastery: {} steps, expected ~{} turns, actual {} "
            "-> efficiency {:.0%} -> {}",
            step_count, expected_turns, turns_taken, efficiency, mastery.value,
        )
        return mastery

    def classify_by_type(self, turns_taken: int, problem_type: str) -> MasteryLevel:
        """Classify against thresholds scaled by the problem type's difficulty."""
        self._validate_turns(turns_taken)

        multiplier = get_difficulty_multiplier(problem_type)
        mastered_limit = round_half_up(self.mastered_threshold * multiplier)
        competent_limit = round_half_up(self.competent_threshold * multiplier)

        mastery = self._classify_turns(turns_taken, mastered_limit, competent_limit)
        logger.debug(
            "Type-adjusted mastery: {} (x{}), thresholds {}/{}, turns {} -> {}",
            problem_type, multiplier, mastered_limit, competent_limit,
            turns_taken, mastery.value,
        )
        return mastery

    def classify_basic(self, turns_taken: int) -> MasteryLevel:
        """Classify against the unscaled turn thresholds."""
        self._validate_turns(turns_taken)
        mastery = self._classify_turns(
            turns_taken, self.mastered_threshold, self.competent_threshold
        )
        logger.debug("Basic mastery: turns {} -> {}", turns_taken, mastery.value)
        return mastery

    @staticmethod
    def _classify_turns(turns_taken: int, mastered_limit: int, competent_limit: int) -> MasteryLevel:
        if turns_taken <= mastered_limit:
            return MasteryLevel.MASTERED
        if turns_taken <= competent_limit:
            return MasteryLevel.COMPETENT
        return MasteryLevel.STRUGGLING

    def apply_struggle_adjustment(
        self,
        base: MasteryLevel,
        signals: StruggleSignals,
    ) -> MasteryLevel:
        """
        Downgrade a base classification according to struggle signals.

        Never upgrades: severe struggle forces struggling, moderate struggle
        drops exactly one level, light struggle keeps the base result.
        """
        score = calculate_struggle_score(signals)

        if score >= self.STRUGGLE_SEVERE:
            adjusted = MasteryLevel.STRUGGLING
        elif score >= self.STRUGGLE_MODERATE:
            adjusted = base.downgrade()
        else:
            adjusted = base

        logger.debug(
            "Struggle adjustment: hints={}, mistakes={}, clarifications={} "
            "-> score {:.0%}, {} -> {}",
            signals.hints_requested, signals.incorrect_attempts,
            signals.clarification_requests, score, base.value, adjusted.value,
        )
        return adjusted

    def classify(
        self,
        turns_taken: int,
        problem_type: str | None = None,
        step_count: int | None = None,
        struggle_signals: StruggleSignals | None = None,
    ) -> MasteryLevel:
        """
        Classify an attempt with the most specific strategy available.

        Args:
            turns_taken: Learner-side exchanges needed to solve (>= 1)
            problem_type: Optional problem-type label for difficulty scaling
            step_count: Optional number of steps in the reference solution
            struggle_signals: Optional struggle indicators for the downgrade pass

        Returns:
            MasteryLevel
        """
        if step_count is not None:
            base = self.classify_by_steps(turns_taken, step_count)
        elif problem_type:
            base = self.classify_by_type(turns_taken, problem_type)
        else:
            base = self.classify_basic(turns_taken)

        if struggle_signals is None:
            return base
        return self.apply_struggle_adjustment(base, struggle_signals)


def classify_mastery(
    turns_taken: int,
    problem_type: str | None = None,
    step_count: int | None = None,
    struggle_signals: StruggleSignals | None = None,
) -> MasteryLevel:
    """Classify an attempt using thresholds from the current settings."""
    return MasteryClassifier().classify(
        turns_taken,
        problem_type=problem_type,
        step_count=step_count,
        struggle_signals=struggle_signals,
    )
