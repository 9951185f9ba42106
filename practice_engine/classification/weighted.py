"""
Weighted keyword topic scorer.

Each topic has a keyword set, a weight and a priority tier
(1 = most specific, 4 = most general). A topic's score is

    matched keywords x weight x priority boost (3.0 tier 1, 2.0 tier 2, else 1.0)

The highest score wins. Equal scores go to the topic declared first in
TOPIC_PATTERNS, so the table order is part of the contract. With no match at
all the scorer falls back to linear-equations.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from loguru import logger

from practice_engine.core.topics import DEFAULT_TOPIC, Topic


@dataclass(frozen=True)
class TopicPattern:
    keywords: tuple[str, ...]
    weight: float
    priority: int

    @property
    def priority_boost(self) -> float:
        return PRIORITY_BOOSTS.get(self.priority, 1.0)


@dataclass(frozen=True)
class TopicScore:
    topic: Topic
    score: float
    matched_keywords: tuple[str, ...]


@dataclass
class TopicClassification:
    """Winning topic with a confidence estimate and close runners-up."""

    topic: Topic
    confidence: float
    alternatives: list[Topic] = field(default_factory=list)
    scores: list[TopicScore] = field(default_factory=list)


PRIORITY_BOOSTS: dict[int, float] = {1: 3.0, 2: 2.0}

# Declaration order breaks score ties: first declared wins.
TOPIC_PATTERNS: dict[Topic, TopicPattern] = {
    # Priority 1: most specific
    Topic.INEQUALITIES: TopicPattern(
        keywords=("<", ">", "≤", "≥", "inequality", "greater than", "less than",
                  "at least", "at most", "no more than", "no less than"),
        weight=2.5,
        priority=1,
    ),
    Topic.ABSOLUTE_VALUE: TopicPattern(
        keywords=("|", "absolute value", "absolute", "|x|", "abs("),
        weight=2.5,
        priority=1,
    ),
    Topic.CALCULUS: TopicPattern(
        keywords=("derivative", "integral", "limit", "dx", "dy", "differentiate",
                  "integrate", "tangent line", "rate of change", "area under curve"),
        weight=3.0,
        priority=1,
    ),
    Topic.TRIGONOMETRY: TopicPattern(
        keywords=("sin", "cos", "tan", "csc", "sec", "cot", "angle", "radian",
                  "degree", "triangle sides", "hypotenuse", "opposite", "adjacent"),
        weight=2.5,
        priority=1,
    ),
    # Priority 2: moderately specific
    Topic.SYSTEMS_OF_EQUATIONS: TopicPattern(
        keywords=("system", "two equations", "solve for x and y", "elimination",
                  "substitution", "multiple equations"),
        weight=2.0,
        priority=2,
    ),
    Topic.QUADRATIC_EQUATIONS: TopicPattern(
        keywords=("x²", "x^2", "quadratic", "parabola", "vertex", "factor",
                  "completing the square", "quadratic formula", "discriminant"),
        weight=2.0,
        priority=2,
    ),
    Topic.RATIONAL_EXPRESSIONS: TopicPattern(
        keywords=("fraction", "rational", "numerator", "denominator", "lcd",
                  "common denominator", "rational equation"),
        weight=2.0,
        priority=2,
    ),
    Topic.RADICALS: TopicPattern(
        keywords=("√", "radical", "square root", "cube root", "nth root",
                  "radicand", "simplify radical"),
        weight=2.0,
        priority=2,
    ),
    Topic.GEOMETRY: TopicPattern(
        keywords=("triangle", "circle", "rectangle", "square", "polygon", "area",
                  "perimeter", "volume", "surface area", "angle measure",
                  "parallel", "perpendicular"),
        weight=2.0,
        priority=2,
    ),
    # Priority 3: general algebra
    Topic.POLYNOMIALS: TopicPattern(
        keywords=("polynomial", "factor", "expand", "binomial", "trinomial", "foil",
                  "distribute", "monomial", "degree of polynomial"),
        weight=1.5,
        priority=3,
    ),
    Topic.EXPONENTS: TopicPattern(
        keywords=("^", "exponent", "power", "exponential", "base",
                  "scientific notation", "x^3", "x^4", "x^5"),
        weight=1.5,
        priority=3,
    ),
    Topic.FUNCTIONS: TopicPattern(
        keywords=("f(x)", "g(x)", "function", "domain", "range", "composition",
                  "inverse function", "evaluate", "f(2)"),
        weight=1.5,
        priority=3,
    ),
    Topic.GRAPHING: TopicPattern(
        keywords=("graph", "plot", "coordinate", "x-axis", "y-axis", "intercept",
                  "slope", "line", "curve", "point"),
        weight=1.5,
        priority=3,
    ),
    # Priority 4: very general
    Topic.LINEAR_EQUATIONS: TopicPattern(
        keywords=("solve for x", "solve for y", "isolate", "2x +", "3x -", "= ",
                  "equation", "solve"),
        weight=1.0,
        priority=4,
    ),
    Topic.WORD_PROBLEMS: TopicPattern(
        keywords=("if", "has", "costs", "years old", "how many", "how much", "total",
                  "altogether", "combined", "less than", "more than"),
        weight=1.2,
        priority=4,
    ),
}

ALTERNATIVE_SCORE_RATIO = 0.7
DEFAULT_CONFIDENCE = 0.5


def calculate_topic_scores(problem_text: str) -> list[TopicScore]:
    """
    Score every topic with at least one keyword match.

    Returns candidates sorted by score descending; the sort is stable, so
    equal scores keep TOPIC_PATTERNS order.
    """
    text = problem_text.lower()
    scores: list[TopicScore] = []

    for topic, pattern in TOPIC_PATTERNS.items():
        matched = tuple(kw for kw in pattern.keywords if kw.lower() in text)
        if not matched:
            continue
        scores.append(
            TopicScore(
                topic=topic,
                score=len(matched) * pattern.weight * pattern.priority_boost,
                matched_keywords=matched,
            )
        )

    scores.sort(key=lambda s: s.score, reverse=True)
    return scores


def _preview(problem_text: str, length: int = 50) -> str:
    return problem_text[:length].replace("\n", " ")


def infer_topic_weighted(problem_text: str) -> Topic:
    """Highest-scoring topic, or linear-equations when nothing matches."""
    scores = calculate_topic_scores(problem_text)

    if not scores:
        logger.debug("No keyword matches, defaulting to {}", DEFAULT_TOPIC.value)
        return DEFAULT_TOPIC

    best = scores[0]
    logger.debug(
        "Weighted topic for \"{}...\": {} (top candidates: {})",
        _preview(problem_text),
        best.topic.value,
        " | ".join(f"{s.topic.value} ({s.score:.1f})" for s in scores[:3]),
    )
    return best.topic


def classify_topic_with_confidence(problem_text: str) -> TopicClassification:
    """
    Classify and estimate how clear-cut the decision was.

    Confidence is 1.0 with a single candidate, otherwise
    min(1, 0.5 + (best - second) / best). Alternatives are the other
    candidates scoring at least 70% of the best.
    """
    scores = calculate_topic_scores(problem_text)

    if not scores:
        return TopicClassification(topic=DEFAULT_TOPIC, confidence=DEFAULT_CONFIDENCE)

    best = scores[0]
    if len(scores) == 1:
        confidence = 1.0
    else:
        gap = (best.score - scores[1].score) / best.score
        confidence = min(1.0, DEFAULT_CONFIDENCE + gap)

    threshold = best.score * ALTERNATIVE_SCORE_RATIO
    alternatives = [s.topic for s in scores[1:] if s.score >= threshold]

    return TopicClassification(
        topic=best.topic,
        confidence=confidence,
        alternatives=alternatives,
        scores=scores,
    )


def explain_topic_classification(problem_text: str, limit: int = 5) -> str:
    """Human-readable scoring breakdown of the top candidates."""
    scores = calculate_topic_scores(problem_text)
    header = f'Problem: "{_preview(problem_text, 100)}..."'

    if not scores:
        return f"{header}\nNo keyword matches found. Defaulting to {DEFAULT_TOPIC.value}."

    lines = [header, "", f"Classification Results (top {limit}):"]
    for rank, score in enumerate(scores[:limit], start=1):
        pattern = TOPIC_PATTERNS[score.topic]
        lines.append(f"{rank}. {score.topic.value} (score: {score.score:.2f})")
        lines.append(f"   - Matched keywords: {', '.join(score.matched_keywords)}")
        lines.append(f"   - Weight: {pattern.weight}, Priority: {pattern.priority}")
    lines.append("")
    lines.append(f"Selected: {scores[0].topic.value}")
    return "\n".join(lines)
