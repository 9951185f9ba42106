"""
Rule-based topic classifier kept as a backstop for the weighted scorer.

Rules are checked in order and the first match wins, which makes it cruder
than the weighted scorer (e.g. any '<' beats most other cues).
"""

from __future__ import annotations

import re

from practice_engine.core.topics import DEFAULT_TOPIC, Topic

_LINEAR_PATTERN = re.compile(r"\d*x\s*[+\-]\s*\d+\s*=")
_EXPONENT_PATTERN = re.compile(r"\^\d")

WORD_PROBLEM_MIN_LENGTH = 100


def _has_any(text: str, *needles: str) -> bool:
    return any(needle in text for needle in needles)


def infer_topic_legacy(problem_text: str) -> Topic:
    text = problem_text.lower()

    if (
        _has_any(text, "solve", "find")
        and _LINEAR_PATTERN.search(text)
        and not _has_any(text, "x²", "x^2")
    ):
        return Topic.LINEAR_EQUATIONS

    if _has_any(text, "x²", "x^2", "quadratic", "parabola"):
        return Topic.QUADRATIC_EQUATIONS

    if (
        ("system" in text and "equation" in text)
        or "solve for x and y" in text
        or text.count("equation") >= 2
    ):
        return Topic.SYSTEMS_OF_EQUATIONS

    if _has_any(text, "<", ">", "inequality"):
        return Topic.INEQUALITIES

    if _has_any(text, "|", "absolute"):
        return Topic.ABSOLUTE_VALUE

    if _has_any(text, "f(x)", "g(x)", "function", "domain", "range"):
        return Topic.FUNCTIONS

    if _EXPONENT_PATTERN.search(text) or _has_any(text, "exponent", "power"):
        return Topic.EXPONENTS

    if _has_any(text, "√", "radical", "square root"):
        return Topic.RADICALS

    if _has_any(text, "polynomial", "factor"):
        return Topic.POLYNOMIALS

    if len(text) > WORD_PROBLEM_MIN_LENGTH and _has_any(text, "if", "how many", "calculate"):
        return Topic.WORD_PROBLEMS

    if _has_any(text, "triangle", "circle", "area", "perimeter", "volume"):
        return Topic.GEOMETRY

    if _has_any(text, "sin", "cos", "tan", "angle"):
        return Topic.TRIGONOMETRY

    if _has_any(text, "derivative", "integral", "limit", "dx"):
        return Topic.CALCULUS

    return DEFAULT_TOPIC
