"""
Semantic topic classifier backed by an OpenAI-compatible chat-completions API.

One request per problem: the prompt lists the allowed topic labels and the
reply must contain exactly one of them (case-insensitive containment). Any
other outcome (timeout, HTTP error, empty or unknown reply) raises
ExternalClassifierError for the caller's fallback chain. No retries here.

Usage:
    async with SemanticTopicClassifier() as classifier:
        topic = await classifier.classify("Find the derivative of x^3")
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import httpx
from loguru import logger

from practice_engine.config import get_settings
from practice_engine.core.errors import ExternalClassifierError
from practice_engine.core.topics import Topic

# Order matters for containment matching of the reply
ALLOWED_TOPICS: tuple[Topic, ...] = (
    Topic.LINEAR_EQUATIONS,
    Topic.QUADRATIC_EQUATIONS,
    Topic.SYSTEMS_OF_EQUATIONS,
    Topic.INEQUALITIES,
    Topic.ABSOLUTE_VALUE,
    Topic.POLYNOMIALS,
    Topic.RATIONAL_EXPRESSIONS,
    Topic.RADICALS,
    Topic.EXPONENTS,
    Topic.FUNCTIONS,
    Topic.GRAPHING,
    Topic.CALCULUS,
    Topic.TRIGONOMETRY,
    Topic.GEOMETRY,
    Topic.WORD_PROBLEMS,
)

SYSTEM_PROMPT = (
    "You are a math education expert that classifies math problems "
    "into specific categories."
)

USER_PROMPT_TEMPLATE = """Classify the following math problem into ONE of these categories:

{labels}

Problem: "{problem}"

Rules:
- Choose the MOST SPECIFIC category that fits
- If multiple categories apply, choose the PRIMARY focus
- Respond with ONLY the category name, no explanation

Category:"""

TEMPERATURE = 0.3
MAX_TOKENS = 20


def build_messages(problem_text: str, allowed: Sequence[Topic] = ALLOWED_TOPICS) -> list[dict[str, str]]:
    labels = ", ".join(topic.value for topic in allowed)
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": USER_PROMPT_TEMPLATE.format(labels=labels, problem=problem_text)},
    ]


def match_topic_label(reply: str, allowed: Sequence[Topic] = ALLOWED_TOPICS) -> Topic | None:
    """First allowed label contained in the reply, ignoring case."""
    normalized = reply.strip().lower()
    for topic in allowed:
        if topic.value in normalized:
            return topic
    return None


class SemanticTopicClassifier:
    """
    Async client for the external semantic classifier.

    The HTTP client is created lazily and reused; close it with ``close()``
    or by using the classifier as an async context manager.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        timeout_seconds: float | None = None,
        allowed_topics: Sequence[Topic] = ALLOWED_TOPICS,
        client: httpx.AsyncClient | None = None,
    ):
        settings = get_settings()
        self.api_key = api_key or settings.openai_api_key
        self.base_url = (base_url or settings.openai_base_url).rstrip("/")
        self.model = model or settings.topic_classifier_model
        self.timeout_seconds = timeout_seconds or settings.topic_classifier_timeout_seconds
        self.allowed_topics = tuple(allowed_topics)
        self._client = client

    async def __aenter__(self) -> SemanticTopicClassifier:
        self._ensure_client()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout_seconds),
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def classify(self, problem_text: str) -> Topic:
        """
        Ask the external model for the problem's topic.

        Raises:
            ExternalClassifierError: On missing key, transport failure,
                non-200 status, malformed body or an unknown label
        """
        if not self.api_key:
            raise ExternalClassifierError("No API key configured", reason="not_configured")

        client = self._ensure_client()
        payload = {
            "model": self.model,
            "messages": build_messages(problem_text, self.allowed_topics),
            "temperature": TEMPERATURE,
            "max_tokens": MAX_TOKENS,
        }

        logger.debug("Semantic classification request for \"{}...\"", problem_text[:100])
        try:
            response = await client.post(
                f"{self.base_url}/chat/completions",
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout_seconds,
            )
        except httpx.TimeoutException as e:
            raise ExternalClassifierError(f"Classifier timed out: {e}", reason="timeout") from e
        except httpx.RequestError as e:
            raise ExternalClassifierError(f"Classifier request failed: {e}", reason="transport") from e

        if response.status_code != 200:
            raise ExternalClassifierError(
                f"Classifier API error: {response.status_code}", reason="http_status"
            )

        try:
            reply = response.json()["choices"][0]["message"]["content"] or ""
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ExternalClassifierError("Malformed classifier response", reason="malformed") from e

        if not isinstance(reply, str):
            raise ExternalClassifierError("Malformed classifier response", reason="malformed")

        if not reply.strip():
            raise ExternalClassifierError("Empty classifier response", reason="empty")

        topic = match_topic_label(reply, self.allowed_topics)
        if topic is None:
            raise ExternalClassifierError(f"Invalid topic: {reply.strip()!r}", reason="unknown_label")

        logger.debug("Semantic classifier answered {}", topic.value)
        return topic
