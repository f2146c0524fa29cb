"""LLM Provider implementation using Anthropic Claude API."""

import os
import re
from typing import Protocol

import anthropic

from ..config import (
    DEFAULT_ANALYSIS_MODEL,
    DEFAULT_LLM_TIMEOUT_SECONDS,
    env_float,
)
from ..errors import AnalysisError, AnalysisErrorKind
from ..logging_config import get_logger

logger = get_logger(__name__)


# Fallback classification by message text, checked in order.
_ERROR_PATTERNS: list[tuple[re.Pattern, AnalysisErrorKind, str]] = [
    (
        re.compile(r"401|403|api_key_invalid|unauthorized|authentication", re.I),
        AnalysisErrorKind.AUTH,
        "API key is invalid, expired, or lacks necessary permissions.",
    ),
    (
        re.compile(r"429|quota|rate limit|rate_limit", re.I),
        AnalysisErrorKind.RATE_LIMIT,
        "Rate limit reached. Throttling active.",
    ),
    (
        re.compile(r"safety|blocked|refusal", re.I),
        AnalysisErrorKind.POLICY,
        "Analysis aborted. Content flagged by safety filters.",
    ),
    (
        re.compile(r"fetch|network|dns|connection|timed out|timeout", re.I),
        AnalysisErrorKind.NETWORK,
        "Failed to reach the model provider.",
    ),
    (
        re.compile(r"500|503|529|unavailable|overloaded", re.I),
        AnalysisErrorKind.UNAVAILABLE,
        "Remote model is currently experiencing high latency or downtime.",
    ),
    (
        re.compile(r"token_limit|max_tokens|max_output_tokens|context length", re.I),
        AnalysisErrorKind.CAPACITY,
        "Response exceeded model token limits for the current context.",
    ),
]


def classify_error(error: Exception) -> AnalysisError:
    """Map a provider exception onto the AnalysisError taxonomy."""
    if isinstance(error, AnalysisError):
        return error

    if isinstance(error, anthropic.APIConnectionError):
        return AnalysisError(AnalysisErrorKind.NETWORK, str(error))

    if isinstance(error, anthropic.APIStatusError):
        status = error.status_code
        if status in (401, 403):
            return AnalysisError(AnalysisErrorKind.AUTH, str(error))
        if status == 429:
            return AnalysisError(AnalysisErrorKind.RATE_LIMIT, str(error))
        if status >= 500:
            return AnalysisError(AnalysisErrorKind.UNAVAILABLE, str(error))

    text = str(error)
    for pattern, kind, message in _ERROR_PATTERNS:
        if pattern.search(text):
            return AnalysisError(kind, message)

    return AnalysisError(
        AnalysisErrorKind.UNKNOWN,
        text or "An unexpected internal exception occurred.",
    )


class ILLMProvider(Protocol):
    """Abstraction for LLM access."""

    async def complete(
        self,
        messages: list[dict],  # [{"role": "user", "content": "..."}]
        system: str | None = None,
        max_tokens: int = 1024,
        model: str | None = None,
    ) -> str:
        """Generate completion. Raises AnalysisError on failure."""
        ...


class LLMProvider:
    """Anthropic Claude API provider."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
    ):
        self._api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        if not self._api_key:
            raise ValueError("ANTHROPIC_API_KEY environment variable not set")

        self._model = model or os.getenv("ANALYSIS_MODEL", DEFAULT_ANALYSIS_MODEL)
        if timeout is None:
            timeout = env_float("LLM_TIMEOUT_SECONDS", DEFAULT_LLM_TIMEOUT_SECONDS)
        self._client = anthropic.AsyncAnthropic(api_key=self._api_key, timeout=timeout)

    async def complete(
        self,
        messages: list[dict],  # [{"role": "user", "content": "..."}]
        system: str | None = None,
        max_tokens: int = 1024,
        model: str | None = None,
    ) -> str:
        """Generate completion using Claude API."""
        kwargs = {
            "model": model or self._model,
            "messages": messages,
            "max_tokens": max_tokens,
        }
        if system:
            kwargs["system"] = system

        try:
            response = await self._client.messages.create(**kwargs)
        except Exception as e:
            error = classify_error(e)
            logger.error("LLM API error [%s]: %s", error.kind.value, e)
            raise error from e

        text = "".join(
            getattr(block, "text", "") for block in (response.content or [])
        )

        if response.stop_reason == "refusal":
            raise AnalysisError(
                AnalysisErrorKind.POLICY,
                "Analysis aborted. Content flagged by safety filters.",
            )
        if not text:
            if response.stop_reason == "max_tokens":
                raise AnalysisError(
                    AnalysisErrorKind.CAPACITY,
                    "Response exceeded model token limits for the current context.",
                )
            raise AnalysisError(
                AnalysisErrorKind.EMPTY,
                "The model returned a null or empty completion.",
            )

        return text
