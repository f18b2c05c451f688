"""Thread analyzer that asks an LLM for a structured priority assessment."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from datetime import datetime
from functools import partial
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from napoleon_ai.core.datetime_utils import utc_now
from napoleon_ai.core.interfaces import AnalyzerError, ValidationError
from napoleon_ai.core.models import AIAnalysis, EmailThread

from .llm import LLMClient
from .prompts import ANALYSIS_SYSTEM_PROMPT, build_analysis_prompt

LOGGER = logging.getLogger(__name__)

MAX_SUMMARY_CHARS = 500
MAX_KEY_POINTS = 5
MAX_SUGGESTED_ACTIONS = 4

_FIELD_ERRORS = {
    "priority_score": "Invalid priority score received from AI analysis",
    "category": "Invalid category received from AI analysis",
    "summary": "Invalid summary received from AI analysis",
}


class _AnalysisPayload(BaseModel):
    """Shape of the JSON object the LLM is asked to return."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    priority_score: float = Field(ge=0.0, le=10.0, allow_inf_nan=False)
    category: Literal["urgent", "important", "follow_up", "fyi", "spam"]
    summary: str = Field(min_length=1)
    key_points: list[str] = Field(default_factory=list)
    suggested_actions: list[str] = Field(default_factory=list)
    sentiment: Literal["positive", "neutral", "negative"] = "neutral"
    confidence_score: float = 0.5

    @field_validator("priority_score", mode="before")
    @classmethod
    def _reject_non_numbers(cls, value: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("priority_score must be a number")
        return value

    @field_validator("key_points", "suggested_actions", mode="before")
    @classmethod
    def _string_items(cls, value: Any) -> list[str]:
        if not isinstance(value, list):
            return []
        return [item.strip() for item in value if isinstance(item, str) and item.strip()]

    @field_validator("sentiment", mode="before")
    @classmethod
    def _default_sentiment(cls, value: Any) -> Any:
        if value not in ("positive", "neutral", "negative"):
            return "neutral"
        return value

    @field_validator("confidence_score", mode="before")
    @classmethod
    def _default_confidence(cls, value: Any) -> Any:
        if (
            isinstance(value, bool)
            or not isinstance(value, (int, float))
            or not 0.0 <= value <= 1.0
        ):
            return 0.5
        return value


class LLMThreadAnalyzer:
    """Analyze threads through an :class:`LLMClient` returning JSON."""

    def __init__(
        self,
        llm_client: LLMClient,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._llm_client = llm_client
        self._clock = clock

    @property
    def provider_id(self) -> str:
        return self._llm_client.provider_id

    async def analyze_thread(self, thread: EmailThread) -> AIAnalysis:
        """Run the blocking LLM call off the event loop and parse its answer."""
        if thread is None or not thread.id or not thread.subject:
            raise ValidationError("Thread must have valid ID and subject")

        prompt = build_analysis_prompt(thread, now=self._clock())
        loop = asyncio.get_running_loop()
        raw_output = await loop.run_in_executor(
            None,
            partial(self._llm_client.generate, prompt, system=ANALYSIS_SYSTEM_PROMPT),
        )
        analysis = parse_analysis(raw_output, thread.id, created_at=self._clock())
        LOGGER.info(
            "Analyzed thread %s via %s - score %.1f, category %s",
            thread.id,
            self.provider_id,
            analysis.priority_score,
            analysis.category,
        )
        return analysis


def parse_analysis(raw: str, thread_id: str, *, created_at: datetime) -> AIAnalysis:
    """Validate raw LLM output and convert it into an :class:`AIAnalysis`."""
    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise AnalyzerError("Invalid JSON response from AI analysis") from exc
    if not isinstance(decoded, dict):
        raise AnalyzerError("Invalid analysis response from AI")

    try:
        payload = _AnalysisPayload.model_validate(decoded)
    except PydanticValidationError as exc:
        field = exc.errors()[0]["loc"][0] if exc.errors() else None
        message = _FIELD_ERRORS.get(str(field), "Invalid analysis response from AI")
        if field == "priority_score":
            raise ValidationError(message) from exc
        raise AnalyzerError(message) from exc

    return AIAnalysis(
        id=f"analysis_{thread_id}_{int(created_at.timestamp() * 1000)}",
        thread_id=thread_id,
        priority_score=round(payload.priority_score, 1),
        category=payload.category,
        summary=payload.summary[:MAX_SUMMARY_CHARS],
        key_points=tuple(payload.key_points[:MAX_KEY_POINTS]),
        suggested_actions=tuple(payload.suggested_actions[:MAX_SUGGESTED_ACTIONS]),
        sentiment=payload.sentiment,
        confidence_score=round(payload.confidence_score, 2),
        created_at=created_at,
    )


__all__ = ["LLMThreadAnalyzer", "parse_analysis"]
