"""Application configuration models and loader utilities."""

from __future__ import annotations

import os
from collections.abc import Iterable
from functools import lru_cache
from pathlib import Path
from typing import Any, cast

from dotenv import dotenv_values
from pydantic import BaseModel, Field, field_validator


class LlmSettings(BaseModel):
    """Settings for the local LLM provider backing thread analysis."""

    base_url: str = Field(
        default="http://localhost:11434", description="Ollama server URL"
    )
    model: str = Field(default="gpt-oss:20b", description="Model identifier")
    timeout_seconds: int = Field(
        default=30, description="Request timeout for LLM calls"
    )
    temperature: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Sampling temperature for LLM completions",
    )
    max_output_tokens: int | None = Field(
        default=800,
        ge=32,
        description="Maximum tokens to request from the provider",
    )


class LoggingSettings(BaseModel):
    """Logging preferences."""

    level: str = Field(default="INFO", description="Root logging level")
    structured: bool = Field(
        default=False, description="Toggle JSON structured logging"
    )


class ScoringSettings(BaseModel):
    """Settings shared by the heuristic, numeric and AI-backed scorers."""

    vip_senders: tuple[str, ...] = Field(
        default=(),
        description="Sender names or addresses always treated as urgent",
    )
    batch_size: int = Field(
        default=5, ge=1, description="Threads scored concurrently per batch"
    )
    batch_delay_seconds: float = Field(
        default=0.2, ge=0.0, description="Pause between batches of analyzer calls"
    )

    @field_validator("vip_senders", mode="before")
    @classmethod
    def _split_vip_senders(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, str):
            return tuple(item.strip() for item in value.split(",") if item.strip())
        return value


class BoostSettings(BaseModel):
    """Additive boosts applied on top of the analyzer's base score."""

    c_level_participants: float = Field(
        default=0.8, description="Boost when an executive takes part in a thread"
    )
    time_sensitive_keywords: float = Field(
        default=0.5, description="Boost for deadline or urgency wording"
    )
    high_priority_labels: float = Field(
        default=0.4, description="Boost for IMPORTANT-style provider labels"
    )
    unread_messages: float = Field(
        default=0.2, description="Boost when the thread has unread messages"
    )
    unread_priority_category: float = Field(
        default=0.2,
        description="Extra boost for unread threads categorised urgent/important",
    )
    recent_activity: float = Field(
        default=0.1, description="Boost for activity inside the recency window"
    )
    recent_activity_hours: float = Field(
        default=4.0, gt=0.0, description="Width of the recency window in hours"
    )
    important_attachments: float = Field(
        default=0.1, description="Boost for attachments on important threads"
    )
    attachment_min_score: float = Field(
        default=6.0, description="Base score required for the attachment boost"
    )


class CacheSettings(BaseModel):
    """Bounds for the per-thread analysis cache."""

    max_entries: int = Field(
        default=1024, ge=1, description="Analyses kept before evicting the oldest"
    )
    ttl_seconds: int | None = Field(
        default=600,
        ge=1,
        description="Seconds an analysis stays valid; empty disables expiry",
    )


class AppSettings(BaseModel):
    """Aggregated application configuration."""

    llm: LlmSettings = Field(default_factory=LlmSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    scoring: ScoringSettings = Field(default_factory=ScoringSettings)
    boosts: BoostSettings = Field(default_factory=BoostSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)


ENV_PREFIX = "NAPOLEON_AI_"
_BOOLEAN_WORDS = {"true": True, "false": False}


def _setting_path(key: str) -> list[str]:
    """Split ``NAPOLEON_AI_SECTION__FIELD`` into ``["section", "field"]``."""
    return [part.lower() for part in key.removeprefix(ENV_PREFIX).split("__") if part]


def _coerce(value: str | None) -> Any:
    """Blank strings disable a setting; true/false become booleans."""
    if value is None or value == "":
        return None
    return _BOOLEAN_WORDS.get(value.lower(), value)


def _prefixed(items: Iterable[tuple[str | None, str | None]]) -> dict[str, str | None]:
    return {key: value for key, value in items if key and key.startswith(ENV_PREFIX)}


def _collect_env_values(
    env_file: Path | str | None, *, include_environment: bool = True
) -> dict[str, Any]:
    """Build the nested settings tree from an env file and the process environment.

    Process environment values win over values read from ``env_file``.
    """
    raw: dict[str, str | None] = {}
    if env_file and Path(env_file).is_file():
        raw.update(_prefixed(dotenv_values(env_file).items()))
    if include_environment:
        raw.update(_prefixed(os.environ.items()))

    tree: dict[str, Any] = {}
    for key, value in raw.items():
        path = _setting_path(key)
        if not path:
            continue
        node = tree
        for section in path[:-1]:
            node = cast(dict[str, Any], node.setdefault(section, {}))
        node[path[-1]] = _coerce(value)
    return tree


@lru_cache(maxsize=1)
def load_app_settings(
    env_file: Path | str | None = None,
    include_environment: bool = True,
    **overrides: Any,
) -> AppSettings:
    """Load application settings, applying env files and overrides."""
    collected = _collect_env_values(env_file, include_environment=include_environment)
    if overrides:
        collected.update(overrides)
    return AppSettings.model_validate(collected)


__all__ = [
    "AppSettings",
    "BoostSettings",
    "CacheSettings",
    "LlmSettings",
    "LoggingSettings",
    "ScoringSettings",
    "load_app_settings",
]
