"""Keyword-based numeric priority scoring with time decay."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from napoleon_ai.core.datetime_utils import hours_between, utc_now
from napoleon_ai.core.models import (
    CanonicalMessage,
    MessagePriority,
    MessageSource,
    NormalizedMessage,
    PriorityStats,
)
from napoleon_ai.ingestion.normalizer import MessageNormalizer

from .vocabulary import DEFAULT_VOCABULARY, KeywordVocabulary, contains_any

URGENT_POINTS = 100
VIP_TITLE_POINTS = 60
VIP_DOMAIN_POINTS = 40
IMPORTANT_CHANNEL_POINTS = 40
DIRECT_MESSAGE_POINTS = 20
QUESTION_POINTS = 25
MEETING_POINTS = 20
BUSINESS_POINTS = 30
SECURITY_POINTS = 40
PROMOTIONAL_PENALTY = -30

DECAY_WINDOW_HOURS = 168
MIN_DECAY = 0.1

URGENT_THRESHOLD = 60
QUESTION_THRESHOLD = 20


def decay_factor(received_at: datetime, now: datetime) -> float:
    """Linear decay from 1.0 to ``MIN_DECAY`` across a week of age."""
    hours_old = max(0.0, hours_between(received_at, now))
    return max(MIN_DECAY, 1 - hours_old / DECAY_WINDOW_HOURS)


def raw_score(
    message: CanonicalMessage, *, vocabulary: KeywordVocabulary = DEFAULT_VOCABULARY
) -> int:
    """Sum the keyword group points for ``message`` before decay."""
    content = f"{message.subject} {message.snippet}".lower()
    sender = message.sender.lower()
    score = 0

    if contains_any(content, vocabulary.scoring_urgent_keywords):
        score += URGENT_POINTS
    if contains_any(sender, vocabulary.scoring_vip_titles):
        score += VIP_TITLE_POINTS
    if contains_any(sender, vocabulary.scoring_vip_domains):
        score += VIP_DOMAIN_POINTS

    if message.source is MessageSource.SLACK:
        if contains_any(sender, vocabulary.scoring_important_channels):
            score += IMPORTANT_CHANNEL_POINTS
        if "dm with" in sender:
            score += DIRECT_MESSAGE_POINTS

    if contains_any(content, vocabulary.scoring_question_indicators):
        score += QUESTION_POINTS
    if contains_any(content, vocabulary.meeting_keywords):
        score += MEETING_POINTS
    if contains_any(content, vocabulary.business_keywords):
        score += BUSINESS_POINTS
    if contains_any(content, vocabulary.security_keywords):
        score += SECURITY_POINTS
    if contains_any(content, vocabulary.promotional_indicators):
        score += PROMOTIONAL_PENALTY

    return score


def score_priority(
    message: CanonicalMessage,
    *,
    now: datetime | None = None,
    vocabulary: KeywordVocabulary = DEFAULT_VOCABULARY,
) -> int:
    """Return the decayed, non-negative priority score for ``message``."""
    current = now or utc_now()
    decayed = math.floor(
        raw_score(message, vocabulary=vocabulary)
        * decay_factor(message.received_at, current)
    )
    return max(0, decayed)


def score_messages(
    messages: Iterable[CanonicalMessage],
    *,
    now: datetime | None = None,
    vocabulary: KeywordVocabulary = DEFAULT_VOCABULARY,
) -> list[NormalizedMessage]:
    """Score messages and rank them by score, then recency, both descending."""
    current = now or utc_now()
    scored = [
        NormalizedMessage(
            message=message,
            priority_score=score_priority(message, now=current, vocabulary=vocabulary),
        )
        for message in messages
    ]
    scored.sort(key=lambda item: (item.priority_score, item.received_at), reverse=True)
    return scored


def normalize_messages(
    gmail_payload: Mapping[str, Any] | None = None,
    slack_payload: Mapping[str, Any] | None = None,
    *,
    now: datetime | None = None,
) -> list[NormalizedMessage]:
    """Normalize both provider payloads and return the ranked inbox."""
    report = MessageNormalizer().normalize(gmail_payload, slack_payload)
    return score_messages(report.messages, now=now)


def priority_bucket(score: int) -> MessagePriority:
    """Map a numeric score onto the unified inbox buckets."""
    if score >= URGENT_THRESHOLD:
        return MessagePriority.URGENT
    if score >= QUESTION_THRESHOLD:
        return MessagePriority.QUESTION
    return MessagePriority.NORMAL


def summarize_priorities(messages: Iterable[NormalizedMessage]) -> PriorityStats:
    """Count scored messages per bucket and per provider."""
    stats = PriorityStats(sources={"google": 0, "slack": 0})
    for item in messages:
        bucket = priority_bucket(item.priority_score)
        if bucket is MessagePriority.URGENT:
            stats.urgent += 1
        elif bucket is MessagePriority.QUESTION:
            stats.question += 1
        else:
            stats.normal += 1
        stats.sources[item.provider] = stats.sources.get(item.provider, 0) + 1
    return stats


__all__ = [
    "decay_factor",
    "normalize_messages",
    "priority_bucket",
    "raw_score",
    "score_messages",
    "score_priority",
    "summarize_priorities",
]
