"""Keyword tables shared by the classifier and both scorers."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

VOCABULARY_VERSION = "2024.1"


# pylint: disable=too-many-instance-attributes
@dataclass(frozen=True)
class KeywordVocabulary:
    """Lower-case substring tables used for priority detection.

    Tables prefixed ``scoring_`` feed the numeric point table and are broader
    than the classifier's tables: the classifier only needs the strongest
    signals to pick a bucket, while the scorer accumulates many weak ones.
    """

    version: str
    urgent_keywords: tuple[str, ...]
    executive_titles: tuple[str, ...]
    vip_channels: tuple[str, ...]
    question_indicators: tuple[str, ...]
    scoring_urgent_keywords: tuple[str, ...]
    scoring_vip_titles: tuple[str, ...]
    scoring_vip_domains: tuple[str, ...]
    scoring_important_channels: tuple[str, ...]
    scoring_question_indicators: tuple[str, ...]
    meeting_keywords: tuple[str, ...]
    business_keywords: tuple[str, ...]
    security_keywords: tuple[str, ...]
    promotional_indicators: tuple[str, ...]
    time_sensitive_keywords: tuple[str, ...]
    c_level_markers: tuple[str, ...]
    high_priority_labels: frozenset[str]


DEFAULT_VOCABULARY = KeywordVocabulary(
    version=VOCABULARY_VERSION,
    urgent_keywords=(
        "urgent",
        "asap",
        "emergency",
        "critical",
        "deadline",
        "blocked",
        "down",
        "broken",
        "immediately",
        "outage",
        "action required",
        "time sensitive",
    ),
    executive_titles=(
        "ceo",
        "cfo",
        "cto",
        "coo",
        "vp",
        "director",
        "chief",
        "board",
        "founder",
        "president",
    ),
    vip_channels=("general", "incidents", "leadership", "all-hands", "announcements"),
    question_indicators=(
        "?",
        "can you",
        "could you",
        "please advise",
        "how to",
        "lmk",
        "let me know",
        "any update",
        "thoughts on",
    ),
    scoring_urgent_keywords=(
        "urgent",
        "asap",
        "emergency",
        "critical",
        "immediate",
        "breaking",
        "alert",
        "action required",
        "time sensitive",
        "deadline",
        "overdue",
        "escalation",
        "issue",
        "problem",
        "down",
        "failing",
        "broken",
        "incident",
        "outage",
    ),
    scoring_vip_titles=(
        "ceo",
        "cto",
        "cfo",
        "president",
        "director",
        "vp",
        "vice president",
        "manager",
        "lead",
        "head",
        "senior",
        "chief",
        "executive",
    ),
    scoring_vip_domains=("board", "leadership", "executive", "c-suite"),
    scoring_important_channels=(
        "general",
        "announcements",
        "alerts",
        "incidents",
        "leadership",
        "executive",
        "board",
        "all-hands",
    ),
    scoring_question_indicators=(
        "?",
        "please",
        "can you",
        "could you",
        "would you",
        "help",
        "question",
        "how to",
        "what is",
        "how do",
        "where is",
        "when is",
        "why is",
        "need assistance",
    ),
    meeting_keywords=(
        "meeting",
        "calendar",
        "schedule",
        "appointment",
        "call",
        "zoom",
        "teams",
        "conference",
    ),
    business_keywords=(
        "revenue",
        "budget",
        "financial",
        "quarterly",
        "earnings",
        "contract",
        "deal",
        "client",
        "customer",
        "sales",
    ),
    security_keywords=(
        "security",
        "breach",
        "compliance",
        "audit",
        "risk",
        "vulnerability",
        "threat",
        "privacy",
        "gdpr",
        "hipaa",
    ),
    promotional_indicators=(
        "unsubscribe",
        "newsletter",
        "promotion",
        "marketing",
        "automated",
        "no-reply",
        "noreply",
        "do not reply",
    ),
    time_sensitive_keywords=(
        "urgent",
        "asap",
        "immediately",
        "deadline",
        "today",
        "emergency",
        "critical",
        "time-sensitive",
        "time sensitive",
        "expires",
        "due today",
    ),
    c_level_markers=(
        "ceo",
        "cto",
        "cfo",
        "coo",
        "cmo",
        "chief",
        "president",
        "vp",
        "board",
        "director",
        "executive",
    ),
    high_priority_labels=frozenset({"IMPORTANT", "URGENT", "PRIORITY", "FLAGGED"}),
)


def contains_any(text: str, keywords: Iterable[str]) -> bool:
    """Return ``True`` when any keyword occurs in ``text``."""
    return any(keyword in text for keyword in keywords)


def first_match(text: str, keywords: Iterable[str]) -> str | None:
    """Return the first keyword found in ``text``, if any."""
    for keyword in keywords:
        if keyword in text:
            return keyword
    return None


__all__ = [
    "DEFAULT_VOCABULARY",
    "KeywordVocabulary",
    "VOCABULARY_VERSION",
    "contains_any",
    "first_match",
]
