"""Core domain models used across the application."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class MessageSource(str, Enum):
    """Upstream provider a message was fetched from."""

    GMAIL = "gmail"
    SLACK = "slack"

    @property
    def provider(self) -> str:
        """Provider name used by the numeric scoring pipeline."""
        return "google" if self is MessageSource.GMAIL else "slack"


class MessagePriority(str, Enum):
    """Coarse priority bucket shown in the unified inbox."""

    URGENT = "urgent"
    QUESTION = "question"
    NORMAL = "normal"


class PriorityTier(str, Enum):
    """Executive priority tier derived from a 0-10 score."""

    GOLD = "gold"
    SILVER = "silver"
    BRONZE = "bronze"
    STANDARD = "standard"

    @property
    def rank(self) -> int:
        """Ordering helper, higher is more important."""
        return _TIER_RANKS[self]


_TIER_RANKS = {
    PriorityTier.GOLD: 3,
    PriorityTier.SILVER: 2,
    PriorityTier.BRONZE: 1,
    PriorityTier.STANDARD: 0,
}


# pylint: disable=too-many-instance-attributes
@dataclass(frozen=True, slots=True)
class CanonicalMessage:
    """Provider-neutral message produced by the normalizer."""

    id: str
    source: MessageSource
    subject: str
    sender: str
    snippet: str
    received_at: datetime
    sender_email: str | None = None
    channel: str | None = None
    thread_id: str | None = None
    participants: tuple[str, ...] = ()
    labels: frozenset[str] = frozenset()
    unread_count: int = 0
    has_attachments: bool = False

    @property
    def key(self) -> tuple[str, str]:
        """Globally unique identity of the message."""
        return (self.source.value, self.id)


@dataclass(frozen=True, slots=True)
class EmailThread:
    """Conversation view consumed by the AI-backed scorer."""

    id: str
    subject: str
    snippet: str
    participants: tuple[str, ...]
    unread_count: int
    last_activity: datetime
    has_attachments: bool = False
    labels: frozenset[str] = frozenset()


@dataclass(frozen=True, slots=True)
class AIAnalysis:
    """Structured output of a language-model thread analysis."""

    id: str
    thread_id: str
    priority_score: float
    category: str
    summary: str
    key_points: tuple[str, ...]
    suggested_actions: tuple[str, ...]
    sentiment: str
    confidence_score: float
    created_at: datetime


@dataclass(frozen=True, slots=True)
class ScoredThread:
    """Thread paired with its analysis, final score and tier."""

    thread: EmailThread
    analysis: AIAnalysis
    priority_score: float
    priority_tier: PriorityTier
    boost_reason: str | None = None
    boosted_score: float | None = None


@dataclass(frozen=True, slots=True)
class NormalizedMessage:
    """Message with its keyword-based numeric priority score."""

    message: CanonicalMessage
    priority_score: int

    @property
    def id(self) -> str:
        return self.message.id

    @property
    def provider(self) -> str:
        return self.message.source.provider

    @property
    def subject(self) -> str:
        return self.message.subject

    @property
    def sender(self) -> str:
        return self.message.sender

    @property
    def snippet(self) -> str:
        return self.message.snippet

    @property
    def received_at(self) -> datetime:
        return self.message.received_at


@dataclass(frozen=True, slots=True)
class Classification:
    """Heuristic priority bucket together with the rule that produced it."""

    priority: MessagePriority
    reason: str | None = None


@dataclass(slots=True)
class PriorityStats:
    """Bucket and provider counts for a scored inbox."""

    urgent: int = 0
    question: int = 0
    normal: int = 0
    sources: dict[str, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return self.urgent + self.question + self.normal


@dataclass(frozen=True, slots=True)
class PriorityAssessment:
    """Outcome of one scoring strategy for one message."""

    message_id: str
    strategy: str
    label: str
    score: float
    reason: str | None = None


__all__ = [
    "AIAnalysis",
    "CanonicalMessage",
    "Classification",
    "EmailThread",
    "MessagePriority",
    "MessageSource",
    "NormalizedMessage",
    "PriorityAssessment",
    "PriorityStats",
    "PriorityTier",
    "ScoredThread",
]
