"""Parse provider payloads into canonical messages and threads."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from ..core.datetime_utils import ensure_utc
from ..core.models import CanonicalMessage, EmailThread, MessageSource

LOGGER = logging.getLogger(__name__)

_EPOCH_PATTERN = re.compile(r"^\d+(\.\d+)?$")


class _RawMessage(BaseModel):
    """Loosely shaped provider record validated at the ingestion boundary."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)
    subject: str | None = None
    sender: str | None = None
    snippet: str | None = Field(
        default=None, validation_alias=AliasChoices("snippet", "text")
    )
    received_at: datetime = Field(
        validation_alias=AliasChoices("received_at", "receivedAt", "ts")
    )
    sender_email: str | None = Field(
        default=None, validation_alias=AliasChoices("sender_email", "senderEmail")
    )
    channel: str | None = None
    thread_id: str | None = Field(
        default=None, validation_alias=AliasChoices("thread_id", "threadId")
    )
    participants: list[str] = Field(default_factory=list)
    labels: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("labels", "label_ids", "labelIds"),
    )
    unread_count: int = Field(
        default=0, ge=0, validation_alias=AliasChoices("unread_count", "unreadCount")
    )
    has_attachments: bool = Field(
        default=False,
        validation_alias=AliasChoices("has_attachments", "hasAttachments"),
    )

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("received_at", mode="before")
    @classmethod
    def _coerce_epoch(cls, value: Any) -> Any:
        if isinstance(value, str) and _EPOCH_PATTERN.match(value.strip()):
            return float(value)
        return value

    @field_validator("received_at")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


@dataclass(slots=True)
class RejectedRecord:
    """Provider record that failed validation and was quarantined."""

    source: MessageSource
    index: int
    raw_id: str | None
    reason: str


@dataclass(slots=True)
class NormalizationReport:
    """Messages accepted from a payload together with quarantined records."""

    messages: list[CanonicalMessage] = field(default_factory=list)
    rejected: list[RejectedRecord] = field(default_factory=list)

    def extend(self, other: NormalizationReport) -> None:
        self.messages.extend(other.messages)
        self.rejected.extend(other.rejected)


class MessageNormalizer:
    """Convert Gmail- and Slack-shaped payloads into canonical messages."""

    def normalize_gmail(self, payload: Mapping[str, Any] | None) -> NormalizationReport:
        """Normalize a ``{"messages": [...]}`` payload fetched from Gmail."""
        return self._normalize(payload, MessageSource.GMAIL)

    def normalize_slack(self, payload: Mapping[str, Any] | None) -> NormalizationReport:
        """Normalize a ``{"messages": [...]}`` payload fetched from Slack."""
        return self._normalize(payload, MessageSource.SLACK)

    def normalize(
        self,
        gmail_payload: Mapping[str, Any] | None = None,
        slack_payload: Mapping[str, Any] | None = None,
    ) -> NormalizationReport:
        """Normalize both providers into a single report, Gmail first."""
        report = NormalizationReport()
        if gmail_payload:
            report.extend(self.normalize_gmail(gmail_payload))
        if slack_payload:
            report.extend(self.normalize_slack(slack_payload))
        return report

    def _normalize(
        self, payload: Mapping[str, Any] | None, source: MessageSource
    ) -> NormalizationReport:
        report = NormalizationReport()
        records = payload.get("messages") if isinstance(payload, Mapping) else None
        if not isinstance(records, list):
            return report

        for index, record in enumerate(records):
            try:
                raw = _RawMessage.model_validate(record)
            except PydanticValidationError as exc:
                rejected = RejectedRecord(
                    source=source,
                    index=index,
                    raw_id=_raw_id(record),
                    reason=_describe_error(exc),
                )
                LOGGER.warning(
                    "Quarantined %s record #%s (id=%s): %s",
                    source.value,
                    index,
                    rejected.raw_id,
                    rejected.reason,
                )
                report.rejected.append(rejected)
                continue
            report.messages.append(_to_canonical(raw, source))

        LOGGER.debug(
            "Normalized %d %s message(s), rejected %d",
            len(report.messages),
            source.value,
            len(report.rejected),
        )
        return report


def thread_from_message(message: CanonicalMessage) -> EmailThread:
    """Project a canonical message onto the thread view used by the AI scorer.

    Thread ids are prefixed with the provider, since message ids are only
    unique per source.
    """
    participants = message.participants
    if not participants:
        participants = (message.sender_email or message.sender,)
    return EmailThread(
        id=f"{message.source.value}:{message.thread_id or message.id}",
        subject=message.subject,
        snippet=message.snippet,
        participants=participants,
        unread_count=message.unread_count,
        last_activity=message.received_at,
        has_attachments=message.has_attachments,
        labels=message.labels,
    )


def _to_canonical(raw: _RawMessage, source: MessageSource) -> CanonicalMessage:
    if source is MessageSource.GMAIL:
        sender = raw.sender or "Unknown Sender"
        subject = raw.subject or "No Subject"
    else:
        sender = raw.sender or "Unknown Channel"
        subject = raw.subject or f"Message from {sender}"
    return CanonicalMessage(
        id=raw.id,
        source=source,
        subject=subject,
        sender=sender,
        snippet=raw.snippet or "",
        received_at=raw.received_at,
        sender_email=raw.sender_email,
        channel=raw.channel,
        thread_id=raw.thread_id,
        participants=tuple(raw.participants),
        labels=frozenset(raw.labels),
        unread_count=raw.unread_count,
        has_attachments=raw.has_attachments,
    )


def _raw_id(record: Any) -> str | None:
    if isinstance(record, Mapping) and record.get("id") is not None:
        return str(record["id"])
    return None


def _describe_error(exc: PydanticValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error["loc"]) or "record"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


__all__ = [
    "MessageNormalizer",
    "NormalizationReport",
    "RejectedRecord",
    "thread_from_message",
]
