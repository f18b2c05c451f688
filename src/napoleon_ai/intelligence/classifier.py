"""Heuristic urgent/question/normal classification for inbox messages."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from napoleon_ai.core.models import Classification, MessagePriority, MessageSource

from .vocabulary import DEFAULT_VOCABULARY, KeywordVocabulary, first_match

# Attribute names tried in order for each logical field. Mapping payloads
# coming straight from the UI use ``content``; canonical messages use ``snippet``.
_FIELD_ALIASES = {
    "subject": ("subject",),
    "content": ("content", "snippet"),
    "sender": ("sender",),
    "sender_email": ("sender_email", "senderEmail"),
    "channel": ("channel",),
    "source": ("source",),
}


def classify(
    message: Any,
    vip_senders: Iterable[str] = (),
    *,
    vocabulary: KeywordVocabulary = DEFAULT_VOCABULARY,
) -> MessagePriority:
    """Return the coarse priority bucket for ``message``."""
    return classify_with_reason(message, vip_senders, vocabulary=vocabulary).priority


def classify_with_reason(
    message: Any,
    vip_senders: Iterable[str] = (),
    *,
    vocabulary: KeywordVocabulary = DEFAULT_VOCABULARY,
) -> Classification:
    """Classify ``message`` and report which rule decided the bucket."""
    sender = _field(message, "sender").lower()
    sender_email = _field(message, "sender_email").lower()
    content = f"{_field(message, 'subject')} {_field(message, 'content')}".lower()

    for vip in vip_senders:
        needle = vip.strip().lower()
        if needle and (needle in sender or needle in sender_email):
            return Classification(MessagePriority.URGENT, f"VIP sender '{vip}'")

    keyword = first_match(content, vocabulary.urgent_keywords)
    if keyword:
        return Classification(MessagePriority.URGENT, f"urgent keyword '{keyword}'")

    title = first_match(sender, vocabulary.executive_titles) or first_match(
        sender_email, vocabulary.executive_titles
    )
    if title:
        return Classification(MessagePriority.URGENT, f"executive sender '{title}'")

    if _field(message, "source").lower() == MessageSource.SLACK.value:
        channel = first_match(_field(message, "channel").lower(), vocabulary.vip_channels)
        if channel:
            return Classification(MessagePriority.URGENT, f"VIP channel '{channel}'")

    indicator = first_match(content, vocabulary.question_indicators)
    if indicator:
        return Classification(MessagePriority.QUESTION, f"question '{indicator}'")

    return Classification(MessagePriority.NORMAL)


class HeuristicClassifier:
    """Classifier bound to a VIP allow-list and keyword vocabulary."""

    def __init__(
        self,
        vip_senders: Iterable[str] = (),
        *,
        vocabulary: KeywordVocabulary = DEFAULT_VOCABULARY,
    ) -> None:
        self._vip_senders = tuple(vip_senders)
        self._vocabulary = vocabulary

    @property
    def vip_senders(self) -> tuple[str, ...]:
        return self._vip_senders

    def classify(self, message: Any) -> MessagePriority:
        return classify(message, self._vip_senders, vocabulary=self._vocabulary)

    def classify_with_reason(self, message: Any) -> Classification:
        return classify_with_reason(
            message, self._vip_senders, vocabulary=self._vocabulary
        )


def _field(message: Any, name: str) -> str:
    for alias in _FIELD_ALIASES[name]:
        if isinstance(message, Mapping):
            value = message.get(alias)
        else:
            value = getattr(message, alias, None)
        if value is None:
            continue
        if isinstance(value, MessageSource):
            return value.value
        return str(value)
    return ""


__all__ = ["HeuristicClassifier", "classify", "classify_with_reason"]
