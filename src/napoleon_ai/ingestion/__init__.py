"""Ingestion of provider payloads into canonical records."""

from .normalizer import (
    MessageNormalizer,
    NormalizationReport,
    RejectedRecord,
    thread_from_message,
)

__all__ = [
    "MessageNormalizer",
    "NormalizationReport",
    "RejectedRecord",
    "thread_from_message",
]
