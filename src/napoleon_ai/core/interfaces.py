"""Protocol interfaces and shared errors for decoupling components."""

from __future__ import annotations

from typing import Protocol

from .models import AIAnalysis, CanonicalMessage, EmailThread, PriorityAssessment


class ValidationError(ValueError):
    """Raised when scorer input or analyzer output fails validation."""


class AnalyzerError(RuntimeError):
    """Raised by analyzer implementations when a thread cannot be analysed."""


class ThreadAnalyzer(Protocol):
    """Capability producing an :class:`AIAnalysis` for a thread."""

    async def analyze_thread(self, thread: EmailThread) -> AIAnalysis:
        """Analyse ``thread`` and return its structured assessment."""
        raise NotImplementedError


class PriorityStrategy(Protocol):
    """Interchangeable way of ranking canonical messages."""

    @property
    def name(self) -> str:
        """Short identifier reported in assessments."""
        raise NotImplementedError

    async def assess(self, message: CanonicalMessage) -> PriorityAssessment:
        """Return the priority assessment for ``message``."""
        raise NotImplementedError


__all__ = [
    "AnalyzerError",
    "PriorityStrategy",
    "ThreadAnalyzer",
    "ValidationError",
]
