"""Executive priority scoring backed by AI thread analysis."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from napoleon_ai.core.config import AppSettings, BoostSettings
from napoleon_ai.core.datetime_utils import ensure_utc, utc_now
from napoleon_ai.core.interfaces import ThreadAnalyzer, ValidationError
from napoleon_ai.core.models import AIAnalysis, EmailThread, PriorityTier, ScoredThread

from .batch import BatchScorer, ThreadScoreOutcome
from .cache import AnalysisCache
from .vocabulary import DEFAULT_VOCABULARY, KeywordVocabulary, contains_any

LOGGER = logging.getLogger(__name__)

MIN_SCORE = 0.0
MAX_SCORE = 10.0

GOLD_THRESHOLD = 9.0
SILVER_THRESHOLD = 7.0
BRONZE_THRESHOLD = 4.0

_PRIORITY_CATEGORIES = frozenset({"urgent", "important"})


@dataclass(frozen=True, slots=True)
class TierInfo:
    """Display copy for a priority tier."""

    name: str
    description: str


_TIER_INFO = {
    PriorityTier.GOLD: TierInfo(
        "Gold Priority", "Requires immediate executive attention"
    ),
    PriorityTier.SILVER: TierInfo("Silver Priority", "Important business matter"),
    PriorityTier.BRONZE: TierInfo(
        "Bronze Priority", "Routine business communication"
    ),
    PriorityTier.STANDARD: TierInfo("Standard Priority", "Informational content"),
}


def get_priority_tier(score: float) -> PriorityTier:
    """Map a 0-10 score onto its tier; each band includes its lower bound."""
    if score >= GOLD_THRESHOLD:
        return PriorityTier.GOLD
    if score >= SILVER_THRESHOLD:
        return PriorityTier.SILVER
    if score >= BRONZE_THRESHOLD:
        return PriorityTier.BRONZE
    return PriorityTier.STANDARD


def tier_info(tier: PriorityTier) -> TierInfo:
    """Return the display name and description for ``tier``."""
    return _TIER_INFO[tier]


def apply_boosts(
    thread: EmailThread,
    analysis: AIAnalysis,
    boosts: BoostSettings,
    *,
    now: datetime,
    vocabulary: KeywordVocabulary = DEFAULT_VOCABULARY,
) -> tuple[float, list[str]]:
    """Return the boosted (unclamped) score and the names of the boosts applied."""
    base = analysis.priority_score
    score = base
    reasons: list[str] = []

    participants = [participant.lower() for participant in thread.participants]
    if any(contains_any(item, vocabulary.c_level_markers) for item in participants):
        score += boosts.c_level_participants
        reasons.append("C-level participants")

    text = f"{thread.subject} {thread.snippet}".lower()
    if contains_any(text, vocabulary.time_sensitive_keywords):
        score += boosts.time_sensitive_keywords
        reasons.append("time-sensitive keywords")

    if any(label.upper() in vocabulary.high_priority_labels for label in thread.labels):
        score += boosts.high_priority_labels
        reasons.append("high priority labels")

    if thread.unread_count > 0:
        score += boosts.unread_messages
        reasons.append("unread messages")
        if analysis.category in _PRIORITY_CATEGORIES:
            score += boosts.unread_priority_category
            reasons.append(f"unread {analysis.category} thread")

    window_start = ensure_utc(now) - timedelta(hours=boosts.recent_activity_hours)
    if ensure_utc(thread.last_activity) > window_start:
        score += boosts.recent_activity
        reasons.append("recent activity")

    if thread.has_attachments and base >= boosts.attachment_min_score:
        score += boosts.important_attachments
        reasons.append("important attachments")

    return score, reasons


class PriorityScorer:
    """Combine an analyzer's base score with deterministic executive boosts."""

    def __init__(
        self,
        analyzer: ThreadAnalyzer | None,
        *,
        boosts: BoostSettings | None = None,
        cache: AnalysisCache | None = None,
        batch_size: int = 5,
        batch_delay_seconds: float = 0.2,
        vocabulary: KeywordVocabulary = DEFAULT_VOCABULARY,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        if analyzer is None:
            raise ValidationError("Analyzer is required")
        self._analyzer = analyzer
        self._boosts = boosts or BoostSettings()
        self._cache = cache if cache is not None else AnalysisCache()
        self._vocabulary = vocabulary
        self._clock = clock
        self._batch = BatchScorer(
            self.score_thread,
            batch_size=batch_size,
            batch_delay_seconds=batch_delay_seconds,
        )

    @classmethod
    def from_settings(
        cls, analyzer: ThreadAnalyzer | None, settings: AppSettings
    ) -> PriorityScorer:
        """Build a scorer configured from application settings."""
        return cls(
            analyzer,
            boosts=settings.boosts,
            cache=AnalysisCache.from_settings(settings.cache),
            batch_size=settings.scoring.batch_size,
            batch_delay_seconds=settings.scoring.batch_delay_seconds,
        )

    @property
    def cache(self) -> AnalysisCache:
        return self._cache

    async def score_thread(self, thread: EmailThread) -> ScoredThread:
        """Score a single thread, analysing it at most once per cache lifetime."""
        _validate_thread(thread)

        analysis = await self._cache.get_or_create(
            thread.id,
            lambda: self._analyzer.analyze_thread(thread),
            validate=_validate_analysis,
        )

        boosted, reasons = apply_boosts(
            thread,
            analysis,
            self._boosts,
            now=self._clock(),
            vocabulary=self._vocabulary,
        )
        final_score = round(min(MAX_SCORE, max(MIN_SCORE, boosted)), 1)
        tier = get_priority_tier(final_score)

        LOGGER.debug(
            "Thread %s scored %.1f (%s), base %.1f, boosts: %s",
            thread.id,
            final_score,
            tier.value,
            analysis.priority_score,
            ", ".join(reasons) or "none",
        )
        return ScoredThread(
            thread=thread,
            analysis=analysis,
            priority_score=final_score,
            priority_tier=tier,
            boost_reason=", ".join(reasons) if reasons else None,
            boosted_score=boosted if boosted != analysis.priority_score else None,
        )

    async def score_threads(self, threads: Sequence[EmailThread]) -> list[ScoredThread]:
        """Score threads, dropping failures, highest priority first."""
        return await self._batch.successful(_validate_threads(threads))

    async def score_threads_detailed(
        self, threads: Sequence[EmailThread]
    ) -> list[ThreadScoreOutcome]:
        """Score threads and report a success or error for each, in input order."""
        return await self._batch.run(_validate_threads(threads))

    def get_priority_tier(self, score: float) -> PriorityTier:
        return get_priority_tier(score)

    def clear_cache(self) -> None:
        """Forget every cached analysis."""
        self._cache.clear()


def _validate_thread(thread: Any) -> None:
    if thread is None:
        raise ValidationError("Thread is required for priority scoring")
    if not getattr(thread, "id", None) or not getattr(thread, "subject", None):
        raise ValidationError("Thread must have valid ID and subject")


def _validate_threads(threads: Any) -> Sequence[EmailThread]:
    if isinstance(threads, (str, bytes)) or not isinstance(threads, Sequence):
        raise ValidationError("Threads must be a sequence")
    return threads


def _validate_analysis(analysis: AIAnalysis) -> None:
    score = getattr(analysis, "priority_score", None)
    if (
        isinstance(score, bool)
        or not isinstance(score, (int, float))
        or not math.isfinite(score)
        or not MIN_SCORE <= score <= MAX_SCORE
    ):
        raise ValidationError("Invalid priority score received from AI analysis")


__all__ = [
    "PriorityScorer",
    "TierInfo",
    "apply_boosts",
    "get_priority_tier",
    "tier_info",
]
