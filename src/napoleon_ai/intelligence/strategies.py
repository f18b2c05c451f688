"""Heuristic, numeric and AI-backed scorers behind one strategy interface."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime

from napoleon_ai.core.datetime_utils import utc_now
from napoleon_ai.core.interfaces import PriorityStrategy
from napoleon_ai.core.models import CanonicalMessage, MessagePriority, PriorityAssessment
from napoleon_ai.ingestion.normalizer import thread_from_message

from .classifier import HeuristicClassifier
from .priority import priority_bucket, score_priority
from .scorer import PriorityScorer
from .vocabulary import DEFAULT_VOCABULARY, KeywordVocabulary

_BUCKET_SCORES = {
    MessagePriority.URGENT: 2.0,
    MessagePriority.QUESTION: 1.0,
    MessagePriority.NORMAL: 0.0,
}


class HeuristicStrategy:
    """Rank by the urgent/question/normal keyword classifier."""

    name = "heuristic"

    def __init__(self, classifier: HeuristicClassifier | None = None) -> None:
        self._classifier = classifier or HeuristicClassifier()

    async def assess(self, message: CanonicalMessage) -> PriorityAssessment:
        result = self._classifier.classify_with_reason(message)
        return PriorityAssessment(
            message_id=message.id,
            strategy=self.name,
            label=result.priority.value,
            score=_BUCKET_SCORES[result.priority],
            reason=result.reason,
        )


class NumericStrategy:
    """Rank by the decayed keyword point score."""

    name = "numeric"

    def __init__(
        self,
        *,
        vocabulary: KeywordVocabulary = DEFAULT_VOCABULARY,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._vocabulary = vocabulary
        self._clock = clock

    async def assess(self, message: CanonicalMessage) -> PriorityAssessment:
        score = score_priority(message, now=self._clock(), vocabulary=self._vocabulary)
        return PriorityAssessment(
            message_id=message.id,
            strategy=self.name,
            label=priority_bucket(score).value,
            score=float(score),
        )


class AIBackedStrategy:
    """Rank by the analyzer score with executive boosts and tiers."""

    name = "ai"

    def __init__(self, scorer: PriorityScorer) -> None:
        self._scorer = scorer

    async def assess(self, message: CanonicalMessage) -> PriorityAssessment:
        scored = await self._scorer.score_thread(thread_from_message(message))
        return PriorityAssessment(
            message_id=message.id,
            strategy=self.name,
            label=scored.priority_tier.value,
            score=scored.priority_score,
            reason=scored.boost_reason,
        )


async def rank_messages(
    messages: Iterable[CanonicalMessage], strategy: PriorityStrategy
) -> list[PriorityAssessment]:
    """Assess every message with ``strategy``, highest score first.

    Messages are assessed one after another and any strategy error propagates;
    ties keep their input order.
    """
    assessments = [await strategy.assess(message) for message in messages]
    return sorted(assessments, key=lambda item: item.score, reverse=True)


__all__ = [
    "AIBackedStrategy",
    "HeuristicStrategy",
    "NumericStrategy",
    "rank_messages",
]
