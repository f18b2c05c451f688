"""Batch orchestration for AI-backed thread scoring."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass

from napoleon_ai.core.models import EmailThread, ScoredThread

LOGGER = logging.getLogger(__name__)

ScoreFn = Callable[[EmailThread], Awaitable[ScoredThread]]


@dataclass(frozen=True, slots=True)
class ThreadScoreOutcome:
    """Result of scoring one thread in a batch: a score or the error raised."""

    index: int
    thread: EmailThread
    scored: ScoredThread | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.scored is not None


class BatchScorer:
    """Score threads in fixed-size chunks, isolating individual failures."""

    def __init__(
        self,
        score_fn: ScoreFn,
        *,
        batch_size: int = 5,
        batch_delay_seconds: float = 0.2,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self._score_fn = score_fn
        self._batch_size = batch_size
        self._batch_delay_seconds = batch_delay_seconds

    async def run(self, threads: Sequence[EmailThread]) -> list[ThreadScoreOutcome]:
        """Score every thread and return one outcome per input, in input order."""
        outcomes: list[ThreadScoreOutcome] = []
        for start in range(0, len(threads), self._batch_size):
            chunk = threads[start : start + self._batch_size]
            outcomes.extend(
                await asyncio.gather(
                    *(
                        self._score_one(start + offset, thread)
                        for offset, thread in enumerate(chunk)
                    )
                )
            )
            if start + self._batch_size < len(threads) and self._batch_delay_seconds:
                await asyncio.sleep(self._batch_delay_seconds)

        failures = sum(1 for outcome in outcomes if not outcome.ok)
        if failures:
            LOGGER.warning(
                "Scored %d of %d thread(s); %d failed",
                len(outcomes) - failures,
                len(outcomes),
                failures,
            )
        return outcomes

    async def successful(self, threads: Sequence[EmailThread]) -> list[ScoredThread]:
        """Return scored threads only, highest priority first."""
        return rank_outcomes(await self.run(threads))

    async def _score_one(self, index: int, thread: EmailThread) -> ThreadScoreOutcome:
        try:
            scored = await self._score_fn(thread)
        except Exception as exc:  # noqa: BLE001 - isolated per thread
            LOGGER.warning(
                "Failed to score thread %s: %s", getattr(thread, "id", None), exc
            )
            return ThreadScoreOutcome(index=index, thread=thread, error=exc)
        return ThreadScoreOutcome(index=index, thread=thread, scored=scored)


def rank_outcomes(outcomes: Sequence[ThreadScoreOutcome]) -> list[ScoredThread]:
    """Drop failed outcomes and sort the rest by descending score.

    The sort is stable, so equal scores keep their input order.
    """
    scored = [outcome.scored for outcome in outcomes if outcome.scored is not None]
    return sorted(scored, key=lambda item: item.priority_score, reverse=True)


__all__ = ["BatchScorer", "ThreadScoreOutcome", "rank_outcomes"]
