"""Tests for the AI-backed executive priority scorer."""

from __future__ import annotations

import asyncio
import math
from dataclasses import replace
from datetime import UTC, datetime, timedelta

import pytest

from napoleon_ai.core.config import BoostSettings
from napoleon_ai.core.interfaces import ValidationError
from napoleon_ai.core.models import AIAnalysis, EmailThread, PriorityTier
from napoleon_ai.intelligence.scorer import PriorityScorer, get_priority_tier, tier_info

NOW = datetime(2024, 2, 1, 12, 0, tzinfo=UTC)


class StubAnalyzer:
    """Analyzer returning queued responses; the last one repeats."""

    def __init__(self, *responses: AIAnalysis | Exception) -> None:
        self._responses = list(responses)
        self.calls: list[str] = []

    async def analyze_thread(self, thread: EmailThread) -> AIAnalysis:
        self.calls.append(thread.id)
        response = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        await asyncio.sleep(0)
        if isinstance(response, Exception):
            raise response
        return response


def _analysis(
    thread_id: str, score: float | None, category: str = "important", **overrides
) -> AIAnalysis:
    values = {
        "id": f"analysis_{thread_id}",
        "thread_id": thread_id,
        "priority_score": score,
        "category": category,
        "summary": f"Summary for {thread_id}",
        "key_points": (),
        "suggested_actions": (),
        "sentiment": "neutral",
        "confidence_score": 0.9,
        "created_at": NOW,
    }
    values.update(overrides)
    return AIAnalysis(**values)


def _threads() -> list[EmailThread]:
    return [
        EmailThread(
            id="thread_1",
            subject="URGENT: Board Meeting Cancelled - Immediate Action Required",
            snippet="Due to the CEO's emergency, the board meeting scheduled for "
            "tomorrow has been cancelled. Please reschedule all stakeholder calls.",
            participants=("ceo@company.com", "board@company.com", "executive@company.com"),
            unread_count=1,
            last_activity=datetime(2024, 1, 15, 8, 0, tzinfo=UTC),
            has_attachments=True,
            labels=frozenset({"INBOX", "IMPORTANT", "UNREAD"}),
        ),
        EmailThread(
            id="thread_2",
            subject="Q4 Financial Results - Executive Review Required",
            snippet="Please find attached the preliminary Q4 financial results. Your "
            "review and approval are needed before the earnings call on Friday.",
            participants=("cfo@company.com", "executive@company.com"),
            unread_count=0,
            last_activity=datetime(2024, 1, 14, 16, 30, tzinfo=UTC),
            has_attachments=True,
            labels=frozenset({"INBOX", "IMPORTANT"}),
        ),
        EmailThread(
            id="thread_3",
            subject="Weekly Team Newsletter - January Edition",
            snippet="Here's this week's team newsletter with updates on project "
            "milestones, upcoming events, and employee spotlights.",
            participants=("hr@company.com", "executive@company.com"),
            unread_count=0,
            last_activity=datetime(2024, 1, 12, 10, 0, tzinfo=UTC),
            has_attachments=False,
            labels=frozenset({"INBOX"}),
        ),
        EmailThread(
            id="thread_4",
            subject="Contract Amendment - Legal Review Needed",
            snippet="The proposed amendments to the vendor contract require executive "
            "approval. Legal has flagged several clauses that need attention.",
            participants=("legal@company.com", "executive@company.com", "vendor@external.com"),
            unread_count=1,
            last_activity=datetime(2024, 1, 15, 14, 20, tzinfo=UTC),
            has_attachments=True,
            labels=frozenset({"INBOX", "UNREAD"}),
        ),
    ]


def _scorer(analyzer: StubAnalyzer, **kwargs) -> PriorityScorer:
    kwargs.setdefault("batch_delay_seconds", 0)
    return PriorityScorer(analyzer, clock=lambda: NOW, **kwargs)


def test_constructor_requires_analyzer() -> None:
    with pytest.raises(ValidationError, match="required"):
        PriorityScorer(None)


def test_urgent_executive_thread_is_gold() -> None:
    thread = _threads()[0]
    analyzer = StubAnalyzer(_analysis(thread.id, 9.5, "urgent"))

    result = asyncio.run(_scorer(analyzer).score_thread(thread))

    assert result.priority_tier is PriorityTier.GOLD
    assert result.priority_score == 10.0
    assert result.boosted_score is not None and result.boosted_score > 10
    assert result.analysis.category == "urgent"
    assert analyzer.calls == ["thread_1"]


def test_important_labels_push_financial_thread_into_gold() -> None:
    thread = _threads()[1]
    analyzer = StubAnalyzer(_analysis(thread.id, 7.8))

    result = asyncio.run(_scorer(analyzer).score_thread(thread))

    assert result.priority_score == 9.1
    assert result.priority_tier is PriorityTier.GOLD
    assert result.boost_reason == (
        "C-level participants, high priority labels, important attachments"
    )


def test_routine_newsletter_stays_bronze() -> None:
    thread = _threads()[2]
    analyzer = StubAnalyzer(_analysis(thread.id, 4.2, "fyi", sentiment="positive"))

    result = asyncio.run(_scorer(analyzer).score_thread(thread))

    assert result.priority_tier is PriorityTier.BRONZE
    assert 4 <= result.priority_score < 7
    assert result.analysis.category == "fyi"


def test_unread_legal_thread_gets_category_boost() -> None:
    thread = _threads()[3]
    analyzer = StubAnalyzer(
        _analysis(
            thread.id,
            8.3,
            suggested_actions=("Review contract amendments", "Consult with legal team"),
        )
    )

    result = asyncio.run(_scorer(analyzer).score_thread(thread))

    assert result.priority_score >= 8
    assert result.priority_tier in (PriorityTier.SILVER, PriorityTier.GOLD)
    assert "unread important thread" in (result.boost_reason or "")
    assert "Review contract amendments" in result.analysis.suggested_actions


def test_c_level_participants_boost_into_gold() -> None:
    thread = replace(
        _threads()[0],
        participants=("ceo@company.com", "cto@company.com", "executive@company.com"),
    )
    analyzer = StubAnalyzer(_analysis(thread.id, 8.5))

    result = asyncio.run(_scorer(analyzer).score_thread(thread))

    assert result.priority_score > 8.5
    assert result.priority_tier is PriorityTier.GOLD


def test_time_sensitive_subject_boosts_score() -> None:
    thread = replace(_threads()[0], subject="DEADLINE TODAY: Contract Signature Required")
    analyzer = StubAnalyzer(_analysis(thread.id, 7.5, "urgent"))

    result = asyncio.run(_scorer(analyzer).score_thread(thread))

    assert result.priority_score > 7.5


def test_time_sensitive_boost_alone_uses_policy_value() -> None:
    thread = EmailThread(
        id="solo",
        subject="DEADLINE TODAY: Contract Signature Required",
        snippet="",
        participants=("alex@vendor.com",),
        unread_count=0,
        last_activity=NOW - timedelta(days=3),
    )
    analyzer = StubAnalyzer(_analysis(thread.id, 7.5, "fyi"))

    result = asyncio.run(_scorer(analyzer).score_thread(thread))

    assert result.priority_score == 8.0
    assert result.boost_reason == "time-sensitive keywords"


def test_boost_values_come_from_settings() -> None:
    thread = replace(_threads()[2], participants=("ceo@company.com",))
    analyzer = StubAnalyzer(_analysis(thread.id, 4.2, "fyi"))
    boosts = BoostSettings(c_level_participants=3.0)

    result = asyncio.run(_scorer(analyzer, boosts=boosts).score_thread(thread))

    assert result.priority_score == 7.2
    assert result.priority_tier is PriorityTier.SILVER


def test_recent_activity_boost_uses_clock() -> None:
    thread = replace(_threads()[2], last_activity=NOW - timedelta(hours=1))
    analyzer = StubAnalyzer(_analysis(thread.id, 4.2, "fyi"))

    result = asyncio.run(_scorer(analyzer).score_thread(thread))

    assert "recent activity" in (result.boost_reason or "")
    assert result.priority_score == 5.1


def test_thread_without_signals_keeps_base_score() -> None:
    thread = EmailThread(
        id="quiet",
        subject="Lunch menu",
        snippet="Soup and salad this week.",
        participants=("cafe@company.com",),
        unread_count=0,
        last_activity=NOW - timedelta(days=2),
    )
    analyzer = StubAnalyzer(_analysis(thread.id, 2.0, "fyi"))

    result = asyncio.run(_scorer(analyzer).score_thread(thread))

    assert result.priority_score == 2.0
    assert result.priority_tier is PriorityTier.STANDARD
    assert result.boost_reason is None
    assert result.boosted_score is None


@pytest.mark.parametrize("base", [0.0, 0.5, 5.0, 9.9, 10.0])
def test_final_score_is_clamped(base: float) -> None:
    thread = _threads()[0]
    analyzer = StubAnalyzer(_analysis(thread.id, base, "urgent"))

    result = asyncio.run(_scorer(analyzer).score_thread(thread))

    assert 0 <= result.priority_score <= 10


def test_analyzer_errors_propagate_and_are_not_cached() -> None:
    thread = _threads()[0]
    analyzer = StubAnalyzer(RuntimeError("OpenAI API rate limit exceeded"))
    scorer = _scorer(analyzer)

    with pytest.raises(RuntimeError, match="OpenAI API rate limit exceeded"):
        asyncio.run(scorer.score_thread(thread))
    with pytest.raises(RuntimeError):
        asyncio.run(scorer.score_thread(thread))

    assert analyzer.calls == ["thread_1", "thread_1"]
    assert len(scorer.cache) == 0


@pytest.mark.parametrize("bad_score", [None, "8", math.nan, math.inf, -1.0, 10.5])
def test_invalid_analysis_score_is_rejected(bad_score: object) -> None:
    thread = _threads()[0]
    analyzer = StubAnalyzer(_analysis(thread.id, bad_score))  # type: ignore[arg-type]
    scorer = _scorer(analyzer)

    with pytest.raises(ValidationError) as excinfo:
        asyncio.run(scorer.score_thread(thread))

    assert str(excinfo.value) == "Invalid priority score received from AI analysis"
    assert len(scorer.cache) == 0


def test_thread_input_is_validated_before_analysis() -> None:
    analyzer = StubAnalyzer(_analysis("x", 5.0))
    scorer = _scorer(analyzer)

    with pytest.raises(ValidationError, match="Thread is required for priority scoring"):
        asyncio.run(scorer.score_thread(None))  # type: ignore[arg-type]
    with pytest.raises(ValidationError, match="Thread must have valid ID and subject"):
        asyncio.run(scorer.score_thread({}))  # type: ignore[arg-type]
    with pytest.raises(ValidationError, match="Thread must have valid ID and subject"):
        asyncio.run(scorer.score_thread(replace(_threads()[0], subject="")))

    assert analyzer.calls == []


def test_analysis_is_cached_until_cleared() -> None:
    thread = _threads()[0]
    analyzer = StubAnalyzer(_analysis(thread.id, 8.5))
    scorer = _scorer(analyzer)

    first = asyncio.run(scorer.score_thread(thread))
    second = asyncio.run(scorer.score_thread(thread))

    assert len(analyzer.calls) == 1
    assert first.analysis.id == second.analysis.id

    scorer.clear_cache()
    asyncio.run(scorer.score_thread(thread))

    assert len(analyzer.calls) == 2


def test_concurrent_requests_share_one_analysis() -> None:
    thread = _threads()[0]
    analyzer = StubAnalyzer(_analysis(thread.id, 8.5))
    scorer = _scorer(analyzer)

    async def _score_twice():
        return await asyncio.gather(scorer.score_thread(thread), scorer.score_thread(thread))

    first, second = asyncio.run(_score_twice())

    assert analyzer.calls == ["thread_1"]
    assert first.priority_score == second.priority_score


def test_score_threads_sorts_descending() -> None:
    analyzer = StubAnalyzer(
        _analysis("thread_1", 9.5, "urgent"),
        _analysis("thread_2", 7.8),
        _analysis("thread_3", 4.2, "fyi"),
    )

    results = asyncio.run(_scorer(analyzer).score_threads(_threads()[:3]))

    assert len(results) == 3
    assert results[0].priority_score > results[1].priority_score > results[2].priority_score
    assert results[0].priority_tier is PriorityTier.GOLD
    assert results[1].priority_tier in (PriorityTier.SILVER, PriorityTier.GOLD)
    assert results[2].priority_tier is PriorityTier.BRONZE
    assert analyzer.calls == ["thread_1", "thread_2", "thread_3"]


def test_score_threads_drops_failed_threads() -> None:
    analyzer = StubAnalyzer(
        _analysis("thread_1", 9.5, "urgent"),
        RuntimeError("OpenAI API error"),
        _analysis("thread_3", 4.2, "fyi"),
    )

    results = asyncio.run(_scorer(analyzer).score_threads(_threads()[:3]))

    assert [result.thread.id for result in results] == ["thread_1", "thread_3"]


def test_score_threads_detailed_reports_each_outcome() -> None:
    failure = RuntimeError("OpenAI API error")
    analyzer = StubAnalyzer(
        _analysis("thread_1", 9.5, "urgent"),
        failure,
        _analysis("thread_3", 4.2, "fyi"),
    )

    outcomes = asyncio.run(_scorer(analyzer).score_threads_detailed(_threads()[:3]))

    assert [outcome.thread.id for outcome in outcomes] == ["thread_1", "thread_2", "thread_3"]
    assert [outcome.ok for outcome in outcomes] == [True, False, True]
    assert outcomes[1].error is failure
    assert outcomes[1].scored is None


def test_score_threads_processes_in_batches() -> None:
    threads = [
        replace(_threads()[2], id=f"thread_{index}", participants=("hr@company.com",))
        for index in range(5)
    ]
    analyzer = StubAnalyzer(*(_analysis(thread.id, 5.0, "fyi") for thread in threads))

    results = asyncio.run(_scorer(analyzer, batch_size=2).score_threads(threads))

    assert len(results) == 5
    assert analyzer.calls == [thread.id for thread in threads]
    # Equal scores keep their input order.
    assert [result.thread.id for result in results] == [thread.id for thread in threads]


def test_score_threads_requires_a_sequence() -> None:
    scorer = _scorer(StubAnalyzer(_analysis("x", 5.0)))

    with pytest.raises(ValidationError, match="sequence"):
        asyncio.run(scorer.score_threads("thread_1"))  # type: ignore[arg-type]


@pytest.mark.parametrize(
    ("score", "tier"),
    [
        (10.0, PriorityTier.GOLD),
        (9.5, PriorityTier.GOLD),
        (9.0, PriorityTier.GOLD),
        (8.9, PriorityTier.SILVER),
        (7.0, PriorityTier.SILVER),
        (6.9, PriorityTier.BRONZE),
        (4.0, PriorityTier.BRONZE),
        (3.9, PriorityTier.STANDARD),
        (0, PriorityTier.STANDARD),
    ],
)
def test_priority_tier_boundaries(score: float, tier: PriorityTier) -> None:
    assert get_priority_tier(score) is tier
    assert _scorer(StubAnalyzer(_analysis("x", 5.0))).get_priority_tier(score) is tier


def test_tier_info_describes_each_tier() -> None:
    assert tier_info(PriorityTier.GOLD).name == "Gold Priority"
    assert PriorityTier.GOLD.rank > PriorityTier.SILVER.rank > PriorityTier.BRONZE.rank
    assert PriorityTier.BRONZE.rank > PriorityTier.STANDARD.rank
