"""Tests for the command-line interface."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path

import pytest

from napoleon_ai.cli import build_parser, execute
from napoleon_ai.core.config import AppSettings, ScoringSettings
from napoleon_ai.core.models import AIAnalysis, EmailThread


class StubAnalyzer:
    """Analyzer scoring threads from a lookup table."""

    def __init__(self, scores: dict[str, float]) -> None:
        self.scores = scores

    async def analyze_thread(self, thread: EmailThread) -> AIAnalysis:
        if thread.id not in self.scores:
            raise RuntimeError("analysis unavailable")
        return AIAnalysis(
            id=f"analysis_{thread.id}",
            thread_id=thread.id,
            priority_score=self.scores[thread.id],
            category="important",
            summary=f"Summary of {thread.id}",
            key_points=(),
            suggested_actions=(),
            sentiment="neutral",
            confidence_score=0.9,
            created_at=datetime(2024, 1, 15, tzinfo=UTC),
        )


def _settings() -> AppSettings:
    return AppSettings(scoring=ScoringSettings(batch_delay_seconds=0))


def _gmail_file(tmp_path: Path) -> Path:
    path = tmp_path / "gmail.json"
    path.write_text(
        json.dumps(
            {
                "messages": [
                    {
                        "id": "g1",
                        "subject": "Weekly notes",
                        "sender": "Sam Ortiz",
                        "receivedAt": "2024-01-15T08:00:00Z",
                    },
                    {
                        "id": "g2",
                        "subject": "URGENT: wire approval",
                        "sender": "Pat Lee, CFO",
                        "senderEmail": "cfo@company.com",
                        "receivedAt": "2024-01-15T09:00:00Z",
                    },
                    {"subject": "missing id", "receivedAt": "2024-01-15T09:00:00Z"},
                ]
            }
        ),
        encoding="utf-8",
    )
    return path


def _slack_file(tmp_path: Path) -> Path:
    path = tmp_path / "slack.json"
    path.write_text(
        json.dumps([{"id": "s1", "sender": "#general", "text": "Any update?", "ts": "1705305600"}]),
        encoding="utf-8",
    )
    return path


def test_info_command_reports_configuration(capsys: pytest.CaptureFixture[str]) -> None:
    args = build_parser().parse_args([])

    assert execute(args, _settings()) == 0
    output = capsys.readouterr().out
    assert "gpt-oss:20b" in output
    assert "VIP senders: (none)" in output
    assert "Keyword vocabulary: 2024.1" in output


def test_inbox_command_prints_ranked_messages(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    args = build_parser().parse_args(
        ["inbox", "--gmail", str(_gmail_file(tmp_path)), "--slack", str(_slack_file(tmp_path))]
    )

    assert execute(args, _settings()) == 0
    output = capsys.readouterr().out
    assert "Skipped gmail record #2 (id=-)" in output
    assert output.index("URGENT: wire approval") < output.index("Weekly notes")
    assert "3 message(s)" in output
    assert "(gmail 2, slack 1)" in output


def test_classify_command_applies_vip_senders(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    args = build_parser().parse_args(
        ["classify", "--gmail", str(_gmail_file(tmp_path)), "--vip", "Sam"]
    )

    assert execute(args, _settings()) == 0
    output = capsys.readouterr().out
    assert "VIP sender 'Sam'" in output
    assert "urgent keyword 'urgent'" in output


def test_triage_command_prints_tiers_and_failures(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    args = build_parser().parse_args(
        ["triage", "--gmail", str(_gmail_file(tmp_path)), "--slack", str(_slack_file(tmp_path))]
    )
    analyzer = StubAnalyzer({"gmail:g1": 3.0, "gmail:g2": 9.2})

    assert execute(args, _settings(), analyzer=analyzer) == 0
    output = capsys.readouterr().out
    assert output.index("Gold Priority") < output.index("Standard Priority")
    assert "Summary of gmail:g2" in output
    assert "Failed to score thread slack:s1: analysis unavailable" in output


def test_triage_command_fails_when_nothing_scores(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    args = build_parser().parse_args(["triage", "--slack", str(_slack_file(tmp_path))])

    assert execute(args, _settings(), analyzer=StubAnalyzer({})) == 1
    assert "Triage failed: No threads could be analysed" in capsys.readouterr().out


def test_unreadable_payload_returns_error(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    args = build_parser().parse_args(["inbox", "--gmail", str(tmp_path / "missing.json")])

    assert execute(args, _settings()) == 1
    assert "Could not read payload" in capsys.readouterr().out


def test_empty_inbox_is_reported(capsys: pytest.CaptureFixture[str]) -> None:
    args = build_parser().parse_args(["inbox"])

    assert execute(args, _settings()) == 0
    assert "No messages found." in capsys.readouterr().out
