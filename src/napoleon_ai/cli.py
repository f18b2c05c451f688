"""Command-line entry point for Napoleon AI."""

from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path
from typing import Any

from napoleon_ai.core import AppSettings, configure_logging, load_app_settings
from napoleon_ai.core.datetime_utils import display_datetime
from napoleon_ai.core.interfaces import AnalyzerError, ThreadAnalyzer
from napoleon_ai.ingestion import MessageNormalizer, NormalizationReport, thread_from_message
from napoleon_ai.intelligence import (
    DEFAULT_VOCABULARY,
    HeuristicClassifier,
    LLMThreadAnalyzer,
    OllamaClient,
    PriorityScorer,
    score_messages,
    summarize_priorities,
    tier_info,
)
from napoleon_ai.intelligence.batch import rank_outcomes


def build_parser() -> argparse.ArgumentParser:
    """Create and configure the CLI argument parser."""
    parser = argparse.ArgumentParser(description="Napoleon AI executive inbox triage")
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to a .env file containing configuration overrides.",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="info",
        choices=["info", "inbox", "classify", "triage"],
        help="Operation to execute.",
    )
    parser.add_argument(
        "--gmail",
        type=Path,
        default=None,
        help='JSON file with a Gmail payload: {"messages": [...]}.',
    )
    parser.add_argument(
        "--slack",
        type=Path,
        default=None,
        help='JSON file with a Slack payload: {"messages": [...]}.',
    )
    parser.add_argument(
        "--vip",
        dest="vip_senders",
        action="append",
        default=None,
        help="Extra VIP sender substring for classify (repeatable).",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=20,
        help="Maximum rows to print; set to 0 for no limit (default: 20).",
    )
    return parser


def execute(
    args: argparse.Namespace,
    settings: AppSettings,
    *,
    analyzer: ThreadAnalyzer | None = None,
) -> int:
    """Execute the requested CLI command and return an exit code."""
    command = args.command
    if command == "info":
        _run_info(settings)
        return 0

    try:
        report = _load_report(args.gmail, args.slack)
    except (OSError, json.JSONDecodeError) as exc:
        print(f"Could not read payload: {exc}")
        return 1

    limit = None if args.limit is not None and args.limit <= 0 else args.limit
    if command == "inbox":
        _run_inbox(report, limit=limit)
    elif command == "classify":
        vip_senders = settings.scoring.vip_senders + tuple(args.vip_senders or ())
        _run_classify(report, vip_senders=vip_senders, limit=limit)
    elif command == "triage":
        try:
            asyncio.run(_run_triage(report, settings, limit=limit, analyzer=analyzer))
        except AnalyzerError as exc:
            print(f"Triage failed: {exc}")
            return 1
    return 0


def main() -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args()

    settings = load_app_settings(env_file=args.env_file)
    configure_logging(settings.logging)
    raise SystemExit(execute(args, settings))


def _run_info(settings: AppSettings) -> None:
    print("Napoleon AI is ready. Provide Gmail or Slack payloads to triage.")
    print(f"LLM: {settings.llm.model} at {settings.llm.base_url}")
    print(f"VIP senders: {', '.join(settings.scoring.vip_senders) or '(none)'}")
    print(f"Keyword vocabulary: {DEFAULT_VOCABULARY.version}")
    ttl = settings.cache.ttl_seconds
    print(
        f"Analysis cache: {settings.cache.max_entries} entries, "
        f"TTL {f'{ttl}s' if ttl else 'disabled'}"
    )


def _load_report(gmail_path: Path | None, slack_path: Path | None) -> NormalizationReport:
    normalizer = MessageNormalizer()
    report = normalizer.normalize(_read_payload(gmail_path), _read_payload(slack_path))
    for rejected in report.rejected:
        print(
            f"Skipped {rejected.source.value} record #{rejected.index} "
            f"(id={rejected.raw_id or '-'}): {rejected.reason}"
        )
    return report


def _read_payload(path: Path | None) -> dict[str, Any] | None:
    if path is None:
        return None
    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, list):
        return {"messages": payload}
    return payload


def _run_inbox(report: NormalizationReport, *, limit: int | None) -> None:
    """Print the numerically ranked inbox with bucket statistics."""
    ranked = score_messages(report.messages)
    if not ranked:
        print("No messages found.")
        return

    header = f"{'Score':>5}  {'Source':<6}  {'Received':<22}  {'Sender':<24}  Subject"
    print(header)
    print("-" * len(header))
    for item in ranked[:limit]:
        received = display_datetime(item.received_at) or "-"
        print(
            f"{item.priority_score:>5}  {item.message.source.value:<6}  "
            f"{received:<22}  {item.sender[:24]:<24}  {item.subject}"
        )

    stats = summarize_priorities(ranked)
    print(
        f"\n{stats.total} message(s): {stats.urgent} urgent, "
        f"{stats.question} question, {stats.normal} normal "
        f"(gmail {stats.sources.get('google', 0)}, slack {stats.sources.get('slack', 0)})"
    )


def _run_classify(
    report: NormalizationReport, *, vip_senders: tuple[str, ...], limit: int | None
) -> None:
    """Print the heuristic bucket and deciding rule for each message."""
    if not report.messages:
        print("No messages found.")
        return

    classifier = HeuristicClassifier(vip_senders)
    for message in report.messages[:limit]:
        result = classifier.classify_with_reason(message)
        reason = f"  ({result.reason})" if result.reason else ""
        print(f"{result.priority.value:<8}  {message.sender[:24]:<24}  {message.subject}{reason}")


async def _run_triage(
    report: NormalizationReport,
    settings: AppSettings,
    *,
    limit: int | None,
    analyzer: ThreadAnalyzer | None = None,
) -> None:
    """Score threads through the LLM analyzer and print them by tier."""
    if not report.messages:
        print("No messages found.")
        return

    if analyzer is None:
        analyzer = LLMThreadAnalyzer(OllamaClient(settings.llm))
    scorer = PriorityScorer.from_settings(analyzer, settings)
    threads = [thread_from_message(message) for message in report.messages]
    outcomes = await scorer.score_threads_detailed(threads)

    failures = [outcome for outcome in outcomes if not outcome.ok]
    scored = rank_outcomes(outcomes)
    for item in scored[:limit]:
        info = tier_info(item.priority_tier)
        boosts = f"  [{item.boost_reason}]" if item.boost_reason else ""
        print(f"{item.priority_score:>4.1f}  {info.name:<18}  {item.thread.subject}{boosts}")
        print(f"      {item.analysis.summary}")

    for outcome in failures:
        print(f"Failed to score thread {outcome.thread.id}: {outcome.error}")
    if failures and not scored:
        raise AnalyzerError("No threads could be analysed")


if __name__ == "__main__":
    main()
