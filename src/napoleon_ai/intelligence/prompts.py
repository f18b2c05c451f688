"""Prompt templates for LLM-driven thread analysis."""

from __future__ import annotations

from datetime import datetime, timedelta
from textwrap import dedent

from napoleon_ai.core.datetime_utils import ensure_utc
from napoleon_ai.core.models import EmailThread

ANALYSIS_SYSTEM_PROMPT = dedent(
    """
    You are an executive email prioritization assistant. Analyse email
    threads and score their priority for C-level executives on a 0-10 scale:
    - 9-10: urgent matters requiring immediate executive action
      (board issues, crises, legal deadlines)
    - 7-8: important business matters requiring timely attention
      (financial reports, strategic decisions)
    - 4-6: routine business communication worth reviewing
    - 0-3: informational content with no action required
    Respond ONLY with a JSON object, no additional text.
    """
).strip()


def build_analysis_prompt(thread: EmailThread, *, now: datetime) -> str:
    """Compose a JSON-only analysis prompt describing ``thread``."""
    participants = ", ".join(thread.participants) or "(none)"
    labels = ", ".join(sorted(thread.labels)) or "(none)"
    last_activity = ensure_utc(thread.last_activity)
    is_recent = last_activity > ensure_utc(now) - timedelta(hours=24)

    prompt = f"""
    Analyze this executive email thread for priority scoring.

    Subject: {thread.subject}
    Snippet: {thread.snippet}
    Participants: {participants}
    Unread count: {thread.unread_count}
    Has attachments: {str(thread.has_attachments).lower()}
    Labels: {labels}
    Last activity: {last_activity.isoformat()}
    Recent activity: {str(is_recent).lower()}

    Respond with JSON using this schema:
    {{
      "priority_score": number,          # 0-10
      "category": "urgent" | "important" | "follow_up" | "fyi" | "spam",
      "summary": string,                 # 1-2 sentence executive summary
      "key_points": [string, ...],       # 3-5 key points
      "suggested_actions": [string, ...],  # 2-4 specific actions
      "sentiment": "positive" | "neutral" | "negative",
      "confidence_score": number,        # 0-1
      "reasoning": string                # why this score was chosen
    }}
    """

    return dedent(prompt).strip()


__all__ = ["ANALYSIS_SYSTEM_PROMPT", "build_analysis_prompt"]
