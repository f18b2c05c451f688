"""LLM client abstractions used by the thread analyzer."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import urljoin

import httpx

from napoleon_ai.core.config import LlmSettings
from napoleon_ai.core.interfaces import AnalyzerError

LOGGER = logging.getLogger(__name__)


class LLMError(AnalyzerError):
    """Raised when the LLM provider fails to respond as expected."""


class LLMClient(Protocol):
    """Protocol describing the minimal LLM client behaviour."""

    @property
    def provider_id(self) -> str:
        """Identifier describing the backing model/provider."""
        raise NotImplementedError

    def generate(self, prompt: str, *, system: str | None = None) -> str:
        """Return the raw JSON text completion for ``prompt``."""
        raise NotImplementedError


@dataclass(slots=True)
class OllamaClient:
    """Synchronous client for the Ollama generate API in JSON mode.

    Transport failures and 429/5xx responses are retried with exponential
    backoff capped at eight seconds. Other 4xx responses and an unparseable
    body fail immediately.
    """

    settings: LlmSettings
    max_attempts: int = 3

    @property
    def provider_id(self) -> str:
        """Return a human readable identifier for the configured model."""
        return f"ollama:{self.settings.model}"

    def generate(self, prompt: str, *, system: str | None = None) -> str:
        body = self._post(_resolve_endpoint(self.settings.base_url), self._payload(prompt, system))
        text = body.get("response")
        if not isinstance(text, str) or not text.strip():
            raise LLMError("LLM response missing 'response' field")
        return text

    def _payload(self, prompt: str, system: str | None) -> dict[str, object]:
        options: dict[str, object] = {"temperature": self.settings.temperature}
        if self.settings.max_output_tokens is not None:
            options["num_predict"] = self.settings.max_output_tokens
        payload: dict[str, object] = {
            "model": self.settings.model,
            "prompt": prompt,
            "stream": False,
            "format": "json",
            "options": options,
        }
        if system:
            payload["system"] = system
        return payload

    def _post(self, endpoint: str, payload: dict[str, object]) -> dict[str, object]:
        failure: Exception | None = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                response = httpx.post(
                    endpoint, json=payload, timeout=self.settings.timeout_seconds
                )
                response.raise_for_status()
                return response.json()
            except json.JSONDecodeError as exc:
                raise LLMError("LLM returned invalid JSON") from exc
            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                if status == 429:
                    failure = LLMError("LLM rate limit exceeded")
                elif 400 <= status < 500:
                    raise LLMError(f"LLM request rejected with status {status}") from exc
                else:
                    failure = exc
            except httpx.HTTPError as exc:
                failure = exc

            LOGGER.warning(
                "LLM request attempt %d/%d failed: %s", attempt, self.max_attempts, failure
            )
            if attempt < self.max_attempts:
                time.sleep(min(2**attempt, 8))

        raise LLMError("LLM request failed after retries") from failure


def _resolve_endpoint(base_url: str) -> str:
    return urljoin(base_url.rstrip("/") + "/", "api/generate")


__all__ = ["LLMClient", "LLMError", "OllamaClient"]
