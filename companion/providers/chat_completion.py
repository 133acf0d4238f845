# companion/providers/chat_completion.py
# -*- coding: utf-8 -*-
"""
Companion Server — Chat completion provider
-------------------------------------------
This module is the ONLY place that knows how to talk to the
OpenAI-compatible /chat/completions endpoint.

Responsibilities:
- Build the HTTP request (URL, headers, JSON payload).
- Enforce the request timeout so a slow upstream never hangs the caller.
- Parse the response and return assistant text.

Every failure (disabled, HTTP error, timeout, bad JSON, empty content) is
raised as UpstreamError; callers decide what fallback to show.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from companion.core.config import settings
from companion.core.errors import UpstreamError
from companion.utils import Stopwatch

logger = logging.getLogger(__name__)


class ChatCompletionProvider:
    """
    Parameters
    ----------
    api_key:
        Bearer token. When None the provider is "not configured" and
        `complete()` raises UpstreamError straight away.
    base_url / model / timeout_s / max_tokens / temperature:
        Default to the values in settings.
    session:
        Optional requests.Session (tests pass a fake one).
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout_s: Optional[float] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url or settings.completion_base_url
        self.model = model or settings.completion_model
        self.timeout_s = timeout_s if timeout_s is not None else settings.completion_timeout_s
        self.max_tokens = max_tokens if max_tokens is not None else settings.completion_max_tokens
        self.temperature = (
            temperature if temperature is not None else settings.completion_temperature
        )
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls) -> "ChatCompletionProvider":
        return cls(api_key=settings.completion_api_key)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def build_payload(
        self,
        system_prompt: str,
        turns: List[Dict[str, str]],
    ) -> Dict[str, Any]:
        """
        Build the JSON payload.

        `turns` are {"role": "user"|"assistant", "content": "..."} dicts,
        oldest first; the last one is the message being answered.
        """
        messages: List[Dict[str, str]] = [{"role": "system", "content": system_prompt}]
        messages.extend(turns)
        return {
            "model": self.model,
            "messages": messages,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }

    def complete(self, system_prompt: str, turns: List[Dict[str, str]]) -> str:
        """
        Return the assistant's reply (stripped).

        Raises
        ------
        UpstreamError
            If the provider is not configured, or the HTTP/JSON call fails.
        """
        if not self.is_configured:
            raise UpstreamError("completion provider has no API key")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = self.build_payload(system_prompt, turns)

        try:
            with Stopwatch(f"completion {self.model}", logger):
                resp = self.session.post(
                    self.base_url,
                    headers=headers,
                    json=payload,
                    timeout=self.timeout_s,
                )
        except requests.Timeout as exc:
            raise UpstreamError(f"completion timed out after {self.timeout_s}s") from exc
        except requests.RequestException as exc:
            raise UpstreamError(f"completion HTTP error: {exc}") from exc

        if resp.status_code != 200:
            # Provider text goes to the log only, never to the client.
            text_preview = resp.text[:200].replace("\n", " ")
            logger.error("Completion HTTP %s: %s", resp.status_code, text_preview)
            raise UpstreamError(f"completion HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as exc:
            raise UpstreamError("completion returned non-JSON response") from exc

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise UpstreamError(
                "completion response missing choices[0].message.content"
            ) from exc

        if not isinstance(content, str) or not content.strip():
            raise UpstreamError("completion returned empty content")

        return content.strip()
