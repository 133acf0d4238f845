# companion/providers/web_search.py
# -*- coding: utf-8 -*-
"""
Companion Server — Web search provider
--------------------------------------
Best-effort lookup used to give the chat model a bit of live context.

Uses the DuckDuckGo Instant Answer API by default. The contract is simple:
`search(query)` returns a short text snippet, or "" when anything goes
wrong. It never raises, so a flaky search can never break a chat turn.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from companion.core.config import settings

logger = logging.getLogger(__name__)

MAX_SNIPPET_CHARS: int = 600


class WebSearchError(Exception):
    """Raised internally when a search call fails; never leaves this module."""


class WebSearchProvider:
    def __init__(
        self,
        url: Optional[str] = None,
        timeout_s: Optional[float] = None,
        enabled: Optional[bool] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.url = url or settings.search_url
        self.timeout_s = timeout_s if timeout_s is not None else settings.search_timeout_s
        self.enabled = settings.search_enabled if enabled is None else enabled
        self.session = session or requests.Session()

    def _get_json(self, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            resp = self.session.get(self.url, params=params, timeout=self.timeout_s)
        except requests.RequestException as exc:
            raise WebSearchError(f"HTTP request failed: {exc}") from exc

        if resp.status_code != 200:
            raise WebSearchError(f"HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as exc:
            raise WebSearchError("non-JSON response") from exc
        if not isinstance(data, dict):
            raise WebSearchError("unexpected JSON shape")
        return data

    @staticmethod
    def _snippet(data: Dict[str, Any]) -> str:
        """Pick the most useful text out of an Instant Answer response."""
        for key in ("AbstractText", "Answer", "Definition"):
            value = data.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()

        topics = data.get("RelatedTopics")
        if not isinstance(topics, list):
            return ""

        texts: List[str] = []
        for topic in topics:
            if isinstance(topic, dict) and isinstance(topic.get("Text"), str):
                texts.append(topic["Text"].strip())
            if len(texts) >= 3:
                break
        return " | ".join(t for t in texts if t)

    def search(self, query: str) -> str:
        if not self.enabled or not query.strip():
            return ""

        params = {"q": query, "format": "json", "no_html": 1, "skip_disambig": 1}
        try:
            data = self._get_json(params)
        except WebSearchError as exc:
            logger.warning("Web search failed for %r: %s", query, exc)
            return ""

        return self._snippet(data)[:MAX_SNIPPET_CHARS]
