# companion/core/pipeline.py
# -*- coding: utf-8 -*-
"""
Companion Server — Chat pipeline
--------------------------------
High-level pipeline for handling a single chat submission:

    (user_id, message, locale)
        -> MemoryStore.build_context
        -> optional web search snippet
        -> ChatCompletionProvider.complete
        -> MemoryStore.append
        -> ProgressionLedger.record_activity
        -> Leaderboard.update

IMPORTANT:
- Memory and progression are only touched after the completion succeeded,
  so a failed upstream call leaves no trace in the user's state.
- Upstream failures never reach the end user: they get FALLBACK_REPLY.
- Without an API key the server answers with a mock echo (handy for local
  UI work) and records nothing.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional

from companion.core import clock, safety
from companion.core.config import settings
from companion.core.errors import UpstreamError, ValidationError
from companion.core.memory import MemoryStore
from companion.core.types import ChatTurnResult

if TYPE_CHECKING:
    from companion.core.engine import Engine

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "I'm having trouble finding my words right now. Please try again in a moment."

_SEARCH_TRIGGERS = (
    "search",
    "look up",
    "latest",
    "news",
    "today's",
    "who is",
    "what is",
    "current",
)


# ---------------------------------------------------------------------------
# Prompt helpers
# ---------------------------------------------------------------------------

_PROMPT_CACHE: Dict[str, str] = {}


def _read_prompt_file(filename: str) -> str:
    """
    Read an optional prompt override from settings.prompts_dir (cached).

    Missing files read as "" so the built-in prompt is used.
    """
    if filename in _PROMPT_CACHE:
        return _PROMPT_CACHE[filename]

    path: Path = settings.prompts_dir / filename
    text = path.read_text(encoding="utf-8").strip() if path.is_file() else ""
    _PROMPT_CACHE[filename] = text
    return text


def build_system_prompt(locale: str, search_snippet: str = "") -> str:
    base = _read_prompt_file("system_prompt.txt") or (
        "You are a friendly, concise AI companion. Be warm and supportive."
    )
    parts = [base, f"Language: {locale}"]
    if search_snippet:
        parts.append(f"Web context (may be incomplete): {search_snippet}")
    return "\n\n".join(parts)


def wants_search(text: str) -> bool:
    lowered = text.lower()
    return any(trig in lowered for trig in _SEARCH_TRIGGERS)


def mock_reply(message: str) -> str:
    return f'AI (mock): I heard: "{message}"'


# ---------------------------------------------------------------------------
# Core pipeline
# ---------------------------------------------------------------------------


def submit_chat_turn(
    engine: "Engine",
    user_id: str,
    message: str,
    locale: str = "en",
    now: Optional[datetime] = None,
) -> ChatTurnResult:
    """
    Run one chat turn end to end.

    Raises ValidationError for an empty message; every other failure is
    turned into a fallback reply.
    """
    now = clock.as_utc(now) if now is not None else clock.utc_now()

    # 1) Sanitize
    cleaned = safety.clean_message(message)
    if cleaned.is_empty:
        raise ValidationError("message is required")
    clean_text = cleaned.text

    # 2) Mock mode (no API key configured)
    if not engine.completion.is_configured:
        logger.info("[Pipeline] No completion API key; mock reply for %s", user_id)
        return ChatTurnResult(reply=mock_reply(clean_text))

    # 3) Context + optional live search
    context = engine.memory.build_context(user_id, now)
    turns: List[Dict[str, str]] = MemoryStore.as_messages(context)
    turns.append({"role": "user", "content": clean_text})

    snippet = engine.search.search(clean_text) if wants_search(clean_text) else ""
    system_prompt = build_system_prompt(locale, snippet)

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "[Pipeline] %s context=%d turns, search=%s",
            user_id,
            len(context),
            bool(snippet),
        )

    # 4) Completion
    try:
        reply = engine.completion.complete(system_prompt, turns)
    except UpstreamError as exc:
        logger.warning("[Pipeline] Upstream failure for %s: %s", user_id, exc)
        return ChatTurnResult(reply=FALLBACK_REPLY, upstream_failed=True)

    reply = safety.clamp_reply_text(reply)

    # 5) Commit: memory, progression, leaderboard
    engine.memory.append(user_id, clean_text, reply, now)
    activity = engine.ledger.record_activity(user_id, engine.chat_base_points, now)
    engine.leaderboard.update(user_id)

    return ChatTurnResult(reply=reply, activity=activity)
