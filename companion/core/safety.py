# companion/core/safety.py
# -*- coding: utf-8 -*-
"""
Companion Server — Text hygiene
-------------------------------
Pure helpers applied at the two edges of a chat turn:

- clean_message(): what the user typed, before it is remembered or sent
  to the completion provider.
- clamp_reply_text(): what the provider answered, before it is stored
  in memory and returned.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

from companion.core.config import settings

logger = logging.getLogger(__name__)

_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

ELLIPSIS = "..."


@dataclass
class CleanMessage:
    text: str
    truncated: bool

    @property
    def is_empty(self) -> bool:
        return not self.text


def clean_message(raw: Optional[str], max_chars: Optional[int] = None) -> CleanMessage:
    """
    Drop control characters, collapse runs of whitespace to one space and
    cut at `max_chars` (settings.max_user_chars by default).
    """
    limit = max_chars if max_chars is not None else settings.max_user_chars
    text = " ".join(_CONTROL_CHARS_RE.sub("", raw or "").split())

    if len(text) <= limit:
        return CleanMessage(text=text, truncated=False)

    logger.debug("[Safety] User message cut from %d to %d chars", len(text), limit)
    return CleanMessage(text=text[:limit].rstrip(), truncated=True)


def clamp_reply_text(reply: str, limit: Optional[int] = None) -> str:
    limit = limit if limit is not None else settings.max_reply_chars
    if limit <= 0:
        return ""
    if len(reply) <= limit:
        return reply
    if limit <= len(ELLIPSIS):
        return reply[:limit]
    return reply[: limit - len(ELLIPSIS)].rstrip() + ELLIPSIS
