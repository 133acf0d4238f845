# companion/core/moods.py
# -*- coding: utf-8 -*-
"""
Companion Server — MoodJournal
------------------------------
Per-user log of self-reported moods, answered with a short "heartbeat"
message. The mood label comes from the client (voice/face classification
happens elsewhere); unknown labels get a neutral reply.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, List, Optional

from companion.core import clock
from companion.core.errors import ValidationError
from companion.models.memory_model import MoodEntry
from companion.runtime_state import StateStore

logger = logging.getLogger(__name__)

# locale -> mood -> message; "*" is the fallback for unknown moods
HEARTBEATS: Dict[str, Dict[str, str]] = {
    "en": {
        "happy": "Love that energy! What made today good?",
        "calm": "A calm heart is a strong heart. Enjoy the quiet.",
        "sad": "I'm here with you. Want to tell me what's weighing on you?",
        "anxious": "Let's take one slow breath together. In... and out.",
        "angry": "That sounds frustrating. It's okay to feel this way.",
        "tired": "You've been carrying a lot. Rest is allowed.",
        "*": "Thanks for checking in. I'm listening whenever you're ready.",
    },
    "es": {
        "happy": "¡Me encanta esa energía! ¿Qué hizo bueno tu día?",
        "calm": "Un corazón tranquilo es un corazón fuerte. Disfruta la calma.",
        "sad": "Estoy aquí contigo. ¿Quieres contarme qué te pesa?",
        "anxious": "Respiremos despacio juntos. Inhala... y exhala.",
        "angry": "Suena frustrante. Está bien sentirse así.",
        "tired": "Has cargado mucho. Descansar está permitido.",
        "*": "Gracias por contarme cómo estás. Te escucho cuando quieras.",
    },
}


def base_locale(locale: str) -> str:
    """"es-MX" -> "es"; unsupported locales fall back to "en"."""
    short = (locale or "en").replace("_", "-").split("-")[0].lower()
    return short if short in HEARTBEATS else "en"


def heartbeat_message(mood: str, locale: str) -> str:
    table = HEARTBEATS[base_locale(locale)]
    return table.get(mood, table["*"])


class MoodJournal:
    def __init__(self, store: StateStore) -> None:
        self.store = store

    def record_mood(
        self,
        user_id: str,
        mood: str,
        locale: str = "en",
        now: Optional[datetime] = None,
    ) -> str:
        mood = (mood or "").strip().lower()
        if not mood:
            raise ValidationError("mood is required")

        entry = MoodEntry(
            user_id=user_id,
            mood=mood,
            locale=locale,
            timestamp=clock.as_utc(now) if now is not None else clock.utc_now(),
        )
        with self.store.lock(f"mood:{user_id}"):
            self.store.append_mood(entry)

        logger.info("[MoodJournal] %s feels %s", user_id, mood)
        return heartbeat_message(mood, locale)

    def list_moods(self, user_id: str) -> List[MoodEntry]:
        """Newest first."""
        return sorted(
            self.store.mood_entries(user_id), key=lambda e: e.timestamp, reverse=True
        )
