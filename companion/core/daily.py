# companion/core/daily.py
# -*- coding: utf-8 -*-
"""
Companion Server — DailyGate
----------------------------
Resources generated at most once per UTC day.

Oracle (global, keyed by UTC date):
- First request of the day generates a message (completion provider, or
  the fixed pool when the provider fails), stores it and returns it with
  already_consumed=False.
- Every later request that day gets the same stored resource with
  already_consumed=True; the HTTP layer then shows a rotating placeholder.

Daily question (keyed by user):
- get_or_create_question() returns the stored question, generating one if
  the user has none. There is no re-roll: an answered question stays.
- answer_question() awards the reward once, on the first correct answer.
"""

from __future__ import annotations

import json
import logging
import zlib
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from companion.core import clock
from companion.core.errors import NotFound, UpstreamError, ValidationError
from companion.core.leaderboard import Leaderboard
from companion.core.progression import ProgressionLedger
from companion.core.types import AnswerResult, OracleResult
from companion.models.daily_model import DailyQuestion, DailyResource
from companion.providers.chat_completion import ChatCompletionProvider
from companion.runtime_state import StateStore

logger = logging.getLogger(__name__)


ORACLE_POOL: List[str] = [
    "Small steps still move you forward. Take one today.",
    "Someone is glad you exist. Let that be enough for this morning.",
    "Rest is not a reward you earn; it is part of the work.",
    "Say the kind thing you were going to keep to yourself.",
    "You have survived every hard day so far. Today is no different.",
    "Curiosity beats worry. Ask one more question today.",
    "Drink some water, open a window, begin again.",
]

ORACLE_PLACEHOLDERS: List[str] = [
    "The oracle has already spoken today. Come back tomorrow for a new message.",
    "Today's message has been delivered. The stars are resting until midnight (UTC).",
    "One oracle per day keeps the magic alive. See you tomorrow!",
    "The oracle is quiet now. Reread today's words, they were meant for you.",
]

QUESTION_POOL: List[Dict[str, Any]] = [
    {
        "question": "Which of these helps most when you feel stressed?",
        "choices": ["Holding your breath", "Slow, deep breathing", "Skipping meals", "Scrolling until late"],
        "answer_index": 1,
    },
    {
        "question": "How many hours of sleep do most adults need per night?",
        "choices": ["3-4", "5-6", "7-9", "11-12"],
        "answer_index": 2,
    },
    {
        "question": "What is a good first step when a friend seems sad?",
        "choices": ["Ignore it", "Ask how they are and listen", "Change the subject", "Give a lecture"],
        "answer_index": 1,
    },
    {
        "question": "Which activity is known to lift your mood quickly?",
        "choices": ["A short walk outside", "Arguing online", "Staying indoors all day", "Skipping water"],
        "answer_index": 0,
    },
    {
        "question": "Gratitude journaling means writing down...",
        "choices": ["Your mistakes", "Things you are thankful for", "Your to-do list", "Other people's faults"],
        "answer_index": 1,
    },
]

_ORACLE_SYSTEM_PROMPT = (
    "You are a gentle oracle inside a companion app. Reply with one short, "
    "warm, uplifting message for the day (at most two sentences). No preamble."
)

_QUESTION_SYSTEM_PROMPT = (
    "You write one multiple-choice wellbeing quiz question. Reply ONLY with JSON: "
    '{"question": "...", "choices": ["...", "...", "...", "..."], "answer_index": 0}'
)


def extract_json_block(text: str) -> Optional[Dict[str, Any]]:
    """Extract the outermost {...} object from a model reply, or None."""
    if not text:
        return None

    end = text.rfind("}")
    if end == -1:
        return None
    start = text.find("{")
    if start == -1 or start > end:
        return None

    try:
        obj = json.loads(text[start : end + 1])
    except json.JSONDecodeError:
        return None
    return obj if isinstance(obj, dict) else None


def _parse_question(obj: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if obj is None:
        return None
    question = obj.get("question")
    choices = obj.get("choices")
    answer_index = obj.get("answer_index")
    if not isinstance(question, str) or not question.strip():
        return None
    if not isinstance(choices, list) or not 2 <= len(choices) <= 6:
        return None
    if not all(isinstance(c, str) and c.strip() for c in choices):
        return None
    if isinstance(answer_index, bool) or not isinstance(answer_index, int):
        return None
    if not 0 <= answer_index < len(choices):
        return None
    return {
        "question": question.strip(),
        "choices": [c.strip() for c in choices],
        "answer_index": answer_index,
    }


def oracle_placeholder(now: datetime) -> str:
    """Placeholder shown once today's oracle was handed out; rotates hourly."""
    hour = clock.as_utc(now).hour
    return ORACLE_PLACEHOLDERS[hour % len(ORACLE_PLACEHOLDERS)]


class DailyGate:
    def __init__(
        self,
        store: StateStore,
        ledger: ProgressionLedger,
        leaderboard: Leaderboard,
        provider: ChatCompletionProvider,
        question_reward: int = 25,
    ) -> None:
        self.store = store
        self.ledger = ledger
        self.leaderboard = leaderboard
        self.provider = provider
        self.question_reward = question_reward

    # ------------------------------------------------------------------
    # Oracle
    # ------------------------------------------------------------------

    def _generate_oracle(self, today: date) -> Tuple[str, str]:
        try:
            text = self.provider.complete(
                _ORACLE_SYSTEM_PROMPT,
                [{"role": "user", "content": f"Today is {today.isoformat()}. What is today's message?"}],
            )
            return text, "provider"
        except UpstreamError as exc:
            logger.warning("[DailyGate] Oracle generation failed (%s); using pool.", exc)
            return ORACLE_POOL[today.toordinal() % len(ORACLE_POOL)], "pool"

    def get_or_create_oracle(self, now: Optional[datetime] = None) -> OracleResult:
        now = now or clock.utc_now()
        today = clock.utc_day(now)

        with self.store.lock("oracle"):
            existing = self.store.oracle()
            if existing is not None and existing.date == today:
                return OracleResult(resource=existing, already_consumed=True)

            payload, source = self._generate_oracle(today)
            resource = DailyResource(date=today, payload=payload, source=source)
            self.store.put_oracle(resource)

        logger.info("[DailyGate] New oracle for %s (source=%s)", today, source)
        return OracleResult(resource=resource, already_consumed=False)

    # ------------------------------------------------------------------
    # Daily question
    # ------------------------------------------------------------------

    def _generate_question(self, user_id: str, now: datetime) -> DailyQuestion:
        today = clock.utc_day(now)
        parsed: Optional[Dict[str, Any]] = None
        try:
            reply = self.provider.complete(
                _QUESTION_SYSTEM_PROMPT,
                [{"role": "user", "content": "Write today's question."}],
            )
            parsed = _parse_question(extract_json_block(reply))
            if parsed is None:
                logger.warning("[DailyGate] Provider question was not usable; using pool.")
        except UpstreamError as exc:
            logger.warning("[DailyGate] Question generation failed (%s); using pool.", exc)

        if parsed is None:
            seed = zlib.crc32(f"{user_id}:{today.isoformat()}".encode("utf-8"))
            parsed = dict(QUESTION_POOL[seed % len(QUESTION_POOL)])

        return DailyQuestion(
            user_id=user_id,
            date=today,
            question=parsed["question"],
            choices=list(parsed["choices"]),
            answer_index=parsed["answer_index"],
            reward=self.question_reward,
        )

    def get_or_create_question(
        self,
        user_id: str,
        now: Optional[datetime] = None,
    ) -> DailyQuestion:
        now = now or clock.utc_now()
        with self.store.lock(f"question:{user_id}"):
            question = self.store.question(user_id)
            if question is None:
                question = self._generate_question(user_id, now)
                self.store.put_question(question)
                logger.info("[DailyGate] New question for %s", user_id)
        return question

    def answer_question(
        self,
        user_id: str,
        choice_index: int,
        now: Optional[datetime] = None,
    ) -> AnswerResult:
        if isinstance(choice_index, bool) or not isinstance(choice_index, int):
            raise ValidationError("choice_index must be an integer")
        now = now or clock.utc_now()

        with self.store.lock(f"question:{user_id}"):
            question = self.store.question(user_id)
            if question is None:
                raise NotFound("no daily question yet; fetch one first")
            if not 0 <= choice_index < len(question.choices):
                raise ValidationError(
                    f"choice_index must be between 0 and {len(question.choices) - 1}"
                )

            correct = choice_index == question.answer_index
            if question.answered:
                return AnswerResult(correct=correct, reward=0, already_answered=True)
            if not correct:
                return AnswerResult(correct=False, reward=0)

            activity = self.ledger.record_activity(user_id, question.reward, now)
            question.answered = True
            question.answered_at = now
            self.store.put_question(question)

        self.leaderboard.update(user_id)
        logger.info("[DailyGate] %s answered correctly (+%d)", user_id, activity.award)
        return AnswerResult(correct=True, reward=activity.award, activity=activity)
