# companion/core/engine.py
# -*- coding: utf-8 -*-
"""
Companion Server — Engine
-------------------------
Wires the store, the external providers and the core components together.

One Engine per process is created lazily by get_engine() and handed to the
routers through FastAPI's dependency injection; tests build their own with
build_engine(tmp_path / "db.json", completion=FakeProvider(), ...) and
override the dependency.
"""

from __future__ import annotations

import hmac
import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional, Union

from companion.core.config import settings
from companion.core.daily import DailyGate
from companion.core.economy import Economy
from companion.core.errors import Forbidden
from companion.core.leaderboard import Leaderboard
from companion.core.memory import MemoryStore
from companion.core.moods import MoodJournal
from companion.core.progression import ProgressionLedger
from companion.models.user_model import UserProfile
from companion.providers.chat_completion import ChatCompletionProvider
from companion.providers.web_search import WebSearchProvider
from companion.runtime_state import DocumentStore, StateStore

logger = logging.getLogger(__name__)


class Engine:
    def __init__(
        self,
        store: StateStore,
        completion: ChatCompletionProvider,
        search: WebSearchProvider,
        admin_token: Optional[str] = None,
        chat_base_points: int = 10,
        question_reward: int = 25,
        default_memory_window: int = 30,
    ) -> None:
        self.store = store
        self.completion = completion
        self.search = search
        self.admin_token = admin_token
        self.chat_base_points = chat_base_points

        self.memory = MemoryStore(store, default_window=default_memory_window)
        self.ledger = ProgressionLedger(store, self.memory, default_memory_window)
        self.leaderboard = Leaderboard(store)
        self.economy = Economy(self.ledger)
        self.daily = DailyGate(
            store,
            self.ledger,
            self.leaderboard,
            completion,
            question_reward=question_reward,
        )
        self.moods = MoodJournal(store)

    def check_admin(self, secret: str) -> None:
        if not self.admin_token:
            raise Forbidden("admin endpoint is disabled")
        if not hmac.compare_digest(secret.encode("utf-8"), self.admin_token.encode("utf-8")):
            raise Forbidden("bad admin secret")

    def admin_add_points(self, user_id: str, amount: int, secret: str) -> UserProfile:
        self.check_admin(secret)
        user = self.ledger.add_points(user_id, amount)
        self.leaderboard.update(user_id)
        return user


def build_engine(
    data_path: Optional[Union[Path, str]] = None,
    completion: Optional[ChatCompletionProvider] = None,
    search: Optional[WebSearchProvider] = None,
    admin_token: Optional[str] = None,
    auto_persist: bool = True,
) -> Engine:
    store = StateStore(
        DocumentStore(data_path or settings.data_path),
        auto_persist=auto_persist,
    )
    return Engine(
        store=store,
        completion=completion or ChatCompletionProvider.from_settings(),
        search=search or WebSearchProvider(),
        admin_token=admin_token if admin_token is not None else settings.admin_token,
        chat_base_points=settings.chat_base_points,
        question_reward=settings.daily_question_reward,
        default_memory_window=settings.default_memory_window,
    )


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    engine = build_engine()
    logger.info(
        "Engine ready (data=%s, completion_configured=%s)",
        engine.store.documents.path,
        engine.completion.is_configured,
    )
    return engine
