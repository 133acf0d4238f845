# companion/runtime_state/store.py
# -*- coding: utf-8 -*-
"""
Companion Server — Runtime State Store
--------------------------------------

This module implements the file-backed datastore for the companion server.

Purpose
~~~~~~~
- Hold every piece of mutable state (users, memory log, moods, leaderboard,
  oracle, daily questions) in one place.
- Persist it to disk so a restart does not lose progress.
- Stop concurrent requests from losing each other's updates.

Design notes
~~~~~~~~~~~~
- DocumentStore is the persistence boundary: one JSON document, read and
  replaced whole. A missing or corrupt document reads as an empty skeleton
  (lossy recovery, logged as a warning).
- StateStore loads the document once and keeps the parsed state in memory.
  Components never touch the document; they read and commit entities by key.
- `lock(key)` gives per-entity mutual exclusion for read-modify-write
  sequences ("user:alice", "leaderboard", "oracle", ...).
- `flush()` runs under a single writer lock and always serializes the
  latest in-memory state, so two flushes can never reorder on disk.
- Every put_* applies its change in memory and then flushes; if the write
  fails the change is undone before StorageError reaches the caller.
- Per-key locks live in a WeakValueDictionary and disappear when unused.
- Single process only. Multiple uvicorn workers would each hold their own
  copy of the state.
"""

from __future__ import annotations

import threading
import weakref
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Union

import pydantic
from pydantic import BaseModel, Field

from companion.core.errors import StorageError
from companion.models.daily_model import DailyQuestion, DailyResource
from companion.models.leaderboard_model import LeaderboardEntry
from companion.models.memory_model import MemoryEntry, MoodEntry
from companion.models.user_model import UserProfile
from companion.utils import get_logger, read_json_document, write_json_atomic


logger = get_logger("companion.runtime_state")


# ---------------------------------------------------------------------------
# Document schema
# ---------------------------------------------------------------------------


class Datastore(BaseModel):
    """Top-level container for everything stored on disk."""

    users: Dict[str, UserProfile] = Field(default_factory=dict)
    memory: Dict[str, List[MemoryEntry]] = Field(default_factory=dict)
    moods: Dict[str, List[MoodEntry]] = Field(default_factory=dict)
    leaderboard: List[LeaderboardEntry] = Field(default_factory=list)
    oracle: Optional[DailyResource] = None
    questions: Dict[str, DailyQuestion] = Field(default_factory=dict)


def empty_skeleton() -> Dict[str, Any]:
    return Datastore().model_dump(mode="json")


# ---------------------------------------------------------------------------
# Persistence boundary
# ---------------------------------------------------------------------------


class DocumentStore:
    """
    Whole-document JSON persistence.

    read()  -> the stored document, or an empty skeleton if it is missing
               or cannot be parsed.
    write() -> atomic replace of the whole document.
    """

    def __init__(self, path: Union[Path, str]) -> None:
        self.path = Path(path)

    def read(self) -> Dict[str, Any]:
        try:
            return read_json_document(self.path)
        except FileNotFoundError:
            logger.info("[DocumentStore] No datastore at %s, starting empty.", self.path)
            return empty_skeleton()
        except StorageError as exc:
            logger.warning(
                "[DocumentStore] %s; substituting an empty document. "
                "Existing data will be overwritten on the next write.",
                exc,
            )
            return empty_skeleton()

    def write(self, document: Dict[str, Any]) -> None:
        write_json_atomic(self.path, document)


# ---------------------------------------------------------------------------
# Keyed state store
# ---------------------------------------------------------------------------


class StateStore:
    """
    In-memory, keyed view over a DocumentStore.

    Accessors return copies; callers mutate the copy and hand it back with
    a put_* call, which commits it and (with auto_persist) flushes to disk.
    Wrap read-modify-write sequences in `with store.lock(key):`.

    Parameters
    ----------
    documents:
        Persistence backend.
    auto_persist:
        If True, every commit is flushed to disk immediately. Tests may
        switch this off and call `flush()` themselves.
    """

    def __init__(self, documents: DocumentStore, auto_persist: bool = True) -> None:
        self.documents = documents
        self.auto_persist = auto_persist

        # A key keeps its lock only while some caller holds it.
        self._locks: weakref.WeakValueDictionary[str, threading.RLock] = (
            weakref.WeakValueDictionary()
        )
        self._locks_guard = threading.Lock()
        # Guards the containers in self.state; held only for short commits/dumps.
        self._state_guard = threading.RLock()
        self._writer = threading.Lock()

        self.state: Datastore = self._load()

    # ------------------------------------------------------------------
    # Loading / flushing
    # ------------------------------------------------------------------

    def _load(self) -> Datastore:
        raw = self.documents.read()
        try:
            state = Datastore.model_validate(raw)
        except pydantic.ValidationError as exc:
            logger.warning(
                "[StateStore] Datastore at %s failed validation (%d errors); "
                "starting with empty state.",
                self.documents.path,
                exc.error_count(),
            )
            return Datastore()

        logger.info(
            "[StateStore] Loaded %d users, %d memory logs from %s",
            len(state.users),
            len(state.memory),
            self.documents.path,
        )
        return state


    def flush(self) -> None:
        """Write the current state to disk (one writer at a time)."""
        with self._writer:
            with self._state_guard:
                payload = self.state.model_dump(mode="json")
            self.documents.write(payload)

    def _committed(self, undo: Callable[[], None]) -> None:
        """
        Persist a change that was just applied in memory.

        If the write fails, `undo` restores the previous in-memory value
        before the StorageError propagates, so a failed commit leaves no
        trace that a later flush could write out.
        """
        if not self.auto_persist:
            return
        try:
            self.flush()
        except StorageError:
            with self._state_guard:
                undo()
            logger.error("[StateStore] Write failed; in-memory change rolled back.")
            raise

    # ------------------------------------------------------------------
    # Locking
    # ------------------------------------------------------------------

    def _lock_for(self, key: str) -> threading.RLock:
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def lock(self, key: str) -> Iterator[None]:
        """Per-entity mutual exclusion, re-entrant within one thread."""
        lock = self._lock_for(key)
        with lock:
            yield

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def get_user(self, user_id: str) -> Optional[UserProfile]:
        with self._state_guard:
            user = self.state.users.get(user_id)
            return user.model_copy(deep=True) if user is not None else None

    def put_user(self, user: UserProfile) -> None:
        user_id = user.user_id
        with self._state_guard:
            previous = self.state.users.get(user_id)
            self.state.users[user_id] = user.model_copy(deep=True)

        def undo() -> None:
            if previous is None:
                self.state.users.pop(user_id, None)
            else:
                self.state.users[user_id] = previous

        self._committed(undo)

    # ------------------------------------------------------------------
    # Memory log / moods (append-only)
    # ------------------------------------------------------------------

    def memory_entries(self, user_id: str) -> List[MemoryEntry]:
        with self._state_guard:
            return list(self.state.memory.get(user_id, []))

    def append_memory(self, entry: MemoryEntry) -> None:
        self._append(self.state.memory, entry.user_id, entry)

    def mood_entries(self, user_id: str) -> List[MoodEntry]:
        with self._state_guard:
            return list(self.state.moods.get(user_id, []))

    def append_mood(self, entry: MoodEntry) -> None:
        self._append(self.state.moods, entry.user_id, entry)

    def _append(self, logs: Dict[str, List[Any]], user_id: str, entry: Any) -> None:
        with self._state_guard:
            logs.setdefault(user_id, []).append(entry)

        def undo() -> None:
            entries = logs.get(user_id, [])
            for i in range(len(entries) - 1, -1, -1):
                if entries[i] is entry:
                    del entries[i]
                    break

        self._committed(undo)

    # ------------------------------------------------------------------
    # Leaderboard
    # ------------------------------------------------------------------

    def leaderboard(self) -> List[LeaderboardEntry]:
        with self._state_guard:
            return [e.model_copy() for e in self.state.leaderboard]

    def put_leaderboard(self, entries: List[LeaderboardEntry]) -> None:
        with self._state_guard:
            previous = self.state.leaderboard
            self.state.leaderboard = [e.model_copy() for e in entries]

        def undo() -> None:
            self.state.leaderboard = previous

        self._committed(undo)

    # ------------------------------------------------------------------
    # Daily resources
    # ------------------------------------------------------------------

    def oracle(self) -> Optional[DailyResource]:
        with self._state_guard:
            return self.state.oracle

    def put_oracle(self, resource: DailyResource) -> None:
        with self._state_guard:
            previous = self.state.oracle
            self.state.oracle = resource

        def undo() -> None:
            self.state.oracle = previous

        self._committed(undo)

    def question(self, user_id: str) -> Optional[DailyQuestion]:
        with self._state_guard:
            q = self.state.questions.get(user_id)
            return q.model_copy(deep=True) if q is not None else None

    def put_question(self, question: DailyQuestion) -> None:
        user_id = question.user_id
        with self._state_guard:
            previous = self.state.questions.get(user_id)
            self.state.questions[user_id] = question.model_copy(deep=True)

        def undo() -> None:
            if previous is None:
                self.state.questions.pop(user_id, None)
            else:
                self.state.questions[user_id] = previous

        self._committed(undo)
