"""
Runtime state package for the companion server.

Owns the single datastore document and the keyed, lock-protected view the
core components work against.

Typical usage (see companion.core.engine):

    from companion.runtime_state import DocumentStore, StateStore

    store = StateStore(DocumentStore(settings.data_path))

    with store.lock(f"user:{user_id}"):
        user = store.get_user(user_id)
        ...
        store.put_user(user)
"""

from .store import (
    Datastore,
    DocumentStore,
    StateStore,
    empty_skeleton,
)

__all__ = [
    "Datastore",
    "DocumentStore",
    "StateStore",
    "empty_skeleton",
]
