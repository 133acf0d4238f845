from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Optional

import pytest

from companion.core.engine import build_engine
from companion.core.errors import UpstreamError


class FakeCompletion:
    """Stands in for ChatCompletionProvider; records every call."""

    def __init__(
        self,
        replies: Optional[List[str]] = None,
        fail: bool = False,
        configured: bool = True,
    ) -> None:
        self.replies = list(replies or [])
        self.fail = fail
        self.is_configured = configured
        self.calls: List[tuple] = []

    def complete(self, system_prompt: str, turns: List[Dict[str, str]]) -> str:
        self.calls.append((system_prompt, [dict(t) for t in turns]))
        if self.fail:
            raise UpstreamError("provider down")
        if self.replies:
            return self.replies.pop(0)
        return "I hear you."


class FakeSearch:
    def __init__(self, text: str = "") -> None:
        self.text = text
        self.queries: List[str] = []

    def search(self, query: str) -> str:
        self.queries.append(query)
        return self.text


class FakeResponse:
    def __init__(self, status_code: int = 200, json_data=None, text: str = "") -> None:
        self.status_code = status_code
        self._json = json_data
        self.text = text

    def json(self):
        if self._json is None:
            raise ValueError("no JSON")
        return self._json


class FakeSession:
    """Minimal requests.Session replacement: returns or raises what it is given."""

    def __init__(self, response: Optional[FakeResponse] = None, exc: Optional[Exception] = None) -> None:
        self.response = response
        self.exc = exc
        self.requests: List[dict] = []

    def _handle(self, method: str, url: str, **kwargs):
        self.requests.append({"method": method, "url": url, **kwargs})
        if self.exc is not None:
            raise self.exc
        return self.response

    def post(self, url, **kwargs):
        return self._handle("POST", url, **kwargs)

    def get(self, url, **kwargs):
        return self._handle("GET", url, **kwargs)


ADMIN_SECRET = "s3cret"


@pytest.fixture
def now() -> datetime:
    return datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def completion() -> FakeCompletion:
    return FakeCompletion()


@pytest.fixture
def search() -> FakeSearch:
    return FakeSearch()


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "companion_db.json"


@pytest.fixture
def engine(db_path, completion, search):
    return build_engine(
        db_path,
        completion=completion,
        search=search,
        admin_token=ADMIN_SECRET,
    )


@pytest.fixture
def client(engine):
    from fastapi.testclient import TestClient

    from companion.core.engine import get_engine
    from companion.main import app

    app.dependency_overrides[get_engine] = lambda: engine
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
