"""Shared pytest fixtures: session-enabled apps, in cookie and store mode."""

from typing import Any, Dict, Optional
import pytest

from arxiv.sessions import factory
from arxiv.sessions.store import SessionStore


class DictStore(SessionStore):
    """Keeps sessions in a dict, and records calls, for tests."""

    def __init__(self) -> None:
        self.data: Dict[str, Dict[str, Any]] = {}
        self.calls: list = []

    def get(self, key: str, max_age: Any,
            rolling: bool = False) -> Optional[Dict[str, Any]]:
        self.calls.append(('get', key))
        return self.data.get(key)

    def set(self, key: str, data: Dict[str, Any], max_age: Any,
            changed: bool = True, rolling: bool = False) -> None:
        self.calls.append(('set', key, changed, rolling))
        self.data[key] = dict(data)

    def destroy(self, key: str) -> None:
        self.calls.append(('destroy', key))
        self.data.pop(key, None)


@pytest.fixture()
def app():
    app = factory.create_web_app()
    app.config['TESTING'] = True
    return app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def store():
    return DictStore()


@pytest.fixture()
def store_app(store):
    app = factory.create_web_app(store=store, genid=lambda: 'key-1')
    app.config['TESTING'] = True
    return app


@pytest.fixture()
def store_client(store_app):
    return store_app.test_client()
