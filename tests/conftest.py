"""
pytest configuration and fixtures.
"""

import asyncio
import json
import os
import tempfile
from types import SimpleNamespace
from typing import Any, Dict, List, Union

import pytest
from starlette.websockets import WebSocketState

# main.py builds a module-level app on import, which needs a database directory.
os.environ.setdefault("DATABASE_DIR", tempfile.mkdtemp(prefix="viewpoint_feedback_test_"))

from fastapi.testclient import TestClient

from main import create_app
from services.realtime.connection_manager import ConnectionLifecycleManager
from services.realtime.event_router import EventRouter
from services.realtime.session_registry import SessionRegistry
from services.realtime.transport import WebSocketTransport
from services.realtime.ws_session import RealtimeSessionHandler
from utils.database_init import AsyncDatabaseInitializer
from utils.settings import Settings


class FakeWebSocket:
    """Stand-in for a connected websocket that records decoded frames.

    `fail` makes every send raise: True raises RuntimeError, an exception
    instance is raised as given.
    """

    def __init__(self, fail: Union[bool, BaseException] = False) -> None:
        self.application_state = WebSocketState.CONNECTED
        self.fail = fail
        self.sent: List[Dict[str, Any]] = []

    async def send_text(self, text: str) -> None:
        if isinstance(self.fail, BaseException):
            raise self.fail
        if self.fail:
            raise RuntimeError("socket already closed")
        self.sent.append(json.loads(text))

    def events(self, name: str) -> List[Any]:
        return [frame["data"] for frame in self.sent if frame["event"] == name]


@pytest.fixture
def core():
    """An in-memory realtime core wired the same way the app wires it."""
    registry = SessionRegistry()
    transport = WebSocketTransport()
    manager = ConnectionLifecycleManager(registry, transport)
    router = EventRouter(manager, registry, transport)
    handler = RealtimeSessionHandler(manager, router)

    def connect(fail: Union[bool, BaseException] = False):
        socket = FakeWebSocket(fail=fail)
        handle = manager.connect(socket)
        return handle.client_id, socket

    return SimpleNamespace(
        registry=registry,
        transport=transport,
        manager=manager,
        router=router,
        handler=handler,
        connect=connect,
    )


@pytest.fixture
def run():
    """Run a coroutine to completion on a fresh event loop."""
    return asyncio.run


@pytest.fixture
def db_initializer(tmp_path) -> AsyncDatabaseInitializer:
    return AsyncDatabaseInitializer(tmp_path / "db")


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(database_dir=tmp_path / "db", ws_idle_timeout=0)


@pytest.fixture
def client(settings):
    """TestClient used as a context manager so every websocket shares one loop."""
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client
