"""Shared fixtures for the chat server tests."""

from typing import Any

import pytest

from roomchat.core.config import Settings
from roomchat.core.state import SessionContext
from roomchat.services.connection_manager import ConnectionManager
from roomchat.services.session_engine import SessionEngine


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


class FakeWebSocket:
    """Stands in for a Starlette WebSocket: records every frame sent to it."""

    def __init__(self, fail: bool = False) -> None:
        self.accepted = False
        self.fail = fail
        self.frames: list[dict[str, Any]] = []

    async def accept(self) -> None:
        self.accepted = True

    async def send_json(self, data: dict[str, Any]) -> None:
        if self.fail:
            raise RuntimeError("socket closed")
        self.frames.append(data)

    def events(self, name: str) -> list[Any]:
        """Payloads of every frame of the given type, in arrival order."""
        return [f["data"] for f in self.frames if f["type"] == name]

    def types(self) -> list[str]:
        return [f["type"] for f in self.frames]

    def clear(self) -> None:
        self.frames.clear()


@pytest.fixture
def settings() -> Settings:
    return Settings(DEFAULT_ROOM="general", MESSAGE_HISTORY_LIMIT=200, PAGE_SIZE=20)


@pytest.fixture
def context(settings: Settings) -> SessionContext:
    return SessionContext.create(settings)


@pytest.fixture
def manager() -> ConnectionManager:
    return ConnectionManager()


@pytest.fixture
def engine(context: SessionContext, manager: ConnectionManager) -> SessionEngine:
    return SessionEngine(context, manager)


@pytest.fixture
def connect(manager: ConnectionManager):
    """Open a fake socket on the manager and return (connection_id, socket)."""

    async def _connect(fail: bool = False) -> tuple[str, FakeWebSocket]:
        ws = FakeWebSocket(fail=fail)
        connection_id = await manager.connect(ws)
        ws.clear()
        return connection_id, ws

    return _connect
