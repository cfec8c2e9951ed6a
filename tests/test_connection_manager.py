"""Tests for the WebSocket-backed ConnectionManager transport."""

import pytest

from roomchat.services.connection_manager import ConnectionManager

from conftest import FakeWebSocket

pytestmark = pytest.mark.anyio


class TestConnectionManager:
    async def test_connect_accepts_and_announces_id(self, manager: ConnectionManager) -> None:
        ws = FakeWebSocket()
        connection_id = await manager.connect(ws)

        assert ws.accepted
        assert ws.frames == [{"type": "connected", "data": {"id": connection_id}}]
        assert connection_id in manager.connections
        assert manager.connection_rooms[connection_id] == set()
        assert connection_id not in manager.rooms

    async def test_connection_ids_are_unique(self, manager: ConnectionManager) -> None:
        first = await manager.connect(FakeWebSocket())
        second = await manager.connect(FakeWebSocket())
        assert first != second

    async def test_emit_room_reaches_members_only(self, manager: ConnectionManager, connect) -> None:
        a, ws_a = await connect()
        b, ws_b = await connect()
        _, ws_c = await connect()
        manager.enter_room(a, "general")
        manager.enter_room(b, "general")

        await manager.emit_room("general", "ping", {"n": 1})

        assert ws_a.events("ping") == [{"n": 1}]
        assert ws_b.events("ping") == [{"n": 1}]
        assert ws_c.frames == []

    async def test_emit_room_skip(self, manager: ConnectionManager, connect) -> None:
        a, ws_a = await connect()
        b, ws_b = await connect()
        manager.enter_room(a, "general")
        manager.enter_room(b, "general")

        await manager.emit_room("general", "ping", {}, skip=a)

        assert ws_a.frames == []
        assert ws_b.events("ping") == [{}]

    async def test_connection_id_is_not_a_room(self, manager: ConnectionManager, connect) -> None:
        a, ws_a = await connect()
        ws_a.clear()

        await manager.emit_room(a, "ping", {})

        assert ws_a.frames == []

    async def test_emit_to_empty_room_is_noop(self, manager: ConnectionManager) -> None:
        await manager.emit_room("nobody-here", "ping", {})

    async def test_emit_all(self, connect, manager: ConnectionManager) -> None:
        _, ws_a = await connect()
        _, ws_b = await connect()

        await manager.emit_all("room_list", ["general"])

        assert ws_a.events("room_list") == [["general"]]
        assert ws_b.events("room_list") == [["general"]]

    async def test_emit_to_unknown_connection_is_dropped(self, manager: ConnectionManager) -> None:
        await manager.emit_to("gone", "ping", {})

    async def test_failed_send_disconnects(self, manager: ConnectionManager, connect) -> None:
        a, _ = await connect()
        b, ws_b = await connect()
        manager.enter_room(a, "general")
        manager.enter_room(b, "general")
        ws_b.fail = True

        await manager.emit_room("general", "ping", {})

        assert b not in manager.connections
        assert manager.rooms["general"] == {a}

    async def test_disconnect_cleans_up_rooms(self, manager: ConnectionManager, connect) -> None:
        a, _ = await connect()
        manager.enter_room(a, "general")

        manager.disconnect(a)
        manager.disconnect(a)

        assert a not in manager.connections
        assert "general" not in manager.rooms
        assert a not in manager.rooms

    async def test_enter_room_after_disconnect_is_noop(self, manager: ConnectionManager, connect) -> None:
        a, _ = await connect()
        manager.disconnect(a)
        manager.enter_room(a, "general")
        assert "general" not in manager.rooms
