# roomchat/services/connection_manager.py

from __future__ import annotations

from typing import Any, Dict, Optional, Set
from uuid import uuid4
from fastapi import WebSocket
import logging

from roomchat.models.events import OUT_CONNECTED

logger = logging.getLogger(__name__)

# ============================================================================
# WEBSOCKET CONNECTION MANAGER
# ============================================================================

class ConnectionManager:
    """
    Manages WebSocket connections and room subscriptions.

    This is the transport the SessionEngine talks to. It knows nothing about
    users, messages or typing; it only knows which sockets exist and which
    room scopes they are subscribed to, and it delivers JSON frames to one
    socket, to a room, or to everyone.

    Data Structures:
        connections: Maps connection_id -> WebSocket
                     Example: {"3f0c...": websocket1}

        rooms: Maps room name -> Set of connection_ids subscribed to it
               Example: {"general": {"3f0c...", "9a1b..."}}

        connection_rooms: Maps connection_id -> Set of room names it's in
                          Example: {"3f0c...": {"general", "random"}}

    A connection starts in no room; only enter_room() subscribes it.
    Single-socket delivery goes through emit_to(), never a room scope.

    Frame Format:
        {"type": "<event name>", "data": <payload>}
    """

    def __init__(self) -> None:
        """Initialize connection manager with empty data structures."""
        self.connections: Dict[str, WebSocket] = {}

        # Map: room -> Set[connection_ids]
        self.rooms: Dict[str, Set[str]] = {}

        # Map: connection_id -> Set[rooms it's subscribed to]
        self.connection_rooms: Dict[str, Set[str]] = {}

    async def connect(self, websocket: WebSocket) -> str:
        """
        Accept a new WebSocket connection and give it an identity.

        Args:
            websocket: The WebSocket connection object

        Returns:
            The opaque connection id, stable for the life of the socket

        Note:
            The client is told its id with a "connected" frame. It is not a
            chat user until it sends "user_join".
        """
        await websocket.accept()

        connection_id = uuid4().hex
        self.connections[connection_id] = websocket
        self.connection_rooms[connection_id] = set()

        logger.info("✓ Connection %s opened. Total: %d", connection_id, len(self.connections))
        await self.emit_to(connection_id, OUT_CONNECTED, {"id": connection_id})
        return connection_id

    def disconnect(self, connection_id: str) -> None:
        """
        Forget a connection and drop it from every room it was subscribed to.

        Empty room scopes are removed from memory. Safe to call twice.
        """
        if connection_id not in self.connections:
            return

        for room in self.connection_rooms.pop(connection_id, set()):
            members = self.rooms.get(room)
            if members is None:
                continue
            members.discard(connection_id)
            if not members:
                del self.rooms[room]

        del self.connections[connection_id]
        logger.info("✗ Connection %s closed. Total: %d", connection_id, len(self.connections))

    def enter_room(self, connection_id: str, room: str) -> None:
        """Subscribe a connection to a room scope. No-op for unknown connections."""
        if connection_id not in self.connection_rooms:
            return  # Connection already closed

        self.rooms.setdefault(room, set()).add(connection_id)
        self.connection_rooms[connection_id].add(room)

    async def emit_to(self, connection_id: str, event: str, payload: Any) -> None:
        """Send one event to a single connection. Unknown ids are ignored."""
        if not await self._send(connection_id, event, payload):
            self.disconnect(connection_id)

    async def emit_room(
        self,
        room: str,
        event: str,
        payload: Any,
        skip: Optional[str] = None,
    ) -> None:
        """
        Broadcast an event to every connection subscribed to a room.

        Args:
            room: Target room name
            event: Outbound event name
            payload: JSON-serializable payload
            skip: Optional connection id to leave out (usually the sender)

        Error Handling:
            If a send fails, the connection is marked as disconnected and
            cleaned up after the loop. Nothing is retried.
        """
        if room not in self.rooms:
            # No one subscribed to this room currently
            logger.debug("[routing] Skipped %s: room=%s has 0 subscribers", event, room)
            return

        targets = [cid for cid in self.rooms[room] if cid != skip]
        logger.debug("📨 %s -> room %s: %d clients", event, room, len(targets))
        await self._deliver(targets, event, payload)

    async def emit_all(self, event: str, payload: Any) -> None:
        """Broadcast an event to every open connection."""
        await self._deliver(list(self.connections), event, payload)

    async def _deliver(self, targets: list, event: str, payload: Any) -> None:
        disconnected = set()
        for connection_id in targets:
            if not await self._send(connection_id, event, payload):
                disconnected.add(connection_id)

        # Clean up failed connections
        for connection_id in disconnected:
            self.disconnect(connection_id)

    async def _send(self, connection_id: str, event: str, payload: Any) -> bool:
        websocket = self.connections.get(connection_id)
        if websocket is None:
            return True  # Already gone, nothing to clean up
        try:
            await websocket.send_json({"type": event, "data": payload})
            return True
        except Exception as e:
            logger.error("Send error to %s (%s): %s", connection_id, event, e)
            return False
