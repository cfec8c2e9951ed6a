# roomchat/services/room_directory.py

from __future__ import annotations

from typing import Dict, Iterable, List
import logging

logger = logging.getLogger(__name__)

PRIVATE_ROOM_PREFIX = "private_"


def private_room_for(connection_id: str) -> str:
    """Name of the synthetic room that addresses a single connection."""
    return f"{PRIVATE_ROOM_PREFIX}{connection_id}"


def is_private_room(room: str) -> bool:
    return room.startswith(PRIVATE_ROOM_PREFIX)


def private_room_target(room: str) -> str | None:
    """
    Connection id addressed by a private room name.

    None for a public room, and also for a bare "private_" that addresses
    nobody; check is_private_room() to tell the two apart.
    """
    if not is_private_room(room):
        return None
    target = room[len(PRIVATE_ROOM_PREFIX):]
    return target or None


# ============================================================================
# ROOM DIRECTORY
# ============================================================================
class RoomDirectory:
    """
    Registry of every room name the server has seen.

    Rooms are created implicitly the first time anything references them and
    are never removed. Names are case-sensitive. Private channels are
    registered too, so every room a message lives in is known here, but they
    are hidden from the public listing.

    Usage:
        directory = RoomDirectory(["general"])
        directory.ensure("random")
        directory.list()  # ["general", "random"]
    """

    def __init__(self, initial: Iterable[str] = ()) -> None:
        # dict keeps registration order
        self._rooms: Dict[str, None] = {}
        for name in initial:
            self.ensure(name)

    def ensure(self, name: str) -> bool:
        """Register a room name. Returns True if it was new."""
        if name in self._rooms:
            return False
        self._rooms[name] = None
        logger.debug("Registered room '%s'", name)
        return True

    def list(self, include_private: bool = False) -> List[str]:
        return [
            name for name in self._rooms
            if include_private or not is_private_room(name)
        ]

    def __contains__(self, name: object) -> bool:
        return name in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)
