# roomchat/core/state.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from roomchat.core.config import Settings
from roomchat.services.message_store import MessageStore
from roomchat.services.presence import PresenceTracker
from roomchat.services.room_directory import RoomDirectory
from roomchat.services.user_registry import UserRegistry


@dataclass
class SessionContext:
    """
    All in-memory chat state for one server process.

    Built once at start-up and handed to the SessionEngine, which is the only
    writer. Nothing here is a module-level singleton, so tests can build as
    many independent contexts as they like.
    """

    rooms: RoomDirectory
    users: UserRegistry
    messages: MessageStore
    presence: PresenceTracker
    default_room: str = "general"
    preview_length: int = 20

    @classmethod
    def create(cls, settings: Optional[Settings] = None) -> "SessionContext":
        settings = settings or Settings()
        messages = MessageStore(
            capacity=settings.MESSAGE_HISTORY_LIMIT,
            page_size=settings.PAGE_SIZE,
        )
        messages.ensure(settings.DEFAULT_ROOM)
        return cls(
            rooms=RoomDirectory([settings.DEFAULT_ROOM]),
            users=UserRegistry(),
            messages=messages,
            presence=PresenceTracker(),
            default_room=settings.DEFAULT_ROOM,
            preview_length=settings.PREVIEW_LENGTH,
        )
