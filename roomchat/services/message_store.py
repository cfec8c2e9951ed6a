# roomchat/services/message_store.py

from __future__ import annotations

from collections import deque
from datetime import datetime, timezone
from typing import Callable, Deque, Dict, List, Optional
import logging
import time

from roomchat.models.models import Message

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 200
DEFAULT_PAGE_SIZE = 20


class MessageIdGenerator:
    """
    Millisecond timestamp ids that never repeat.

    Two messages created in the same millisecond (or after the clock steps
    backwards) get last id + 1, so ids stay strictly increasing in creation
    order.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._last = 0

    def __call__(self) -> int:
        candidate = int(self._clock() * 1000)
        if candidate <= self._last:
            candidate = self._last + 1
        self._last = candidate
        return candidate


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


# ============================================================================
# MESSAGE STORE
# ============================================================================
class MessageStore:
    """
    Per-room bounded, append-only message history.

    Each room keeps at most ``capacity`` messages. Appending past the cap
    drops the oldest messages first, regardless of read or reaction state;
    dropped messages are gone for good.

    Data Structures:
        _logs: Maps room name -> deque of Message, oldest first
               Example: {"general": deque([Message(id=1, ...), Message(id=2, ...)])}

    Pagination:
        page() counts backwards from the newest message, so the window moves
        when new messages arrive between calls. There is no stable cursor.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self.page_size = page_size
        self._logs: Dict[str, Deque[Message]] = {}

    def ensure(self, room: str) -> None:
        if room not in self._logs:
            self._logs[room] = deque()

    def append(self, room: str, message: Message) -> None:
        """
        Append a message to a room, evicting the oldest ones beyond capacity.

        The caller keeps the reference; read receipts and reactions mutate
        the stored object in place.
        """
        self.ensure(room)
        log = self._logs[room]
        log.append(message)
        while len(log) > self.capacity:
            evicted = log.popleft()
            logger.debug("Evicted message %s from '%s'", evicted.id, room)

    def find(self, room: str, message_id: int) -> Optional[Message]:
        for message in self._logs.get(room, ()):
            if message.id == message_id:
                return message
        return None

    def all(self, room: str) -> List[Message]:
        return list(self._logs.get(room, ()))

    def page(self, room: str, offset: int = 0, page_size: Optional[int] = None) -> List[Message]:
        """
        Slice of history counting backwards from the newest message.

        Returns the window [len - offset - page_size, len - offset) clamped
        to the log bounds, oldest first.

        Args:
            room: Room name
            offset: How many of the newest messages to skip
            page_size: Window size (defaults to the store's page size)
        """
        if page_size is None:
            page_size = self.page_size
        log = self.all(room)
        offset = max(offset, 0)
        end = max(len(log) - offset, 0)
        start = max(len(log) - offset - page_size, 0)
        return log[start:end]

    def search(self, room: str, query: str) -> List[Message]:
        """Case-insensitive substring search over message content, oldest first."""
        needle = query.lower()
        return [m for m in self._logs.get(room, ()) if needle in m.content.lower()]

    def __len__(self) -> int:
        return sum(len(log) for log in self._logs.values())

    def count(self, room: str) -> int:
        return len(self._logs.get(room, ()))
