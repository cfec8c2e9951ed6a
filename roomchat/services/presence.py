# roomchat/services/presence.py

from __future__ import annotations

from collections import defaultdict
from typing import Dict, List


class PresenceTracker:
    """Who is typing in which room. Entries live until cleared; nothing expires."""

    def __init__(self) -> None:
        # room -> ordered set of display names
        self.rooms: Dict[str, Dict[str, None]] = defaultdict(dict)

    def set_typing(self, room: str, display_name: str, is_typing: bool) -> None:
        if is_typing:
            self.rooms[room][display_name] = None
        else:
            self.rooms[room].pop(display_name, None)

    def current(self, room: str) -> List[str]:
        return list(self.rooms.get(room, {}))

    def clear_user(self, display_name: str) -> List[str]:
        """Remove a name from every room. Returns the rooms it was removed from."""
        changed = []
        for room, names in self.rooms.items():
            if display_name in names:
                del names[display_name]
                changed.append(room)
        return changed
