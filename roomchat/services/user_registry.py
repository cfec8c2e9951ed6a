# roomchat/services/user_registry.py

from __future__ import annotations

from typing import Dict, List, Optional, Tuple
import logging

from roomchat.models.models import User

logger = logging.getLogger(__name__)


class UserRegistry:
    """
    Maps connection id -> User for everyone who has joined.

    A connection becomes a user on its first join and stops being one on
    disconnect. Display names are self-declared and not unique.
    """

    def __init__(self) -> None:
        self._users: Dict[str, User] = {}

    def register(self, connection_id: str, display_name: str, initial_room: str) -> bool:
        """
        Register a connection under a display name.

        First join wins: if the connection is already registered nothing
        changes and False is returned.
        """
        if connection_id in self._users:
            logger.debug("Ignoring repeat join from %s", connection_id)
            return False
        self._users[connection_id] = User(username=display_name, rooms=[initial_room])
        return True

    def add_room_membership(self, connection_id: str, room: str) -> None:
        user = self._users.get(connection_id)
        if user is not None:
            user.add_room(room)

    def find(self, connection_id: str) -> Optional[User]:
        return self._users.get(connection_id)

    def find_by_display_name(self, name: str) -> Optional[Tuple[str, User]]:
        """
        First (connection_id, User) registered under this display name.

        Names are not unique, so with duplicates the earliest registration wins.
        """
        for connection_id, user in self._users.items():
            if user.username == name:
                return connection_id, user
        return None

    def remove(self, connection_id: str) -> Optional[User]:
        return self._users.pop(connection_id, None)

    def snapshot(self) -> List[Tuple[str, User]]:
        return list(self._users.items())

    def __len__(self) -> int:
        return len(self._users)
