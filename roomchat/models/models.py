# roomchat/models/models.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict


class User(BaseModel):
    """A connected participant, keyed by connection id in the UserRegistry."""

    username: str
    rooms: List[str] = Field(default_factory=list)
    online: bool = True

    def add_room(self, room: str) -> None:
        if room not in self.rooms:
            self.rooms.append(room)


class Message(BaseModel):
    """
    A chat message as held in a room's history.

    The same object is mutated in place by read receipts and reactions, so
    whoever holds a reference sees the latest state.

    Wire Format (camelCase, what clients receive):
        {
            "id": 1733000000000,
            "sender": "alice",
            "senderId": "3f0c...",
            "content": "hi",
            "timestamp": "2025-11-30T20:00:00+00:00",
            "file": null,
            "readBy": ["3f0c..."],
            "reactions": {"bob": "👍"}
        }
    """

    model_config = ConfigDict(populate_by_name=True)

    id: int
    sender: str
    sender_id: str = Field(alias="senderId")
    content: str
    timestamp: str
    file: Optional[str] = None
    # Insertion-ordered set of connection ids; the sender is always first
    read_by: List[str] = Field(default_factory=list, alias="readBy")
    # username -> reaction symbol, at most one per user
    reactions: Dict[str, str] = Field(default_factory=dict)

    def model_post_init(self, __context) -> None:
        if self.sender_id not in self.read_by:
            self.read_by.insert(0, self.sender_id)

    def mark_read(self, connection_id: str) -> bool:
        """Record a read receipt. Returns False if it was already recorded."""
        if connection_id in self.read_by:
            return False
        self.read_by.append(connection_id)
        return True

    def set_reaction(self, username: str, reaction: str) -> None:
        self.reactions[username] = reaction

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)
