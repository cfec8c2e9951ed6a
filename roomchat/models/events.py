# roomchat/models/events.py
"""
Tagged event variants exchanged over the chat WebSocket.

Inbound frames look like ``{"action": "<name>", "data": {...}}`` and are
validated into one of the ``*Event`` models below before the SessionEngine
sees them. Outbound frames look like ``{"type": "<name>", "data": ...}``;
the names are the ``OUT_*`` constants and the structured payloads are the
models at the bottom of this module.
"""

from __future__ import annotations

from typing import Dict, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class InvalidEvent(ValueError):
    """Raised when an inbound frame names an unknown event or fails validation."""


# ============================================================================
# INBOUND EVENTS (client -> server)
# ============================================================================

class InboundEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    action: str = ""


class JoinEvent(InboundEvent):
    action: str = "user_join"
    username: str = Field(min_length=1)
    room: Optional[str] = None


class SendMessageEvent(InboundEvent):
    action: str = "send_message"
    content: str
    room: Optional[str] = None
    file: Optional[str] = None


class TypingEvent(InboundEvent):
    action: str = "typing"
    room: Optional[str] = None
    is_typing: bool = Field(alias="isTyping")


class PrivateMessageEvent(InboundEvent):
    action: str = "private_message"
    to_username: str = Field(alias="toUsername", min_length=1)
    content: str
    file: Optional[str] = None


class JoinRoomEvent(InboundEvent):
    action: str = "join_room"
    room: str = Field(min_length=1)


class ReadMessageEvent(InboundEvent):
    action: str = "read_message"
    message_id: int = Field(alias="messageId")
    room: Optional[str] = None


class ReactionEvent(InboundEvent):
    action: str = "reaction"
    message_id: int = Field(alias="messageId")
    room: Optional[str] = None
    reaction: str = Field(min_length=1)


class SearchMessagesEvent(InboundEvent):
    action: str = "search_messages"
    query: str
    room: Optional[str] = None


class LoadMoreEvent(InboundEvent):
    action: str = "load_more"
    room: Optional[str] = None
    offset: int = Field(default=0, ge=0)


INBOUND_EVENTS: Dict[str, Type[InboundEvent]] = {
    "user_join": JoinEvent,
    "send_message": SendMessageEvent,
    "typing": TypingEvent,
    "private_message": PrivateMessageEvent,
    "join_room": JoinRoomEvent,
    "read_message": ReadMessageEvent,
    "reaction": ReactionEvent,
    "search_messages": SearchMessagesEvent,
    "load_more": LoadMoreEvent,
}


def parse_inbound(action: Optional[str], data: object) -> InboundEvent:
    """
    Validate a raw inbound frame into its typed event.

    Args:
        action: The wire name of the event ("send_message", ...)
        data: The decoded "data" object of the frame

    Returns:
        The matching InboundEvent subclass instance

    Raises:
        InvalidEvent: unknown action, non-object payload, or missing/invalid fields
    """
    event_cls = INBOUND_EVENTS.get(action or "")
    if event_cls is None:
        raise InvalidEvent(f"Unknown action: {action}")
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise InvalidEvent(f"Payload for {action} must be an object")

    payload = {k: v for k, v in data.items() if k != "action"}
    try:
        return event_cls.model_validate(payload)
    except ValidationError as exc:
        raise InvalidEvent(f"Invalid {action} payload: {exc.error_count()} error(s)") from exc


# ============================================================================
# OUTBOUND EVENTS (server -> client)
# ============================================================================

OUT_CONNECTED = "connected"
OUT_RECEIVE_MESSAGE = "receive_message"
OUT_RECEIVE_MESSAGES = "receive_messages"
OUT_USER_LIST = "user_list"
OUT_ROOM_LIST = "room_list"
OUT_NOTIFICATION = "notification"
OUT_PLAY_SOUND = "play_sound"
OUT_TYPING_USERS = "typing_users"
OUT_READ_RECEIPT = "read_receipt"
OUT_REACTION = "reaction"
OUT_SEARCH_RESULTS = "search_results"
OUT_ACK = "ack"
OUT_USER_LEFT = "user_left"


class OutboundPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class Notification(OutboundPayload):
    message: str
    id: int


class ReadReceipt(OutboundPayload):
    message_id: int = Field(alias="messageId")
    read_by: list[str] = Field(alias="readBy")


class ReactionUpdate(OutboundPayload):
    message_id: int = Field(alias="messageId")
    username: str
    reaction: str


class Ack(OutboundPayload):
    id: int


class UserLeft(OutboundPayload):
    username: str
    id: str
