# roomchat/services/session_engine.py

from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Type
import logging

from roomchat.core.state import SessionContext
from roomchat.models.events import (
    OUT_ACK,
    OUT_NOTIFICATION,
    OUT_PLAY_SOUND,
    OUT_REACTION,
    OUT_READ_RECEIPT,
    OUT_RECEIVE_MESSAGE,
    OUT_RECEIVE_MESSAGES,
    OUT_ROOM_LIST,
    OUT_SEARCH_RESULTS,
    OUT_TYPING_USERS,
    OUT_USER_LEFT,
    OUT_USER_LIST,
    Ack,
    InboundEvent,
    JoinEvent,
    JoinRoomEvent,
    LoadMoreEvent,
    Notification,
    PrivateMessageEvent,
    ReactionEvent,
    ReactionUpdate,
    ReadMessageEvent,
    ReadReceipt,
    SearchMessagesEvent,
    SendMessageEvent,
    TypingEvent,
    UserLeft,
)
from roomchat.models.models import Message, User
from roomchat.services.message_store import MessageIdGenerator, utc_timestamp
from roomchat.services.room_directory import (
    is_private_room,
    private_room_for,
    private_room_target,
)

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """The delivery capability the engine needs. ConnectionManager implements it."""

    def enter_room(self, connection_id: str, room: str) -> None: ...

    async def emit_to(self, connection_id: str, event: str, payload: Any) -> None: ...

    async def emit_room(
        self, room: str, event: str, payload: Any, skip: Optional[str] = None
    ) -> None: ...

    async def emit_all(self, event: str, payload: Any) -> None: ...


def preview(sender: str, content: str, length: int = 20) -> str:
    """Notification text for a new message: sender plus a truncated content preview."""
    suffix = "..." if len(content) > length else ""
    return f"{sender}: {content[:length]}{suffix}"


def messages_to_wire(messages: List[Message]) -> List[dict]:
    return [m.to_wire() for m in messages]


# ============================================================================
# SESSION ENGINE
# ============================================================================

class SessionEngine:
    """
    Applies inbound chat events to the session state and fans out the results.

    Each connection is either Unjoined or Active. "user_join" moves it to
    Active; disconnect ends it. Events that need an Active connection are
    dropped silently while the connection is Unjoined, and so are events
    whose target (message, recipient) does not exist. Nothing is reported
    back as an error.

    Concurrency:
        All handlers run on one event loop and finish every state mutation
        before their first ``await``, so each inbound event is applied
        atomically with respect to every other one. The awaits only flush
        emissions through the transport.

    Delivery Targets:
        - emit_to:   one connection (the caller, or a private recipient)
        - emit_room: every connection subscribed to a room
        - emit_all:  every connection
    """

    def __init__(self, context: SessionContext, transport: Transport) -> None:
        self.context = context
        self.transport = transport
        self._message_ids = MessageIdGenerator()
        self._notification_ids = MessageIdGenerator()
        self._handlers: Dict[Type[InboundEvent], Callable[[str, Any], Awaitable[None]]] = {
            JoinEvent: self.join,
            SendMessageEvent: self.send_message,
            TypingEvent: self.typing,
            PrivateMessageEvent: self.private_message,
            JoinRoomEvent: self.join_room,
            ReadMessageEvent: self.read_message,
            ReactionEvent: self.react,
            SearchMessagesEvent: self.search_messages,
            LoadMoreEvent: self.load_more,
        }

    async def handle(self, connection_id: str, event: InboundEvent) -> None:
        """Route a validated inbound event to its handler."""
        handler = self._handlers.get(type(event))
        if handler is None:
            logger.warning("No handler for %s", type(event).__name__)
            return
        await handler(connection_id, event)

    def _room(self, room: Optional[str]) -> str:
        return room or self.context.default_room

    def _notification(self, text: str) -> dict:
        return Notification(message=text, id=self._notification_ids()).to_wire()

    # ------------------------------------------------------------------
    # Inbound events
    # ------------------------------------------------------------------

    async def join(self, connection_id: str, event: JoinEvent) -> None:
        """
        Register the connection as a user and subscribe it to its first room.

        First join wins: a second join on the same connection is ignored,
        whatever name or room it carries.
        """
        ctx = self.context
        room = self._room(event.room)
        if not ctx.users.register(connection_id, event.username, room):
            return
        ctx.rooms.ensure(room)
        ctx.messages.ensure(room)
        self.transport.enter_room(connection_id, room)
        history = messages_to_wire(ctx.messages.all(room))
        logger.info("%s joined %s", event.username, room)

        await self.transport.emit_to(connection_id, OUT_RECEIVE_MESSAGES, history)
        await self.transport.emit_all(OUT_USER_LIST, self.users())
        await self.transport.emit_all(OUT_ROOM_LIST, self.rooms())
        await self.transport.emit_room(
            room, OUT_NOTIFICATION, self._notification(f"{event.username} joined {room}")
        )

    async def send_message(self, connection_id: str, event: SendMessageEvent) -> None:
        """
        Store a message and deliver it.

        Private rooms ("private_<connection id>") deliver to the addressed
        connection and echo to the sender only. Any other room gets a
        broadcast, and every member but the sender also gets a preview
        notification and a sound cue. The sender always gets an ack.
        A private room name that addresses no connection is dropped.
        """
        ctx = self.context
        user = ctx.users.find(connection_id)
        if user is None:
            return
        room = self._room(event.room)
        target = private_room_target(room)
        if target is None and is_private_room(room):
            logger.debug("Dropped message to unaddressed private room %r", room)
            return
        message = Message(
            id=self._message_ids(),
            sender=user.username,
            sender_id=connection_id,
            content=event.content,
            timestamp=utc_timestamp(),
            file=event.file,
        )
        ctx.rooms.ensure(room)
        ctx.messages.append(room, message)
        wire = message.to_wire()
        ack = Ack(id=message.id).to_wire()

        if target is not None:
            logger.debug("Private message %s: %s -> %s", message.id, connection_id, target)
            if target != connection_id:
                await self.transport.emit_to(target, OUT_RECEIVE_MESSAGE, wire)
            await self.transport.emit_to(connection_id, OUT_RECEIVE_MESSAGE, wire)
            await self.transport.emit_to(connection_id, OUT_ACK, ack)
            return

        logger.debug("Message %s from %s in %s", message.id, user.username, room)
        notification = self._notification(preview(user.username, event.content, ctx.preview_length))
        await self.transport.emit_room(room, OUT_RECEIVE_MESSAGE, wire)
        await self.transport.emit_to(connection_id, OUT_ACK, ack)
        await self.transport.emit_room(room, OUT_NOTIFICATION, notification, skip=connection_id)
        await self.transport.emit_room(room, OUT_PLAY_SOUND, {}, skip=connection_id)

    async def typing(self, connection_id: str, event: TypingEvent) -> None:
        ctx = self.context
        user = ctx.users.find(connection_id)
        if user is None:
            return
        room = self._room(event.room)
        ctx.rooms.ensure(room)
        ctx.presence.set_typing(room, user.username, event.is_typing)
        await self.transport.emit_room(room, OUT_TYPING_USERS, ctx.presence.current(room))

    async def private_message(self, connection_id: str, event: PrivateMessageEvent) -> None:
        """
        Send a one-to-one message addressed by display name.

        Display names are not unique; the earliest registered user with the
        name receives it. Unknown names are ignored.
        """
        if self.context.users.find(connection_id) is None:
            return
        recipient = self.context.users.find_by_display_name(event.to_username)
        if recipient is None:
            logger.debug("Private message to unknown user %r dropped", event.to_username)
            return
        recipient_id, _ = recipient
        await self.send_message(
            connection_id,
            SendMessageEvent(
                content=event.content,
                room=private_room_for(recipient_id),
                file=event.file,
            ),
        )

    async def join_room(self, connection_id: str, event: JoinRoomEvent) -> None:
        ctx = self.context
        user = ctx.users.find(connection_id)
        if user is None:
            return
        room = event.room
        ctx.rooms.ensure(room)
        ctx.users.add_room_membership(connection_id, room)
        ctx.messages.ensure(room)
        self.transport.enter_room(connection_id, room)
        history = messages_to_wire(ctx.messages.all(room))
        logger.info("%s joined %s", user.username, room)

        await self.transport.emit_to(connection_id, OUT_RECEIVE_MESSAGES, history)
        await self.transport.emit_all(OUT_ROOM_LIST, self.rooms())
        await self.transport.emit_room(
            room, OUT_NOTIFICATION, self._notification(f"{user.username} joined {room}")
        )

    async def read_message(self, connection_id: str, event: ReadMessageEvent) -> None:
        ctx = self.context
        if ctx.users.find(connection_id) is None:
            return
        room = self._room(event.room)
        message = ctx.messages.find(room, event.message_id)
        if message is None:
            return
        message.mark_read(connection_id)
        receipt = ReadReceipt(message_id=message.id, read_by=list(message.read_by)).to_wire()
        await self.transport.emit_room(room, OUT_READ_RECEIPT, receipt)

    async def react(self, connection_id: str, event: ReactionEvent) -> None:
        """Set the caller's reaction on a message, replacing any earlier one."""
        ctx = self.context
        user = ctx.users.find(connection_id)
        if user is None:
            return
        room = self._room(event.room)
        message = ctx.messages.find(room, event.message_id)
        if message is None:
            return
        message.set_reaction(user.username, event.reaction)
        update = ReactionUpdate(
            message_id=message.id, username=user.username, reaction=event.reaction
        ).to_wire()
        await self.transport.emit_room(room, OUT_REACTION, update)

    async def search_messages(self, connection_id: str, event: SearchMessagesEvent) -> None:
        results = self.context.messages.search(self._room(event.room), event.query)
        await self.transport.emit_to(connection_id, OUT_SEARCH_RESULTS, messages_to_wire(results))

    async def load_more(self, connection_id: str, event: LoadMoreEvent) -> None:
        page = self.context.messages.page(self._room(event.room), event.offset)
        await self.transport.emit_to(connection_id, OUT_RECEIVE_MESSAGES, messages_to_wire(page))

    async def disconnect(self, connection_id: str) -> Optional[User]:
        """
        Tear down a user when their connection goes away.

        Every room the user was in hears a leave notification and a
        "user_left" event, rooms they were typing in get the new typing set,
        and everyone gets the new roster. Unjoined connections are ignored.
        """
        ctx = self.context
        user = ctx.users.remove(connection_id)
        if user is None:
            return None
        typing_rooms = ctx.presence.clear_user(user.username)
        logger.info("%s disconnected", user.username)

        left = UserLeft(username=user.username, id=connection_id).to_wire()
        for room in user.rooms:
            await self.transport.emit_room(
                room, OUT_NOTIFICATION, self._notification(f"{user.username} left {room}")
            )
            await self.transport.emit_room(room, OUT_USER_LEFT, left)
        for room in typing_rooms:
            await self.transport.emit_room(room, OUT_TYPING_USERS, ctx.presence.current(room))
        await self.transport.emit_all(OUT_USER_LIST, self.users())
        return user

    # ------------------------------------------------------------------
    # Read-only snapshots
    # ------------------------------------------------------------------

    def messages(self, room: Optional[str] = None) -> List[dict]:
        return messages_to_wire(self.context.messages.all(self._room(room)))

    def users(self) -> List[list]:
        return [[cid, user.model_dump()] for cid, user in self.context.users.snapshot()]

    def rooms(self) -> List[str]:
        return self.context.rooms.list()
