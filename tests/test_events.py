"""Tests for inbound event validation."""

import pytest

from roomchat.models.events import (
    InvalidEvent,
    JoinEvent,
    LoadMoreEvent,
    PrivateMessageEvent,
    ReactionEvent,
    SendMessageEvent,
    TypingEvent,
    parse_inbound,
)


class TestParseInbound:
    def test_join_with_default_room(self) -> None:
        event = parse_inbound("user_join", {"username": "alice"})
        assert isinstance(event, JoinEvent)
        assert event.username == "alice"
        assert event.room is None

    def test_send_message_with_file(self) -> None:
        event = parse_inbound(
            "send_message", {"content": "look", "room": "general", "file": "data:image/png;base64,AAA"}
        )
        assert isinstance(event, SendMessageEvent)
        assert event.file == "data:image/png;base64,AAA"

    def test_camel_case_fields(self) -> None:
        typing = parse_inbound("typing", {"room": "general", "isTyping": True})
        assert isinstance(typing, TypingEvent)
        assert typing.is_typing is True

        private = parse_inbound("private_message", {"toUsername": "bob", "content": "psst"})
        assert isinstance(private, PrivateMessageEvent)
        assert private.to_username == "bob"

        reaction = parse_inbound("reaction", {"messageId": 12, "room": "general", "reaction": "👍"})
        assert isinstance(reaction, ReactionEvent)
        assert reaction.message_id == 12

    def test_load_more_defaults_offset(self) -> None:
        event = parse_inbound("load_more", {"room": "general"})
        assert isinstance(event, LoadMoreEvent)
        assert event.offset == 0

    def test_unknown_action(self) -> None:
        with pytest.raises(InvalidEvent):
            parse_inbound("shout", {})

    def test_missing_action(self) -> None:
        with pytest.raises(InvalidEvent):
            parse_inbound(None, {})

    def test_missing_required_field(self) -> None:
        with pytest.raises(InvalidEvent):
            parse_inbound("send_message", {"room": "general"})

    def test_empty_username_rejected(self) -> None:
        with pytest.raises(InvalidEvent):
            parse_inbound("user_join", {"username": ""})

    def test_negative_offset_rejected(self) -> None:
        with pytest.raises(InvalidEvent):
            parse_inbound("load_more", {"room": "general", "offset": -1})

    def test_payload_must_be_an_object(self) -> None:
        with pytest.raises(InvalidEvent):
            parse_inbound("typing", ["general", True])

    def test_invalid_event_is_a_value_error(self) -> None:
        assert issubclass(InvalidEvent, ValueError)
