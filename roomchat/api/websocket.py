# roomchat/api/websocket.py

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from roomchat.models.events import InvalidEvent, parse_inbound

logger = logging.getLogger(__name__)

router = APIRouter()

# ============================================================================
# WEBSOCKET ENDPOINT
# ============================================================================

@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """
    WebSocket endpoint for the chat session.

    Protocol:
    =========

    Every frame is JSON. Client -> server frames name an action, server ->
    client frames name a type:

        {"action": "send_message", "data": {"content": "hi", "room": "general"}}
        {"type": "receive_message", "data": {"id": ..., "sender": "alice", ...}}

    Client -> Server Actions:
    -------------------------
    user_join        {"username": "alice", "room": "general"}
    send_message     {"content": "hi", "room": "general", "file": "data:..."}
    typing           {"room": "general", "isTyping": true}
    private_message  {"toUsername": "bob", "content": "psst"}
    join_room        {"room": "random"}
    read_message     {"messageId": 1733000000000, "room": "general"}
    reaction         {"messageId": 1733000000000, "room": "general", "reaction": "👍"}
    search_messages  {"query": "lunch", "room": "general"}
    load_more        {"room": "general", "offset": 20}

    Server -> Client Types:
    -----------------------
    connected, receive_message, receive_messages, user_list, room_list,
    notification, play_sound, typing_users, read_receipt, reaction,
    search_results, ack, user_left

    Lifecycle:
    ==========
    1. Client connects and receives {"type": "connected", "data": {"id": ...}}
    2. Client sends "user_join" to become a chat user
    3. Client sends any other action; those sent before joining are ignored
    4. On disconnect the user leaves every room and the roster is re-broadcast

    Error Handling:
        Binary frames, and frames that are too large, not JSON, name an unknown action or fail
        validation are logged and dropped. The client gets no error frame.
    """
    manager = websocket.app.state.connection_manager
    engine = websocket.app.state.engine
    max_bytes = websocket.app.state.settings.MAX_MESSAGE_BYTES

    connection_id = await manager.connect(websocket)

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))

            data = message.get("text")
            if data is None:
                logger.warning("Dropped binary frame from %s", connection_id)
                continue

            size = len(data.encode("utf-8"))
            if size > max_bytes:
                logger.warning("Dropped %d byte frame from %s", size, connection_id)
                continue

            try:
                frame = json.loads(data)
                if not isinstance(frame, dict):
                    raise InvalidEvent("Frame must be a JSON object")
                event = parse_inbound(frame.get("action"), frame.get("data"))
            except json.JSONDecodeError:
                logger.warning("Dropped invalid JSON from %s", connection_id)
                continue
            except InvalidEvent as e:
                logger.warning("Dropped frame from %s: %s", connection_id, e)
                continue

            logger.debug("Websocket input from %s: %s", connection_id, event.action)
            await engine.handle(connection_id, event)

    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.error("WebSocket error on %s: %s", connection_id, e)
    finally:
        manager.disconnect(connection_id)
        await engine.disconnect(connection_id)
