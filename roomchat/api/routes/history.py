# roomchat/api/routes/history.py

from typing import List, Optional

from fastapi import APIRouter, Depends

from roomchat.api.routes.utils import get_engine
from roomchat.services.session_engine import SessionEngine

router = APIRouter(prefix="/api")

# ============================================================================
# READ-ONLY SNAPSHOT ENDPOINTS
# ============================================================================

@router.get("/messages")
async def list_messages(room: Optional[str] = None, engine: SessionEngine = Depends(get_engine)) -> List[dict]:
    """
    Full in-memory history of a room, oldest first.

    Args:
        room: Room name (defaults to the configured default room)

    Returns:
        List of messages in wire format; empty for rooms nobody has used
    """
    return engine.messages(room)


@router.get("/users")
async def list_users(engine: SessionEngine = Depends(get_engine)) -> List[list]:
    """Connected users as [connection_id, user] pairs, in join order."""
    return engine.users()


@router.get("/rooms")
async def list_rooms(engine: SessionEngine = Depends(get_engine)) -> List[str]:
    """Public room names in the order they were created."""
    return engine.rooms()
