# roomchat/api/routes/health.py

from fastapi import APIRouter, Depends

from roomchat.api.routes.utils import get_connection_manager, get_engine
from roomchat.services.connection_manager import ConnectionManager
from roomchat.services.session_engine import SessionEngine

router = APIRouter()

@router.get("/health")
async def health(
    engine: SessionEngine = Depends(get_engine),
    manager: ConnectionManager = Depends(get_connection_manager),
):
    """
    Health check endpoint.

    Returns current system status, connection, user, room and message counts.

    Returns:
        dict: Status, open connections, joined users, known rooms, stored messages
    """
    ctx = engine.context
    return {
        "status": "healthy",
        "connections": len(manager.connections),
        "users": len(ctx.users),
        "rooms": len(ctx.rooms.list()),
        "messages": len(ctx.messages),
    }
