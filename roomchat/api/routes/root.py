# roomchat/api/routes/root.py

from fastapi import APIRouter

router = APIRouter()


@router.get("/")
async def root():
    """
    Root endpoint - API information.

    Returns basic info about the server and where to find things.
    """
    return {
        "message": "Room chat server is running",
        "version": "1.0",
        "endpoints": {
            "websocket": "/ws",
            "messages": "/api/messages?room=<room>",
            "users": "/api/users",
            "rooms": "/api/rooms",
            "health": "/health",
        },
    }
