# roomchat/main.py

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from roomchat.core.config import Settings, settings as default_settings
from roomchat.core.logging import setup_logging, get_logger
from roomchat.core.state import SessionContext
from roomchat.services.connection_manager import ConnectionManager
from roomchat.services.session_engine import SessionEngine
from roomchat.api.routes import root, health, history
from roomchat.api import websocket as websocket_module

logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI app and a fresh chat session.

    Each call gets its own SessionContext, ConnectionManager and
    SessionEngine, stored on ``app.state``.
    """
    settings = settings or default_settings

    app = FastAPI(title="Room Chat Server")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    connection_manager = ConnectionManager()
    context = SessionContext.create(settings)
    app.state.settings = settings
    app.state.context = context
    app.state.connection_manager = connection_manager
    app.state.engine = SessionEngine(context, connection_manager)

    # REST routes
    app.include_router(root.router)
    app.include_router(health.router)
    app.include_router(history.router)

    # WebSocket routes
    app.include_router(websocket_module.router)

    logger.info("🚀 Chat session ready (default room '%s')", settings.DEFAULT_ROOM)
    return app


# Configure logging first
setup_logging()

app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("roomchat.main:app", host=default_settings.HOST, port=default_settings.PORT)
