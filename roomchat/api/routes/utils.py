# roomchat/api/routes/utils.py

from __future__ import annotations

from fastapi import Request

from roomchat.services.connection_manager import ConnectionManager
from roomchat.services.session_engine import SessionEngine


def get_engine(request: Request) -> SessionEngine:
    """Dependency provider for the SessionEngine built by create_app()."""
    return request.app.state.engine


def get_connection_manager(request: Request) -> ConnectionManager:
    """Dependency provider for the ConnectionManager built by create_app()."""
    return request.app.state.connection_manager
