from __future__ import annotations

from starlette.requests import HTTPConnection

from .errors import Unauthenticated


USER_ID_HEADER = "x-user-id"


def current_user_id(connection: HTTPConnection) -> str | None:
    """
    Caller identity set by the upstream auth provider, or None.
    Works for both HTTP requests and WebSocket connections.
    """
    user_id = (connection.headers.get(USER_ID_HEADER) or "").strip()
    return user_id or None


def require_user(user_id: str | None) -> str:
    if not user_id:
        raise Unauthenticated()
    return user_id
