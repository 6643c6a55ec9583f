"""
Session Middleware Module - Black Box Interface

Purpose: Connect the session manager to FastAPI/Starlette requests
Interface: StarletteCarrier, get_session_manager(), current_session(),
           existing_session()
Hidden: Cookie and form parsing, response cookie headers

Can be used by any FastAPI app that keeps a SessionManager on app.state.
"""

import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, Response

from ..session import SessionLike, SessionManager, SessionNotFound

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


class StarletteCarrier:
    """
    RequestCarrier over a Starlette request and the response being built.

    Form fields are read from an urlencoded or multipart body when the
    request has one, then from the query string.
    """

    def __init__(self, request: Request, response: Optional[Response] = None):
        self.request = request
        self.response = response

    def read_cookie(self, name: str) -> Optional[str]:
        return self.request.cookies.get(name)

    async def read_form_field(self, name: str) -> Optional[str]:
        content_type = self.request.headers.get("content-type", "")
        if content_type.startswith(FORM_CONTENT_TYPES):
            form = await self.request.form()
            value = form.get(name)
            # multipart uploads come back as UploadFile, not str
            if isinstance(value, str) and value:
                return value
        return self.request.query_params.get(name)

    def set_cookie(self, name: str, value: str, max_age: Optional[int], http_only: bool) -> None:
        if self.response is None:
            raise RuntimeError("Cannot set session cookie: carrier has no response")
        self.response.set_cookie(key=name, value=value, max_age=max_age, httponly=http_only)


def get_session_manager(request: Request) -> SessionManager:
    """FastAPI dependency returning the app's session manager."""
    manager = getattr(request.app.state, "session_manager", None)
    if manager is None:
        raise HTTPException(503, "Service not initialized")
    return manager


async def current_session(
    request: Request,
    response: Response,
    manager: SessionManager = Depends(get_session_manager),
) -> SessionLike:
    """FastAPI dependency: the request's session, created if missing."""
    return await manager.get_or_create(StarletteCarrier(request, response))


async def existing_session(
    request: Request,
    response: Response,
    manager: SessionManager = Depends(get_session_manager),
) -> SessionLike:
    """FastAPI dependency: the request's session; 404 if there is none."""
    try:
        return await manager.find(StarletteCarrier(request, response))
    except SessionNotFound as exc:
        logger.debug(f"Session lookup failed: {exc}")
        raise HTTPException(404, "Session not found")


__all__ = [
    "StarletteCarrier",
    "current_session",
    "existing_session",
    "get_session_manager",
]
