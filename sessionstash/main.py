#!/usr/bin/env python3
"""
sessionstash - Reference Service

This is the thin orchestration layer that:
1. Loads configuration
2. Initializes modules
3. Serves a small session API over them

All session logic is in the modules, following black box principles.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import redis.asyncio as redis
import uvicorn
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse

from sessionstash.config.provider import ConfigProvider, EnvConfigProvider
from sessionstash.logging_config import configure_logging, get_logging_config
from sessionstash.modules.api import SessionResponse, SetValueRequest, StatusResponse, ValueResponse
from sessionstash.modules.middleware import (
    StarletteCarrier,
    existing_session,
    get_session_manager,
)
from sessionstash.modules.sequence import RedisSequence
from sessionstash.modules.session import (
    SessionLike,
    SessionManager,
    SessionNotFound,
    StorageUnavailable,
    ValueKind,
    widen,
)
from sessionstash.modules.storage import RedisCacheStore, StorageModule

logger = logging.getLogger(__name__)

router = APIRouter()


# Session Endpoints


@router.post("/session", response_model=SessionResponse, status_code=201)
async def create_session(
    request: Request,
    response: Response,
    manager: SessionManager = Depends(get_session_manager),
):
    """
    Create a new session and set its cookie.

    Returns:
        201: Session created
        503: Session storage unavailable
    """
    session = await manager.create(StarletteCarrier(request, response))
    return SessionResponse.from_session(session)


@router.get("/session", response_model=SessionResponse)
async def read_session(session: SessionLike = Depends(existing_session)):
    """
    Get the session identified by the request cookie or form field.

    Returns:
        200: Session found
        404: No session
    """
    return SessionResponse.from_session(session)


@router.delete("/session", status_code=204)
async def delete_session(
    session: SessionLike = Depends(existing_session),
    manager: SessionManager = Depends(get_session_manager),
):
    """
    Delete the request's session. The cookie is left to go stale.

    Returns:
        204: Session deleted
        404: No session
    """
    await manager.delete(session)
    return Response(status_code=204)


@router.get("/session/status", response_model=StatusResponse)
async def session_status(
    request: Request,
    manager: SessionManager = Depends(get_session_manager),
):
    """Report whether the request carries a live session."""
    return StatusResponse(authenticated=await manager.is_logged_on(StarletteCarrier(request)))


@router.put("/session/data/{key}", response_model=SessionResponse)
async def set_session_value(
    key: str,
    payload: SetValueRequest,
    request: Request,
    response: Response,
    manager: SessionManager = Depends(get_session_manager),
):
    """
    Store a value in the request's session, creating the session if needed.

    The value is checked before the session is looked up, so a rejected
    value never creates a session.

    Returns:
        200: Value stored
        422: Value does not fit the declared kind
    """
    try:
        value = widen(payload.value, payload.kind)
    except (TypeError, ValueError) as e:
        raise HTTPException(422, str(e))

    session = await manager.get_or_create(StarletteCarrier(request, response))
    session.data[key] = value
    await manager.save(session)
    return SessionResponse.from_session(session)


@router.get("/session/data/{key}", response_model=ValueResponse)
async def get_session_value(
    key: str,
    kind: Optional[ValueKind] = Query(None, description="Kind to read the value as"),
    session: SessionLike = Depends(existing_session),
):
    """
    Read one value, optionally as a given kind.

    A missing key or a kind mismatch is reported with found=false.
    """
    if kind is None:
        value, found = session.get(key)
    else:
        value, found = session.get_as(key, kind)
    return ValueResponse(key=key, kind=kind, value=value, found=found)


@router.delete("/session/data/{key}", response_model=SessionResponse)
async def delete_session_value(
    key: str,
    session: SessionLike = Depends(existing_session),
    manager: SessionManager = Depends(get_session_manager),
):
    """Remove one value from the request's session."""
    session.delete(key)
    await manager.save(session)
    return SessionResponse.from_session(session)


# Health Endpoints


@router.get("/healthz")
async def healthz():
    """
    Minimal liveness endpoint.

    Returns:
        200: Service is running
    """
    return {"status": "ok"}


# Error handlers


async def storage_unavailable_handler(request, exc):
    """Handle a missing session store."""
    logger.error(f"Session storage unavailable: {exc}")
    return JSONResponse(status_code=503, content={"error": "Session storage unavailable"})


async def session_not_found_handler(request, exc):
    """Handle session lookups that found nothing."""
    return JSONResponse(status_code=404, content={"error": str(exc)})


async def redis_error_handler(request, exc):
    """Handle Redis connection errors."""
    logger.error(f"Redis connection error: {exc}")
    return JSONResponse(status_code=503, content={"error": "Database connection failed"})


def create_app(
    config_provider: Optional[ConfigProvider] = None,
    manager: Optional[SessionManager] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config_provider: Configuration source (environment if None)
        manager: Ready session manager; when None one is built over Redis
            at startup

    Returns:
        Configured FastAPI app
    """
    provider = config_provider or EnvConfigProvider()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Manage application lifecycle - initialize and cleanup resources.
        """
        storage = None

        if getattr(app.state, "session_manager", None) is None:
            logger.info("Starting session service...")
            storage = StorageModule(provider.get_storage_config())
            redis_client = await storage.connect()

            session_config = provider.get_session_config()
            app.state.session_manager = SessionManager(
                session_config,
                RedisCacheStore(redis_client, key_prefix=session_config.key_prefix),
                RedisSequence(redis_client, name=session_config.sequence_name),
            )
            logger.info("Session service started successfully")

        yield

        if storage:
            logger.info("Shutting down session service...")
            await storage.disconnect()
            app.state.session_manager = None

    app = FastAPI(
        title="sessionstash",
        description="Server-side sessions backed by Redis",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.session_manager = manager
    app.include_router(router)

    app.add_exception_handler(StorageUnavailable, storage_unavailable_handler)
    app.add_exception_handler(SessionNotFound, session_not_found_handler)
    app.add_exception_handler(redis.ConnectionError, redis_error_handler)

    return app


app = create_app()


if __name__ == "__main__":
    provider = EnvConfigProvider()
    api_config = provider.get_api_config()
    session_field = provider.get_session_config().form_field
    configure_logging(api_config.log_level, session_field)
    uvicorn.run(
        "sessionstash.main:app",
        host=api_config.host,
        port=api_config.port,
        log_level=api_config.log_level.lower(),
        log_config=get_logging_config(api_config.log_level, session_field),
    )
