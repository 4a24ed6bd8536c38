"""Shared route dependencies"""

import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request

from ..core.readiness import Backend
from ..core.session import SessionManager, ShopperSession
from ..errors import ConfigUnavailable
from ..services.auth_client import AuthUser

logger = logging.getLogger(__name__)


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.sessions


def get_shopper(session_id: str, request: Request) -> ShopperSession:
    """Look up the shopper session from the path"""
    session = get_session_manager(request).get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    session.touch()
    return session


async def get_backend(request: Request) -> Backend:
    """Wait for the backend clients to be ready"""
    try:
        return await request.app.state.backend_handle.wait()
    except ConfigUnavailable as e:
        raise HTTPException(status_code=503, detail=e.message)


async def get_current_user(
    session: ShopperSession = Depends(get_shopper),
    backend: Backend = Depends(get_backend),
) -> Optional[AuthUser]:
    """
    The signed-in user for this session, or None for guests.

    A sign-in that has expired, or whose token no longer verifies against
    the configured JWT secret, is dropped from the session.
    """
    auth_session = session.auth
    if auth_session is None:
        return None

    if auth_session.expired():
        logger.info(f"Sign-in expired for session {session.session_id}")
        session.auth = None
        return None

    if backend.auth and backend.auth.jwt_secret:
        if backend.auth.user_from_token(auth_session.access_token) is None:
            logger.info(f"Sign-in no longer valid for session {session.session_id}")
            session.auth = None
            return None

    return auth_session.user
