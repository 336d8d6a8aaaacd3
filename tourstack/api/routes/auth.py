"""Admin login, logout and session check (``/api/auth``, public)."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Request, Response

from tourstack.api.auth import SESSION_COOKIE
from tourstack.api.dependencies import SessionManagerDep
from tourstack.api.schemas import LoginRequest
from tourstack.utils.errors import AuthenticationError, ValidationError

logger = structlog.get_logger(logger_name=__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", summary="Log in with the admin password")
async def login(body: LoginRequest, response: Response, sessions: SessionManagerDep) -> dict[str, Any]:
    if not body.password:
        raise ValidationError(message="Password required")
    if not sessions.check_password(body.password):
        logger.warning("admin_login_failed")
        raise AuthenticationError(message="Invalid password")
    sessions.set_cookie(response, sessions.issue())
    logger.info("admin_login")
    return {"success": True}


@router.post("/logout", summary="Clear the session cookie")
async def logout(response: Response, sessions: SessionManagerDep) -> dict[str, Any]:
    sessions.clear_cookie(response)
    return {"success": True}


@router.get("/check", summary="Report whether the caller is logged in")
async def check(request: Request, sessions: SessionManagerDep) -> dict[str, Any]:
    login_time = sessions.verify(request.cookies.get(SESSION_COOKIE))
    return {"isAuthenticated": login_time is not None, "loginTime": login_time}
