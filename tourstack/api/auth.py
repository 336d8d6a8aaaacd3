"""Admin authentication: password login and a signed session cookie.

# ─── SESSION COOKIE ───────────────────────────────────────────────────
#
#   tourstack.sid = "{login_epoch}:{hmac_sha256_hex(secret, login_epoch)}"
#
# The server keeps no session table.  A cookie is valid when its HMAC
# matches and it is younger than the session TTL (7 days by default).
# Logging out clears the cookie on the client; a copied cookie stays
# valid until it expires, which is why rotating SESSION_SECRET is the
# way to revoke every session at once.
#
# Every /api/* path requires a valid cookie except the public prefixes
# below, which serve the visitor app.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import hashlib
import hmac
import secrets
import time

import structlog
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from tourstack.config.settings import Settings

logger = structlog.get_logger(logger_name=__name__)

SESSION_COOKIE = "tourstack.sid"
DEFAULT_ADMIN_PASSWORD = "admin"

PUBLIC_PREFIXES = ("/api/auth", "/api/visitor", "/api/chat", "/api/health")


class SessionManager:
    """Checks the admin password and issues/verifies session cookies."""

    def __init__(self, settings: Settings) -> None:
        password = settings.admin_password
        if not password:
            logger.warning(
                "admin_password_default",
                message='ADMIN_PASSWORD not set. Using "admin" (not secure for production).',
            )
            password = DEFAULT_ADMIN_PASSWORD
        secret = settings.session_secret
        if not secret:
            logger.warning(
                "session_secret_generated",
                message="SESSION_SECRET not set. Sessions will not survive a restart.",
            )
            secret = secrets.token_hex(32)

        self._password = password
        self._secret = secret.encode("utf-8")
        self._ttl_seconds = settings.session_ttl_hours * 3600
        self._secure = settings.is_production

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    def check_password(self, candidate: str) -> bool:
        return hmac.compare_digest(candidate.encode("utf-8"), self._password.encode("utf-8"))

    def issue(self, now: float | None = None) -> str:
        issued_ms = int((now if now is not None else time.time()) * 1000)
        return f"{issued_ms}:{self._sign(str(issued_ms))}"

    def verify(self, cookie: str | None, now: float | None = None) -> int | None:
        """Return the login time (epoch ms) of a valid cookie, else ``None``."""
        if not cookie or ":" not in cookie:
            return None
        issued, signature = cookie.split(":", 1)
        if not issued.isdigit():
            return None
        if not hmac.compare_digest(signature, self._sign(issued)):
            return None
        current_ms = (now if now is not None else time.time()) * 1000
        if current_ms - int(issued) > self._ttl_seconds * 1000:
            return None
        return int(issued)

    def set_cookie(self, response: Response, value: str) -> None:
        response.set_cookie(
            SESSION_COOKIE,
            value,
            max_age=self._ttl_seconds,
            httponly=True,
            samesite="lax",
            secure=self._secure,
        )

    def clear_cookie(self, response: Response) -> None:
        response.delete_cookie(SESSION_COOKIE, httponly=True, samesite="lax", secure=self._secure)

    def _sign(self, payload: str) -> str:
        return hmac.new(self._secret, payload.encode("utf-8"), hashlib.sha256).hexdigest()


def is_public_path(path: str) -> bool:
    if not path.startswith("/api"):
        return True
    return any(path == prefix or path.startswith(prefix + "/") for prefix in PUBLIC_PREFIXES)


class AdminAuthMiddleware(BaseHTTPMiddleware):
    """Reject protected ``/api`` requests without a valid session cookie."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        if request.method == "OPTIONS" or is_public_path(request.url.path):
            return await call_next(request)

        sessions: SessionManager | None = getattr(request.app.state, "session_manager", None)
        if sessions is None or sessions.verify(request.cookies.get(SESSION_COOKIE)) is None:
            return JSONResponse(status_code=401, content={"error": "Authentication required"})
        return await call_next(request)
