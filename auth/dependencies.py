"""
auth/dependencies.py -- FastAPI Depends() helpers for session handling.

Two transports are accepted, checked in priority order:
  1. Session cookie ("auth_token") -- set by POST /auth/login for browsers.
  2. Authorization: Bearer <token> header -- scripts and non-browser clients.

get_session_token() only extracts the raw credential. Verification happens
inside the core operation (directory.service.submit calls verify_session as
its first step), so a bad credential is reported before any body checks.

get_current_session() is the hard variant for routes that need the caller's
identity directly; it raises Unauthorized, which the app maps to 401.

Layer rule: no imports from api/ or directory/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Request

from auth.models import SessionClaims
from auth.tokens import AUTH_COOKIE_NAME, verify_session


def get_session_token(request: Request) -> str | None:
    """Return the raw session credential carried by the request, if any."""
    token: str | None = request.cookies.get(AUTH_COOKIE_NAME)
    if not token:
        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            token = auth_header[7:].strip()
    return token or None


def get_current_session(request: Request) -> SessionClaims:
    """Require a valid session. Raises Unauthorized otherwise.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(session: SessionClaims = Depends(get_current_session)): ...
    """
    return verify_session(get_session_token(request))
