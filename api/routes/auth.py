"""
api/routes/auth.py -- Registration, login, logout and session lookup.

Routes:
  POST /auth/register  -- create an account; 201 {message, userId}
  POST /auth/login     -- password login; 200 {message, userId} + session cookie
  POST /auth/logout    -- clears the session cookie; 200
  GET  /auth/me        -- identity behind the current session (requires auth)

Security:
  login() in auth/service.py equalizes timing and returns one error for
  unknown email and wrong password -- use it, never inline the lookup.
  Cache-Control: no-store on login responses.
  The token is only ever returned as an httpOnly cookie, never in the body.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.models import (
    LoginRequest,
    LoginResponse,
    MeResponse,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
)
from auth import service
from auth.dependencies import get_current_session
from auth.models import SessionClaims
from auth.store import UserStore
from auth.tokens import clear_auth_cookie, set_auth_cookie
from core.errors import Unauthorized

# Auth policy:
# - POST /auth/register: public
# - POST /auth/login:    public
# - POST /auth/logout:   public -- clearing a cookie needs no prior auth
# - GET  /auth/me:       requires a valid session (get_current_session)
router = APIRouter()


@router.post("/auth/register", response_model=RegisterResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> RegisterResponse:
    """Create an account. The email is normalized to lowercase before storage."""
    user_store: UserStore = request.app.state.user_store
    user_id = service.register(user_store, body.name, body.email, body.password)
    return RegisterResponse(message="Registration successful!", user_id=user_id)


@router.post("/auth/login", response_model=LoginResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password; set the session cookie."""
    user_store: UserStore = request.app.state.user_store
    token, user_id = service.login(user_store, body.email, body.password)

    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(message="Login successful!", user_id=user_id).model_dump(by_alias=True),
    )
    set_auth_cookie(resp, token)
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/auth/logout", response_model=MessageResponse)
def logout() -> JSONResponse:
    """Clear the session cookie. The token itself stays valid until it expires."""
    resp = JSONResponse(content={"message": "Logged out."})
    clear_auth_cookie(resp)
    return resp


@router.get("/auth/me", response_model=MeResponse)
def me(request: Request, session: SessionClaims = Depends(get_current_session)) -> MeResponse:
    """Return identity information for the current session."""
    user_store: UserStore = request.app.state.user_store
    user = service.find_by_id(user_store, session.user_id)
    if user is None:
        raise Unauthorized()
    return MeResponse(user_id=user.id, email=user.email, name=user.name)
