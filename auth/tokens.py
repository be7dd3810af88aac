"""
auth/tokens.py -- Password hashing, session-token signing, and cookie helpers.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry
       the user id (sub), email, issued-at and a fixed 24h expiry. Any
       verification failure -- malformed, bad signature, expired, missing
       claims -- collapses to a single Unauthorized so callers cannot use
       the endpoint as an oracle.

  Passwords: bcrypt with a per-user random salt from bcrypt.gensalt() and a
       configurable work factor (BCRYPT_ROUNDS, default 12). checkpw does the
       constant-time comparison. _DUMMY_HASH lets authentication burn the same
       bcrypt cost when the email is unknown, so response time does not reveal
       whether an account exists.

  Transport: the token travels in an httpOnly, SameSite=Strict cookie scoped
       to "/" whose max_age matches the token lifetime. Secure is set when
       SECURE_COOKIES=true (production, HTTPS only).

There is no server-side revocation list. Logout clears the cookie; a copied
token stays valid until it expires.

Layer rule: no imports from api/ or directory/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

from auth.models import SessionClaims
from core.config import get_settings
from core.errors import Unauthorized

logger = logging.getLogger("reliefmap.auth")

_settings = get_settings()

_ALGORITHM = "HS256"

AUTH_COOKIE_NAME = "auth_token"

# Session lifetime is fixed, not configurable.
TOKEN_LIFETIME = timedelta(hours=24)

# bcrypt only looks at the first 72 bytes; recent releases reject longer input.
MAX_PASSWORD_BYTES = 72

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the given plaintext password."""
    salt = bcrypt.gensalt(rounds=_settings.bcrypt_rounds)
    return bcrypt.hashpw(plain.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    A malformed stored hash or an over-long password is a mismatch, not an error.
    """
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


# Computed once at module load so the first login attempt is not measurably
# slower than later ones.
_DUMMY_HASH: str = hash_password("reliefmap_timing_dummy")


def burn_password_check(plain: str) -> None:
    """Run a full bcrypt comparison whose result is discarded."""
    verify_password(plain, _DUMMY_HASH)


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def create_access_token(user_id: str, email: str, issued_at: datetime | None = None) -> str:
    """Encode a signed session token for the given identity.

    Args:
        user_id:   Opaque user id, stored as the JWT subject claim.
        email:     Normalized email of the user.
        issued_at: Issue time; defaults to now. The expiry is always
                   issued_at + TOKEN_LIFETIME (24h).
    """
    issued = issued_at or datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "email": email,
        "iat": issued,
        "exp": issued + TOKEN_LIFETIME,
    }
    return jwt.encode(payload, _settings.secret_key, algorithm=_ALGORITHM)


def verify_session(token: str | None) -> SessionClaims:
    """Verify signature and expiry and return the token's claims.

    Raises Unauthorized for every kind of failure, with the same message.
    """
    if not token or not isinstance(token, str):
        raise Unauthorized()
    try:
        payload = jwt.decode(token, _settings.secret_key, algorithms=[_ALGORITHM])
    except (JWTError, ValueError, TypeError) as exc:
        raise Unauthorized() from exc

    user_id = payload.get("sub")
    email = payload.get("email")
    iat = payload.get("iat")
    exp = payload.get("exp")
    if not isinstance(user_id, str) or not isinstance(email, str):
        raise Unauthorized()
    if not isinstance(iat, (int, float)) or not isinstance(exp, (int, float)):
        raise Unauthorized()

    return SessionClaims(
        user_id=user_id,
        email=email,
        issued_at=datetime.fromtimestamp(iat, tz=timezone.utc),
        expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
    )


# ---------------------------------------------------------------------------
# Cookie helpers
# ---------------------------------------------------------------------------


def set_auth_cookie(response, token: str) -> None:
    """Write the session token as an httpOnly cookie on the response.

    httponly=True: page scripts cannot read the cookie.
    samesite="strict": never sent on cross-site requests.
    path="/": scoped to the whole API surface.
    max_age: matches the token expiry so both lapse together.
    """
    response.set_cookie(
        AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="strict",
        secure=_settings.secure_cookies,
        max_age=int(TOKEN_LIFETIME.total_seconds()),
        path="/",
    )


def clear_auth_cookie(response) -> None:
    response.delete_cookie(
        AUTH_COOKIE_NAME,
        path="/",
        httponly=True,
        samesite="strict",
        secure=_settings.secure_cookies,
    )
