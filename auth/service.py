"""
auth/service.py -- Registration and login, the credential authority's operations.

register() and login() are framework-free: they take a UserStore, raise the
typed errors from core/errors.py, and never see an HTTP object. The route
layer in api/routes/auth.py only maps their results onto responses.

Uniform failure for login:
  Unknown email and wrong password raise the same InvalidCredentials, and
  both branches pay for one bcrypt comparison (against the stored hash or
  the module dummy hash). Neither the response body nor its timing reveals
  which check failed.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from auth.models import User
from auth.store import UserStore, normalize_email
from auth.tokens import (
    MAX_PASSWORD_BYTES,
    burn_password_check,
    create_access_token,
    hash_password,
    verify_password,
)
from core.errors import DuplicateEmail, InternalError, InvalidCredentials, InvalidInput

logger = logging.getLogger("reliefmap.auth")


def _clean(value) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise InvalidInput("Missing required fields.")
    return value.strip()


def find_by_email(store: UserStore, email: str) -> User | None:
    """Pure lookup by normalized email. Storage failures become InternalError."""
    try:
        return store.get_by_email(normalize_email(email))
    except SQLAlchemyError as exc:
        logger.exception("User lookup failed")
        raise InternalError() from exc


def find_by_id(store: UserStore, user_id: str) -> User | None:
    """Lookup by opaque user id. Storage failures become InternalError."""
    try:
        return store.get_by_id(user_id)
    except SQLAlchemyError as exc:
        logger.exception("User lookup failed")
        raise InternalError() from exc


def register(store: UserStore, name: str | None, email: str | None, password: str | None) -> str:
    """Create an account and return the new user id.

    Raises:
        InvalidInput:   a field is missing or blank, or the password is longer
                        than bcrypt can use.
        DuplicateEmail: an account with the normalized email already exists.
        InternalError:  any other storage failure.
    """
    clean_name = _clean(name)
    clean_email = normalize_email(_clean(email))
    if not clean_name or not clean_email or not _clean(password):
        raise InvalidInput("Missing required fields.")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise InvalidInput(f"Password must be at most {MAX_PASSWORD_BYTES} bytes.")

    # Early exit only -- UNIQUE(email) in the store is what actually decides.
    if find_by_email(store, clean_email) is not None:
        raise DuplicateEmail()

    user = User(name=clean_name, email=clean_email, password_hash=hash_password(password))
    try:
        user_id = store.create_user(user)
    except SQLAlchemyError as exc:
        logger.exception("Registration insert failed")
        raise InternalError() from exc
    logger.info("Registered user %s", user_id)
    return user_id


def authenticate(store: UserStore, email: str, password: str) -> User:
    """Return the user whose credentials match, or raise InvalidCredentials."""
    user = find_by_email(store, email)
    if user is None:
        # Equalize timing -- do NOT return before running bcrypt.
        burn_password_check(password)
        raise InvalidCredentials()
    if not verify_password(password, user.password_hash):
        raise InvalidCredentials()
    return user


def login(store: UserStore, email: str | None, password: str | None) -> tuple[str, str]:
    """Verify credentials and mint a session token.

    Returns:
        (token, user_id)

    Raises:
        InvalidInput:       email or password missing.
        InvalidCredentials: unknown email or wrong password (indistinguishable).
        InternalError:      storage failure.
    """
    clean_email = normalize_email(_clean(email))
    if not clean_email or not isinstance(password, str) or not password:
        raise InvalidInput("Missing email or password.")

    try:
        user = authenticate(store, clean_email, password)
    except InvalidCredentials:
        logger.info("Rejected login attempt")
        raise

    token = create_access_token(user.id, user.email)
    return token, user.id
