"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in directory/models.py -- dataclasses own domain shape; stores and services
do the work.

Layer rule: no imports from api/ or directory/.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass
class User:
    """A registered submitter.

    email is always stored in its normalized (lowercase) form and is the
    uniqueness and lookup key. password_hash is a bcrypt hash; the plaintext
    is never held on this object.

    id is None before the record is written to the database.
    """

    name: str
    email: str
    password_hash: str
    id: str | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class SessionClaims:
    """The verified contents of a session token.

    Not persisted -- rebuilt from the signed token on every request.
    """

    user_id: str
    email: str
    issued_at: datetime
    expires_at: datetime
