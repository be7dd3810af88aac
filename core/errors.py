"""
core/errors.py -- The error taxonomy shared by every ReliefMap operation.

Every core operation either returns its result or raises exactly one of the
ReliefMapError subclasses below. The API layer maps each class to a stable
HTTP status via its `status_code` attribute; nothing else about the error
leaves the process.

`message` is always safe to show to a caller. InternalError never carries
storage error text -- the original exception is chained (`raise ... from`)
and logged server-side only.
"""

from __future__ import annotations


class ReliefMapError(Exception):
    """Base class for all typed outcomes of a failed core operation."""

    status_code: int = 500
    default_message: str = "Internal server error."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(ReliefMapError):
    """Missing, malformed or out-of-range request data. Retrying will not help."""

    status_code = 400
    default_message = "Invalid request data."


class Unauthorized(ReliefMapError):
    """Missing, malformed, badly signed or expired session credential.

    The message is the same for every cause.
    """

    status_code = 401
    default_message = "Unauthorized. Login required."


class InvalidCredentials(ReliefMapError):
    """Login failure. Unknown email and wrong password are indistinguishable."""

    status_code = 401
    default_message = "Invalid email or password."


class DuplicateEmail(ReliefMapError):
    status_code = 409
    default_message = "A user with this email already exists."


class InternalError(ReliefMapError):
    """Storage or unexpected failure. Safe to retry."""

    status_code = 500
    default_message = "Internal server error."
