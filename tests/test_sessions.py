"""Unit tests for the session authority (auth/tokens.py, auth/service.login).

Covers:
- Login success returns a token that verify_session accepts
- Unknown email and wrong password raise the identical error
- Token lifetime: accepted just before 24h, rejected just after
- Tampered, foreign-key, malformed and claim-less tokens all raise Unauthorized
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from auth import service
from auth.store import UserStore
from auth.tokens import TOKEN_LIFETIME, create_access_token, verify_session
from core.config import get_settings
from core.errors import InvalidCredentials, InvalidInput, Unauthorized

# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------


@pytest.fixture
def registered(user_store: UserStore) -> tuple[UserStore, str]:
    user_id = service.register(user_store, "Ravi", "ravi@example.org", "correct horse")
    return user_store, user_id


class TestLogin:
    def test_login_returns_verifiable_token(self, registered) -> None:
        store, user_id = registered
        token, returned_id = service.login(store, "Ravi@Example.org", "correct horse")
        assert returned_id == user_id
        claims = verify_session(token)
        assert claims.user_id == user_id
        assert claims.email == "ravi@example.org"

    def test_wrong_password_and_unknown_email_are_identical(self, registered) -> None:
        store, _ = registered
        with pytest.raises(InvalidCredentials) as wrong_pw:
            service.login(store, "ravi@example.org", "battery staple")
        with pytest.raises(InvalidCredentials) as unknown:
            service.login(store, "nobody@example.org", "correct horse")
        assert type(wrong_pw.value) is type(unknown.value)
        assert wrong_pw.value.message == unknown.value.message
        assert wrong_pw.value.status_code == unknown.value.status_code

    def test_unknown_email_still_runs_bcrypt(self, registered, monkeypatch) -> None:
        import auth.service as auth_service

        calls = []
        monkeypatch.setattr(auth_service, "burn_password_check", lambda pw: calls.append(pw))
        with pytest.raises(InvalidCredentials):
            service.login(registered[0], "ghost@example.org", "whatever")
        assert calls == ["whatever"]

    @pytest.mark.parametrize("email, password", [(None, "pw"), ("ravi@example.org", None), ("", "pw"), ("a@b.c", "")])
    def test_missing_fields(self, registered, email, password) -> None:
        with pytest.raises(InvalidInput):
            service.login(registered[0], email, password)


# ---------------------------------------------------------------------------
# Token lifetime and integrity
# ---------------------------------------------------------------------------


class TestVerifySession:
    def test_expiry_is_24h_after_issue(self) -> None:
        issued = datetime.now(timezone.utc).replace(microsecond=0)
        claims = verify_session(create_access_token("u1", "u1@example.org", issued_at=issued))
        assert claims.expires_at - claims.issued_at == timedelta(hours=24) == TOKEN_LIFETIME

    def test_accepted_at_23h59m(self) -> None:
        issued = datetime.now(timezone.utc) - timedelta(hours=23, minutes=59)
        claims = verify_session(create_access_token("u1", "u1@example.org", issued_at=issued))
        assert claims.user_id == "u1"

    def test_rejected_at_24h01m(self) -> None:
        issued = datetime.now(timezone.utc) - timedelta(hours=24, minutes=1)
        with pytest.raises(Unauthorized):
            verify_session(create_access_token("u1", "u1@example.org", issued_at=issued))

    def test_tampered_signature_rejected(self) -> None:
        token = create_access_token("u1", "u1@example.org")
        header, payload, signature = token.split(".")
        flipped = ("A" if signature[0] != "A" else "B") + signature[1:]
        with pytest.raises(Unauthorized):
            verify_session(f"{header}.{payload}.{flipped}")

    def test_foreign_secret_rejected(self) -> None:
        now = datetime.now(timezone.utc)
        forged = jwt.encode(
            {"sub": "u1", "email": "u1@example.org", "iat": now, "exp": now + timedelta(hours=1)},
            "x" * 64,
            algorithm="HS256",
        )
        with pytest.raises(Unauthorized):
            verify_session(forged)

    def test_missing_claims_rejected(self) -> None:
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"sub": "u1", "iat": now, "exp": now + timedelta(hours=1)},
            get_settings().secret_key,
            algorithm="HS256",
        )
        with pytest.raises(Unauthorized):
            verify_session(token)

    @pytest.mark.parametrize("token", [None, "", "not-a-jwt", "a.b.c"])
    def test_malformed_rejected(self, token) -> None:
        with pytest.raises(Unauthorized):
            verify_session(token)

    def test_all_failures_share_one_message(self) -> None:
        expired = create_access_token(
            "u1", "u1@example.org", issued_at=datetime.now(timezone.utc) - timedelta(days=2)
        )
        messages = set()
        for token in (None, "garbage", expired):
            with pytest.raises(Unauthorized) as excinfo:
                verify_session(token)
            messages.add(excinfo.value.message)
        assert len(messages) == 1
