"""Unit tests for the credential store and registration (auth/store.py, auth/service.py).

Covers:
- Email normalization on write and lookup
- Required-field validation
- Password is stored only as a salted bcrypt hash
- Duplicate detection, including when the pre-check is bypassed
- Concurrent same-email registrations: exactly one wins
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from auth import service
from auth.models import User
from auth.store import UserStore
from auth.tokens import verify_password
from core.errors import DuplicateEmail, InternalError, InvalidInput


class TestRegister:
    def test_register_returns_id_and_normalizes_email(self, user_store: UserStore) -> None:
        user_id = service.register(user_store, "Asha", "  Asha@Example.ORG ", "s3cret-pass")
        user = user_store.get_by_id(user_id)
        assert user is not None
        assert user.email == "asha@example.org"
        assert user.name == "Asha"

    def test_password_is_hashed_with_salt(self, user_store: UserStore) -> None:
        a = service.register(user_store, "A", "a@example.org", "same-password")
        b = service.register(user_store, "B", "b@example.org", "same-password")
        hash_a = user_store.get_by_id(a).password_hash
        hash_b = user_store.get_by_id(b).password_hash
        assert "same-password" not in hash_a
        assert hash_a.startswith("$2")
        assert hash_a != hash_b
        assert verify_password("same-password", hash_a)

    @pytest.mark.parametrize(
        "name, email, password",
        [
            (None, "x@example.org", "pw"),
            ("X", None, "pw"),
            ("X", "x@example.org", None),
            ("   ", "x@example.org", "pw"),
            ("X", "   ", "pw"),
            ("X", "x@example.org", "   "),
        ],
    )
    def test_missing_fields_rejected(self, user_store: UserStore, name, email, password) -> None:
        with pytest.raises(InvalidInput):
            service.register(user_store, name, email, password)
        assert user_store.count_users() == 0

    def test_overlong_password_rejected(self, user_store: UserStore) -> None:
        with pytest.raises(InvalidInput):
            service.register(user_store, "X", "x@example.org", "p" * 73)

    def test_duplicate_email_any_case(self, user_store: UserStore) -> None:
        service.register(user_store, "One", "dup@example.org", "pw-one")
        with pytest.raises(DuplicateEmail):
            service.register(user_store, "Two", "DUP@example.org", "pw-two")
        assert user_store.count_users() == 1

    def test_unique_constraint_is_final_arbiter(self, user_store: UserStore, monkeypatch) -> None:
        """With the lookup pre-check blinded, the UNIQUE index still rejects the second insert."""
        monkeypatch.setattr(user_store, "get_by_email", lambda email: None)
        service.register(user_store, "One", "race@example.org", "pw")
        with pytest.raises(DuplicateEmail):
            service.register(user_store, "Two", "Race@Example.org", "pw")
        assert user_store.count_users() == 1

    def test_storage_failure_is_internal_error(self, user_store: UserStore, monkeypatch) -> None:
        from sqlalchemy.exc import OperationalError

        def boom(email):
            raise OperationalError("SELECT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(user_store, "get_by_email", boom)
        with pytest.raises(InternalError) as excinfo:
            service.register(user_store, "X", "x@example.org", "pw")
        assert "disk" not in excinfo.value.message


class TestConcurrentRegistration:
    def test_same_email_two_threads_one_success(self, tmp_path) -> None:
        store = UserStore(f"sqlite:///{tmp_path / 'users.db'}")
        barrier = threading.Barrier(2)

        def attempt(email: str):
            barrier.wait()
            try:
                return service.register(store, "Racer", email, "pw")
            except DuplicateEmail as exc:
                return exc

        try:
            with ThreadPoolExecutor(max_workers=2) as pool:
                results = list(pool.map(attempt, ["Same@Example.org", "same@example.org"]))
        finally:
            count = store.count_users()
            store.close()

        successes = [r for r in results if isinstance(r, str)]
        failures = [r for r in results if isinstance(r, DuplicateEmail)]
        assert len(successes) == 1
        assert len(failures) == 1
        assert count == 1

    def test_distinct_emails_all_succeed(self, tmp_path) -> None:
        store = UserStore(f"sqlite:///{tmp_path / 'users.db'}")
        emails = [f"user{i}@example.org" for i in range(5)]
        try:
            with ThreadPoolExecutor(max_workers=5) as pool:
                ids = list(pool.map(lambda e: service.register(store, "U", e, "pw"), emails))
            assert len(set(ids)) == 5
            assert store.count_users() == 5
        finally:
            store.close()


class TestUserStore:
    def test_get_by_email_missing_returns_none(self, user_store: UserStore) -> None:
        assert user_store.get_by_email("nobody@example.org") is None

    def test_create_user_normalizes_email(self, user_store: UserStore) -> None:
        user_id = user_store.create_user(User(name="N", email="MiXeD@Example.org", password_hash="x"))
        assert user_store.get_by_email("mixed@example.org").id == user_id
        assert service.find_by_email(user_store, "MIXED@example.org").id == user_id

    def test_find_by_id(self, user_store: UserStore) -> None:
        user_id = service.register(user_store, "Asha", "asha@example.org", "pw-asha")
        assert service.find_by_id(user_store, user_id).email == "asha@example.org"
        assert service.find_by_id(user_store, "0" * 32) is None

    def test_find_by_id_storage_failure(self, user_store: UserStore, monkeypatch) -> None:
        from sqlalchemy.exc import OperationalError

        def boom(user_id):
            raise OperationalError("SELECT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(user_store, "get_by_id", boom)
        with pytest.raises(InternalError):
            service.find_by_id(user_store, "a" * 32)
