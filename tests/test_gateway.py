"""Unit tests for auth/gateway.py -- AuthGateway against an in-memory fake store.

Covers:
- register() hashes the password and rejects duplicate emails (pre-check and race)
- register() lets other store failures propagate
- login() issues a token carrying the user's id and role, valid for 24 hours
- login() fails identically for unknown email and wrong password
- authenticate() returns ABSENT / INVALID / VALID with the decoded identity
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from auth.gateway import (
    AuthGateway,
    AuthStatus,
    DuplicateEmailError,
    InvalidCredentialsError,
)
from auth.models import Identity, User
from auth.tokens import create_access_token, decode_access_token, verify_password


class TestConstruction:
    def test_empty_secret_rejected(self, fake_store) -> None:
        with pytest.raises(ValueError):
            AuthGateway(fake_store, secret_key="")


class TestRegister:
    def test_register_returns_persisted_user(self, gateway: AuthGateway) -> None:
        user = gateway.register("Ana", "ana@x.com", "pw123", "client")
        assert user.id is not None
        assert user.name == "Ana"
        assert user.email == "ana@x.com"
        assert user.role == "client"

    def test_register_stores_bcrypt_hash_not_password(self, gateway: AuthGateway, fake_store) -> None:
        gateway.register("Ana", "ana@x.com", "pw123", "client")
        stored = fake_store.get_by_email("ana@x.com")
        assert stored.password_hash != "pw123"
        assert stored.password_hash.startswith("$2b$10$")
        assert verify_password("pw123", stored.password_hash)

    def test_duplicate_email_rejected(self, gateway: AuthGateway) -> None:
        gateway.register("Ana", "ana@x.com", "pw123", "client")
        with pytest.raises(DuplicateEmailError):
            gateway.register("Other Ana", "ana@x.com", "different", "professional")

    def test_duplicate_email_race_maps_integrity_error(self, gateway: AuthGateway, fake_store) -> None:
        """Two registrations can both pass the lookup; the UNIQUE constraint still wins."""
        fake_store.raise_on_create = IntegrityError("INSERT INTO users", {}, Exception("UNIQUE"))
        with pytest.raises(DuplicateEmailError):
            gateway.register("Ana", "ana@x.com", "pw123", "client")

    def test_other_store_failures_propagate(self, gateway: AuthGateway, fake_store) -> None:
        fake_store.raise_on_create = OperationalError("INSERT INTO users", {}, Exception("connection lost"))
        with pytest.raises(OperationalError):
            gateway.register("Ana", "ana@x.com", "pw123", "client")


class TestLogin:
    def test_login_issues_token_with_identity(self, gateway: AuthGateway, secret_key: str) -> None:
        user = gateway.register("Bruno", "bruno@x.com", "s3nha", "professional")
        token = gateway.login("bruno@x.com", "s3nha")

        payload = decode_access_token(token, secret_key)
        assert payload is not None
        assert payload["id"] == user.id
        assert payload["role"] == "professional"

    def test_login_token_expires_in_24_hours(self, gateway: AuthGateway, secret_key: str) -> None:
        gateway.register("Bruno", "bruno@x.com", "s3nha", "professional")
        now = datetime.now(timezone.utc).timestamp()
        payload = decode_access_token(gateway.login("bruno@x.com", "s3nha"), secret_key)
        assert payload["exp"] - now == pytest.approx(24 * 60 * 60, abs=5)

    def test_unknown_email_and_wrong_password_are_indistinguishable(self, gateway: AuthGateway) -> None:
        gateway.register("Carla", "carla@x.com", "right", "client")

        with pytest.raises(InvalidCredentialsError) as unknown:
            gateway.login("nobody@x.com", "right")
        with pytest.raises(InvalidCredentialsError) as mismatch:
            gateway.login("carla@x.com", "wrong")

        assert str(unknown.value) == str(mismatch.value) == "invalid credentials"

    def test_user_without_hash_cannot_log_in(self, gateway: AuthGateway, fake_store) -> None:
        fake_store.users["ghost@x.com"] = User(id=99, name="Ghost", email="ghost@x.com", role="client")
        with pytest.raises(InvalidCredentialsError):
            gateway.login("ghost@x.com", "")


class TestAuthenticate:
    @pytest.mark.parametrize("header", [None, "", "Bearer", "Basic dXNlcjpwdw==", "Token abc"])
    def test_missing_or_malformed_header_is_absent(self, gateway: AuthGateway, header) -> None:
        result = gateway.authenticate(header)
        assert result.status is AuthStatus.ABSENT
        assert result.identity is None

    def test_garbage_token_is_invalid(self, gateway: AuthGateway) -> None:
        result = gateway.authenticate("Bearer not.a.token")
        assert result.status is AuthStatus.INVALID
        assert result.identity is None

    def test_expired_token_is_invalid(self, gateway: AuthGateway, secret_key: str) -> None:
        token = create_access_token(1, "client", secret_key, expire_seconds=-1)
        assert gateway.authenticate(f"Bearer {token}").status is AuthStatus.INVALID

    def test_foreign_secret_is_invalid(self, gateway: AuthGateway) -> None:
        token = create_access_token(1, "client", "some-other-secret-0123456789abcdef", expire_seconds=60)
        assert gateway.authenticate(f"Bearer {token}").status is AuthStatus.INVALID

    def test_login_token_round_trips_to_identity(self, gateway: AuthGateway) -> None:
        user = gateway.register("Dani", "dani@x.com", "pw", "client")
        token = gateway.login("dani@x.com", "pw")

        result = gateway.authenticate(f"Bearer {token}")
        assert result.status is AuthStatus.VALID
        assert result.identity == Identity(id=user.id, role="client")
