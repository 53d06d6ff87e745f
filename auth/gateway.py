"""
auth/gateway.py -- The Auth Gateway: registration, login, and token checks.

AuthGateway is constructed with everything it needs (the user store, the
signing secret, token lifetime, bcrypt cost) so tests can hand it an
in-memory store or a fake. Nothing here reads configuration or app state.

authenticate() makes the three possible outcomes explicit in its return
type instead of raising: ABSENT (no bearer token), INVALID (token present
but fails verification), VALID (identity attached). The HTTP mapping of
those outcomes lives in auth/dependencies.py.

Layer rule: no imports from api/, core/, or stats/.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from sqlalchemy.exc import IntegrityError

from auth.models import Identity, User
from auth.store import UserStore
from auth.tokens import (
    BCRYPT_ROUNDS,
    DUMMY_HASH,
    create_access_token,
    decode_access_token,
    extract_bearer_token,
    hash_password,
    verify_password,
)

logger = logging.getLogger("zela.auth")

DEFAULT_TOKEN_EXPIRE_SECONDS = 24 * 60 * 60


class InvalidCredentialsError(Exception):
    """Login email/password did not resolve to an account.

    Deliberately carries no hint of which half was wrong.
    """

    def __init__(self) -> None:
        super().__init__("invalid credentials")


class DuplicateEmailError(Exception):
    """Registration attempted with an email that already has an account."""

    def __init__(self, email: str) -> None:
        super().__init__("email already registered")
        self.email = email


class AuthStatus(str, Enum):
    ABSENT = "absent"
    INVALID = "invalid"
    VALID = "valid"


@dataclass(frozen=True)
class AuthResult:
    status: AuthStatus
    identity: Identity | None = None


class AuthGateway:
    """Accepts credentials, issues tokens, and verifies them per request.

    Usage:
        gateway = AuthGateway(UserStore(engine), secret_key=settings.jwt_secret)
        user = gateway.register("Ana", "ana@x.com", "pw123", "client")
        token = gateway.login("ana@x.com", "pw123")
        result = gateway.authenticate(f"Bearer {token}")
    """

    def __init__(
        self,
        user_store: UserStore,
        secret_key: str,
        token_expire_seconds: int = DEFAULT_TOKEN_EXPIRE_SECONDS,
        bcrypt_rounds: int = BCRYPT_ROUNDS,
    ) -> None:
        if not secret_key:
            raise ValueError("AuthGateway requires a non-empty secret_key")
        self._users = user_store
        self._secret_key = secret_key
        self._token_expire_seconds = token_expire_seconds
        self._bcrypt_rounds = bcrypt_rounds

    def register(self, name: str, email: str, password: str, role: str) -> User:
        """Hash the password and persist a new user.

        Raises DuplicateEmailError if the email is taken, whether caught by
        the lookup here or by the store's UNIQUE constraint when two
        registrations race. Any other store error propagates unchanged.
        """
        if self._users.get_by_email(email) is not None:
            raise DuplicateEmailError(email)

        password_hash = hash_password(password, rounds=self._bcrypt_rounds)
        try:
            user = self._users.create_user(User(name=name, email=email, role=role, password_hash=password_hash))
        except IntegrityError as exc:
            raise DuplicateEmailError(email) from exc

        logger.info("Registered user id=%s role=%s", user.id, user.role)
        return user

    def login(self, email: str, password: str) -> str:
        """Verify email/password and return a freshly signed token.

        bcrypt runs whether or not the email exists (against DUMMY_HASH for
        unknown emails) so timing does not reveal which emails are registered.
        """
        user = self._users.get_by_email(email)
        if user is None or user.password_hash is None:
            verify_password(password, DUMMY_HASH)
            logger.info("Login failed: unknown email")
            raise InvalidCredentialsError()
        if not verify_password(password, user.password_hash):
            logger.info("Login failed: bad password for user id=%s", user.id)
            raise InvalidCredentialsError()

        logger.info("Login succeeded for user id=%s", user.id)
        return self.issue_token(user)

    def issue_token(self, user: User) -> str:
        return create_access_token(user.id, user.role, self._secret_key, self._token_expire_seconds)

    def authenticate(self, authorization: str | None) -> AuthResult:
        """Classify an Authorization header value as ABSENT, INVALID, or VALID."""
        token = extract_bearer_token(authorization)
        if token is None:
            return AuthResult(AuthStatus.ABSENT)

        payload = decode_access_token(token, self._secret_key)
        if payload is None:
            return AuthResult(AuthStatus.INVALID)

        return AuthResult(AuthStatus.VALID, Identity(id=payload["id"], role=payload["role"]))
