"""
auth/tokens.py -- JWT and password hashing utilities.

Security design decisions:
  JWT: python-jose with HS256. Tokens carry id, role, and expiry. The signing
       secret is always passed in by the caller (the AuthGateway owns it), so
       nothing here reads configuration. Verification returns None on any
       failure -- the gateway turns that into an INVALID outcome.

  Passwords: bcrypt with a fixed cost factor of 10. Bcrypt is the right choice
       for low-entropy secrets (passwords) because its cost factor makes
       brute-force expensive. DUMMY_HASH enables timing equalization in
       AuthGateway.login() so response time does not reveal whether an email
       exists.

Layer rule: no imports from api/, core/, or stats/.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

logger = logging.getLogger("zela.auth")

ALGORITHM = "HS256"
BCRYPT_ROUNDS = 10
BEARER_SCHEME = "bearer"

# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
#
# bcrypt 4.x rejects passlib's wrap-bug probe (a >72 byte password), so the
# library is used directly.
# ---------------------------------------------------------------------------


def hash_password(plain: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    bcrypt only looks at the first 72 bytes of input; newer bcrypt releases
    raise ValueError past that limit. The error propagates to the caller.
    """
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed stored hash or over-long input -- never a match.
        return False


# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones.
DUMMY_HASH: str = hash_password("zela_timing_dummy")


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def create_access_token(user_id: int, role: str, secret_key: str, expire_seconds: int) -> str:
    """Encode a signed JWT carrying {id, role, exp}.

    Args:
        user_id:        Store-assigned user ID.
        role:           User role, copied verbatim into the claim.
        secret_key:     HS256 signing secret.
        expire_seconds: Token lifetime from now.
    """
    expire = datetime.now(timezone.utc) + timedelta(seconds=expire_seconds)
    payload = {
        "id": user_id,
        "role": role,
        "exp": expire,
    }
    return jwt.encode(payload, secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str, secret_key: str) -> dict | None:
    """Decode and verify a JWT. Returns the payload dict or None on any failure.

    jwt.decode checks the signature and requires an unexpired exp claim. A
    token that verifies but lacks exp, id or role was not issued by this
    service and is rejected too.
    """
    try:
        payload = jwt.decode(token, secret_key, algorithms=[ALGORITHM], options={"require_exp": True})
    except JWTError as exc:
        logger.debug("Token rejected: %s", exc)
        return None
    if "id" not in payload or "role" not in payload:
        return None
    return payload


# ---------------------------------------------------------------------------
# Authorization header parsing
# ---------------------------------------------------------------------------


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token from an "Authorization: Bearer <token>" header value.

    Anything that is not exactly a scheme and a credential, with the scheme
    being Bearer (case-insensitive), counts as no token at all.
    """
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != BEARER_SCHEME:
        return None
    return parts[1]
