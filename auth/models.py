"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in stats/models.py -- dataclasses own domain shape; stores, the gateway and
routes do the work.

Layer rule: no imports from api/, core/, or stats/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered account.

    password_hash never crosses the API boundary. Route handlers build the
    response model field by field from id/name/email/role, so there is no
    serialization path that could leak it.

    role is an open string ("client", "professional", ...). It is copied into
    the token verbatim and nothing in this service branches on its value.
    """

    name: str
    email: str
    role: str
    id: int | None = None
    password_hash: str | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class Identity:
    """The {id, role} pair carried by a verified token. Lives for one request."""

    id: int
    role: str
