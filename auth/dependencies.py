"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Only one auth method exists: an "Authorization: Bearer <token>" header
carrying a JWT issued by POST /login. There are no cookies and no sessions;
every protected request is verified from scratch.

get_gateway() pulls the AuthGateway wired in by the lifespan.
require_identity() maps the gateway's three outcomes to HTTP:
  ABSENT  -> 401 (with WWW-Authenticate: Bearer)
  INVALID -> 403
  VALID   -> the decoded Identity, also stored on request.state.identity

Layer rule: no imports from core/ or stats/.
  auth/dependencies.py may import from fastapi (for HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.gateway import AuthGateway, AuthStatus
from auth.models import Identity


def get_gateway(request: Request) -> AuthGateway:
    return request.app.state.gateway


def require_identity(request: Request) -> Identity:
    """Require a valid bearer token. Raises 401 if none is presented, 403 if it fails verification.

    Use as a FastAPI dependency:
        @router.get("/protected")
        async def route(identity: Identity = Depends(require_identity)): ...
    """
    result = get_gateway(request).authenticate(request.headers.get("Authorization"))

    if result.status is AuthStatus.ABSENT:
        raise HTTPException(
            status_code=401,
            detail="unauthenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if result.status is AuthStatus.INVALID:
        raise HTTPException(status_code=403, detail="forbidden")

    request.state.identity = result.identity
    return result.identity
