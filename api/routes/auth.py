"""
api/routes/auth.py -- Registration and login endpoints.

Routes:
  POST /register  -- create an account; 201 with the public user view
  POST /login     -- exchange email/password for a bearer token

Both handlers are plain `def`: the gateway does blocking bcrypt and
SQLAlchemy work, and FastAPI runs sync handlers in its threadpool.

Security:
  Login returns the same 401 body for an unknown email and a wrong password.
  Cache-Control: no-store on login responses so tokens are not cached.
  Store failures are logged and surfaced as an opaque 500.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.exc import SQLAlchemyError

from api.models import LoginRequest, RegisterRequest, TokenResponse, UserResponse
from auth.dependencies import get_gateway
from auth.gateway import AuthGateway, DuplicateEmailError, InvalidCredentialsError

logger = logging.getLogger("zela.api")

# Auth policy:
# - POST /register: public
# - POST /login:    public
router = APIRouter()


@router.post("/register", response_model=UserResponse, status_code=201)
def register(body: RegisterRequest, gateway: AuthGateway = Depends(get_gateway)) -> UserResponse:
    """Hash the password, persist the user, and echo back id/name/email/role."""
    try:
        user = gateway.register(body.name, body.email, body.password, body.role)
    except DuplicateEmailError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        logger.exception("Registration failed")
        raise HTTPException(status_code=500, detail="internal error") from exc
    return UserResponse.from_user(user)


@router.post("/login", response_model=TokenResponse)
def login(body: LoginRequest, response: Response, gateway: AuthGateway = Depends(get_gateway)) -> TokenResponse:
    """Authenticate with email and password; return a 24-hour bearer token."""
    response.headers["Cache-Control"] = "no-store"
    try:
        token = gateway.login(body.email, body.password)
    except InvalidCredentialsError as exc:
        raise HTTPException(status_code=401, detail=str(exc), headers={"Cache-Control": "no-store"}) from exc
    except SQLAlchemyError as exc:
        logger.exception("Login failed")
        raise HTTPException(status_code=500, detail="internal error") from exc
    return TokenResponse(token=token)
