"""
api/routes/auth.py -- Registration and login endpoints.

Routes:
  POST /api/register  -- create a user; 201 with the stored row
  POST /api/login     -- check credentials; 200 with a one-hour JWT

Both routes are public. Every other /api route sits behind require_token.

Login answers "User not found" and "Invalid password" separately, both
with 400. That reveals which usernames exist; existing clients rely on the
two messages, so the behaviour is kept.

Any store or bcrypt failure becomes a fixed 500 message. A duplicate
username is not told apart from other store failures on the wire; the log
line records which StoreError subclass fired.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from api.models import Credentials, LoginResponse, RegisterResponse, UserRow
from auth.store import UserStore
from auth.tokens import PasswordHashError, TokenService, hash_password, verify_password
from core.errors import StoreError

logger = logging.getLogger("stavba.api")

router = APIRouter()


@router.post("/register", response_model=RegisterResponse, status_code=201)
def register(request: Request, body: Credentials) -> RegisterResponse:
    """Hash the password and insert the user.

    The response includes the stored bcrypt hash, matching what existing
    clients receive today.
    """
    user_store: UserStore = request.app.state.user_store
    try:
        user = user_store.create_user(body.username, hash_password(body.password))
    except (PasswordHashError, StoreError) as exc:
        logger.exception("Error registering user (%s)", type(exc).__name__)
        raise HTTPException(status_code=500, detail="Failed to register user") from exc

    logger.info("Registered user %r (id=%s)", user.username, user.id)
    return RegisterResponse(
        message="User registered successfully",
        user=UserRow(id=user.id, username=user.username, password=user.password),
    )


@router.post("/login", response_model=LoginResponse)
def login(request: Request, body: Credentials) -> JSONResponse:
    """Verify username and password; return a signed session token."""
    user_store: UserStore = request.app.state.user_store
    tokens: TokenService = request.app.state.tokens
    try:
        user = user_store.get_by_username(body.username)
        if user is None:
            raise HTTPException(status_code=400, detail="User not found")
        if not verify_password(body.password, user.password):
            raise HTTPException(status_code=400, detail="Invalid password")
    except (PasswordHashError, StoreError) as exc:
        logger.exception("Error logging in (%s)", type(exc).__name__)
        raise HTTPException(status_code=500, detail="Failed to login") from exc

    token = tokens.issue(user.id, user.username)
    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(message="Login successful", token=token).model_dump(),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp
