"""
auth/dependencies.py -- FastAPI Depends() helper guarding resource routes.

require_token() is the auth middleware for every invoice and zakazka route:

  1. Read the Authorization header and take the token from "Bearer <token>".
  2. No header, no token part, or another scheme -> HTTP 401.
  3. TokenService.verify() fails (tampered, malformed, expired) -> HTTP 403.
  4. Otherwise the claims are attached to request.state.user and returned.

The TokenService comes from request.app.state.tokens, where the lifespan
placed it. Register and login are public and never use this dependency.

Layer rule: auth/dependencies.py may import from fastapi (for
HTTPException/Request) because it is part of the dependency injection system.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.models import TokenClaims
from auth.tokens import InvalidTokenError, MissingTokenError, TokenService


def bearer_token(auth_header: str | None) -> str | None:
    """Return the token from an "Authorization: Bearer <token>" value, or None."""
    if not auth_header:
        return None
    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]


def require_token(request: Request) -> TokenClaims:
    """Require a valid session token. 401 when absent, 403 when invalid or expired.

    Use as a router-level dependency:
        router = APIRouter(dependencies=[Depends(require_token)])
    """
    tokens: TokenService = request.app.state.tokens
    try:
        claims = tokens.verify(bearer_token(request.headers.get("Authorization")))
    except MissingTokenError:
        raise HTTPException(status_code=401, detail="Access denied, no token provided") from None
    except InvalidTokenError:
        raise HTTPException(status_code=403, detail="Invalid token") from None
    request.state.user = claims
    return claims
