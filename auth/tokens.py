"""
auth/tokens.py -- Password hashing and JWT session tokens.

Security design decisions:
  Passwords: bcrypt used directly (no passlib wrapper) with a fixed cost
       factor of 10 rounds. Every hash gets a fresh salt, so hashing the same
       password twice gives two different strings.

  JWT: python-jose with HS256. Tokens carry userId and username and expire
       exactly one hour after issuance. There is no revocation list -- a
       token stays valid until it expires.

  SECRET_KEY: injected into TokenService at construction. This module never
       reads configuration itself, so tests can build a TokenService with any
       secret they like.

Failure kinds are kept apart on purpose:
  verify_password() returns False for a wrong password but raises
  PasswordHashError when bcrypt cannot run at all (malformed stored hash).
  TokenService.verify() raises MissingTokenError when there is nothing to
  check and InvalidTokenError when the token does not check out.
  The auth dependency maps those to 401 and 403.

Layer rule: no imports from api/ or billing/.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

from auth.models import TokenClaims

logger = logging.getLogger("stavba.auth")

BCRYPT_ROUNDS = 10
# bcrypt reads at most 72 bytes; longer passwords are truncated.
BCRYPT_MAX_BYTES = 72
TOKEN_LIFETIME = timedelta(hours=1)

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class PasswordHashError(Exception):
    """bcrypt could not hash or check the password."""


class AuthError(Exception):
    """Base class for session token failures."""


class MissingTokenError(AuthError):
    """No bearer token was presented."""


class InvalidTokenError(AuthError):
    """The token is malformed, tampered with, or expired."""


# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


def _password_bytes(plain: str) -> bytes:
    return plain.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    Passwords longer than 72 bytes are truncated, so an 80-byte password
    registers and later verifies against its first 72 bytes. Raises
    PasswordHashError if bcrypt cannot run.
    """
    try:
        hashed = bcrypt.hashpw(_password_bytes(plain), bcrypt.gensalt(rounds=BCRYPT_ROUNDS))
    except ValueError as exc:
        raise PasswordHashError(str(exc)) from exc
    return hashed.decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    A mismatch is False. A hash bcrypt cannot parse raises PasswordHashError.
    """
    try:
        return bcrypt.checkpw(_password_bytes(plain), hashed.encode("utf-8"))
    except ValueError as exc:
        raise PasswordHashError(str(exc)) from exc


# ---------------------------------------------------------------------------
# JWT issue / verify
# ---------------------------------------------------------------------------


class TokenService:
    """Issues and verifies signed session tokens with one fixed secret.

    Usage:
        tokens = TokenService(settings.secret_key)
        token = tokens.issue(user.id, user.username)
        claims = tokens.verify(token)
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256") -> None:
        if not secret_key:
            raise ValueError("TokenService requires a non-empty secret key")
        self._secret_key = secret_key
        self._algorithm = algorithm

    def issue(self, user_id: int, username: str) -> str:
        """Encode a signed JWT for the user, expiring one hour from now."""
        issued_at = datetime.now(timezone.utc)
        payload = {
            "userId": user_id,
            "username": username,
            "iat": issued_at,
            "exp": issued_at + TOKEN_LIFETIME,
        }
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: str | None) -> TokenClaims:
        """Check signature and expiry and return the decoded identity.

        Raises MissingTokenError for an empty token and InvalidTokenError for
        anything python-jose rejects (bad signature, garbage, expired) or a
        payload without the identity or expiry claims.
        """
        if not token:
            raise MissingTokenError("no token provided")
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except JWTError as exc:
            logger.debug("Rejected token: %s", exc)
            raise InvalidTokenError(str(exc)) from exc
        if any(claim not in payload for claim in ("userId", "username", "exp")):
            raise InvalidTokenError("token is missing identity or expiry claims")
        return TokenClaims(
            user_id=payload["userId"],
            username=payload["username"],
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
