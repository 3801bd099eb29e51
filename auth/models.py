"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores and routes
do the work.

Layer rule: no imports from api/ or billing/.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass
class User:
    """A registered account.

    password holds the bcrypt hash written at registration. The plaintext
    is never stored. Users are created once and never updated or deleted.
    """

    username: str
    password: str
    id: int | None = None


@dataclass(frozen=True)
class TokenClaims:
    """Identity decoded from a verified session token."""

    user_id: int
    username: str
    expires_at: datetime
