"""
auth/store.py -- SQLAlchemy Core persistence layer for users.

Pattern: Repository + Data Mapper (same as billing/store.py).
UserStore is the repository; _row_to_user is the mapper.
Route code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.
  username is UNIQUE at the database level. A second registration with the
  same name fails with ConstraintViolationError -- it never overwrites.

Layer rule: no imports from api/ or billing/.
"""

from __future__ import annotations

from sqlalchemy import Column, Integer, MetaData, String, Table, Text
from sqlalchemy.engine import Engine

from auth.models import User
from core.errors import store_errors

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(255), nullable=False, unique=True),
    Column("password", Text, nullable=False),  # bcrypt hash
)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User entities.

    Usage:
        store = UserStore(engine)
        user = store.create_user("alice", hash_password("pw1"))
        user = store.get_by_username("alice")
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def create_user(self, username: str, hashed_password: str) -> User:
        """Insert a new user and return the stored row.

        Raises ConstraintViolationError if the username already exists.
        """
        with store_errors(), self.engine.begin() as conn:
            row = conn.execute(
                _users.insert().values(username=username, password=hashed_password).returning(*_users.c)
            ).one()
        return _row_to_user(row)

    def get_by_username(self, username: str) -> User | None:
        """Look up a user by exact username (case-sensitive). Returns None if not found."""
        with store_errors(), self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.username == username)).first()
        return _row_to_user(row) if row is not None else None


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(id=row.id, username=row.username, password=row.password)


def create_tables(engine: Engine) -> None:
    """Create the users table if it does not exist."""
    with store_errors():
        metadata.create_all(engine)
