"""
core/errors.py -- Store failure taxonomy.

Every store method runs its statement inside store_errors(), which turns
SQLAlchemy exceptions into one of three StoreError types:

  ConstraintViolationError -- the database rejected the values
                              (unique, foreign key, NOT NULL, bad literal).
                              Also raised for integers the driver cannot
                              bind (too large for SQLite INTEGER).
  StoreUnavailableError    -- the database could not be reached or the
                              connection broke mid-statement.
  StoreError               -- anything else the driver raised.

Route handlers catch StoreError and answer with a fixed 500 message. The
subclass only matters for the server-side log line; clients never see it.
"""

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import DataError, IntegrityError, InterfaceError, OperationalError, SQLAlchemyError


class StoreError(Exception):
    """A database statement failed. The driver exception is chained as __cause__."""


class ConstraintViolationError(StoreError):
    """The statement reached the database but violated a constraint or type."""


class StoreUnavailableError(StoreError):
    """The database could not be reached or dropped the connection."""


@contextmanager
def store_errors() -> Iterator[None]:
    try:
        yield
    except (IntegrityError, DataError) as exc:
        raise ConstraintViolationError(str(exc.orig)) from exc
    except OverflowError as exc:
        raise ConstraintViolationError(str(exc)) from exc
    except (OperationalError, InterfaceError) as exc:
        raise StoreUnavailableError(str(exc.orig)) from exc
    except SQLAlchemyError as exc:
        raise StoreError(str(exc)) from exc
