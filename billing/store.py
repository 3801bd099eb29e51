"""
billing/store.py -- SQLAlchemy Core persistence for invoices and zakazky.

Both resources have the same lifecycle: create, list, get, full update and
delete by id, with no ownership rules. RecordStore implements that once and
is bound to a Table; invoice_store() and zakazka_store() are the two
concrete repositories the API uses.

Every method issues exactly one statement. Writes use RETURNING so the
caller gets the stored row (server-generated id included) without a second
round trip, and a miss on update/delete is detected from the empty result
rather than a preceding SELECT.

Rows are returned as plain dicts keyed by column name. Nothing is cached.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    engine = create_db_engine(settings.database_url)
    create_tables(engine)
    zakazky = zakazka_store(engine)
    row = zakazky.create({"nazev": "Roof", "cena_bez_dph": 100, ...})
    zakazky.delete(row["id"])
"""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import Column, Date, ForeignKey, Integer, MetaData, Numeric, String, Table, Text
from sqlalchemy.engine import Engine

from core.errors import store_errors

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()


def _money() -> Numeric:
    # Floats in and out; no Decimal round trip through JSON.
    return Numeric(14, 2, asdecimal=False)


zakazky_table = Table(
    "zakazky",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("nazev", String(255)),
    Column("adresa", Text),
    Column("cena_bez_dph", _money()),
    Column("dph", _money()),
    Column("cena_s_dph", _money()),  # not recomputed from cena_bez_dph + dph
    Column("stav", String(50)),
    Column("zisk", _money()),
    Column("stavebni_denik", Text),
)

invoices_table = Table(
    "invoices",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("zakazka_id", Integer, ForeignKey("zakazky.id")),
    Column("invoice_type_id", Integer),
    Column("issue_date", Date),
    Column("due_date", Date),
    Column("amount", _money()),
    Column("payment_method", String(50)),
    Column("status", String(50)),
    Column("description", Text),
)


def create_tables(engine: Engine) -> None:
    """Create the zakazky and invoices tables if they do not exist."""
    with store_errors():
        metadata.create_all(engine)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class RecordStore:
    """Single-table CRUD repository keyed by an integer ``id`` column."""

    def __init__(self, engine: Engine, table: Table) -> None:
        self.engine = engine
        self.table = table

    @property
    def fields(self) -> list[str]:
        """Writable column names, in table order (everything except id)."""
        return [c.name for c in self.table.c if c.name != "id"]

    def _values(self, data: dict[str, Any]) -> dict[str, Any]:
        # Full field set every time: absent keys are written as NULL.
        return {name: data.get(name) for name in self.fields}

    def create(self, data: dict[str, Any]) -> dict[str, Any]:
        """Insert one row and return it with its generated id."""
        stmt = self.table.insert().values(**self._values(data)).returning(*self.table.c)
        with store_errors(), self.engine.begin() as conn:
            row = conn.execute(stmt).one()
        return dict(row._mapping)

    def list_all(self) -> list[dict[str, Any]]:
        """Return every row in store-default order."""
        with store_errors(), self.engine.connect() as conn:
            rows = conn.execute(self.table.select()).fetchall()
        return [dict(r._mapping) for r in rows]

    def get(self, record_id: int) -> Optional[dict[str, Any]]:
        with store_errors(), self.engine.connect() as conn:
            row = conn.execute(self.table.select().where(self.table.c.id == record_id)).first()
        return dict(row._mapping) if row is not None else None

    def update(self, record_id: int, data: dict[str, Any]) -> Optional[dict[str, Any]]:
        """Overwrite every field of the row. Returns None if record_id does not exist."""
        stmt = (
            self.table.update()
            .where(self.table.c.id == record_id)
            .values(**self._values(data))
            .returning(*self.table.c)
        )
        with store_errors(), self.engine.begin() as conn:
            row = conn.execute(stmt).first()
        return dict(row._mapping) if row is not None else None

    def delete(self, record_id: int) -> Optional[dict[str, Any]]:
        """Delete the row and return its prior contents, or None if it did not exist."""
        stmt = self.table.delete().where(self.table.c.id == record_id).returning(*self.table.c)
        with store_errors(), self.engine.begin() as conn:
            row = conn.execute(stmt).first()
        return dict(row._mapping) if row is not None else None


def invoice_store(engine: Engine) -> RecordStore:
    return RecordStore(engine, invoices_table)


def zakazka_store(engine: Engine) -> RecordStore:
    return RecordStore(engine, zakazky_table)
