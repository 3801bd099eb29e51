"""
API request and response models for Stavba REST endpoints.

These Pydantic v2 models define the HTTP transport contract. They coerce
types at the boundary (ISO date or datetime strings -> date, numeric
strings -> float, numbers -> str) but add no other validation: every field
is optional and a missing field reaches the store as NULL, where the
table's own constraints decide.
"""

from datetime import date
from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict

# ---------------------------------------------------------------------------
# Common
# ---------------------------------------------------------------------------


def _date_part(value: Any) -> Any:
    """Keep the calendar date of an ISO datetime string (2024-03-01T10:30:00Z -> 2024-03-01).

    The offset is ignored, the same way a database cast of the string to DATE
    drops it.
    """
    if isinstance(value, str) and len(value) > 10 and value[10] in "Tt ":
        return value[:10]
    return value


LenientDate = Annotated[Optional[date], BeforeValidator(_date_part)]


class MessageResponse(BaseModel):
    """Envelope for every error response and for plain acknowledgements."""

    message: str


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str
    components: dict[str, str]


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class Credentials(BaseModel):
    """Request body for POST /api/register and POST /api/login.

    No format or strength rules. JSON numbers are accepted and stored as text.
    """

    model_config = ConfigDict(coerce_numbers_to_str=True)

    username: str
    password: str


class UserRow(BaseModel):
    """The users row as stored. password is the bcrypt hash, never the plaintext."""

    model_config = ConfigDict(frozen=True)

    id: int
    username: str
    password: str


class RegisterResponse(BaseModel):
    message: str
    user: UserRow


class LoginResponse(BaseModel):
    message: str
    token: str


# ---------------------------------------------------------------------------
# Zakazky (work orders)
# ---------------------------------------------------------------------------


class ZakazkaIn(BaseModel):
    """Request body for POST and PUT /api/zakazky.

    cena_s_dph is stored as given; it is not checked against
    cena_bez_dph and dph.
    """

    model_config = ConfigDict(coerce_numbers_to_str=True)

    nazev: Optional[str] = None
    adresa: Optional[str] = None
    cena_bez_dph: Optional[float] = None
    dph: Optional[float] = None
    cena_s_dph: Optional[float] = None
    stav: Optional[str] = None
    zisk: Optional[float] = None
    stavebni_denik: Optional[str] = None


class ZakazkaOut(ZakazkaIn):
    model_config = ConfigDict(frozen=True)

    id: int


# ---------------------------------------------------------------------------
# Invoices
# ---------------------------------------------------------------------------


class InvoiceIn(BaseModel):
    """Request body for POST and PUT /api/invoices.

    zakazka_id is passed through untouched; whether it must reference an
    existing zakazka is up to the database's foreign key.
    """

    model_config = ConfigDict(coerce_numbers_to_str=True)

    zakazka_id: Optional[int] = None
    invoice_type_id: Optional[int] = None
    issue_date: LenientDate = None
    due_date: LenientDate = None
    amount: Optional[float] = None
    payment_method: Optional[str] = None
    status: Optional[str] = None
    description: Optional[str] = None


class InvoiceOut(InvoiceIn):
    model_config = ConfigDict(frozen=True)

    id: int
