"""
api/routes/invoices.py -- Invoice CRUD routes (/api/invoices).

Any authenticated user may act on any invoice. zakazka_id is written as
given; the database's foreign key is the only check that it exists.
"""

from api.models import InvoiceIn, InvoiceOut
from api.routes.records import Resource, build_router

INVOICES = Resource(
    noun="invoice",
    plural="invoices",
    state_attr="invoices",
    body_model=InvoiceIn,
    row_model=InvoiceOut,
)

router = build_router(INVOICES)
