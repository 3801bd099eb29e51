"""
api/routes/zakazky.py -- Work order CRUD routes (/api/zakazky).

Prices are stored exactly as submitted: cena_s_dph is never derived from
cena_bez_dph and dph.
"""

from api.models import ZakazkaIn, ZakazkaOut
from api.routes.records import Resource, build_router

ZAKAZKY = Resource(
    noun="zakazka",
    plural="zakazky",
    state_attr="zakazky",
    body_model=ZakazkaIn,
    row_model=ZakazkaOut,
)

router = build_router(ZAKAZKY)
