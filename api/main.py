"""
api/main.py -- FastAPI application entry point for Stavba.

Run with:      uvicorn asgi:app --reload
               python main.py serve

Middleware stack (outermost to innermost):
  1. CORSMiddleware   -- adds CORS headers for allowed browser origins
  2. log_requests     -- one log line per request with latency

Lifespan builds every shared resource once and places it on app.state:
  engine      -- SQLAlchemy Engine (the bounded connection pool)
  user_store  -- UserStore(engine)
  invoices    -- RecordStore for the invoices table
  zakazky     -- RecordStore for the zakazky table
  tokens      -- TokenService(settings.secret_key)
Routes read them from request.app.state; nothing below this module reads
configuration or builds its own engine.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import HealthResponse
from api.routes.auth import router as auth_router
from api.routes.invoices import router as invoices_router
from api.routes.zakazky import router as zakazky_router
from auth.store import UserStore
from auth.store import create_tables as create_user_tables
from auth.tokens import TokenService
from billing.store import create_tables as create_billing_tables
from billing.store import invoice_store, zakazka_store
from core.config import get_settings
from core.db import create_db_engine, ping

VERSION = "1.0.0"

_settings = get_settings()

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=_settings.log_level.upper(),
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("stavba.api")


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the engine, stores and token service; dispose the pool on shutdown.

    A failed connectivity check is logged but does not stop startup -- the
    first request that needs the database gets a 500 instead, and the pool
    recovers once the database is back.
    """
    settings = get_settings()
    logger.info("Stavba API starting up")
    engine = create_db_engine(settings.database_url, pool_size=settings.db_pool_size, echo=settings.db_echo)
    if ping(engine):
        logger.info("Connected to database %s", engine.url.render_as_string(hide_password=True))
        if settings.db_create_schema:
            create_user_tables(engine)
            create_billing_tables(engine)
    else:
        logger.warning("Database unreachable at startup -- requests will fail until it is available")

    app.state.engine = engine
    app.state.user_store = UserStore(engine)
    app.state.invoices = invoice_store(engine)
    app.state.zakazky = zakazka_store(engine)
    app.state.tokens = TokenService(settings.secret_key)

    yield

    engine.dispose()
    logger.info("Stavba API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Stavba API",
    description="Invoices and work orders (zakazky) behind username/password login.",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api", tags=["Auth"])
app.include_router(invoices_router, prefix="/api", tags=["Invoices"])
app.include_router(zakazky_router, prefix="/api", tags=["Zakazky"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# Every error body is {"message": ...}, the shape clients already parse.
# ---------------------------------------------------------------------------


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 when a value cannot be coerced at all (e.g. a non-integer path id)."""
    return JSONResponse(
        status_code=422,
        content={"message": "Request validation failed.", "detail": jsonable_errors(exc)},
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unexpected server errors.

    The traceback goes to the log only; the client receives a generic message.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "An unexpected error occurred."})


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    # ctx may hold exception instances, which are not JSON serializable.
    return [{"loc": list(err.get("loc", ())), "msg": err.get("msg", "")} for err in exc.errors()]


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------


@app.get("/api/health", tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return liveness and database reachability. Public."""
    db_status = "ok" if ping(request.app.state.engine) else "error"
    return HealthResponse(version=VERSION, components={"app": "ok", "database": db_status})
