#!/usr/bin/env python3
"""
Stavba -- invoices and work orders (zakazky) behind a JWT-protected API.

Usage:
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 5001 --reload
  python main.py init-db
  python main.py init-db --database-url postgresql+psycopg2://user:pw@host/stavba

Environment variables (or .env):
  SECRET_KEY     JWT signing key, at least 32 characters. Required unless DEBUG=true.
  DATABASE_URL   SQLAlchemy URL. Defaults to a local SQLite file.
  DEBUG          true generates a throwaway SECRET_KEY for local development.
"""

import argparse
import sys
from typing import Optional

from auth.store import create_tables as create_user_tables
from billing.store import create_tables as create_billing_tables
from core.config import get_settings
from core.db import create_db_engine, ping
from core.errors import StoreError


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "asgi:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )
    return 0


def _init_db(args: argparse.Namespace) -> int:
    """Create the users, zakazky and invoices tables. Safe to run repeatedly."""
    url = args.database_url or get_settings().database_url
    engine = create_db_engine(url)
    try:
        if not ping(engine):
            print(f"  [!] Could not connect to {engine.url.render_as_string(hide_password=True)}")
            return 1
        create_user_tables(engine)
        create_billing_tables(engine)
    except StoreError as e:
        print(f"  [!] Could not create tables: {e}")
        return 1
    finally:
        engine.dispose()
    print(f"  Tables ready at {engine.url.render_as_string(hide_password=True)}")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="stavba", description="Stavba invoice and zakazka API")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve.add_argument("--host", default=None, help="Bind address (default: HOST setting)")
    serve.add_argument("--port", type=int, default=None, help="Bind port (default: PORT setting, 5001)")
    serve.add_argument("--reload", action="store_true", help="Restart on code changes (development)")
    serve.set_defaults(func=_serve)

    init_db = sub.add_parser("init-db", help="Create database tables")
    init_db.add_argument("--database-url", default=None, help="Override DATABASE_URL")
    init_db.set_defaults(func=_init_db)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
