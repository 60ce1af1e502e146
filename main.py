#!/usr/bin/env python3
"""
Stockroom -- token-authenticated users and products API.

Usage:
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 8080
  python main.py init-db
  python main.py create-user alice --firstname Alice --lastname A

Environment variables:
  SECRET_KEY    Token signing key, at least 32 characters. Required unless DEBUG=true.
  DATABASE_URL  SQLAlchemy URL of the store. Defaults to storage/stockroom.db.
  See core/config.py for the full list.
"""

import argparse
import asyncio
import getpass
import logging
import sys

from auth.passwords import PasswordHasher
from auth.service import IdentityService
from auth.tokens import TokenIssuer
from core.config import get_settings
from core.errors import AppError
from storage.seed import seed_if_empty
from storage.store import CredentialStore


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("asgi:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def _init_db(args: argparse.Namespace) -> int:
    """Create the schema and seed empty tables, then exit."""
    settings = get_settings()
    store = CredentialStore(settings.database_url)
    try:
        result = seed_if_empty(store, PasswordHasher(settings.bcrypt_rounds), settings.admin_password)
    finally:
        store.close()
    print(f"  Database ready at {settings.database_url}")
    print(f"  Admin user created: {'yes' if result.admin_created else 'no (users exist)'}")
    print(f"  Sample products created: {result.products_created}")
    return 0


def _create_user(args: argparse.Namespace) -> int:
    settings = get_settings()
    password = args.password or getpass.getpass("Password: ")
    store = CredentialStore(settings.database_url)
    service = IdentityService(
        store,
        PasswordHasher(settings.bcrypt_rounds),
        TokenIssuer(settings.secret_key, settings.token_expire_seconds),
    )
    try:
        result = asyncio.run(service.register(args.username, password, args.firstname, args.lastname))
    except AppError as exc:
        print(f"  [!] {exc.message}")
        return 1
    finally:
        store.close()
    print(f"  Created user '{args.username}' (id={result.user_id})")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="stockroom",
        description="Token-authenticated users and products API.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  DEBUG=true python main.py serve --reload
  SECRET_KEY=... python main.py serve --host 0.0.0.0
  python main.py init-db
  python main.py create-user alice --firstname Alice --lastname A
        """,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the API with uvicorn")
    serve.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    serve.add_argument("--port", type=int, default=8000, help="Port (default: 8000)")
    serve.add_argument("--reload", action="store_true", help="Reload on code changes (development only)")
    serve.set_defaults(func=_serve)

    init_db = sub.add_parser("init-db", help="Create tables and seed an empty database")
    init_db.set_defaults(func=_init_db)

    create_user = sub.add_parser("create-user", help="Register a user from the command line")
    create_user.add_argument("username")
    create_user.add_argument("--password", help="Password (prompted for when omitted)")
    create_user.add_argument("--firstname")
    create_user.add_argument("--lastname")
    create_user.set_defaults(func=_create_user)

    args = parser.parse_args()
    logging.basicConfig(level=logging.WARNING, format="%(levelname)-5s %(name)s %(message)s")
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
