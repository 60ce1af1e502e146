"""
storage/store.py -- SQLAlchemy Core persistence layer for users and products.

Pattern: Repository + Data Mapper. CredentialStore is the repository;
_row_to_user / _row_to_product are the mappers. Services never touch SQL
directly.

One store instance (one Engine) is opened per process by the api/main.py
lifespan and reused for the process lifetime. Methods are synchronous; the
services await them through the threadpool so a request coroutine suspends
at each store call and receives exactly one result or exception.

Failure contract: every SQLAlchemyError -- connection problems, constraint
violations (duplicate username), integers sqlite cannot bind, anything -- is
re-raised as StorageError chained to the original. Nothing is swallowed,
nothing returns a default.

Security:
  All queries use bound parameters. No f-strings in SQL.

Concurrency: no row locking. Two stock updates on the same product both
succeed and the later write wins.

DB path: storage/stockroom.db unless DATABASE_URL says otherwise.

Layer rule: no imports from api/ or any service module.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, MetaData, Numeric, String, Table, Text, create_engine, event, func, select
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from auth.models import User
from catalog.models import Product
from core.errors import StorageError

logger = logging.getLogger("stockroom.store")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(255), nullable=False, unique=True),
    Column("password_hash", Text, nullable=False),
    Column("firstname", String(255)),
    Column("lastname", String(255)),
    Column("created_at", String(32), nullable=False),
    sqlite_autoincrement=True,  # ids are never reused, even after deletes
)

_products = Table(
    "products",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("price", Numeric(10, 2), nullable=False),
    Column("stock", Integer, nullable=False, server_default="0"),
    sqlite_autoincrement=True,
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class CredentialStore:
    """Repository for User and Product records.

    Usage:
        store = CredentialStore("sqlite:///stockroom.db")
        user_id = store.insert_user(User(username="alice", password_hash=hasher.hash("pw")))
        user = store.find_user_by_username("alice")
        store.close()
    """

    def __init__(self, db_url: str, **engine_options) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args, **engine_options)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        try:
            metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            self.engine.dispose()
            raise StorageError("Could not initialise the database") from exc

    @contextmanager
    def _connect(self, operation: str) -> Iterator[Connection]:
        """Yield a connection; translate any SQLAlchemy failure into StorageError.

        sqlite3 raises a bare OverflowError when an integer parameter does not
        fit a 64-bit INTEGER, and SQLAlchemy passes it through unwrapped.
        """
        try:
            with self.engine.connect() as conn:
                yield conn
        except (SQLAlchemyError, OverflowError) as exc:
            logger.error("Store operation %s failed: %s", operation, exc.__class__.__name__)
            raise StorageError(f"Store operation {operation} failed") from exc

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def insert_user(self, user: User) -> int:
        """Insert a new user and return its assigned id.

        A duplicate username violates the UNIQUE constraint and surfaces as
        StorageError like any other write failure.
        """
        with self._connect("insert_user") as conn:
            result = conn.execute(
                _users.insert().values(
                    username=user.username,
                    password_hash=user.password_hash,
                    firstname=user.firstname,
                    lastname=user.lastname,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def find_user_by_username(self, username: str) -> User | None:
        """Look up a user by exact username (case-sensitive). Returns None if not found."""
        with self._connect("find_user_by_username") as conn:
            row = conn.execute(_users.select().where(_users.c.username == username)).fetchone()
        return _row_to_user(row) if row is not None else None

    def list_users(self) -> list[User]:
        """Return all users in insertion order."""
        with self._connect("list_users") as conn:
            rows = conn.execute(_users.select().order_by(_users.c.id)).fetchall()
        return [_row_to_user(r) for r in rows]

    def list_usernames(self) -> list[str]:
        with self._connect("list_usernames") as conn:
            rows = conn.execute(select(_users.c.username).order_by(_users.c.id)).fetchall()
        return [r.username for r in rows]

    def count_users(self) -> int:
        with self._connect("count_users") as conn:
            result = conn.execute(select(func.count()).select_from(_users)).scalar()
        return result or 0

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    def insert_product(self, product: Product) -> int:
        """Insert a new product and return its assigned id."""
        with self._connect("insert_product") as conn:
            result = conn.execute(
                _products.insert().values(name=product.name, price=product.price, stock=product.stock)
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def find_product_by_id(self, product_id: int) -> Product | None:
        with self._connect("find_product_by_id") as conn:
            row = conn.execute(_products.select().where(_products.c.id == product_id)).fetchone()
        return _row_to_product(row) if row is not None else None

    def list_products(self) -> list[Product]:
        with self._connect("list_products") as conn:
            rows = conn.execute(_products.select().order_by(_products.c.id)).fetchall()
        return [_row_to_product(r) for r in rows]

    def count_products(self) -> int:
        with self._connect("count_products") as conn:
            result = conn.execute(select(func.count()).select_from(_products)).scalar()
        return result or 0

    def update_product_stock(self, product_id: int, stock: int) -> int:
        """Set stock on one product. Returns the affected row count (0 or 1).

        Unconditional UPDATE: no version column, last write wins.
        """
        with self._connect("update_product_stock") as conn:
            result = conn.execute(_products.update().where(_products.c.id == product_id).values(stock=stock))
            conn.commit()
        return result.rowcount

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        username=row.username,
        password_hash=row.password_hash,
        firstname=row.firstname,
        lastname=row.lastname,
        created_at=row.created_at,
    )


def _row_to_product(row) -> Product:
    return Product(id=row.id, name=row.name, price=row.price, stock=row.stock)
