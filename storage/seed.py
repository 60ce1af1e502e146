"""
storage/seed.py -- First-run bootstrap for an empty database.

Tables are created by CredentialStore itself (metadata.create_all). This module
fills them: an administrative user when there are no users, and a few sample
products when there are no products. Each table is checked independently, so
a database with users but no products still gets the sample products.

Called once at process start by the api/main.py lifespan (when
SEED_ON_STARTUP=true) and by `python main.py init-db`. Storage errors
propagate -- a database that cannot be seeded should stop startup, not limp on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from auth.models import User
from auth.passwords import PasswordHasher
from catalog.models import Product
from storage.store import CredentialStore

logger = logging.getLogger("stockroom.seed")

ADMIN_USERNAME = "admin"

SAMPLE_PRODUCTS: tuple[Product, ...] = (
    Product(name="Laptop", price=Decimal("999.99"), stock=10),
    Product(name="Smartphone", price=Decimal("499.99"), stock=15),
    Product(name="Headphones", price=Decimal("79.99"), stock=20),
)


@dataclass
class SeedResult:
    admin_created: bool = False
    products_created: int = 0


def seed_if_empty(store: CredentialStore, hasher: PasswordHasher, admin_password: str) -> SeedResult:
    """Insert the admin user and sample products into empty tables."""
    result = SeedResult()

    if store.count_users() == 0:
        store.insert_user(
            User(
                username=ADMIN_USERNAME,
                password_hash=hasher.hash(admin_password),
                firstname="Admin",
                lastname="User",
            )
        )
        result.admin_created = True
        logger.info("Seeded administrative user '%s'", ADMIN_USERNAME)
        if admin_password == "admin":
            logger.warning("Administrative user has the default password. Set ADMIN_PASSWORD before deploying.")

    if store.count_products() == 0:
        for product in SAMPLE_PRODUCTS:
            store.insert_product(Product(name=product.name, price=product.price, stock=product.stock))
        result.products_created = len(SAMPLE_PRODUCTS)
        logger.info("Seeded %d sample products", result.products_created)

    return result
