"""
catalog/service.py -- Product operations behind the authentication gate.

Products have no owner: any authenticated identity may create, read or change
any product. The gate runs before these methods are reached; nothing here
looks at the caller's identity.

Store calls are awaited through run_in_threadpool, same as auth/service.py.

update_stock distinguishes "no such product" (zero rows affected -> NotFound)
from "the store failed" (StorageError). The UPDATE is unconditional, so two
concurrent updates on one product resolve to whichever commits last.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal

from starlette.concurrency import run_in_threadpool

from catalog.models import Product, ProductListing
from core.errors import NotFound, StorageError, ValidationError
from storage.store import CredentialStore

logger = logging.getLogger("stockroom.catalog")

_CENT = Decimal("0.01")

PRODUCT_NOT_FOUND = "Product not found"


class ProductService:
    def __init__(self, store: CredentialStore) -> None:
        self._store = store

    async def create(self, name: str, price: Decimal, stock: int) -> Product:
        if not name:
            raise ValidationError("Product name is required")
        price = Decimal(price)
        if price < 0:
            raise ValidationError("Price must not be negative")
        _require_stock(stock)

        product = Product(name=name, price=price.quantize(_CENT, rounding=ROUND_HALF_UP), stock=stock)
        try:
            product.id = await run_in_threadpool(self._store.insert_product, product)
        except StorageError as exc:
            raise StorageError("Error creating product") from exc
        logger.info("Created product id=%d", product.id)
        return product

    async def get(self, product_id: int) -> Product:
        try:
            product = await run_in_threadpool(self._store.find_product_by_id, product_id)
        except StorageError as exc:
            raise StorageError("Database error") from exc
        if product is None:
            raise NotFound(PRODUCT_NOT_FOUND)
        return product

    async def list_products(self) -> ProductListing:
        """Return every product with count and average price of this read."""
        try:
            products = await run_in_threadpool(self._store.list_products)
        except StorageError as exc:
            raise StorageError("Database error") from exc

        average = None
        if products:
            total = sum((p.price for p in products), Decimal("0"))
            average = (total / len(products)).quantize(_CENT, rounding=ROUND_HALF_UP)
        return ProductListing(products=products, count=len(products), average_price=average)

    async def update_stock(self, product_id: int, stock: int) -> None:
        _require_stock(stock)
        try:
            affected = await run_in_threadpool(self._store.update_product_stock, product_id, stock)
        except StorageError as exc:
            raise StorageError("Failed to update stock") from exc
        if affected == 0:
            raise NotFound(PRODUCT_NOT_FOUND)
        logger.info("Set stock of product id=%d to %d", product_id, stock)


def _require_stock(stock: int) -> None:
    if isinstance(stock, bool) or not isinstance(stock, int) or stock < 0:
        raise ValidationError("Stock must be a non-negative integer")
