"""
catalog/models.py -- Domain dataclasses for products.

These are pure data containers with zero logic. Aggregates are computed in
catalog/service.py at read time.

price is a Decimal with two fractional digits. Floats never touch it between
the API contract and the NUMERIC column.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional


@dataclass
class Product:
    """A stocked product. Any authenticated identity may read or change it.

    id is None before the record is written to the database.
    """

    name: str
    price: Decimal
    stock: int
    id: Optional[int] = None


@dataclass
class ProductListing:
    """All products plus aggregates computed from the same read.

    average_price is None when there are no products.
    """

    products: list[Product] = field(default_factory=list)
    count: int = 0
    average_price: Optional[Decimal] = None
