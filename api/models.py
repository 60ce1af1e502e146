"""
API request and response models for Stockroom REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
catalog/models.py, which own the internal domain representation. Route
handlers map between the two.

Separation of concerns: domain dataclasses = domain truth; api/ models = API contract.
"""

from decimal import Decimal
from typing import Annotated, Any, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

from auth.models import PublicProfile
from catalog.models import Product

# Prices stay Decimal inside the process and go out as JSON numbers, which is
# what the browser client expects. Pydantic's default would emit a string.
JsonPrice = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

# SQLite INTEGER is a signed 64-bit value; larger ids or stock levels cannot be bound.
MAX_INTEGER = 2**63 - 1


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorResponse(BaseModel):
    """Error envelope returned on every 4xx/5xx response: {"error": message}."""

    model_config = ConfigDict(frozen=True)

    error: str
    detail: Optional[Any] = None


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]


# ---------------------------------------------------------------------------
# Auth -- request models
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/auth/register."""

    username: str = Field(min_length=1, max_length=255)
    # bcrypt reads at most 72 bytes; the service enforces the byte limit.
    password: str = Field(min_length=1, max_length=72)
    firstname: Optional[str] = Field(default=None, max_length=255)
    lastname: Optional[str] = Field(default=None, max_length=255)


class LoginRequest(BaseModel):
    """Request body for POST /api/auth/login."""

    username: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=255)


# ---------------------------------------------------------------------------
# Auth -- response models
# ---------------------------------------------------------------------------


class UserProfileResponse(BaseModel):
    """Public view of a user. There is no password field to leak."""

    model_config = ConfigDict(frozen=True)

    id: int
    username: str
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_profile(cls, profile: PublicProfile) -> "UserProfileResponse":
        return cls(
            id=profile.id,
            username=profile.username,
            firstname=profile.firstname,
            lastname=profile.lastname,
            created_at=profile.created_at,
        )


class AuthResponse(BaseModel):
    """{auth, token} -- registration success and login failure share this shape."""

    auth: bool
    token: Optional[str] = None


class LoginResponse(AuthResponse):
    user: UserProfileResponse


class SimilarUsernamesResponse(BaseModel):
    candidate: Optional[str] = None
    groups: list[list[str]]


class MeResponse(BaseModel):
    """Identity decoded from the caller's token. Timestamps are Unix seconds."""

    id: int
    issued_at: int
    expires_at: int


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


class ProductCreate(BaseModel):
    """Request body for POST /api/products."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    stock: int = Field(ge=0, le=MAX_INTEGER)


class StockUpdate(BaseModel):
    """Request body for PATCH /api/products/{id}/stock."""

    stock: int = Field(ge=0, le=MAX_INTEGER)


class ProductResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    price: JsonPrice
    stock: int

    @classmethod
    def from_product(cls, product: Product) -> "ProductResponse":
        return cls(id=product.id, name=product.name, price=product.price, stock=product.stock)


class ProductListMeta(BaseModel):
    """Aggregates computed at read time over the returned rows."""

    count: int
    average_price: Optional[JsonPrice] = None


class ProductListResponse(BaseModel):
    message: str = "success"
    data: list[ProductResponse]
    meta: ProductListMeta


class ProductDetailResponse(BaseModel):
    message: str = "success"
    data: ProductResponse


class SuccessResponse(BaseModel):
    success: bool = True
