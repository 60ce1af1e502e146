"""
api/routes/products.py -- Product CRUD endpoints.

Routes:
  GET   /api/products             -- all products plus count / average price
  POST  /api/products             -- create a product; 201
  GET   /api/products/{id}        -- one product; 404 if absent
  PATCH /api/products/{id}/stock  -- set stock; 404 if absent

Every route sits behind the authentication gate. Products are shared: the
caller's identity is checked for validity only, never for ownership.
"""

from fastapi import APIRouter, Depends, Path, Request

from api.models import (
    MAX_INTEGER,
    ProductCreate,
    ProductDetailResponse,
    ProductListMeta,
    ProductListResponse,
    ProductResponse,
    StockUpdate,
    SuccessResponse,
)
from auth.dependencies import get_current_identity
from catalog.service import ProductService

# Auth policy:
# - all routes: require auth -- router-level dependency, handlers do not repeat it.
router = APIRouter(prefix="/products", dependencies=[Depends(get_current_identity)])


@router.get("", response_model=ProductListResponse)
async def list_products(request: Request) -> ProductListResponse:
    products: ProductService = request.app.state.product_service
    listing = await products.list_products()
    return ProductListResponse(
        data=[ProductResponse.from_product(p) for p in listing.products],
        meta=ProductListMeta(count=listing.count, average_price=listing.average_price),
    )


@router.post("", response_model=ProductResponse, status_code=201)
async def create_product(request: Request, body: ProductCreate) -> ProductResponse:
    products: ProductService = request.app.state.product_service
    product = await products.create(body.name, body.price, body.stock)
    return ProductResponse.from_product(product)


@router.get("/{product_id}", response_model=ProductDetailResponse)
async def get_product(request: Request, product_id: int = Path(le=MAX_INTEGER)) -> ProductDetailResponse:
    products: ProductService = request.app.state.product_service
    product = await products.get(product_id)
    return ProductDetailResponse(data=ProductResponse.from_product(product))


@router.patch("/{product_id}/stock", response_model=SuccessResponse)
async def update_stock(
    request: Request,
    body: StockUpdate,
    product_id: int = Path(le=MAX_INTEGER),
) -> SuccessResponse:
    """Overwrite the stock level. Concurrent updates: the last write wins."""
    products: ProductService = request.app.state.product_service
    await products.update_stock(product_id, body.stock)
    return SuccessResponse()
