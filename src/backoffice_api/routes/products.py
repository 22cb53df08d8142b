"""Product catalogue endpoints.

Reading the catalogue is public; creating, changing and deleting products
requires an admin token.
"""

from fastapi import APIRouter, Depends, Query, Response
from starlette.status import HTTP_201_CREATED, HTTP_204_NO_CONTENT

from backoffice.models import (
    ErrorResponse,
    Product,
    ProductCategory,
    ProductCreate,
    ProductStats,
    ProductUpdate,
)
from backoffice.services.product_service import ProductService
from backoffice_api.dependencies import get_product_service
from backoffice_api.security import require_admin

router = APIRouter(tags=["products"])

NOT_FOUND = {404: {"description": "Product not found", "model": ErrorResponse}}
ADMIN_ONLY = {
    401: {"description": "Bearer token required", "model": ErrorResponse},
    403: {"description": "Admin role required", "model": ErrorResponse},
}


@router.get(
    "/products/stats",
    summary="Product statistics",
    description="Product count, stock and sales per category.",
    response_model=ProductStats,
)
async def product_stats(service: ProductService = Depends(get_product_service)) -> ProductStats:
    return service.product_stats()


@router.post(
    "/products",
    summary="Create product",
    response_model=Product,
    status_code=HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
    responses={400: {"description": "Invalid product", "model": ErrorResponse}, **ADMIN_ONLY},
)
async def create_product(
    body: ProductCreate,
    service: ProductService = Depends(get_product_service),
) -> Product:
    return service.create_product(body)


@router.get("/products", summary="List products", response_model=list[Product])
async def list_products(
    category: ProductCategory | None = Query(default=None),
    featured: bool | None = Query(default=None),
    service: ProductService = Depends(get_product_service),
) -> list[Product]:
    return service.list_products(category=category, featured=featured)


@router.get(
    "/products/{product_id}",
    summary="Get product",
    response_model=Product,
    responses=NOT_FOUND,
)
async def get_product(
    product_id: str,
    service: ProductService = Depends(get_product_service),
) -> Product:
    return service.get_product(product_id)


@router.put(
    "/products/{product_id}",
    summary="Update product",
    description="Fields not sent keep their value; the result is validated as a whole.",
    response_model=Product,
    dependencies=[Depends(require_admin)],
    responses={**NOT_FOUND, **ADMIN_ONLY},
)
async def update_product(
    product_id: str,
    body: ProductUpdate,
    service: ProductService = Depends(get_product_service),
) -> Product:
    return service.update_product(product_id, body)


@router.delete(
    "/products/{product_id}",
    summary="Delete product",
    status_code=HTTP_204_NO_CONTENT,
    response_class=Response,
    dependencies=[Depends(require_admin)],
    responses={**NOT_FOUND, **ADMIN_ONLY},
)
async def delete_product(
    product_id: str,
    service: ProductService = Depends(get_product_service),
) -> Response:
    service.delete_product(product_id)
    return Response(status_code=HTTP_204_NO_CONTENT)
