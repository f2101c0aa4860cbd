"""Product API endpoints.

Provides the CRUD endpoints of the product catalog.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response, status

from catalog_api.api.schemas import (
    ErrorResponse,
    ProductCreateRequest,
    ProductResponse,
    ProductUpdateRequest,
)
from catalog_api.application.product_service import (
    DEFAULT_LIMIT,
    DEFAULT_OFFSET,
    ProductService,
)
from catalog_api.domain.exceptions import BadRequestError

router = APIRouter(prefix="/products", tags=["Products"])


# ============================================================================
# Dependencies
# ============================================================================


def get_service(request: Request) -> ProductService:
    """Get product service bound to the app repository and request ID."""
    request_id = getattr(request.state, "request_id", None)
    return ProductService(request.app.state.repository, request_id=request_id)


def _parse_int(value: str | None, default: int) -> int:
    """Parse a query value, falling back to the default when unparsable."""
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "",
    response_model=list[ProductResponse],
    responses={500: {"model": ErrorResponse}},
    summary="List products",
    description="List products ordered by ID, paginated with limit/offset.",
)
@router.get("/", response_model=list[ProductResponse], include_in_schema=False)
async def list_products(
    service: Annotated[ProductService, Depends(get_service)],
    limit: Annotated[str | None, Query()] = None,
    offset: Annotated[str | None, Query()] = None,
) -> list[ProductResponse]:
    """List products.

    Unparsable ``limit``/``offset`` values are ignored in favor of the
    defaults (10 and 0).

    Args:
        service: Product service.
        limit: Page size.
        offset: Number of products to skip.

    Returns:
        Page of products.
    """
    products = await service.list_products(
        limit=_parse_int(limit, DEFAULT_LIMIT),
        offset=_parse_int(offset, DEFAULT_OFFSET),
    )
    return [ProductResponse.from_entity(p) for p in products]


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
    summary="Create product",
)
@router.post(
    "/",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    include_in_schema=False,
)
async def create_product(
    payload: ProductCreateRequest,
    service: Annotated[ProductService, Depends(get_service)],
) -> ProductResponse:
    """Create a product.

    Args:
        payload: Product data.
        service: Product service.

    Returns:
        Created product with its generated ID.
    """
    product = await service.create_product(
        name=payload.name,
        price=payload.price,
        stock=payload.stock,
    )
    return ProductResponse.from_entity(product)


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Get product",
)
async def get_product(
    product_id: str,
    service: Annotated[ProductService, Depends(get_service)],
) -> ProductResponse:
    """Get a product by ID."""
    product = await service.get_product(product_id)
    return ProductResponse.from_entity(product)


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Update product",
    description="Overwrite name, price and stock. The path ID is authoritative.",
)
async def update_product(
    product_id: str,
    payload: ProductUpdateRequest,
    service: Annotated[ProductService, Depends(get_service)],
) -> ProductResponse:
    """Update a product.

    Args:
        product_id: Product ID from the path.
        payload: New product values.
        service: Product service.

    Returns:
        Updated product.

    Raises:
        BadRequestError: If the body carries a different product ID.
    """
    if payload.id_product and payload.id_product != product_id:
        raise BadRequestError(
            "product id in body does not match path",
            field="idProduct",
        )

    product = await service.update_product(
        product_id,
        name=payload.name,
        price=payload.price,
        stock=payload.stock,
    )
    return ProductResponse.from_entity(product)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"model": ErrorResponse}},
    summary="Delete product",
)
async def delete_product(
    product_id: str,
    service: Annotated[ProductService, Depends(get_service)],
) -> Response:
    """Delete a product."""
    await service.delete_product(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
