"""Product application service.

Validates catalog requests and orchestrates repository calls. Errors
raised by the repository are passed through unchanged.
"""

import math

import structlog

from catalog_api.domain.entities import MAX_STOCK, Product
from catalog_api.domain.exceptions import BadRequestError
from catalog_api.domain.repository import ProductRepository

logger = structlog.get_logger()

DEFAULT_LIMIT = 10
DEFAULT_OFFSET = 0


class ProductService:
    """Application service for the product catalog use cases.

    Holds no state of its own: every read goes to the repository and
    every write is handed to it.
    """

    def __init__(
        self,
        repository: ProductRepository,
        request_id: str | None = None,
    ) -> None:
        """Initialize service.

        Args:
            repository: Product repository.
            request_id: Request ID for correlation.
        """
        self.repository = repository
        self.request_id = request_id

    async def create_product(self, name: str, price: float, stock: int) -> Product:
        """Create a new product.

        Args:
            name: Product name, must not be blank. Stored without surrounding
                whitespace.
            price: Unit price, must be positive.
            stock: Units available, must not be negative.

        Returns:
            The stored product with its generated ID.

        Raises:
            BadRequestError: If any value is invalid.
        """
        _require_name(name)
        _require_price(price)
        _require_stock(stock)

        product = Product.create(name=name.strip(), price=price, stock=stock)
        await self.repository.save(product)

        logger.info(
            "Product created",
            product_id=product.id,
            request_id=self.request_id,
        )
        return product

    async def list_products(
        self,
        limit: int = DEFAULT_LIMIT,
        offset: int = DEFAULT_OFFSET,
    ) -> list[Product]:
        """List one page of products ordered by ID.

        A non-positive limit falls back to the default page size and a
        negative offset to the first page.
        """
        if limit <= 0:
            limit = DEFAULT_LIMIT
        if offset < 0:
            offset = DEFAULT_OFFSET
        return await self.repository.find_all(limit=limit, offset=offset)

    async def get_product(self, product_id: str) -> Product:
        """Get a product by ID.

        Raises:
            BadRequestError: If the ID is empty.
            ProductNotFoundError: If the product does not exist.
        """
        _require_id(product_id)
        return await self.repository.find_by_id(product_id)

    async def update_product(
        self,
        product_id: str,
        name: str,
        price: float,
        stock: int,
    ) -> Product:
        """Overwrite name, price and stock of an existing product.

        Args:
            product_id: ID of the product to update.
            name: New name.
            price: New unit price.
            stock: New stock level.

        Returns:
            The updated product.

        Raises:
            BadRequestError: If any value is invalid.
            ProductNotFoundError: If the product does not exist.
        """
        _require_id(product_id)
        _require_name(name)
        _require_price(price)
        _require_stock(stock)

        updated = await self.repository.update(
            Product(id=product_id, name=name.strip(), price=price, stock=stock)
        )

        logger.info(
            "Product updated",
            product_id=product_id,
            request_id=self.request_id,
        )
        return updated

    async def delete_product(self, product_id: str) -> None:
        """Delete a product.

        Raises:
            BadRequestError: If the ID is empty.
            ProductNotFoundError: If the product does not exist.
        """
        _require_id(product_id)
        await self.repository.find_by_id(product_id)
        await self.repository.delete_by_id(product_id)

        logger.info(
            "Product deleted",
            product_id=product_id,
            request_id=self.request_id,
        )


# ============================================================================
# Validation
# ============================================================================


def _require_id(product_id: str) -> None:
    if not product_id or not product_id.strip():
        raise BadRequestError("product id is required", field="id")


def _require_name(name: str) -> None:
    if not name or not name.strip():
        raise BadRequestError("name must not be empty", field="name")


def _require_price(price: float) -> None:
    if not math.isfinite(price) or price <= 0:
        raise BadRequestError("price must be greater than 0", field="price")


def _require_stock(stock: int) -> None:
    if stock < 0:
        raise BadRequestError("stock must not be negative", field="stock")
    if stock > MAX_STOCK:
        raise BadRequestError(f"stock must not exceed {MAX_STOCK}", field="stock")
