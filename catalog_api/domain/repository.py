"""Repository port for product persistence.

Both storage adapters (in-memory and relational) implement this
interface; the application service depends only on it.
"""

from abc import ABC, abstractmethod

from catalog_api.domain.entities import Product


class ProductRepository(ABC):
    """Persistence contract for products.

    Implementations must:
    - order ``find_all`` results by product ID ascending
    - raise ProductNotFoundError for unknown IDs on lookup, update and delete
    - raise RepositoryError for any storage fault
    """

    @abstractmethod
    async def save(self, product: Product) -> None:
        """Insert the product or overwrite the one with the same ID.

        Args:
            product: Product to store.

        Raises:
            RepositoryError: On storage failure.
        """

    @abstractmethod
    async def find_all(self, limit: int, offset: int) -> list[Product]:
        """Return one page of products ordered by ID.

        Args:
            limit: Maximum number of products.
            offset: Number of products to skip.

        Returns:
            Products in the page, empty when none match.
        """

    @abstractmethod
    async def find_by_id(self, product_id: str) -> Product:
        """Get a product by ID.

        Args:
            product_id: Product ID.

        Returns:
            The stored product.

        Raises:
            ProductNotFoundError: If no product has this ID.
        """

    @abstractmethod
    async def update(self, product: Product) -> Product:
        """Overwrite name, price and stock of an existing product.

        The existence check and the write are a single atomic step.

        Args:
            product: Product carrying the ID and the new values.

        Returns:
            The product as stored after the update.

        Raises:
            ProductNotFoundError: If no product has this ID.
        """

    @abstractmethod
    async def delete_by_id(self, product_id: str) -> None:
        """Delete a product by ID.

        Args:
            product_id: Product ID.

        Raises:
            ProductNotFoundError: If no product has this ID.
        """
