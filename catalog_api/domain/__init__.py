"""Domain layer - Product entity, repository port and error taxonomy.

Example usage:
    from catalog_api.domain import Product

    product = Product.create(name="Widget", price=9.99, stock=3)
"""

from catalog_api.domain.entities import Product
from catalog_api.domain.exceptions import (
    BadRequestError,
    DomainError,
    ProductNotFoundError,
    RepositoryError,
)
from catalog_api.domain.repository import ProductRepository

__all__ = [
    "BadRequestError",
    "DomainError",
    "Product",
    "ProductNotFoundError",
    "ProductRepository",
    "RepositoryError",
]
