"""Application layer module.

Contains the application service (use cases) that validates requests
and orchestrates the repository.
"""

from catalog_api.application.product_service import ProductService

__all__ = [
    "ProductService",
]
