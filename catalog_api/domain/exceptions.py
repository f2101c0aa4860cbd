"""Domain exceptions.

Error taxonomy shared by the application service, the repositories and
the HTTP adapter:

- BadRequestError: input is malformed or breaks a validation rule
- ProductNotFoundError: no product exists for the given ID
- RepositoryError: the storage layer failed or timed out
"""

from typing import Any


class DomainError(Exception):
    """Base class for all catalog errors.

    All catalog errors inherit from this class so the HTTP layer can
    translate them in one place.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class BadRequestError(DomainError):
    """Raised when input fails validation."""

    def __init__(self, message: str = "bad request", field: str | None = None) -> None:
        """Initialize bad request error.

        Args:
            message: Explanation of the violated rule.
            field: Name of the offending field, if any.
        """
        super().__init__(message, details={"field": field} if field else None)
        self.field = field


class ProductNotFoundError(DomainError):
    """Raised when a product ID has no stored record."""

    def __init__(self, product_id: str) -> None:
        """Initialize product not found error.

        Args:
            product_id: The ID that was looked up.
        """
        super().__init__(
            f"product with id {product_id} not found",
            details={"product_id": product_id},
        )
        self.product_id = product_id


class RepositoryError(DomainError):
    """Raised when the storage layer fails.

    Covers connectivity faults, driver errors and operation timeouts.
    The message is logged server-side and never returned to clients.
    """

    pass
