"""API schemas for the product catalog.

Pydantic models for request/response validation and serialization.
Missing body fields default to their zero value so the application
service, not the decoder, decides what is invalid.
"""

from pydantic import BaseModel, ConfigDict, Field

from catalog_api.domain.entities import Product


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: str | None = Field(default=None, description="Field that caused the error")
    message: str = Field(..., description="Error message")


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: list[ErrorDetail] = Field(
        default_factory=list, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


# ============================================================================
# Product Schemas
# ============================================================================


class ProductCreateRequest(BaseModel):
    """Request to create a product."""

    name: str = Field(default="", description="Product name")
    price: float = Field(default=0, description="Unit price, must be positive")
    stock: int = Field(default=0, description="Units available")


class ProductUpdateRequest(BaseModel):
    """Request to update a product.

    ``idProduct`` is optional; the ID in the path is authoritative and a
    differing body ID is rejected.
    """

    model_config = ConfigDict(populate_by_name=True)

    id_product: str | None = Field(
        default=None,
        alias="idProduct",
        description="Optional product ID, must match the path",
    )
    name: str = Field(default="", description="New product name")
    price: float = Field(default=0, description="New unit price")
    stock: int = Field(default=0, description="New stock level")


class ProductResponse(BaseModel):
    """Product representation."""

    id: str = Field(..., description="Product ID")
    name: str = Field(..., description="Product name")
    price: float = Field(..., description="Unit price")
    stock: int = Field(..., description="Units available")

    @classmethod
    def from_entity(cls, product: Product) -> "ProductResponse":
        """Convert Product entity to response schema."""
        return cls(
            id=product.id,
            name=product.name,
            price=product.price,
            stock=product.stock,
        )
