"""Domain entities for the product catalog.

The catalog has a single entity, the Product. Validation of incoming
values belongs to the application service; the entity only carries state.
"""

from dataclasses import dataclass, replace
from uuid import uuid4

# Largest stock a product may hold; matches the 32-bit INTEGER column.
MAX_STOCK = 2**31 - 1


@dataclass
class Product:
    """A product in the catalog.

    Attributes:
        id: Unique product identifier (UUID string), generated on creation.
        name: Display name, never empty once persisted.
        price: Unit price, strictly positive.
        stock: Units available, never negative.
    """

    id: str
    name: str
    price: float
    stock: int

    @classmethod
    def create(cls, name: str, price: float, stock: int) -> "Product":
        """Create a new product with a freshly generated ID.

        Args:
            name: Product name.
            price: Unit price.
            stock: Units available.

        Returns:
            New Product instance.
        """
        return cls(id=str(uuid4()), name=name, price=price, stock=stock)

    def copy(self) -> "Product":
        """Return a detached copy of this product."""
        return replace(self)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "stock": self.stock,
        }
