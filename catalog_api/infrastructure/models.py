"""SQLAlchemy models for database tables."""

from sqlalchemy import Column, Float, Integer, String

from catalog_api.domain.entities import Product
from catalog_api.infrastructure.database import Base


class ProductModel(Base):
    """Product row in the ``products`` table."""

    __tablename__ = "products"

    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    price = Column(Float, nullable=False)
    stock = Column(Integer, nullable=False)

    def __repr__(self) -> str:
        """String representation."""
        return f"<ProductModel(id={self.id}, name={self.name})>"

    def to_entity(self) -> Product:
        """Convert row to domain entity."""
        return Product(
            id=self.id,
            name=self.name,
            price=self.price,
            stock=self.stock,
        )
