"""Relational product repository.

Stores products in the ``products`` table through async SQLAlchemy.
Every call opens its own session and transaction and runs under a
fixed timeout so a stalled connection cannot block a request forever.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import structlog
from sqlalchemy import delete, or_, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalog_api.domain.entities import Product
from catalog_api.domain.exceptions import ProductNotFoundError, RepositoryError
from catalog_api.domain.repository import ProductRepository
from catalog_api.infrastructure.models import ProductModel

logger = structlog.get_logger()

T = TypeVar("T")

DEFAULT_TIMEOUT_SECONDS = 3.0

# Dialects with INSERT ... ON CONFLICT support
_UPSERT_INSERTS: dict[str, Callable[..., Any]] = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class SqlProductRepository(ProductRepository):
    """Repository for Product database operations.

    Example usage:
        engine = create_engine(settings.database_url)
        repo = SqlProductRepository(create_session_factory(engine))
        products = await repo.find_all(limit=10, offset=0)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize repository.

        Args:
            session_factory: Factory producing async sessions.
            timeout_seconds: Upper bound for each repository call.
        """
        self.session_factory = session_factory
        self.timeout_seconds = timeout_seconds

    async def save(self, product: Product) -> None:
        """Upsert a product, skipping the write when nothing changed."""

        async def _save() -> None:
            async with self.session_factory() as session, session.begin():
                insert = self._insert_for(session)
                stmt = insert(ProductModel).values(
                    id=product.id,
                    name=product.name,
                    price=product.price,
                    stock=product.stock,
                )
                excluded = stmt.excluded
                stmt = stmt.on_conflict_do_update(
                    index_elements=[ProductModel.id],
                    set_={
                        "name": excluded.name,
                        "price": excluded.price,
                        "stock": excluded.stock,
                    },
                    where=or_(
                        ProductModel.name.is_distinct_from(excluded.name),
                        ProductModel.price.is_distinct_from(excluded.price),
                        ProductModel.stock.is_distinct_from(excluded.stock),
                    ),
                )
                await session.execute(stmt)

        await self._run("save", _save)

    async def find_all(self, limit: int, offset: int) -> list[Product]:
        """List products ordered by ID with LIMIT/OFFSET pagination."""

        async def _find_all() -> list[Product]:
            async with self.session_factory() as session:
                query = (
                    select(ProductModel)
                    .order_by(ProductModel.id.asc())
                    .limit(limit)
                    .offset(offset)
                )
                result = await session.execute(query)
                return [row.to_entity() for row in result.scalars().all()]

        return await self._run("find_all", _find_all)

    async def find_by_id(self, product_id: str) -> Product:
        """Get product by ID."""

        async def _find_by_id() -> Product:
            async with self.session_factory() as session:
                row = await session.get(ProductModel, product_id)
                if row is None:
                    raise ProductNotFoundError(product_id)
                return row.to_entity()

        return await self._run("find_by_id", _find_by_id)

    async def update(self, product: Product) -> Product:
        """Overwrite an existing product in a single UPDATE statement."""

        async def _update() -> Product:
            async with self.session_factory() as session, session.begin():
                result = await session.execute(
                    update(ProductModel)
                    .where(ProductModel.id == product.id)
                    .values(
                        name=product.name,
                        price=product.price,
                        stock=product.stock,
                    )
                )
                if result.rowcount == 0:
                    raise ProductNotFoundError(product.id)
            return product.copy()

        return await self._run("update", _update)

    async def delete_by_id(self, product_id: str) -> None:
        """Delete product by ID."""

        async def _delete() -> None:
            async with self.session_factory() as session, session.begin():
                result = await session.execute(
                    delete(ProductModel).where(ProductModel.id == product_id)
                )
                if result.rowcount == 0:
                    raise ProductNotFoundError(product_id)

        await self._run("delete_by_id", _delete)

    async def _run(self, operation: str, func: Callable[[], Awaitable[T]]) -> T:
        """Run a database call under the timeout, translating driver errors.

        Args:
            operation: Operation name for logs and error messages.
            func: Coroutine function performing the call.

        Returns:
            Whatever the call returns.

        Raises:
            RepositoryError: On timeout or SQLAlchemy failure.
        """
        try:
            return await asyncio.wait_for(func(), timeout=self.timeout_seconds)
        except asyncio.TimeoutError as e:
            logger.error(
                "Database operation timed out",
                operation=operation,
                timeout_seconds=self.timeout_seconds,
            )
            raise RepositoryError(
                f"{operation} timed out after {self.timeout_seconds}s"
            ) from e
        except SQLAlchemyError as e:
            logger.error(
                "Database operation failed",
                operation=operation,
                error=str(e),
            )
            raise RepositoryError(f"{operation} failed: {e}") from e

    @staticmethod
    def _insert_for(session: AsyncSession) -> Callable[..., Any]:
        """Get the dialect insert construct supporting ON CONFLICT."""
        dialect = session.bind.dialect.name
        try:
            return _UPSERT_INSERTS[dialect]
        except KeyError:
            raise RepositoryError(f"Upsert not supported for dialect '{dialect}'") from None
