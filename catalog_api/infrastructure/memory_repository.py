"""In-memory product repository.

Keeps products in a dict owned by the repository instance. Suitable for
local development and tests; nothing survives a restart.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from catalog_api.domain.entities import Product
from catalog_api.domain.exceptions import ProductNotFoundError
from catalog_api.domain.repository import ProductRepository


class ReadWriteLock:
    """Asyncio reader/writer lock.

    Any number of readers may hold the lock together; a writer holds it
    alone. Waiting writers block new readers so writes are not starved.
    """

    def __init__(self) -> None:
        self._condition = asyncio.Condition()
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @asynccontextmanager
    async def read(self) -> AsyncIterator[None]:
        """Hold the lock in shared mode."""
        async with self._condition:
            await self._condition.wait_for(
                lambda: not self._writer and self._waiting_writers == 0
            )
            self._readers += 1
        try:
            yield
        finally:
            async with self._condition:
                self._readers -= 1
                if self._readers == 0:
                    self._condition.notify_all()

    @asynccontextmanager
    async def write(self) -> AsyncIterator[None]:
        """Hold the lock in exclusive mode."""
        async with self._condition:
            self._waiting_writers += 1
            try:
                await self._condition.wait_for(
                    lambda: not self._writer and self._readers == 0
                )
            finally:
                self._waiting_writers -= 1
            self._writer = True
        try:
            yield
        finally:
            async with self._condition:
                self._writer = False
                self._condition.notify_all()


class InMemoryProductRepository(ProductRepository):
    """Dict-backed product repository.

    Products are copied on the way in and on the way out, so callers
    never hold a reference into the store.

    Example usage:
        repo = InMemoryProductRepository()
        await repo.save(Product.create("Widget", 9.99, 3))
        page = await repo.find_all(limit=10, offset=0)
    """

    def __init__(self) -> None:
        self._products: dict[str, Product] = {}
        self._lock = ReadWriteLock()

    async def save(self, product: Product) -> None:
        """Save a product."""
        async with self._lock.write():
            self._products[product.id] = product.copy()

    async def find_all(self, limit: int, offset: int) -> list[Product]:
        """List products ordered by ID with pagination."""
        async with self._lock.read():
            ordered = sorted(self._products.values(), key=lambda p: p.id)
            start = max(offset, 0)
            end = start + max(limit, 0)
            return [p.copy() for p in ordered[start:end]]

    async def find_by_id(self, product_id: str) -> Product:
        """Get product by ID."""
        async with self._lock.read():
            product = self._products.get(product_id)
            if product is None:
                raise ProductNotFoundError(product_id)
            return product.copy()

    async def update(self, product: Product) -> Product:
        """Overwrite an existing product under the write lock."""
        async with self._lock.write():
            if product.id not in self._products:
                raise ProductNotFoundError(product.id)
            self._products[product.id] = product.copy()
            return product.copy()

    async def delete_by_id(self, product_id: str) -> None:
        """Delete product by ID."""
        async with self._lock.write():
            if product_id not in self._products:
                raise ProductNotFoundError(product_id)
            del self._products[product_id]

    def __len__(self) -> int:
        return len(self._products)
