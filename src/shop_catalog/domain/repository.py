# src/shop_catalog/domain/repository.py
"""ProductRepository Protocol — the catalog surface the order core consumes.

Stock mutations are single conditional UPDATE statements executed on the
caller's session, so they enlist in the caller's transaction and hold the
product row lock until that transaction ends.
"""
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.shop_catalog.domain.models import Product


class ProductRepositoryProtocol(Protocol):
    async def get_by_id(self, product_id: int, db: AsyncSession) -> Product | None: ...

    async def reserve_stock(
        self, product_id: int, quantity: int, db: AsyncSession
    ) -> Product | None:
        """Decrement stock by quantity iff stock_count >= quantity.

        Returns the updated product, or None when the product is missing
        or short on stock.
        """
        ...

    async def restore_stock(
        self, product_id: int, quantity: int, db: AsyncSession
    ) -> Product | None:
        """Increment stock by quantity. Returns None when the product is missing."""
        ...
