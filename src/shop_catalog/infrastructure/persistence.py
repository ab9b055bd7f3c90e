# src/shop_catalog/infrastructure/persistence.py
"""ProductRepository — raw SQL persistence implementation.

Stock changes use atomic UPDATE ... RETURNING. A result of 0 rows means the
business constraint was violated (unknown product or stock_count < quantity).

Transaction ownership: the CALLER commits or rolls back the session.
"""
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.shop_catalog.domain.models import Product

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_COLUMNS = "id, name, price, stock_count, created_at, updated_at"

_GET_PRODUCT_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM products WHERE id = :id
""")

_RESERVE_STOCK_SQL = text(f"""
    UPDATE products
    SET stock_count = stock_count - :quantity,
        updated_at = NOW()
    WHERE id = :id AND stock_count >= :quantity
    RETURNING {_COLUMNS}
""")

_RESTORE_STOCK_SQL = text(f"""
    UPDATE products
    SET stock_count = stock_count + :quantity,
        updated_at = NOW()
    WHERE id = :id
    RETURNING {_COLUMNS}
""")


def _row_to_product(row: Any) -> Product:
    return Product(
        id=row.id,
        name=row.name,
        price=row.price,
        stock_count=row.stock_count,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class ProductRepository:
    """Concrete implementation of ProductRepositoryProtocol using raw SQL."""

    async def get_by_id(self, product_id: int, db: AsyncSession) -> Product | None:
        result = await db.execute(_GET_PRODUCT_SQL, {"id": product_id})
        row = result.fetchone()
        return _row_to_product(row) if row else None

    async def reserve_stock(
        self, product_id: int, quantity: int, db: AsyncSession
    ) -> Product | None:
        result = await db.execute(
            _RESERVE_STOCK_SQL, {"id": product_id, "quantity": quantity}
        )
        row = result.fetchone()
        return _row_to_product(row) if row else None

    async def restore_stock(
        self, product_id: int, quantity: int, db: AsyncSession
    ) -> Product | None:
        result = await db.execute(
            _RESTORE_STOCK_SQL, {"id": product_id, "quantity": quantity}
        )
        row = result.fetchone()
        return _row_to_product(row) if row else None
