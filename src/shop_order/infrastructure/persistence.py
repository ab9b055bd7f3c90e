# src/shop_order/infrastructure/persistence.py
"""OrderRepository — raw SQL persistence implementation.

asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.
Transaction ownership: the CALLER commits or rolls back the session.
"""
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.shop_order.domain.models import Order, OrderLine

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_INSERT_ORDER_SQL = text("""
    INSERT INTO orders (user_id, status, created_at, updated_at)
    VALUES (CAST(:user_id AS UUID), :status, :created_at, :created_at)
    RETURNING id, created_at, updated_at
""")

_INSERT_LINE_SQL = text("""
    INSERT INTO order_lines (order_id, product_id, quantity, line_total)
    VALUES (:order_id, :product_id, :quantity, :line_total)
""")

_ORDER_COLUMNS = """
    o.id, CAST(o.user_id AS TEXT) AS user_id, o.status, o.created_at, o.updated_at,
    u.name AS buyer_name, u.email AS buyer_email
"""

_ORDER_FROM = "orders o LEFT JOIN users u ON u.id = o.user_id"

_GET_ORDER_SQL = text(f"""
    SELECT {_ORDER_COLUMNS}
    FROM {_ORDER_FROM} WHERE o.id = :id
""")

_GET_ORDER_FOR_UPDATE_SQL = text(f"""
    SELECT {_ORDER_COLUMNS}
    FROM {_ORDER_FROM} WHERE o.id = :id
    FOR UPDATE OF o
""")

_GET_LINES_SQL = text("""
    SELECT l.id, l.order_id, l.product_id, l.quantity, l.line_total,
           p.name AS product_name
    FROM order_lines l
    LEFT JOIN products p ON p.id = l.product_id
    WHERE l.order_id = ANY(:order_ids)
    ORDER BY l.order_id, l.id
""")

_UPDATE_STATUS_SQL = text("""
    UPDATE orders
    SET status = :to_status, updated_at = NOW()
    WHERE id = :id AND status = :from_status
    RETURNING id
""")

_LOCK_ORDER_SQL = text("""
    SELECT id FROM orders WHERE id = :id FOR UPDATE
""")

_DELETE_LINES_SQL = text("""
    DELETE FROM order_lines WHERE order_id = :order_id
""")

_DELETE_ORDER_SQL = text("""
    DELETE FROM orders WHERE id = :id
""")

_USER_FILTER = """
    WHERE o.user_id = CAST(:user_id AS UUID)
      AND (CAST(:start AS TIMESTAMPTZ) IS NULL OR o.created_at >= CAST(:start AS TIMESTAMPTZ))
      AND (CAST(:end AS TIMESTAMPTZ) IS NULL OR o.created_at <= CAST(:end AS TIMESTAMPTZ))
"""

_LIST_ORDERS_SQL = text(f"""
    SELECT {_ORDER_COLUMNS}
    FROM {_ORDER_FROM}
    {_USER_FILTER}
    ORDER BY o.created_at DESC, o.id DESC
    LIMIT :limit OFFSET :offset
""")

_COUNT_ORDERS_SQL = text(f"""
    SELECT COUNT(*) AS total
    FROM orders o
    {_USER_FILTER}
""")


# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_order(row: Any) -> Order:
    return Order(
        id=row.id,
        user_id=str(row.user_id),
        status=row.status,
        created_at=row.created_at,
        updated_at=row.updated_at,
        buyer_name=row.buyer_name,
        buyer_email=row.buyer_email,
    )


def _row_to_line(row: Any) -> OrderLine:
    return OrderLine(
        id=row.id,
        order_id=row.order_id,
        product_id=row.product_id,
        quantity=row.quantity,
        line_total=row.line_total,
        product_name=row.product_name,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class OrderRepository:
    """Concrete implementation of OrderRepositoryProtocol using raw SQL."""

    async def create(self, order: Order, db: AsyncSession) -> Order:
        result = await db.execute(
            _INSERT_ORDER_SQL,
            {
                "user_id": order.user_id,
                "status": order.status,
                "created_at": order.created_at,
            },
        )
        row: Any = result.fetchone()
        order.id = row.id
        order.created_at = row.created_at
        order.updated_at = row.updated_at
        return order

    async def bulk_create_lines(
        self, order_id: int, lines: Sequence[OrderLine], db: AsyncSession
    ) -> None:
        if not lines:
            return
        await db.execute(
            _INSERT_LINE_SQL,
            [
                {
                    "order_id": order_id,
                    "product_id": line.product_id,
                    "quantity": line.quantity,
                    "line_total": line.line_total,
                }
                for line in lines
            ],
        )

    async def get_with_lines(
        self, order_id: int, db: AsyncSession, for_update: bool = False
    ) -> Order | None:
        sql = _GET_ORDER_FOR_UPDATE_SQL if for_update else _GET_ORDER_SQL
        result = await db.execute(sql, {"id": order_id})
        row = result.fetchone()
        if row is None:
            return None
        order = _row_to_order(row)
        await self._attach_lines([order], db)
        return order

    async def update_status(
        self, order_id: int, from_status: str, to_status: str, db: AsyncSession
    ) -> bool:
        result = await db.execute(
            _UPDATE_STATUS_SQL,
            {"id": order_id, "from_status": from_status, "to_status": to_status},
        )
        return result.fetchone() is not None

    async def lock_for_delete(self, order_id: int, db: AsyncSession) -> bool:
        result = await db.execute(_LOCK_ORDER_SQL, {"id": order_id})
        return result.fetchone() is not None

    async def delete_cascade(self, order_id: int, db: AsyncSession) -> None:
        await db.execute(_DELETE_LINES_SQL, {"order_id": order_id})
        await db.execute(_DELETE_ORDER_SQL, {"id": order_id})

    async def list_by_user(
        self,
        user_id: str,
        start: datetime | None,
        end: datetime | None,
        limit: int,
        offset: int,
        db: AsyncSession,
    ) -> list[Order]:
        result = await db.execute(
            _LIST_ORDERS_SQL,
            {
                "user_id": user_id,
                "start": start,
                "end": end,
                "limit": limit,
                "offset": offset,
            },
        )
        orders = [_row_to_order(row) for row in result.fetchall()]
        await self._attach_lines(orders, db)
        return orders

    async def count_by_user(
        self,
        user_id: str,
        start: datetime | None,
        end: datetime | None,
        db: AsyncSession,
    ) -> int:
        result = await db.execute(
            _COUNT_ORDERS_SQL, {"user_id": user_id, "start": start, "end": end}
        )
        return int(result.scalar_one())

    async def _attach_lines(self, orders: list[Order], db: AsyncSession) -> None:
        if not orders:
            return
        by_id = {order.id: order for order in orders}
        result = await db.execute(_GET_LINES_SQL, {"order_ids": list(by_id)})
        for row in result.fetchall():
            by_id[row.order_id].lines.append(_row_to_line(row))
