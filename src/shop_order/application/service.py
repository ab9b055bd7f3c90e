# src/shop_order/application/service.py
"""OrderApplicationService — transaction boundary for the order core.

Every mutating operation runs its unit of work on the request's session and
ends it with exactly one commit or one rollback. Domain errors propagate
unchanged after rollback; database errors become StorageFailureError, which
callers may retry since nothing was applied.

Reads (get_order, list_orders) run without explicit transaction.
"""
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.shop_catalog.domain.repository import ProductRepositoryProtocol
from src.shop_catalog.infrastructure.persistence import ProductRepository
from src.shop_common.datetime_utils import end_of_day, start_of_day
from src.shop_common.errors import OrderNotFoundError, StorageFailureError
from src.shop_gateway.user.persistence import UserRepository
from src.shop_order.application.schemas import (
    CancelOrderResponse,
    CreateOrderRequest,
    CreateOrderResponse,
    DeleteOrderResponse,
    ListOrdersQuery,
    OrderLineResponse,
    OrderListResponse,
    OrderResponse,
)
from src.shop_order.domain.canceller import OrderCanceller
from src.shop_order.domain.models import LineRequest, Order, OrderLine, OrderPage
from src.shop_order.domain.processor import OrderProcessor
from src.shop_order.domain.repository import OrderRepositoryProtocol, UserLookupProtocol
from src.shop_order.infrastructure.persistence import OrderRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _line_to_response(line: OrderLine) -> OrderLineResponse:
    return OrderLineResponse(
        product_id=line.product_id,
        product_name=line.product_name,
        quantity=line.quantity,
        unit_price=line.unit_price,
        line_total=line.line_total,
    )


def _order_to_response(order: Order) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        user_id=order.user_id,
        buyer_name=order.buyer_name,
        buyer_email=order.buyer_email,
        status=order.status,
        total_price=order.total_price,
        created_at=order.created_at,
        updated_at=order.updated_at,
        lines=[_line_to_response(line) for line in order.lines],
    )


async def _rollback(db: AsyncSession) -> None:
    try:
        await db.rollback()
    except SQLAlchemyError:
        # The session is discarded on close; the original error is what we report.
        logger.exception("rollback failed")


async def run_in_transaction(
    db: AsyncSession, operation: str, work: Callable[[], Awaitable[T]]
) -> T:
    """Run work, then commit; roll back on any failure."""
    try:
        result = await work()
        await db.commit()
    except SQLAlchemyError as exc:
        await _rollback(db)
        logger.exception("%s failed in storage", operation)
        raise StorageFailureError(f"{operation} failed: storage error") from exc
    except Exception:
        await _rollback(db)
        raise
    return result


class OrderApplicationService:
    def __init__(
        self,
        orders: OrderRepositoryProtocol | None = None,
        products: ProductRepositoryProtocol | None = None,
        users: UserLookupProtocol | None = None,
    ) -> None:
        self._orders: OrderRepositoryProtocol = orders or OrderRepository()
        self._products: ProductRepositoryProtocol = products or ProductRepository()
        self._users: UserLookupProtocol = users or UserRepository()
        self._processor = OrderProcessor(self._orders, self._products, self._users)
        self._canceller = OrderCanceller(self._orders, self._products)

    async def create_order(
        self, db: AsyncSession, user_id: str, req: CreateOrderRequest
    ) -> CreateOrderResponse:
        lines = [LineRequest(item.product_id, item.quantity) for item in req.items]
        placed = await run_in_transaction(
            db, "create_order", lambda: self._processor.create_order(user_id, lines, db)
        )
        return CreateOrderResponse(
            order_id=placed.order_id,
            total_price=placed.total_price,
            created_at=placed.created_at,
        )

    async def cancel_order(self, db: AsyncSession, order_id: int) -> CancelOrderResponse:
        order = await run_in_transaction(
            db, "cancel_order", lambda: self._canceller.cancel_order(order_id, db)
        )
        return CancelOrderResponse(
            order_id=order_id,
            status=order.status,
            restored=[_line_to_response(line) for line in order.lines],
        )

    async def delete_order(self, db: AsyncSession, order_id: int) -> DeleteOrderResponse:
        """Purge an order and its lines. Stock is NOT restored; cancel first for that."""

        async def purge() -> None:
            if not await self._orders.lock_for_delete(order_id, db):
                raise OrderNotFoundError(order_id)
            await self._orders.delete_cascade(order_id, db)

        await run_in_transaction(db, "delete_order", purge)
        logger.info("order %s deleted", order_id)
        return DeleteOrderResponse(order_id=order_id)

    async def get_order(self, db: AsyncSession, order_id: int) -> OrderResponse:
        order = await self._orders.get_with_lines(order_id, db)
        if order is None:
            raise OrderNotFoundError(order_id)
        return _order_to_response(order)

    async def list_orders(
        self, db: AsyncSession, user_id: str, query: ListOrdersQuery
    ) -> OrderListResponse:
        start = start_of_day(query.start_date) if query.start_date else None
        end = end_of_day(query.end_date) if query.end_date else None
        try:
            total = await self._orders.count_by_user(user_id, start, end, db)
            orders = await self._orders.list_by_user(
                user_id, start, end, query.limit, (query.page - 1) * query.limit, db
            )
        except SQLAlchemyError as exc:
            logger.exception("list_orders failed in storage")
            raise StorageFailureError("list_orders failed: storage error") from exc

        page = OrderPage(
            items=orders, total_orders=total, current_page=query.page, limit=query.limit
        )
        return OrderListResponse(
            items=[_order_to_response(o) for o in page.items],
            total_orders=page.total_orders,
            total_pages=page.total_pages,
            current_page=page.current_page,
        )
