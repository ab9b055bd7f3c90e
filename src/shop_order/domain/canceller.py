"""OrderCanceller — reverses a committed order's stock reservation.

Runs on the caller's session; the application service commits or rolls
back. The order row is locked (SELECT ... FOR UPDATE) before its status is
checked, so two concurrent cancels of the same order serialize and the
second one sees CANCEL. The status flip is additionally conditional on
the old status, and every restoration in the call is undone if any step
fails.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.shop_catalog.domain.repository import ProductRepositoryProtocol
from src.shop_common.errors import (
    AlreadyCancelledError,
    OrderNotFoundError,
    ProductNotFoundError,
)
from src.shop_order.domain.models import Order
from src.shop_order.domain.repository import OrderRepositoryProtocol
from src.shop_order.domain.state_machine import cancel_transition

logger = logging.getLogger(__name__)


class OrderCanceller:
    def __init__(
        self,
        orders: OrderRepositoryProtocol,
        products: ProductRepositoryProtocol,
    ) -> None:
        self._orders = orders
        self._products = products

    async def cancel_order(self, order_id: int, db: AsyncSession) -> Order:
        order = await self._orders.get_with_lines(order_id, db, for_update=True)
        if order is None:
            raise OrderNotFoundError(order_id)

        target = cancel_transition(order_id, order.status)

        for index, line in enumerate(order.lines):
            restored = await self._products.restore_stock(line.product_id, line.quantity, db)
            if restored is None:
                raise ProductNotFoundError(line.product_id, line_index=index)

        flipped = await self._orders.update_status(order_id, order.status, target.value, db)
        if not flipped:
            raise AlreadyCancelledError(order_id)

        order.status = target.value
        logger.info(
            "order %s cancelled, restored %d line(s)", order_id, len(order.lines)
        )
        return order
