"""OrderProcessor — reserves stock for every requested line and records the order.

Runs on the caller's session and never commits: the application service
owns the transaction boundary and rolls back on any error raised here, so
a rejected request leaves no order, no lines and no stock decrement behind.

Stock is reserved with a conditional decrement (see ProductRepository), so
the read that validates stock and the write that consumes it are a single
statement holding the product row lock until commit/rollback. Lines are
processed in request order.
"""
import logging
from collections.abc import Sequence
from typing import NoReturn

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.shop_catalog.domain.repository import ProductRepositoryProtocol
from src.shop_common.datetime_utils import utc_now
from src.shop_common.errors import (
    InsufficientStockError,
    InvalidInputError,
    ProductNotFoundError,
    UserNotFoundError,
)
from src.shop_common.limits import MAX_AMOUNT, MAX_LINE_QUANTITY, MAX_ROW_ID
from src.shop_order.domain.models import LineRequest, Order, OrderLine, PlacedOrder
from src.shop_order.domain.repository import OrderRepositoryProtocol, UserLookupProtocol
from src.shop_order.domain.state_machine import INITIAL_STATUS

logger = logging.getLogger(__name__)


def validate_lines(lines: Sequence[LineRequest], max_lines: int) -> None:
    if not lines:
        raise InvalidInputError("order must contain at least one line")
    if len(lines) > max_lines:
        raise InvalidInputError(f"order may contain at most {max_lines} lines")
    for index, line in enumerate(lines):
        # bool is an int subclass; reject it explicitly
        if not isinstance(line.quantity, int) or isinstance(line.quantity, bool):
            raise InvalidInputError(f"line {index}: quantity must be an integer")
        if line.quantity <= 0:
            raise InvalidInputError(f"line {index}: quantity must be positive")
        if line.quantity > MAX_LINE_QUANTITY:
            raise InvalidInputError(f"line {index}: quantity must not exceed {MAX_LINE_QUANTITY}")
        if not 0 < line.product_id <= MAX_ROW_ID:
            raise InvalidInputError(f"line {index}: product_id out of range")


class OrderProcessor:
    def __init__(
        self,
        orders: OrderRepositoryProtocol,
        products: ProductRepositoryProtocol,
        users: UserLookupProtocol,
        max_lines: int | None = None,
    ) -> None:
        self._orders = orders
        self._products = products
        self._users = users
        self._max_lines = max_lines or settings.MAX_ORDER_LINES

    async def create_order(
        self, user_id: str, lines: Sequence[LineRequest], db: AsyncSession
    ) -> PlacedOrder:
        validate_lines(lines, self._max_lines)

        if not await self._users.exists(user_id, db):
            raise UserNotFoundError(user_id)

        order_lines: list[OrderLine] = []
        total_price = 0
        for index, requested in enumerate(lines):
            product = await self._products.reserve_stock(
                requested.product_id, requested.quantity, db
            )
            if product is None:
                await self._raise_reservation_failure(index, requested, db)

            line_total = product.price * requested.quantity
            if line_total > MAX_AMOUNT:
                raise InvalidInputError(f"line {index}: line total out of range")
            total_price += line_total
            order_lines.append(
                OrderLine(
                    product_id=product.id,
                    quantity=requested.quantity,
                    line_total=line_total,
                    product_name=product.name,
                )
            )

        order = await self._orders.create(
            Order(user_id=user_id, status=INITIAL_STATUS.value, created_at=utc_now()),
            db,
        )
        for line in order_lines:
            line.order_id = order.id
        await self._orders.bulk_create_lines(order.id, order_lines, db)

        logger.info(
            "order %s reserved %d line(s) for user %s, total=%d",
            order.id,
            len(order_lines),
            user_id,
            total_price,
        )
        return PlacedOrder(
            order_id=order.id,
            total_price=total_price,
            created_at=order.created_at or utc_now(),
            lines=tuple(order_lines),
        )

    async def _raise_reservation_failure(
        self, index: int, requested: LineRequest, db: AsyncSession
    ) -> NoReturn:
        """Explain why the conditional decrement matched no row.

        The follow-up read takes no lock, so a concurrent cancel may already
        have restored enough stock; the count is only reported while it is
        still short.
        """
        product = await self._products.get_by_id(requested.product_id, db)
        if product is None:
            logger.warning("order rejected: line %d unknown product %s", index, requested.product_id)
            raise ProductNotFoundError(requested.product_id, line_index=index)
        available = product.stock_count if product.stock_count < requested.quantity else None
        logger.warning(
            "order rejected: line %d product %s short on stock (requested %d, available %s)",
            index,
            requested.product_id,
            requested.quantity,
            "changed" if available is None else available,
        )
        raise InsufficientStockError(
            requested.product_id,
            requested=requested.quantity,
            available=available,
            line_index=index,
        )
