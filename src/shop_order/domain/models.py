"""Order domain model — pure dataclasses, no SQLAlchemy dependency."""
from dataclasses import dataclass, field
from datetime import datetime

from src.shop_common.enums import OrderStatus


@dataclass(frozen=True)
class LineRequest:
    """One (product, quantity) pair as requested by the buyer."""

    product_id: int
    quantity: int


@dataclass
class OrderLine:
    product_id: int
    quantity: int
    # price x quantity captured at order time; never re-derived from the catalog
    line_total: int
    id: int | None = None
    order_id: int | None = None
    product_name: str | None = None

    @property
    def unit_price(self) -> int:
        return self.line_total // self.quantity


@dataclass
class Order:
    user_id: str
    status: str = OrderStatus.ORDER.value
    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    buyer_name: str | None = None
    buyer_email: str | None = None
    lines: list[OrderLine] = field(default_factory=list)

    @property
    def total_price(self) -> int:
        return sum(line.line_total for line in self.lines)


@dataclass(frozen=True)
class PlacedOrder:
    order_id: int
    total_price: int
    created_at: datetime
    lines: tuple[OrderLine, ...]


@dataclass(frozen=True)
class OrderPage:
    items: list[Order]
    total_orders: int
    current_page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return -(-self.total_orders // self.limit) if self.limit else 0
