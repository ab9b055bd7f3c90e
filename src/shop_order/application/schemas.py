# src/shop_order/application/schemas.py
from datetime import date, datetime

from pydantic import BaseModel, Field, model_validator

from config.settings import settings
from src.shop_common.limits import INT4_MAX, MAX_LINE_QUANTITY, MAX_ROW_ID


class OrderLineRequest(BaseModel):
    product_id: int = Field(..., gt=0, le=MAX_ROW_ID)
    quantity: int = Field(..., gt=0, le=MAX_LINE_QUANTITY, strict=True)


class CreateOrderRequest(BaseModel):
    items: list[OrderLineRequest] = Field(..., min_length=1)

    @model_validator(mode="after")
    def within_line_limit(self) -> "CreateOrderRequest":
        if len(self.items) > settings.MAX_ORDER_LINES:
            raise ValueError(f"an order may contain at most {settings.MAX_ORDER_LINES} lines")
        return self


class ListOrdersQuery(BaseModel):
    page: int = Field(1, ge=1, le=INT4_MAX)
    limit: int = Field(10, ge=1, le=settings.ORDER_LIST_MAX_LIMIT)
    start_date: date | None = None
    end_date: date | None = None

    @model_validator(mode="after")
    def ordered_range(self) -> "ListOrdersQuery":
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


class CreateOrderResponse(BaseModel):
    order_id: int
    total_price: int
    created_at: datetime


class OrderLineResponse(BaseModel):
    product_id: int
    product_name: str | None = None
    quantity: int
    unit_price: int
    line_total: int


class OrderResponse(BaseModel):
    id: int
    user_id: str
    buyer_name: str | None = None
    buyer_email: str | None = None
    status: str
    total_price: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
    lines: list[OrderLineResponse]


class CancelOrderResponse(BaseModel):
    order_id: int
    status: str
    restored: list[OrderLineResponse]


class DeleteOrderResponse(BaseModel):
    order_id: int


class OrderListResponse(BaseModel):
    items: list[OrderResponse]
    total_orders: int
    total_pages: int
    current_page: int
