# src/shop_order/api/router.py
"""Order REST API — all endpoints require JWT authentication."""
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.shop_common.database import get_db_session
from src.shop_common.limits import MAX_ROW_ID
from src.shop_common.response import ApiResponse, success_response
from src.shop_gateway.auth.dependencies import get_current_user
from src.shop_gateway.user.db_models import UserModel
from src.shop_order.application.schemas import CreateOrderRequest, ListOrdersQuery
from src.shop_order.application.service import OrderApplicationService

router = APIRouter(prefix="/orders", tags=["orders"])

_service = OrderApplicationService()

OrderId = Annotated[int, Path(gt=0, le=MAX_ROW_ID)]


def _respond(request: Request, data: object, message: str) -> ApiResponse:
    resp = success_response(data, message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("", status_code=201)
async def create_order(
    body: CreateOrderRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.create_order(db, str(current_user.id), body)
    return _respond(request, data.model_dump(mode="json"), "Order created")


@router.get("")
async def list_orders(
    query: Annotated[ListOrdersQuery, Query()],
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.list_orders(db, str(current_user.id), query)
    return _respond(request, data.model_dump(mode="json"), "success")


@router.get("/{order_id}")
async def get_order(
    order_id: OrderId,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_order(db, order_id)
    return _respond(request, data.model_dump(mode="json"), "success")


@router.post("/{order_id}/cancel")
async def cancel_order(
    order_id: OrderId,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.cancel_order(db, order_id)
    return _respond(request, data.model_dump(mode="json"), "Order cancelled")


@router.delete("/{order_id}")
async def delete_order(
    order_id: OrderId,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.delete_order(db, order_id)
    return _respond(request, data.model_dump(mode="json"), "Order deleted")
