"""HTTP-level tests for the order router with the service and auth stubbed out."""
import uuid
from collections.abc import AsyncGenerator, Iterator
from datetime import UTC, datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import AsyncClient

from src.main import app
from src.shop_common.database import get_db_session
from src.shop_common.errors import (
    AlreadyCancelledError,
    InsufficientStockError,
    OrderNotFoundError,
    StorageFailureError,
)
from src.shop_gateway.auth.dependencies import get_current_user
from src.shop_order.api import router as order_router
from src.shop_order.application.schemas import (
    CancelOrderResponse,
    CreateOrderResponse,
    DeleteOrderResponse,
    OrderListResponse,
)

USER_ID = uuid.UUID("0b6c1d52-7f3e-4d0c-9a51-3c0f1f0b2f11")


@pytest.fixture
def service(monkeypatch: pytest.MonkeyPatch) -> AsyncMock:
    svc = AsyncMock()
    monkeypatch.setattr(order_router, "_service", svc)
    return svc


@pytest.fixture(autouse=True)
def _overrides() -> Iterator[None]:
    async def _db() -> AsyncGenerator[MagicMock, None]:
        yield MagicMock()

    app.dependency_overrides[get_current_user] = lambda: SimpleNamespace(id=USER_ID)
    app.dependency_overrides[get_db_session] = _db
    yield
    app.dependency_overrides.clear()


class TestCreateOrder:
    async def test_created(self, client: AsyncClient, service: AsyncMock) -> None:
        service.create_order.return_value = CreateOrderResponse(
            order_id=1, total_price=300, created_at=datetime(2026, 1, 1, tzinfo=UTC)
        )

        resp = await client.post(
            "/api/v1/orders", json={"items": [{"product_id": 1, "quantity": 3}]}
        )

        assert resp.status_code == 201
        body = resp.json()
        assert body["success"] is True
        assert body["data"]["order_id"] == 1
        assert body["data"]["total_price"] == 300
        _, user_id, req = service.create_order.await_args.args
        assert user_id == str(USER_ID)
        assert req.items[0].quantity == 3

    async def test_empty_items_is_bad_request(self, client: AsyncClient, service: AsyncMock) -> None:
        resp = await client.post("/api/v1/orders", json={"items": []})

        assert resp.status_code == 400
        body = resp.json()
        assert body["success"] is False
        assert body["code"] == 4003
        service.create_order.assert_not_awaited()

    async def test_zero_quantity_is_bad_request(self, client: AsyncClient, service: AsyncMock) -> None:
        resp = await client.post(
            "/api/v1/orders", json={"items": [{"product_id": 1, "quantity": 0}]}
        )
        assert resp.status_code == 400

    async def test_quantity_beyond_column_range_is_bad_request(
        self, client: AsyncClient, service: AsyncMock
    ) -> None:
        resp = await client.post(
            "/api/v1/orders", json={"items": [{"product_id": 2**70, "quantity": 3_000_000_000}]}
        )

        assert resp.status_code == 400
        assert resp.json()["code"] == 4003
        service.create_order.assert_not_awaited()

    async def test_insufficient_stock(self, client: AsyncClient, service: AsyncMock) -> None:
        service.create_order.side_effect = InsufficientStockError(1, 8, 7, line_index=0)

        resp = await client.post(
            "/api/v1/orders", json={"items": [{"product_id": 1, "quantity": 8}]}
        )

        assert resp.status_code == 400
        body = resp.json()
        assert body["code"] == 3002
        assert body["data"]["available"] == 7

    async def test_storage_failure(self, client: AsyncClient, service: AsyncMock) -> None:
        service.create_order.side_effect = StorageFailureError()

        resp = await client.post(
            "/api/v1/orders", json={"items": [{"product_id": 1, "quantity": 1}]}
        )

        assert resp.status_code == 500
        assert resp.json()["code"] == 9001


class TestCancelOrder:
    async def test_ok(self, client: AsyncClient, service: AsyncMock) -> None:
        service.cancel_order.return_value = CancelOrderResponse(
            order_id=5, status="CANCEL", restored=[]
        )

        resp = await client.post("/api/v1/orders/5/cancel")

        assert resp.status_code == 200
        assert resp.json()["data"]["status"] == "CANCEL"
        assert service.cancel_order.await_args.args[1] == 5

    async def test_already_cancelled(self, client: AsyncClient, service: AsyncMock) -> None:
        service.cancel_order.side_effect = AlreadyCancelledError(5)

        resp = await client.post("/api/v1/orders/5/cancel")

        assert resp.status_code == 400
        assert resp.json()["data"] == {"error": "AlreadyCancelled"}

    async def test_not_found(self, client: AsyncClient, service: AsyncMock) -> None:
        service.cancel_order.side_effect = OrderNotFoundError(5)

        resp = await client.post("/api/v1/orders/5/cancel")

        assert resp.status_code == 404


class TestDeleteOrder:
    async def test_ok(self, client: AsyncClient, service: AsyncMock) -> None:
        service.delete_order.return_value = DeleteOrderResponse(order_id=5)

        resp = await client.delete("/api/v1/orders/5")

        assert resp.status_code == 200
        assert resp.json()["message"] == "Order deleted"

    async def test_not_found(self, client: AsyncClient, service: AsyncMock) -> None:
        service.delete_order.side_effect = OrderNotFoundError(5)

        resp = await client.delete("/api/v1/orders/5")

        assert resp.status_code == 404
        assert resp.json()["code"] == 4001

    async def test_id_beyond_column_range_is_bad_request(
        self, client: AsyncClient, service: AsyncMock
    ) -> None:
        resp = await client.delete(f"/api/v1/orders/{2**63}")

        assert resp.status_code == 400
        assert resp.json()["code"] == 4003
        service.delete_order.assert_not_awaited()


class TestListOrders:
    async def test_passes_query(self, client: AsyncClient, service: AsyncMock) -> None:
        service.list_orders.return_value = OrderListResponse(
            items=[], total_orders=0, total_pages=0, current_page=2
        )

        resp = await client.get(
            "/api/v1/orders", params={"page": 2, "limit": 5, "start_date": "2026-01-01"}
        )

        assert resp.status_code == 200
        query = service.list_orders.await_args.args[2]
        assert query.page == 2 and query.limit == 5
        assert str(query.start_date) == "2026-01-01"

    async def test_bad_page(self, client: AsyncClient, service: AsyncMock) -> None:
        resp = await client.get("/api/v1/orders", params={"page": 0})
        assert resp.status_code == 400


class TestAuth:
    async def test_missing_token_is_401(self, client: AsyncClient, service: AsyncMock) -> None:
        app.dependency_overrides.pop(get_current_user)

        resp = await client.post("/api/v1/orders/5/cancel")

        assert resp.status_code == 401
        service.cancel_order.assert_not_awaited()


async def test_health(client: AsyncClient) -> None:
    resp = await client.get("/health")

    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
