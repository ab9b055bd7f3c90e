"""Integration-test fixtures.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool (created at import time) remains valid across
the entire test session. Requires a PostgreSQL database with migrations
applied (alembic upgrade head); the suite is skipped when none is reachable.
"""

import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, OperationalError

from src.main import app
from src.shop_common.database import async_session_factory, engine


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncGenerator[AsyncClient, None]:  # type: ignore[override]
    """Session-scoped async HTTP client — keeps the engine pool alive."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1 FROM order_lines LIMIT 1"))
    except (OSError, OperationalError, DBAPIError) as exc:
        pytest.skip(f"integration database unavailable: {exc}")
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture(loop_scope="session")
async def new_user(client: AsyncClient) -> str:
    user_id = str(uuid.uuid4())
    async with async_session_factory() as db:
        await db.execute(
            text("INSERT INTO users (id, email, name) VALUES (CAST(:id AS UUID), :email, :name)"),
            {"id": user_id, "email": f"{user_id[:8]}@example.com", "name": "buyer"},
        )
        await db.commit()
    return user_id


@pytest_asyncio.fixture(loop_scope="session")
async def new_product(client: AsyncClient) -> Callable[[int, int], Awaitable[int]]:
    async def create(price: int, stock: int) -> int:
        async with async_session_factory() as db:
            result = await db.execute(
                text(
                    "INSERT INTO products (name, price, stock_count)"
                    " VALUES (:name, :price, :stock) RETURNING id"
                ),
                {"name": f"item-{uuid.uuid4().hex[:6]}", "price": price, "stock": stock},
            )
            product_id = int(result.scalar_one())
            await db.commit()
        return product_id

    return create


async def read_stock(product_id: int) -> int:
    async with async_session_factory() as db:
        result = await db.execute(
            text("SELECT stock_count FROM products WHERE id = :id"), {"id": product_id}
        )
        return int(result.scalar_one())


@pytest.fixture
def stock_of() -> Callable[[int], Awaitable[int]]:
    return read_stock
