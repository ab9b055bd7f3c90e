"""In-memory stand-ins for the order core's storage collaborators.

FakeDatabase holds the committed state. Each FakeSession is one transaction:
it records an undo entry for every write and holds row locks (one
asyncio.Lock per product / order row) until commit or rollback, which
models PostgreSQL row locking closely enough to exercise concurrent
reservations.
"""

import asyncio
import copy
from collections import defaultdict
from collections.abc import Callable, Sequence
from dataclasses import replace
from datetime import datetime
from typing import Any

import pytest
from sqlalchemy.exc import OperationalError

from src.shop_catalog.domain.models import Product
from src.shop_order.domain.models import Order, OrderLine


class FakeDatabase:
    def __init__(self) -> None:
        self.products: dict[int, Product] = {}
        self.orders: dict[int, Order] = {}
        self.users: set[str] = set()
        self.locks: defaultdict[tuple[str, int], asyncio.Lock] = defaultdict(asyncio.Lock)
        self._next_order_id = 1
        self._next_line_id = 1

    def add_product(self, product_id: int, price: int, stock: int, name: str = "") -> Product:
        product = Product(id=product_id, name=name or f"product-{product_id}", price=price,
                          stock_count=stock)
        self.products[product_id] = product
        return product

    def stock(self, product_id: int) -> int:
        return self.products[product_id].stock_count

    def next_order_id(self) -> int:
        value = self._next_order_id
        self._next_order_id += 1
        return value

    def next_line_id(self) -> int:
        value = self._next_line_id
        self._next_line_id += 1
        return value


class FakeSession:
    def __init__(self, database: FakeDatabase, fail_on: str | None = None) -> None:
        self.database = database
        self.fail_on = fail_on
        self.commits = 0
        self.rollbacks = 0
        self._undo: list[Callable[[], None]] = []
        self._held: list[tuple[str, int]] = []

    async def lock(self, key: tuple[str, int]) -> None:
        if key not in self._held:
            await self.database.locks[key].acquire()
            self._held.append(key)
        # let other transactions run between statements
        await asyncio.sleep(0)

    def record(self, undo: Callable[[], None]) -> None:
        self._undo.append(undo)

    def maybe_fail(self, operation: str) -> None:
        if self.fail_on == operation:
            raise OperationalError(operation, {}, Exception("connection reset"))

    async def commit(self) -> None:
        self.maybe_fail("commit")
        self._undo.clear()
        self.commits += 1
        self._release()

    async def rollback(self) -> None:
        for undo in reversed(self._undo):
            undo()
        self._undo.clear()
        self.rollbacks += 1
        self._release()

    def _release(self) -> None:
        for key in self._held:
            self.database.locks[key].release()
        self._held.clear()


class FakeProductRepository:
    def __init__(self, database: FakeDatabase) -> None:
        self._db = database

    async def get_by_id(self, product_id: int, db: FakeSession) -> Product | None:
        product = self._db.products.get(product_id)
        return replace(product) if product else None

    async def reserve_stock(self, product_id: int, quantity: int, db: FakeSession) -> Product | None:
        db.maybe_fail("reserve_stock")
        if product_id not in self._db.products:
            return None
        await db.lock(("product", product_id))
        product = self._db.products[product_id]
        if product.stock_count < quantity:
            return None
        product.stock_count -= quantity
        db.record(lambda: setattr(product, "stock_count", product.stock_count + quantity))
        return replace(product)

    async def restore_stock(self, product_id: int, quantity: int, db: FakeSession) -> Product | None:
        db.maybe_fail("restore_stock")
        if product_id not in self._db.products:
            return None
        await db.lock(("product", product_id))
        product = self._db.products[product_id]
        product.stock_count += quantity
        db.record(lambda: setattr(product, "stock_count", product.stock_count - quantity))
        return replace(product)


class FakeOrderRepository:
    def __init__(self, database: FakeDatabase) -> None:
        self._db = database

    async def create(self, order: Order, db: FakeSession) -> Order:
        db.maybe_fail("create")
        order.id = self._db.next_order_id()
        order.updated_at = order.created_at
        stored = copy.deepcopy(order)
        self._db.orders[order.id] = stored
        db.record(lambda: self._db.orders.pop(stored.id, None))
        return order

    async def bulk_create_lines(
        self, order_id: int, lines: Sequence[OrderLine], db: FakeSession
    ) -> None:
        db.maybe_fail("bulk_create_lines")
        stored = self._db.orders[order_id]
        previous = list(stored.lines)
        for line in lines:
            stored.lines.append(replace(line, id=self._db.next_line_id(), order_id=order_id))
        db.record(lambda: setattr(stored, "lines", previous))

    async def get_with_lines(
        self, order_id: int, db: FakeSession, for_update: bool = False
    ) -> Order | None:
        if for_update and order_id in self._db.orders:
            await db.lock(("order", order_id))
        order = self._db.orders.get(order_id)
        return copy.deepcopy(order) if order else None

    async def update_status(
        self, order_id: int, from_status: str, to_status: str, db: FakeSession
    ) -> bool:
        db.maybe_fail("update_status")
        order = self._db.orders.get(order_id)
        if order is None or order.status != from_status:
            return False
        order.status = to_status
        db.record(lambda: setattr(order, "status", from_status))
        return True

    async def lock_for_delete(self, order_id: int, db: FakeSession) -> bool:
        if order_id not in self._db.orders:
            return False
        await db.lock(("order", order_id))
        return order_id in self._db.orders

    async def delete_cascade(self, order_id: int, db: FakeSession) -> None:
        db.maybe_fail("delete_cascade")
        removed = self._db.orders.pop(order_id)
        db.record(lambda: self._db.orders.__setitem__(order_id, removed))

    def _for_user(
        self, user_id: str, start: datetime | None, end: datetime | None
    ) -> list[Order]:
        found = [
            o for o in self._db.orders.values()
            if o.user_id == user_id
            and (start is None or (o.created_at is not None and o.created_at >= start))
            and (end is None or (o.created_at is not None and o.created_at <= end))
        ]
        return sorted(found, key=lambda o: (o.created_at, o.id), reverse=True)

    async def list_by_user(
        self,
        user_id: str,
        start: datetime | None,
        end: datetime | None,
        limit: int,
        offset: int,
        db: Any,
    ) -> list[Order]:
        return copy.deepcopy(self._for_user(user_id, start, end)[offset:offset + limit])

    async def count_by_user(
        self, user_id: str, start: datetime | None, end: datetime | None, db: Any
    ) -> int:
        return len(self._for_user(user_id, start, end))


class FakeUserRepository:
    def __init__(self, database: FakeDatabase) -> None:
        self._db = database

    async def exists(self, user_id: str, db: Any) -> bool:
        return user_id in self._db.users


@pytest.fixture
def fake_db() -> FakeDatabase:
    database = FakeDatabase()
    database.users.update({"user-1", "user-2"})
    return database


@pytest.fixture
def fake_repos(fake_db: FakeDatabase) -> dict[str, Any]:
    return {
        "orders": FakeOrderRepository(fake_db),
        "products": FakeProductRepository(fake_db),
        "users": FakeUserRepository(fake_db),
    }


@pytest.fixture
def session_factory(fake_db: FakeDatabase) -> Callable[..., FakeSession]:
    def make(fail_on: str | None = None) -> FakeSession:
        return FakeSession(fake_db, fail_on=fail_on)

    return make
