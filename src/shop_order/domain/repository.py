# src/shop_order/domain/repository.py
"""Repository Protocols — interface contracts for the order core's collaborators.

Every mutating call takes the caller's AsyncSession so that all writes of
one unit of work share a single transaction.
"""
from collections.abc import Sequence
from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.shop_order.domain.models import Order, OrderLine


class OrderRepositoryProtocol(Protocol):
    async def create(self, order: Order, db: AsyncSession) -> Order: ...

    async def bulk_create_lines(
        self, order_id: int, lines: Sequence[OrderLine], db: AsyncSession
    ) -> None: ...

    async def get_with_lines(
        self, order_id: int, db: AsyncSession, for_update: bool = False
    ) -> Order | None: ...

    async def update_status(
        self, order_id: int, from_status: str, to_status: str, db: AsyncSession
    ) -> bool: ...

    async def lock_for_delete(self, order_id: int, db: AsyncSession) -> bool: ...

    async def delete_cascade(self, order_id: int, db: AsyncSession) -> None: ...

    async def list_by_user(
        self,
        user_id: str,
        start: datetime | None,
        end: datetime | None,
        limit: int,
        offset: int,
        db: AsyncSession,
    ) -> list[Order]: ...

    async def count_by_user(
        self,
        user_id: str,
        start: datetime | None,
        end: datetime | None,
        db: AsyncSession,
    ) -> int: ...


class UserLookupProtocol(Protocol):
    async def exists(self, user_id: str, db: AsyncSession) -> bool: ...
