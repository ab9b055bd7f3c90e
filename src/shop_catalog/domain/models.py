"""Catalog domain model — pure dataclass, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Product:
    id: int
    name: str
    price: int  # unit price, smallest currency unit
    stock_count: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
