"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class OrderStatus(str, Enum):
    ORDER = "ORDER"
    CANCEL = "CANCEL"
