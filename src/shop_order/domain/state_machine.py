"""Order lifecycle state machine.

    ORDER --cancel--> CANCEL

CANCEL is terminal. Deletion is not a transition; it purges the record
whatever its state.
"""
from src.shop_common.enums import OrderStatus
from src.shop_common.errors import AlreadyCancelledError, InternalError

INITIAL_STATUS = OrderStatus.ORDER

_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.ORDER: frozenset({OrderStatus.CANCEL}),
    OrderStatus.CANCEL: frozenset(),
}


def _parse(status: str | OrderStatus) -> OrderStatus:
    try:
        return OrderStatus(status)
    except ValueError:
        raise InternalError(f"Unknown order status: {status}") from None


def can_transition(current: str | OrderStatus, target: str | OrderStatus) -> bool:
    return _parse(target) in _TRANSITIONS[_parse(current)]


def is_terminal(status: str | OrderStatus) -> bool:
    return not _TRANSITIONS[_parse(status)]


def cancel_transition(order_id: int, current: str | OrderStatus) -> OrderStatus:
    """Return the status an order moves to on cancel, or raise if it cannot."""
    if not can_transition(current, OrderStatus.CANCEL):
        raise AlreadyCancelledError(order_id)
    return OrderStatus.CANCEL
