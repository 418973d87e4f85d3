"""Order status transitions and who may trigger them."""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Iterable

from fantasteak.errors import InvalidTransition
from fantasteak.models import Order, OrderStatus

if TYPE_CHECKING:
    from fantasteak.sync import SyncClient

logger = logging.getLogger(__name__)


class Role(str, Enum):
    CUSTOMER = "customer"
    CASHIER = "cashier"
    ADMIN = "admin"


TRANSITIONS: dict[tuple[OrderStatus, OrderStatus], frozenset[Role]] = {
    (OrderStatus.PENDING, OrderStatus.CONFIRMED): frozenset({Role.CASHIER}),
    (OrderStatus.CONFIRMED, OrderStatus.PAID): frozenset({Role.CASHIER}),
    (OrderStatus.PENDING, OrderStatus.CANCELLED): frozenset({Role.CASHIER, Role.ADMIN}),
    (OrderStatus.CONFIRMED, OrderStatus.CANCELLED): frozenset({Role.CASHIER, Role.ADMIN}),
}

TERMINAL_STATUSES = frozenset({OrderStatus.PAID, OrderStatus.CANCELLED})


def can_transition(current: OrderStatus, target: OrderStatus, role: Role) -> bool:
    return role in TRANSITIONS.get((current, target), frozenset())


def check_transition(current: OrderStatus, target: OrderStatus, role: Role) -> None:
    if not can_transition(current, target, role):
        raise InvalidTransition(current.value, target.value, role.value)


def next_status(order: Order) -> OrderStatus | None:
    """The cashier's forward step for this order, if any."""
    if order.status in TERMINAL_STATUSES:
        return None
    if order.status is OrderStatus.PENDING:
        return OrderStatus.CONFIRMED
    if order.status is OrderStatus.CONFIRMED:
        return OrderStatus.PAID
    return None


def is_active(order: Order) -> bool:
    # Cancelled orders stay in the queue; only payment removes an order.
    return order.status is not OrderStatus.PAID


def active_orders(orders: Iterable[Order]) -> list[Order]:
    return [order for order in orders if is_active(order)]


async def apply_transition(sync: SyncClient, order: Order, target: OrderStatus, role: Role) -> None:
    """Check a requested status change, then persist it.

    A rejected request raises ``InvalidTransition`` before anything reaches
    the store, leaving ``order.status`` as it was.
    """
    try:
        check_transition(order.status, target, role)
    except InvalidTransition:
        logger.warning("rejected %s on %s: %s -> %s", role.value, order.id, order.status.value, target.value)
        raise
    await sync.update_status(order.id, target)
