"""Domain models for the order aggregate and the menu it snapshots."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Iterable


class OrderType(str, Enum):
    DINE_IN = "DINE_IN"
    TAKEAWAY = "TAKEAWAY"
    PRE_ORDER = "PRE_ORDER"


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PAID = "PAID"
    CANCELLED = "CANCELLED"


class PaymentMethod(str, Enum):
    QRIS = "QRIS"
    CASH = "CASH"


@dataclass(frozen=True)
class Category:
    """A menu category."""

    id: str
    name: str


@dataclass(frozen=True)
class MenuItem:
    """A catalog entry; prices are whole rupiah."""

    id: str
    category_id: str
    name: str
    price: int
    description: str = ""
    image: str = ""
    badge: str | None = None
    is_available: bool = True


@dataclass(frozen=True)
class OrderLine:
    """One ordered menu item, with name and price copied at order time."""

    menu_id: str
    name_at_time: str
    price_at_time: int
    quantity: int = 1
    notes: str = ""

    @property
    def subtotal(self) -> int:
        return self.price_at_time * self.quantity


@dataclass
class Order:
    """An order together with its lines."""

    id: str
    customer_name: str
    order_type: OrderType
    status: OrderStatus
    payment_method: PaymentMethod
    total: int
    items: list[OrderLine] = field(default_factory=list)
    created_at: datetime | None = None
    table_number: str | None = None
    event_date: date | None = None

    @property
    def computed_total(self) -> int:
        return sum(line.subtotal for line in self.items)

    @property
    def has_consistent_total(self) -> bool:
        """Whether the stored total still matches the lines."""
        return bool(self.items) and self.total == self.computed_total


def compute_total(lines: Iterable[OrderLine]) -> int:
    """Sum price_at_time * quantity; an empty line set is not an order."""
    lines = list(lines)
    if not lines:
        raise ValueError("An order needs at least one line")
    return sum(line.subtotal for line in lines)


def is_valid(order: Order) -> bool:
    """Check the aggregate invariants that hold from creation onward."""
    if not order.customer_name.strip():
        return False
    if not order.items:
        return False
    if any(line.quantity < 1 for line in order.items):
        return False
    has_event_date = order.event_date is not None
    return has_event_date == (order.order_type is OrderType.PRE_ORDER)
