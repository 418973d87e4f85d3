"""Mapping between store rows and the order aggregate.

Reading is total: any row the store hands back, however partial, maps to
an ``Order`` without raising. Every default applied is listed here:

====================  =====================
field                 default
====================  =====================
``customer_name``     ``"Pelanggan"``
``order_type``        ``DINE_IN``
``status``            ``PENDING``
``payment_method``    ``CASH``
``total``             ``0``
``created_at``        ``None``
``table_number``      ``None``
``event_date``        ``None``
line ``name_at_time`` ``"Item"``
line ``price``        ``0``
line ``quantity``     ``1``
line ``notes``        ``""``
====================  =====================
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping, TypeVar

from fantasteak.data import PLACEHOLDER_CUSTOMER, PLACEHOLDER_ITEM
from fantasteak.models import Order, OrderLine, OrderStatus, OrderType, PaymentMethod

_E = TypeVar("_E", bound=Enum)


def _text(value: Any, default: str) -> str:
    if value is None:
        return default
    text = str(value)
    return text if text.strip() else default


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _number(value: Any, default: int = 0) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default


def _enum(enum_cls: type[_E], value: Any, default: _E) -> _E:
    try:
        return enum_cls(value)
    except (TypeError, ValueError):
        return default


def _timestamp(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def raw_row_to_line(row: Any) -> OrderLine:
    """Map an ``order_items`` row to an ``OrderLine``."""
    if not isinstance(row, Mapping):
        row = {}
    quantity = _number(row.get("quantity"), 1)
    return OrderLine(
        menu_id=_text(row.get("menu_id"), ""),
        name_at_time=_text(row.get("name_at_time"), PLACEHOLDER_ITEM),
        price_at_time=_number(row.get("price_at_time")),
        quantity=quantity if quantity >= 1 else 1,
        notes=_text(row.get("notes"), ""),
    )


def raw_row_to_order(row: Any) -> Order:
    """Map an ``orders`` row joined with its ``order_items`` to an ``Order``."""
    if not isinstance(row, Mapping):
        row = {}
    raw_items = row.get("order_items")
    if not isinstance(raw_items, (list, tuple)):
        raw_items = []
    return Order(
        id=_text(row.get("id"), ""),
        customer_name=_text(row.get("customer_name"), PLACEHOLDER_CUSTOMER),
        order_type=_enum(OrderType, row.get("order_type"), OrderType.DINE_IN),
        status=_enum(OrderStatus, row.get("status"), OrderStatus.PENDING),
        payment_method=_enum(PaymentMethod, row.get("payment_method"), PaymentMethod.CASH),
        total=_number(row.get("total")),
        items=[raw_row_to_line(item) for item in raw_items],
        created_at=_timestamp(row.get("created_at")),
        table_number=_optional_text(row.get("table_number")),
        event_date=_date(row.get("event_date")),
    )


def order_to_rows(order: Order) -> tuple[dict[str, Any], list[dict[str, Any]]]:
    """Split an aggregate into its ``orders`` row and ``order_items`` rows."""
    order_row = {
        "id": order.id,
        "customer_name": order.customer_name,
        "order_type": order.order_type.value,
        "table_number": order.table_number or None,
        "event_date": order.event_date.isoformat() if order.event_date else None,
        "status": order.status.value,
        "payment_method": order.payment_method.value,
        "total": order.total,
    }
    if order.created_at is not None:
        order_row["created_at"] = order.created_at.isoformat()
    item_rows = [
        {
            "order_id": order.id,
            "menu_id": line.menu_id,
            "quantity": line.quantity,
            "price_at_time": line.price_at_time,
            "name_at_time": line.name_at_time,
            "notes": line.notes or "",
        }
        for line in order.items
    ]
    return order_row, item_rows
