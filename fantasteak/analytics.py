"""Admin dashboard figures computed from the order projection."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable

from fantasteak.models import Order, OrderStatus

_WEEKDAYS_SHORT = ("Sen", "Sel", "Rab", "Kam", "Jum", "Sab", "Min")


@dataclass(frozen=True)
class DayRevenue:
    day: date
    label: str
    revenue: int


@dataclass
class SalesStats:
    """Revenue from paid orders only."""

    total_revenue: int
    today_revenue: int
    today_count: int
    chart: list[DayRevenue] = field(default_factory=list)
    paid_orders: list[Order] = field(default_factory=list)


def _order_day(order: Order) -> date | None:
    return order.created_at.date() if order.created_at else None


def sales_stats(orders: Iterable[Order], today: date | None = None, days: int = 7) -> SalesStats:
    today = today or date.today()
    paid = [order for order in orders if order.status is OrderStatus.PAID]
    today_orders = [order for order in paid if _order_day(order) == today]

    chart = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        revenue = sum(order.total for order in paid if _order_day(order) == day)
        chart.append(DayRevenue(day, _WEEKDAYS_SHORT[day.weekday()], revenue))

    return SalesStats(
        total_revenue=sum(order.total for order in paid),
        today_revenue=sum(order.total for order in today_orders),
        today_count=len(today_orders),
        chart=chart,
        paid_orders=paid,
    )


def orphaned_orders(orders: Iterable[Order]) -> list[Order]:
    """Orders whose line rows never made it to the store."""
    return [order for order in orders if not order.items]


def drifted_orders(orders: Iterable[Order]) -> list[Order]:
    """Orders whose stored total no longer matches their lines."""
    return [order for order in orders if order.items and not order.has_consistent_total]
