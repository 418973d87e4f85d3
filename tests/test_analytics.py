from dataclasses import replace
from datetime import date, datetime, timezone

from fantasteak.analytics import drifted_orders, orphaned_orders, sales_stats
from fantasteak.models import OrderStatus


def _at(order, day, status=OrderStatus.PAID, **changes):
    return replace(order, status=status, created_at=datetime(2026, 10, day, 12, 0, tzinfo=timezone.utc), **changes)


def test_sales_count_paid_orders_only(budi_order):
    orders = [
        _at(budi_order, 19, id="FT-1"),
        _at(budi_order, 19, id="FT-2", total=35000),
        _at(budi_order, 18, id="FT-3"),
        _at(budi_order, 19, status=OrderStatus.CANCELLED, id="FT-4"),
        _at(budi_order, 19, status=OrderStatus.CONFIRMED, id="FT-5"),
        _at(budi_order, 1, id="FT-6"),
    ]

    stats = sales_stats(orders, today=date(2026, 10, 19))

    assert stats.today_revenue == 970000
    assert stats.today_count == 2
    assert stats.total_revenue == 935000 * 3 + 35000
    assert [order.id for order in stats.paid_orders] == ["FT-1", "FT-2", "FT-3", "FT-6"]


def test_seven_day_chart_ends_today(budi_order):
    stats = sales_stats([_at(budi_order, 18), _at(budi_order, 13)], today=date(2026, 10, 19))

    assert [day.day for day in stats.chart][0] == date(2026, 10, 13)
    assert [day.day for day in stats.chart][-1] == date(2026, 10, 19)
    assert [day.label for day in stats.chart] == ["Sel", "Rab", "Kam", "Jum", "Sab", "Min", "Sen"]
    assert [day.revenue for day in stats.chart] == [935000, 0, 0, 0, 0, 935000, 0]


def test_attention_lists(budi_order):
    orphan = replace(budi_order, id="FT-ORPHAN", items=[])
    drifted = replace(budi_order, id="FT-DRIFT", total=1)
    orders = [budi_order, orphan, drifted]

    assert orphaned_orders(orders) == [orphan]
    assert drifted_orders(orders) == [drifted]
