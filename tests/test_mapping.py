from datetime import date

import pytest

from fantasteak.mapping import order_to_rows, raw_row_to_order
from fantasteak.models import OrderStatus, OrderType, PaymentMethod, compute_total


def test_missing_name_and_status_get_defaults():
    order = raw_row_to_order({"id": "FT-1", "total": 35000, "order_items": []})

    assert order.customer_name == "Pelanggan"
    assert order.status is OrderStatus.PENDING
    assert order.order_type is OrderType.DINE_IN
    assert order.payment_method is PaymentMethod.CASH


@pytest.mark.parametrize(
    "row",
    [
        None,
        {},
        "not a row",
        {"total": "abc", "order_items": "broken"},
        {"status": "SHIPPED", "order_type": 7, "payment_method": ["x"]},
        {"created_at": "yesterday", "event_date": "soon", "order_items": [None, {"quantity": 0}]},
    ],
)
def test_malformed_rows_never_raise(row):
    order = raw_row_to_order(row)

    assert order.status is OrderStatus.PENDING
    assert order.total >= 0
    assert all(line.quantity >= 1 for line in order.items)


def test_line_defaults():
    order = raw_row_to_order({"id": "FT-2", "order_items": [{"menu_id": "m1", "price_at_time": None}]})

    [line] = order.items
    assert line.name_at_time == "Item"
    assert line.price_at_time == 0
    assert line.quantity == 1
    assert line.notes == ""


def test_numeric_strings_are_accepted():
    order = raw_row_to_order(
        {"total": "935000", "order_items": [{"price_at_time": "450000.0", "quantity": "2"}]}
    )

    assert order.total == 935000
    assert order.items[0].subtotal == 900000


def test_rows_read_back_keep_the_total_invariant(budi_order):
    order_row, item_rows = order_to_rows(budi_order)
    order_row["order_items"] = item_rows

    mapped = raw_row_to_order(order_row)

    assert mapped.total == compute_total(mapped.items)
    assert [line.name_at_time for line in mapped.items] == ["Wagyu Ribeye MB9+", "Iced Lychee Tea"]
    assert mapped.items[0].notes == "less salt"
    assert mapped.created_at == budi_order.created_at


def test_event_date_accepts_timestamp_strings():
    order = raw_row_to_order({"order_type": "PRE_ORDER", "event_date": "2026-12-24T00:00:00Z"})

    assert order.order_type is OrderType.PRE_ORDER
    assert order.event_date == date(2026, 12, 24)
