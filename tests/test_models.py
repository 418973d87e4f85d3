from dataclasses import replace
from datetime import date

import pytest

from fantasteak.models import OrderLine, OrderType, compute_total, is_valid


def test_compute_total_sums_price_times_quantity(steak_lines):
    assert compute_total(steak_lines) == 2 * 450000 + 35000


def test_compute_total_rejects_empty_line_set():
    with pytest.raises(ValueError):
        compute_total([])


def test_line_subtotal():
    assert OrderLine("m2", "Sirloin Black Angus", 275000, quantity=3).subtotal == 825000


def test_valid_order(budi_order):
    assert is_valid(budi_order)
    assert budi_order.has_consistent_total


def test_blank_name_is_invalid(budi_order):
    assert not is_valid(replace(budi_order, customer_name="   "))


def test_order_without_items_is_invalid(budi_order):
    order = replace(budi_order, items=[])
    assert not is_valid(order)
    assert not order.has_consistent_total


def test_event_date_required_only_for_pre_order(budi_order):
    assert not is_valid(replace(budi_order, order_type=OrderType.PRE_ORDER))
    assert is_valid(replace(budi_order, order_type=OrderType.PRE_ORDER, event_date=date(2026, 12, 24)))
    assert not is_valid(replace(budi_order, event_date=date(2026, 12, 24)))


def test_drifted_total_is_detected(budi_order):
    assert not replace(budi_order, total=900000).has_consistent_total
