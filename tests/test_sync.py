import asyncio
import re
import sqlite3
import threading
from datetime import date
from unittest.mock import MagicMock, patch

import pytest

from fantasteak.analytics import orphaned_orders
from fantasteak.errors import PartialOrderError, StoreError
from fantasteak.models import OrderStatus, OrderType, PaymentMethod
from fantasteak.store import WATCHED_TABLES, ChangeFeed, SqliteOrderStore
from fantasteak.sync import new_order_id


async def _place(client, lines, name="Budi", order_type=OrderType.DINE_IN, **kwargs):
    return await client.create_order(lines, name, order_type, PaymentMethod.CASH, **kwargs)


def test_order_id_format():
    for _ in range(50):
        assert re.fullmatch(r"FT-\d{4}\d{1,2}", new_order_id())


@pytest.mark.asyncio
async def test_created_order_is_projected_with_consistent_total(make_client, steak_lines):
    client = make_client()

    order_id = await _place(client, steak_lines, name="  Budi ", table_number="7")

    order = client.find(order_id)
    assert order is not None
    assert order.customer_name == "Budi"
    assert order.status is OrderStatus.PENDING
    assert order.table_number == "7"
    assert order.total == 935000
    assert order.has_consistent_total
    assert [(line.menu_id, line.quantity, line.notes) for line in order.items] == [
        ("m1", 2, "less salt"),
        ("m4", 1, ""),
    ]


@pytest.mark.asyncio
async def test_event_date_is_kept_only_for_pre_orders(make_client, steak_lines):
    client = make_client()

    pre_order = await _place(client, steak_lines, order_type=OrderType.PRE_ORDER, event_date=date(2026, 12, 24))
    dine_in = await _place(client, steak_lines, event_date=date(2026, 12, 24))

    assert client.find(pre_order).event_date == date(2026, 12, 24)
    assert client.find(dine_in).event_date is None


@pytest.mark.asyncio
async def test_second_client_converges_after_change_notification(make_client, steak_lines):
    customer = make_client()
    cashier = make_client()
    await cashier.fetch_all()
    cashier.subscribe(cashier.fetch_all)
    await cashier.feed.prime()

    order_id = await _place(customer, steak_lines)
    assert cashier.find(order_id) is None

    await cashier.feed.poll_once()
    assert cashier.find(order_id) is not None
    assert [order.id for order in cashier.orders] == [order.id for order in customer.orders]


@pytest.mark.asyncio
async def test_one_callback_per_row_written(make_client, steak_lines):
    writer = make_client()
    watcher = make_client()
    calls = []
    watcher.subscribe(lambda: calls.append(1))
    await watcher.feed.prime()

    await _place(writer, steak_lines)
    events = await watcher.feed.poll_once()

    assert [(event.table, event.op) for event in events] == [
        ("orders", "INSERT"),
        ("order_items", "INSERT"),
        ("order_items", "INSERT"),
    ]
    assert len(calls) == 3


@pytest.mark.asyncio
async def test_unsubscribe_stops_callbacks_and_is_idempotent(make_client, steak_lines):
    writer = make_client()
    watcher = make_client()
    calls = []
    subscription = watcher.subscribe(lambda: calls.append(1))
    await watcher.feed.prime()

    watcher.unsubscribe(subscription)
    watcher.unsubscribe(subscription)
    await _place(writer, steak_lines)
    await watcher.feed.poll_once()

    assert calls == []


@pytest.mark.asyncio
async def test_failing_listener_does_not_starve_the_others(make_client, steak_lines):
    writer = make_client()
    watcher = make_client()
    calls = []

    def broken():
        raise RuntimeError("render failed")

    watcher.subscribe(broken)
    watcher.subscribe(lambda: calls.append(1))
    await watcher.feed.prime()

    await _place(writer, steak_lines)
    await watcher.feed.poll_once()

    assert len(calls) == 3


@pytest.mark.asyncio
async def test_failed_line_write_leaves_an_orphaned_order(make_client, steak_lines):
    client = make_client()

    with patch.object(SqliteOrderStore, "_insert_items", side_effect=sqlite3.OperationalError("disk I/O error")):
        with pytest.raises(PartialOrderError) as excinfo:
            await _place(client, steak_lines)

    orders = await client.fetch_all()
    assert [order.id for order in orders] == [excinfo.value.order_id]
    assert orphaned_orders(orders) == orders
    assert orders[0].total == 935000


@pytest.mark.asyncio
async def test_atomic_create_writes_nothing_on_failure(make_client, steak_lines):
    client = make_client(atomic_create=True)

    with patch.object(SqliteOrderStore, "_insert_items", side_effect=sqlite3.OperationalError("disk I/O error")):
        with pytest.raises(StoreError):
            await _place(client, steak_lines)

    assert await client.fetch_all() == []


@pytest.mark.asyncio
async def test_read_failure_keeps_previous_projection(make_client, steak_lines):
    client = make_client()
    order_id = await _place(client, steak_lines)

    with patch.object(client.store, "select_orders", side_effect=StoreError("offline")):
        orders = await client.fetch_all()

    assert [order.id for order in orders] == [order_id]
    assert client.find(order_id) is not None


@pytest.mark.asyncio
async def test_concurrent_status_writes_last_one_wins(make_client, steak_lines):
    cashier = make_client()
    admin = make_client()
    order_id = await _place(cashier, steak_lines)
    await admin.fetch_all()

    await cashier.update_status(order_id, OrderStatus.CONFIRMED)
    await admin.update_status(order_id, OrderStatus.CANCELLED)
    await cashier.fetch_all()

    assert cashier.find(order_id).status is OrderStatus.CANCELLED


@pytest.mark.asyncio
async def test_malformed_stored_order_gets_defaults(store, make_client):
    store.insert_order({"id": "FT-99991", "status": "SHIPPED", "order_type": None, "total": None})
    client = make_client()

    [order] = await client.fetch_all()

    assert order.customer_name == "Pelanggan"
    assert order.order_type is OrderType.DINE_IN
    assert order.status is OrderStatus.PENDING
    assert order.payment_method is PaymentMethod.CASH
    assert order.total == 0
    assert order.created_at is not None
    assert order.items == []


@pytest.mark.asyncio
async def test_paid_orders_leave_the_active_queue(make_client, steak_lines):
    client = make_client()
    paid = await _place(client, steak_lines)
    cancelled = await _place(client, steak_lines)
    await client.update_status(paid, OrderStatus.PAID)
    await client.update_status(cancelled, OrderStatus.CANCELLED)

    assert [order.id for order in client.active_orders()] == [cancelled]


@pytest.mark.asyncio
async def test_status_change_reaches_other_client_through_notification(make_client, steak_lines):
    cashier = make_client()
    kitchen = make_client()
    order_id = await _place(cashier, steak_lines)
    await kitchen.fetch_all()
    kitchen.subscribe(kitchen.fetch_all)
    await kitchen.feed.prime()

    await cashier.update_status(order_id, OrderStatus.CONFIRMED)
    assert kitchen.find(order_id).status is OrderStatus.PENDING

    await kitchen.feed.poll_once()
    assert kitchen.find(order_id).status is OrderStatus.CONFIRMED


@pytest.mark.asyncio
async def test_slow_refresh_does_not_overwrite_a_newer_one(make_client, steak_lines):
    client = make_client()
    order_id = await _place(client, steak_lines)
    read_orders = client.store.select_orders
    first_read_done = threading.Event()
    release = threading.Event()

    def select_orders():
        rows = read_orders()
        if not first_read_done.is_set():
            first_read_done.set()
            release.wait(5)
        return rows

    with patch.object(client.store, "select_orders", side_effect=select_orders):
        slow = asyncio.create_task(client.fetch_all())
        await asyncio.to_thread(first_read_done.wait, 5)
        await client.update_status(order_id, OrderStatus.CONFIRMED)
        assert client.find(order_id).status is OrderStatus.CONFIRMED

        release.set()
        await slow

    assert client.find(order_id).status is OrderStatus.CONFIRMED


@pytest.mark.asyncio
async def test_listen_does_not_read_the_store_until_primed():
    store = MagicMock()
    store.latest_change_id.return_value = 7
    store.changes_since.return_value = []
    feed = ChangeFeed(store, autostart=False)

    feed.listen(lambda event: None)
    store.latest_change_id.assert_not_called()

    await feed.prime()
    await feed.poll_once()
    store.changes_since.assert_called_once_with(7, WATCHED_TABLES)


@pytest.mark.asyncio
async def test_unprimed_feed_skips_history(store, make_client, steak_lines):
    writer = make_client()
    await _place(writer, steak_lines)
    feed = ChangeFeed(store, autostart=False)
    calls = []
    feed.listen(calls.append)

    assert await feed.poll_once() == []
    await _place(writer, steak_lines)
    assert len(await feed.poll_once()) == 3
    assert len(calls) == 3
