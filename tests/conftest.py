from datetime import datetime, timezone

import pytest

from fantasteak.models import Order, OrderLine, OrderStatus, OrderType, PaymentMethod
from fantasteak.store import ChangeFeed, SqliteOrderStore
from fantasteak.sync import SyncClient


@pytest.fixture
def store(tmp_path):
    """A bootstrapped store in a throwaway database file."""
    store = SqliteOrderStore(tmp_path / "orders.db")
    store.bootstrap_schema()
    return store


@pytest.fixture
def make_client(store):
    """Factory for independent clients sharing one store file.

    Feeds poll only when a test calls ``poll_once``.
    """

    def factory(**kwargs):
        client_store = SqliteOrderStore(store.path)
        return SyncClient(client_store, feed=ChangeFeed(client_store, autostart=False), **kwargs)

    return factory


@pytest.fixture
def steak_lines():
    return [
        OrderLine("m1", "Wagyu Ribeye MB9+", 450000, quantity=2, notes="less salt"),
        OrderLine("m4", "Iced Lychee Tea", 35000, quantity=1),
    ]


@pytest.fixture
def budi_order(steak_lines):
    return Order(
        id="FT-00012",
        customer_name="Budi",
        order_type=OrderType.DINE_IN,
        status=OrderStatus.PENDING,
        payment_method=PaymentMethod.CASH,
        total=935000,
        items=steak_lines,
        created_at=datetime(2026, 10, 19, 12, 30, tzinfo=timezone.utc),
    )
