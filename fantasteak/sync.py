"""Client-side order projection kept current by refetching on every change."""

from __future__ import annotations

import asyncio
import inspect
import logging
import random
import time
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Callable, Iterable, Protocol

from fantasteak.errors import PartialOrderError, StoreError
from fantasteak.lifecycle import active_orders
from fantasteak.mapping import order_to_rows, raw_row_to_order
from fantasteak.models import Order, OrderLine, OrderStatus, OrderType, PaymentMethod, compute_total
from fantasteak.store import ChangeEvent, ChangeFeed, OrderStore

logger = logging.getLogger(__name__)

OnChange = Callable[[], Any]


@dataclass(frozen=True)
class Subscription:
    """Handle returned by ``subscribe``."""

    handle: int


class SyncSource(Protocol):
    """Read side every view consumes, independent of the concrete store."""

    async def fetch_all(self) -> list[Order]: ...

    def subscribe(self, on_change: OnChange) -> Subscription: ...

    def unsubscribe(self, subscription: Subscription) -> None: ...


def new_order_id() -> str:
    """Human-readable id: ``FT-`` + last 4 digits of the ms clock + 0..98.

    Two orders created within the same millisecond window can collide; the
    store's primary key rejects the second one.
    """
    millis = str(time.time_ns() // 1_000_000)
    return f"FT-{millis[-4:]}{random.randrange(99)}"


class SyncClient:
    """One client's eventually-consistent view of all orders.

    Mutations go to the store first; ``orders`` is only replaced by a full
    refetch, either after this client's own write or when the change feed
    reports a write from anyone.
    """

    def __init__(self, store: OrderStore, feed: ChangeFeed | None = None, atomic_create: bool = False) -> None:
        self.store = store
        self.feed = feed or ChangeFeed(store)
        self.atomic_create = atomic_create
        self.orders: list[Order] = []
        self._fetch_seq = 0
        self._applied_seq = 0
        self._subscriptions: dict[Subscription, int] = {}

    async def fetch_all(self) -> list[Order]:
        """Refresh the projection; on a read failure keep the previous one.

        Reads may overlap. A read that started before the one last applied is
        discarded so an older snapshot never replaces a newer one.
        """
        self._fetch_seq += 1
        seq = self._fetch_seq
        try:
            rows = await asyncio.to_thread(self.store.select_orders)
        except StoreError as exc:
            logger.error("fetch_all failed, keeping %d cached orders: %s", len(self.orders), exc)
            return list(self.orders)

        if seq < self._applied_seq:
            logger.debug("dropping stale fetch %d, already applied %d", seq, self._applied_seq)
            return list(self.orders)

        orders = [raw_row_to_order(row) for row in rows]
        for order in orders:
            if not order.items:
                logger.warning("order %s has no items", order.id)
            elif not order.has_consistent_total:
                logger.warning("order %s stored total %d != computed %d", order.id, order.total, order.computed_total)
        self.orders = orders
        self._applied_seq = seq
        logger.debug("fetch_all loaded %d orders", len(orders))
        return list(orders)

    def subscribe(self, on_change: OnChange) -> Subscription:
        """Call ``on_change`` on every change to orders or their lines."""

        async def relay(event: ChangeEvent) -> None:
            logger.debug("change %s %s %s", event.table, event.op, event.row_id)
            result = on_change()
            if inspect.isawaitable(result):
                await result

        subscription = Subscription(self.feed.listen(relay))
        self._subscriptions[subscription] = subscription.handle
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        handle = self._subscriptions.pop(subscription, None)
        if handle is not None:
            self.feed.unlisten(handle)

    async def create_order(
        self,
        lines: Iterable[OrderLine],
        customer_name: str,
        order_type: OrderType,
        payment_method: PaymentMethod,
        table_number: str | None = None,
        event_date: date | None = None,
    ) -> str:
        """Persist a new order with its lines and return its id.

        Without ``atomic_create`` this is two writes: the order row, then the
        line rows. If the second write fails the order row stays behind with
        no lines and ``PartialOrderError`` is raised; nothing is retried or
        rolled back.
        """
        lines = list(lines)
        order = Order(
            id=new_order_id(),
            customer_name=customer_name.strip(),
            order_type=order_type,
            status=OrderStatus.PENDING,
            payment_method=payment_method,
            total=compute_total(lines),
            items=lines,
            created_at=datetime.now(timezone.utc),
            table_number=(table_number or "").strip() or None,
            event_date=event_date if order_type is OrderType.PRE_ORDER else None,
        )
        order_row, item_rows = order_to_rows(order)

        if self.atomic_create:
            await asyncio.to_thread(self.store.insert_order_aggregate, order_row, item_rows)
        else:
            await asyncio.to_thread(self.store.insert_order, order_row)
            try:
                await asyncio.to_thread(self.store.insert_order_items, item_rows)
            except StoreError as exc:
                logger.error("order %s written without items: %s", order.id, exc)
                raise PartialOrderError(order.id, exc) from exc

        logger.info("created order %s total=%d lines=%d", order.id, order.total, len(lines))
        await self.fetch_all()
        return order.id

    async def update_status(self, order_id: str, status: OrderStatus) -> None:
        """Write a new status as-is; callers check legality first."""
        await asyncio.to_thread(self.store.update_order, order_id, {"status": status.value})
        logger.info("order %s -> %s", order_id, status.value)
        await self.fetch_all()

    def find(self, order_id: str) -> Order | None:
        return next((order for order in self.orders if order.id == order_id), None)

    def active_orders(self) -> list[Order]:
        return active_orders(self.orders)

    async def aclose(self) -> None:
        for subscription in list(self._subscriptions):
            self.unsubscribe(subscription)
        await self.feed.aclose()
