"""Shared order store: SQLite persistence plus a polled change feed.

Every client process opens the same database file. Triggers on ``orders``
and ``order_items`` append to a ``changes`` table, which ``ChangeFeed``
polls so that one client sees writes made by the others.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Iterable, Protocol, Sequence

from fantasteak.config import CHANGE_POLL_INTERVAL_S, DB_PATH
from fantasteak.errors import StoreError

logger = logging.getLogger(__name__)

WATCHED_TABLES = ("orders", "order_items")

_ORDER_COLUMNS = (
    "id",
    "customer_name",
    "order_type",
    "table_number",
    "event_date",
    "status",
    "payment_method",
    "total",
    "created_at",
)
_ITEM_COLUMNS = ("order_id", "menu_id", "quantity", "price_at_time", "name_at_time", "notes")


@dataclass(frozen=True)
class ChangeEvent:
    """One insert, update or delete recorded by the store."""

    id: int
    table: str
    op: str
    row_id: str


class OrderStore(Protocol):
    """Operations the sync client needs from the order store."""

    def select_orders(self) -> list[dict[str, Any]]: ...

    def insert_order(self, row: dict[str, Any]) -> None: ...

    def insert_order_items(self, rows: Sequence[dict[str, Any]]) -> None: ...

    def insert_order_aggregate(self, row: dict[str, Any], item_rows: Sequence[dict[str, Any]]) -> None: ...

    def update_order(self, order_id: str, fields: dict[str, Any]) -> None: ...

    def delete_order(self, order_id: str) -> None: ...

    def latest_change_id(self) -> int: ...

    def changes_since(self, cursor: int, tables: Iterable[str] = WATCHED_TABLES) -> list[ChangeEvent]: ...


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _change_triggers() -> str:
    statements = []
    for table, key in (("orders", "id"), ("order_items", "order_id")):
        for op, ref in (("INSERT", "NEW"), ("UPDATE", "NEW"), ("DELETE", "OLD")):
            statements.append(
                f"""
                CREATE TRIGGER IF NOT EXISTS trg_{table}_{op.lower()}
                AFTER {op} ON {table}
                BEGIN
                    INSERT INTO changes (table_name, op, row_id, created_at)
                    VALUES ('{table}', '{op}', {ref}.{key}, strftime('%Y-%m-%dT%H:%M:%fZ', 'now'));
                END;
                """
            )
    return "\n".join(statements)


class SqliteOrderStore:
    """Order store backed by a SQLite file shared between client processes."""

    def __init__(self, path: str | Path = DB_PATH) -> None:
        self.path = Path(path)

    def _connect(self) -> sqlite3.Connection:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.path, timeout=5.0)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def _run(self, action: str, fn: Callable[[sqlite3.Connection], Any]) -> Any:
        try:
            conn = self._connect()
            try:
                with conn:
                    return fn(conn)
            finally:
                conn.close()
        except sqlite3.Error as exc:
            logger.error("store %s failed: %s", action, exc)
            raise StoreError(f"Store {action} failed: {exc}") from exc

    def bootstrap_schema(self) -> None:
        """Create persistence schema if it does not already exist."""

        def create(conn: sqlite3.Connection) -> None:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS categories (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS menus (
                    id TEXT PRIMARY KEY,
                    category_id TEXT REFERENCES categories(id),
                    name TEXT NOT NULL,
                    price INTEGER NOT NULL CHECK (price > 0),
                    description TEXT,
                    image TEXT,
                    badge TEXT,
                    is_available INTEGER NOT NULL DEFAULT 1
                );

                CREATE TABLE IF NOT EXISTS promos (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    image TEXT,
                    is_active INTEGER NOT NULL DEFAULT 1
                );

                CREATE TABLE IF NOT EXISTS orders (
                    id TEXT PRIMARY KEY,
                    customer_name TEXT,
                    order_type TEXT,
                    table_number TEXT,
                    event_date TEXT,
                    status TEXT,
                    payment_method TEXT,
                    total INTEGER,
                    created_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS order_items (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    order_id TEXT NOT NULL,
                    menu_id TEXT,
                    quantity INTEGER,
                    price_at_time INTEGER,
                    name_at_time TEXT,
                    notes TEXT,
                    FOREIGN KEY(order_id) REFERENCES orders(id) ON DELETE CASCADE
                );

                CREATE TABLE IF NOT EXISTS changes (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    table_name TEXT NOT NULL,
                    op TEXT NOT NULL,
                    row_id TEXT,
                    created_at TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_order_items_order_id
                    ON order_items(order_id);

                CREATE INDEX IF NOT EXISTS idx_orders_created_at
                    ON orders(created_at);
                """
            )
            conn.executescript(_change_triggers())

        self._run("bootstrap", create)

    def select_orders(self) -> list[dict[str, Any]]:
        """Return every order, newest first, each with its ``order_items`` rows."""

        def select(conn: sqlite3.Connection) -> list[dict[str, Any]]:
            orders = [dict(row) for row in conn.execute("SELECT * FROM orders ORDER BY created_at DESC, rowid DESC")]
            items_by_order: dict[str, list[dict[str, Any]]] = {}
            for row in conn.execute("SELECT * FROM order_items ORDER BY order_id, id"):
                items_by_order.setdefault(row["order_id"], []).append(dict(row))
            for order in orders:
                order["order_items"] = items_by_order.get(order["id"], [])
            return orders

        return self._run("select", select)

    def insert_order(self, row: dict[str, Any]) -> None:
        values = {column: row.get(column) for column in _ORDER_COLUMNS}
        values["created_at"] = values["created_at"] or _utc_now_iso()
        placeholders = ", ".join("?" for _ in _ORDER_COLUMNS)
        self._run(
            "insert order",
            lambda conn: conn.execute(
                f"INSERT INTO orders ({', '.join(_ORDER_COLUMNS)}) VALUES ({placeholders})",
                tuple(values[column] for column in _ORDER_COLUMNS),
            ),
        )

    def insert_order_items(self, rows: Sequence[dict[str, Any]]) -> None:
        self._run("insert items", lambda conn: self._insert_items(conn, rows))

    def insert_order_aggregate(self, row: dict[str, Any], item_rows: Sequence[dict[str, Any]]) -> None:
        """Write an order and its lines in one transaction."""
        values = {column: row.get(column) for column in _ORDER_COLUMNS}
        values["created_at"] = values["created_at"] or _utc_now_iso()
        placeholders = ", ".join("?" for _ in _ORDER_COLUMNS)

        def write(conn: sqlite3.Connection) -> None:
            conn.execute(
                f"INSERT INTO orders ({', '.join(_ORDER_COLUMNS)}) VALUES ({placeholders})",
                tuple(values[column] for column in _ORDER_COLUMNS),
            )
            self._insert_items(conn, item_rows)

        self._run("insert aggregate", write)

    @staticmethod
    def _insert_items(conn: sqlite3.Connection, rows: Sequence[dict[str, Any]]) -> None:
        conn.executemany(
            f"INSERT INTO order_items ({', '.join(_ITEM_COLUMNS)}) VALUES ({', '.join('?' for _ in _ITEM_COLUMNS)})",
            [tuple(row.get(column) for column in _ITEM_COLUMNS) for row in rows],
        )

    def update_order(self, order_id: str, fields: dict[str, Any]) -> None:
        """Update columns of one order row by id."""
        unknown = set(fields) - set(_ORDER_COLUMNS) - {"id"}
        if unknown or not fields:
            raise ValueError(f"Cannot update order columns: {sorted(unknown) or 'none given'}")
        assignments = ", ".join(f"{column} = ?" for column in fields)
        self._run(
            "update order",
            lambda conn: conn.execute(
                f"UPDATE orders SET {assignments} WHERE id = ?",
                (*fields.values(), order_id),
            ),
        )

    def delete_order(self, order_id: str) -> None:
        self._run("delete order", lambda conn: conn.execute("DELETE FROM orders WHERE id = ?", (order_id,)))

    def select_menu(self) -> list[dict[str, Any]]:
        return self._run(
            "select menu",
            lambda conn: [dict(row) for row in conn.execute("SELECT * FROM menus ORDER BY name")],
        )

    def select_categories(self) -> list[dict[str, Any]]:
        return self._run(
            "select categories",
            lambda conn: [dict(row) for row in conn.execute("SELECT * FROM categories ORDER BY id")],
        )

    def latest_change_id(self) -> int:
        def latest(conn: sqlite3.Connection) -> int:
            row = conn.execute("SELECT COALESCE(MAX(id), 0) FROM changes").fetchone()
            return int(row[0])

        return self._run("read change cursor", latest)

    def changes_since(self, cursor: int, tables: Iterable[str] = WATCHED_TABLES) -> list[ChangeEvent]:
        tables = tuple(tables)
        placeholders = ", ".join("?" for _ in tables)

        def select(conn: sqlite3.Connection) -> list[ChangeEvent]:
            rows = conn.execute(
                f"SELECT id, table_name, op, row_id FROM changes WHERE id > ? AND table_name IN ({placeholders}) ORDER BY id",
                (cursor, *tables),
            )
            return [ChangeEvent(row["id"], row["table_name"], row["op"], row["row_id"]) for row in rows]

        return self._run("read changes", select)


ChangeListener = Callable[[ChangeEvent], Any]


class ChangeFeed:
    """Polls the store for change events and hands each one to every listener.

    Events are not merged: a burst of writes produces one callback per row
    touched.
    """

    def __init__(
        self,
        store: OrderStore,
        tables: Iterable[str] = WATCHED_TABLES,
        interval: float = CHANGE_POLL_INTERVAL_S,
        autostart: bool = True,
    ) -> None:
        self.store = store
        self.tables = tuple(tables)
        self.interval = interval
        self.autostart = autostart
        self._listeners: dict[int, ChangeListener] = {}
        self._next_handle = 1
        self._cursor: int | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def listen(self, callback: ChangeListener) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._listeners[handle] = callback
        if self.autostart and not self.running:
            self._start()
        return handle

    async def prime(self) -> None:
        """Start from the newest change so that only later writes are reported."""
        try:
            self._cursor = await asyncio.to_thread(self.store.latest_change_id)
        except StoreError as exc:
            logger.warning("change feed cursor unavailable, will retry on poll: %s", exc)

    def unlisten(self, handle: int) -> None:
        self._listeners.pop(handle, None)
        if not self._listeners and self._task is not None:
            self._task.cancel()
            self._task = None

    def _start(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("no running loop; change feed polls on demand")
            return
        self._task = loop.create_task(self._run())

    async def _run(self) -> None:
        while self._listeners:
            await self.poll_once()
            await asyncio.sleep(self.interval)

    async def poll_once(self) -> list[ChangeEvent]:
        """Read new change events and dispatch them; returns what was dispatched."""
        try:
            if self._cursor is None:
                # Unprimed: nothing before this point is reported.
                self._cursor = await asyncio.to_thread(self.store.latest_change_id)
                return []
            events = await asyncio.to_thread(self.store.changes_since, self._cursor, self.tables)
        except StoreError as exc:
            logger.warning("change feed poll failed: %s", exc)
            return []

        for event in events:
            self._cursor = event.id
            for handle, callback in list(self._listeners.items()):
                try:
                    result = callback(event)
                    if inspect.isawaitable(result):
                        await result
                except Exception:
                    logger.exception("change listener %s failed on %s", handle, event)
        return events

    async def aclose(self) -> None:
        self._listeners.clear()
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
