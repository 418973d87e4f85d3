"""Shared Textual plumbing for the customer, cashier and admin screens."""

from __future__ import annotations

import asyncio
import logging

from textual.app import App
from textual.css.query import NoMatches
from textual.screen import ModalScreen
from textual.widgets import Static

from fantasteak.errors import StoreError
from fantasteak.store import SqliteOrderStore
from fantasteak.sync import Subscription, SyncClient

logger = logging.getLogger(__name__)


class SyncedApp(App):
    """A Textual app holding one sync client for the lifetime of the screen."""

    CSS = """
    Screen {
        layout: vertical;
    }

    #main-layout {
        height: 1fr;
    }

    .pane {
        border: round $primary;
        padding: 1;
    }

    .side-pane {
        border: round $secondary;
        padding: 1;
    }

    .pane-title {
        text-style: bold;
        margin-bottom: 1;
    }

    .list {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #status-bar {
        height: 3;
        border: heavy $secondary;
        padding: 0 1;
    }
    """

    def __init__(self, store: SqliteOrderStore, sync: SyncClient | None = None) -> None:
        super().__init__()
        self.store = store
        self.sync = sync or SyncClient(store)
        self.system_status = ""
        self._subscription: Subscription | None = None

    async def on_mount(self) -> None:
        try:
            await asyncio.to_thread(self.store.bootstrap_schema)
        except StoreError as exc:
            self.alert(f"Database tidak tersedia: {exc}")
        await self.sync.feed.prime()
        await self.sync.fetch_all()
        self._subscription = self.sync.subscribe(self.reload)
        logger.info("%s mounted with %d orders", type(self).__name__, len(self.sync.orders))
        self.refresh_view()

    async def on_unmount(self) -> None:
        await self.release()

    async def release(self) -> None:
        if self._subscription is not None:
            self.sync.unsubscribe(self._subscription)
            self._subscription = None
        await self.sync.aclose()

    async def action_quit(self) -> None:
        await self.release()
        self.exit()

    async def reload(self) -> None:
        await self.sync.fetch_all()
        self.refresh_view()

    async def action_refresh(self) -> None:
        await self.reload()
        self.set_status(f"{len(self.sync.orders)} pesanan dimuat")

    def refresh_view(self) -> None:
        """Redraw from ``self.sync.orders``; subclasses fill this in."""

    def modal_open(self) -> bool:
        return isinstance(self.screen, ModalScreen)

    def alert(self, message: str) -> None:
        logger.warning("alert: %s", message)
        self.notify(message, severity="error", timeout=8)

    def set_status(self, message: str) -> None:
        self.system_status = message
        try:
            self.query_one("#status-bar", Static).update(message)
        except NoMatches:
            return

    def _visible_rows(self, widget: Static) -> int:
        height = widget.size.height
        if height <= 0:
            return 8
        return max(1, height)

    def _window_bounds(self, total: int, rows: int, selected: int | None) -> tuple[int, int]:
        if total <= 0:
            return (0, 0)

        rows = max(1, rows)
        if total <= rows:
            return (0, total)

        if selected is None:
            start = 0
        else:
            half = rows // 2
            start = selected - half
            start = max(0, start)
            start = min(start, total - rows)

        return (start, start + rows)
