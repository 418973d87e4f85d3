"""Admin dashboard: revenue, order history and orders needing attention."""

from __future__ import annotations

import logging

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.reactive import reactive
from textual.widgets import Header, Static

from fantasteak.analytics import drifted_orders, orphaned_orders, sales_stats
from fantasteak.base_app import SyncedApp
from fantasteak.errors import InvalidTransition, StoreError
from fantasteak.lifecycle import Role, apply_transition
from fantasteak.models import Order, OrderStatus
from fantasteak.rendering import format_order_card, format_sales

logger = logging.getLogger(__name__)


class AdminApp(SyncedApp):
    """Sales figures plus the full order list, newest first."""

    TITLE = "Fantasteak"
    SUB_TITLE = "Panel Admin"

    selected_index = reactive(None)

    BINDINGS = [
        ("j", "move(1)", "Next"),
        ("k", "move(-1)", "Previous"),
        ("down", "move(1)", "Next"),
        ("up", "move(-1)", "Previous"),
        ("x", "cancel_order", "Batalkan"),
        ("r", "refresh", "Refresh"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-layout"):
            with Vertical(classes="pane"):
                yield Static("Riwayat Pesanan", classes="pane-title")
                yield Static(id="orders", classes="list")
            with Vertical(classes="side-pane"):
                yield Static("Analitik", classes="pane-title")
                yield Static(id="stats")
                yield Static(id="attention")
        yield Static(id="status-bar")

    def _selected(self) -> Order | None:
        orders = self.sync.orders
        if self.selected_index is None or not (0 <= self.selected_index < len(orders)):
            return None
        return orders[self.selected_index]

    def action_move(self, delta: int) -> None:
        orders = self.sync.orders
        if self.modal_open() or not orders:
            return
        if self.selected_index is None:
            self.selected_index = 0
        else:
            self.selected_index = (self.selected_index + delta) % len(orders)
        self.refresh_view()

    async def action_cancel_order(self) -> None:
        if self.modal_open():
            return
        order = self._selected()
        if order is None:
            return
        try:
            await apply_transition(self.sync, order, OrderStatus.CANCELLED, Role.ADMIN)
        except InvalidTransition as exc:
            self.alert(str(exc))
            return
        except StoreError as exc:
            self.alert(f"Gagal membatalkan {order.id}: {exc}")
            return
        self.set_status(f"{order.id} dibatalkan")
        self.refresh_view()

    def refresh_view(self) -> None:
        orders = self.sync.orders
        self.query_one("#stats", Static).update(format_sales(sales_stats(orders)))

        attention = Text()
        for order in orphaned_orders(orders):
            attention.append(f"\n{order.id} tersimpan tanpa item", style="bold red")
        for order in drifted_orders(orders):
            attention.append(f"\n{order.id} total tidak cocok dengan item", style="bold #f0a830")
        self.query_one("#attention", Static).update(attention)

        orders_widget = self.query_one("#orders", Static)
        if not orders:
            self.selected_index = None
            orders_widget.update("(belum ada pesanan)")
            return
        if self.selected_index is not None and self.selected_index >= len(orders):
            self.selected_index = len(orders) - 1

        visible = max(1, self._visible_rows(orders_widget) // 4)
        start, end = self._window_bounds(len(orders), visible, self.selected_index)
        lines = Text()
        for idx in range(start, end):
            if idx > start:
                lines.append("\n\n")
            lines.append("➤ " if idx == self.selected_index else "  ")
            lines.append_text(format_order_card(orders[idx]))
        orders_widget.update(lines)
