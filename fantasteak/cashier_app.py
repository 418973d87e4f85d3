"""Cashier queue: move orders through the lifecycle and print receipts."""

from __future__ import annotations

import logging

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.reactive import reactive
from textual.widgets import Header, Static

from fantasteak.base_app import SyncedApp
from fantasteak.errors import InvalidTransition, StoreError
from fantasteak.lifecycle import Role, apply_transition, next_status
from fantasteak.models import Order, OrderStatus
from fantasteak.printer import PrinterTransport, check_printer_dependencies
from fantasteak.receipt_modal import ReceiptModal
from fantasteak.rendering import format_order_card
from fantasteak.store import SqliteOrderStore
from fantasteak.sync import SyncClient

logger = logging.getLogger(__name__)


class CashierApp(SyncedApp):
    """Kitchen queue for the cashier: every order not yet paid."""

    TITLE = "Fantasteak"
    SUB_TITLE = "Antrean Dapur"

    selected_index = reactive(None)

    BINDINGS = [
        ("j", "move(1)", "Next"),
        ("k", "move(-1)", "Previous"),
        ("down", "move(1)", "Next"),
        ("up", "move(-1)", "Previous"),
        ("p", "advance", "Proses / Selesai"),
        ("x", "cancel_order", "Batalkan"),
        ("enter", "show_receipt", "Struk"),
        ("r", "refresh", "Refresh"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, store: SqliteOrderStore, transport: PrinterTransport, sync: SyncClient | None = None) -> None:
        super().__init__(store, sync)
        self.transport = transport
        self.busy = False

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-layout"):
            with Vertical(classes="pane"):
                yield Static("Antrean", classes="pane-title", id="queue-title")
                yield Static("Menunggu pesanan baru...", id="queue", classes="list")
        yield Static(id="status-bar")

    def on_mount(self) -> None:
        # SyncedApp.on_mount runs after this and loads the queue.
        _, msg = check_printer_dependencies()
        self.set_status(msg)

    def _queue(self) -> list[Order]:
        return self.sync.active_orders()

    def _selected(self) -> Order | None:
        queue = self._queue()
        if self.selected_index is None or not (0 <= self.selected_index < len(queue)):
            return None
        return queue[self.selected_index]

    def action_move(self, delta: int) -> None:
        if self.modal_open():
            return
        queue = self._queue()
        if not queue:
            return
        if self.selected_index is None:
            self.selected_index = 0 if delta > 0 else len(queue) - 1
        else:
            self.selected_index = (self.selected_index + delta) % len(queue)
        self.refresh_view()

    async def _transition(self, order: Order, target: OrderStatus) -> bool:
        if self.busy:
            return False
        self.busy = True
        try:
            await apply_transition(self.sync, order, target, Role.CASHIER)
        except InvalidTransition as exc:
            self.alert(str(exc))
            return False
        except StoreError as exc:
            self.alert(f"Gagal memperbarui pesanan {order.id}: {exc}")
            return False
        finally:
            self.busy = False
        self.set_status(f"{order.id} -> {target.value}")
        self.refresh_view()
        return True

    async def action_advance(self) -> None:
        if self.modal_open():
            return
        order = self._selected()
        if order is None:
            return
        target = next_status(order)
        if target is None:
            self.alert(f"{order.id} sudah {order.status.value}")
            return
        if await self._transition(order, target) and target is OrderStatus.PAID:
            # Settled orders leave the queue; show the receipt for printing.
            self.push_screen(ReceiptModal(self.sync.find(order.id) or order, self.transport))

    async def action_cancel_order(self) -> None:
        if self.modal_open():
            return
        order = self._selected()
        if order is not None:
            await self._transition(order, OrderStatus.CANCELLED)

    def action_show_receipt(self) -> None:
        if self.modal_open():
            return
        order = self._selected()
        if order is not None:
            self.push_screen(ReceiptModal(order, self.transport))

    def refresh_view(self) -> None:
        queue_widget = self.query_one("#queue", Static)
        self.query_one("#queue-title", Static).update(f"Antrean ({len(self._queue())})")
        queue = self._queue()
        if not queue:
            self.selected_index = None
            queue_widget.update("Menunggu pesanan baru...")
            return

        if self.selected_index is None:
            self.selected_index = 0
        elif self.selected_index >= len(queue):
            self.selected_index = len(queue) - 1

        # Cards take several rows each.
        visible = max(1, self._visible_rows(queue_widget) // 4)
        start, end = self._window_bounds(len(queue), visible, self.selected_index)

        lines = Text()
        if start > 0:
            lines.append("⋮\n", style="dim")
        for idx in range(start, end):
            if idx > start:
                lines.append("\n\n")
            lines.append("➤ " if idx == self.selected_index else "  ")
            lines.append_text(format_order_card(queue[idx]))
        if end < len(queue):
            lines.append("\n⋮", style="dim")
        queue_widget.update(lines)
