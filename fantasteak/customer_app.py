"""Customer menu, cart and checkout."""

from __future__ import annotations

import asyncio
import logging
import webbrowser

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.reactive import reactive
from textual.widgets import Header, Static

from fantasteak import data
from fantasteak.base_app import SyncedApp
from fantasteak.checkout import Cart, checkout, qris_confirmation_url
from fantasteak.checkout_modal import CheckoutForm, CheckoutModal, NoteModal
from fantasteak.errors import CheckoutError, PartialOrderError, StoreError
from fantasteak.models import Category, MenuItem, PaymentMethod
from fantasteak.rendering import format_cart, format_menu_item

logger = logging.getLogger(__name__)

ORDER_FAILED = "Gagal mengirim pesanan. Silakan hubungi kasir."

ALL_CATEGORIES = Category("SEMUA", "Semua")


def menu_from_rows(rows: list[dict]) -> list[MenuItem]:
    return [
        MenuItem(
            id=str(row["id"]),
            category_id=str(row.get("category_id") or ""),
            name=row["name"],
            price=int(row["price"]),
            description=row.get("description") or "",
            image=row.get("image") or "",
            badge=row.get("badge"),
            is_available=bool(row.get("is_available", 1)),
        )
        for row in rows
    ]


def categories_from_rows(rows: list[dict]) -> list[Category]:
    return [Category(id=str(row["id"]), name=row["name"]) for row in rows]


def menu_in_category(menu: list[MenuItem], category_id: str) -> list[MenuItem]:
    if category_id == ALL_CATEGORIES.id:
        return list(menu)
    return [item for item in menu if item.category_id == category_id]


class CustomerApp(SyncedApp):
    """Menu on the right, cart on the left; Ctrl+S opens checkout."""

    TITLE = "Fantasteak"
    SUB_TITLE = "Menu"

    selected_index = reactive(0)

    BINDINGS = [
        ("j", "move(1)", "Next"),
        ("k", "move(-1)", "Previous"),
        ("down", "move(1)", "Next"),
        ("up", "move(-1)", "Previous"),
        ("enter", "add_selected", "Pilih Menu"),
        ("backspace", "remove_selected", "Kurangi"),
        ("n", "note_selected", "Catatan"),
        ("c", "next_category", "Kategori"),
        ("ctrl+s", "checkout", "Checkout"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, store, sync=None) -> None:
        super().__init__(store, sync)
        self.cart = Cart()
        self.menu: list[MenuItem] = list(data.MENU)
        self.categories: list[Category] = [ALL_CATEGORIES, *data.CATEGORIES]
        self.category_index = 0
        self.submitting = False

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-layout"):
            with Vertical(classes="pane"):
                yield Static("Keranjang", classes="pane-title")
                yield Static(id="cart", classes="list")
            with Vertical(classes="side-pane"):
                yield Static("Menu", classes="pane-title", id="menu-title")
                yield Static(id="menu", classes="list")
        yield Static(id="status-bar")

    async def on_mount(self) -> None:
        # Runs before SyncedApp.on_mount, which draws the view.
        try:
            menu_rows = await asyncio.to_thread(self.store.select_menu)
            category_rows = await asyncio.to_thread(self.store.select_categories)
        except StoreError as exc:
            logger.warning("menu unavailable, using built-in catalog: %s", exc)
            return
        if menu_rows:
            self.menu = menu_from_rows(menu_rows)
        if category_rows:
            self.categories = [ALL_CATEGORIES, *categories_from_rows(category_rows)]

    @property
    def category(self) -> Category:
        return self.categories[self.category_index]

    def visible_menu(self) -> list[MenuItem]:
        return menu_in_category(self.menu, self.category.id)

    def _selected_item(self) -> MenuItem | None:
        menu = self.visible_menu()
        if not (0 <= self.selected_index < len(menu)):
            return None
        return menu[self.selected_index]

    def action_move(self, delta: int) -> None:
        menu = self.visible_menu()
        if self.modal_open() or not menu:
            return
        self.selected_index = (self.selected_index + delta) % len(menu)
        self.refresh_view()

    def action_next_category(self) -> None:
        if self.modal_open():
            return
        self.category_index = (self.category_index + 1) % len(self.categories)
        self.selected_index = 0
        self.refresh_view()

    def action_add_selected(self) -> None:
        if self.modal_open():
            return
        item = self._selected_item()
        if item is None:
            return
        if not self.cart.add(item):
            self.set_status(f"{item.name} sedang habis")
        self.refresh_view()

    def action_remove_selected(self) -> None:
        if self.modal_open():
            return
        item = self._selected_item()
        if item is not None:
            self.cart.remove(item.id)
            self.refresh_view()

    def action_note_selected(self) -> None:
        if self.modal_open():
            return
        item = self._selected_item()
        if item is None or not self.cart.quantity_of(item.id):
            return
        current = next((entry.notes for entry in self.cart.entries if entry.item.id == item.id), "")

        def apply(note: str | None) -> None:
            if note is not None:
                self.cart.set_notes(item.id, note)
                self.refresh_view()

        self.push_screen(NoteModal(item.name, current), apply)

    def action_checkout(self) -> None:
        if self.modal_open() or self.submitting:
            return
        if not len(self.cart):
            self.alert("Keranjang masih kosong!")
            return
        self.push_screen(CheckoutModal(self.cart.to_lines(), self.cart.total), self._on_checkout_form)

    def _on_checkout_form(self, form: CheckoutForm | None) -> None:
        if form is not None:
            self.run_worker(self._submit(form), exclusive=True)

    async def _submit(self, form: CheckoutForm) -> None:
        self.submitting = True
        total = self.cart.total
        try:
            order_id = await checkout(
                self.sync,
                self.cart,
                form.customer_name,
                form.order_type,
                form.payment_method,
                table_number=form.table_number,
                event_date=form.event_date,
            )
        except CheckoutError as exc:
            self.alert(exc.message)
            return
        except PartialOrderError as exc:
            logger.error("partial order %s", exc.order_id)
            self.alert(f"{ORDER_FAILED} (#{exc.order_id})")
            return
        except StoreError:
            self.alert(ORDER_FAILED)
            return
        finally:
            self.submitting = False

        self.set_status(f"Pesanan {order_id} terkirim. Terima kasih, {form.customer_name}!")
        self.refresh_view()
        if form.payment_method is PaymentMethod.QRIS:
            url = qris_confirmation_url(
                form.customer_name, total, form.order_type, form.table_number, form.event_date
            )
            webbrowser.open(url)

    def refresh_view(self) -> None:
        self.query_one("#cart", Static).update(format_cart(self.cart))
        self.query_one("#menu-title", Static).update(f"Menu: {self.category.name}")
        menu_widget = self.query_one("#menu", Static)
        menu = self.visible_menu()
        if not menu:
            menu_widget.update("(menu kosong)")
            return

        start, end = self._window_bounds(len(menu), self._visible_rows(menu_widget), self.selected_index)
        lines = Text()
        for idx in range(start, end):
            if idx > start:
                lines.append("\n")
            item = menu[idx]
            lines.append("➤ " if idx == self.selected_index else "  ")
            lines.append_text(format_menu_item(item, self.cart.quantity_of(item.id)))
        menu_widget.update(lines)
