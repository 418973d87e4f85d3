"""Checkout form modal and the per-line note modal."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.screen import ModalScreen
from textual.widgets import Button, Input, RadioButton, RadioSet, Static

from fantasteak.checkout import validate_checkout
from fantasteak.errors import CheckoutError
from fantasteak.models import OrderLine, OrderType, PaymentMethod
from fantasteak.receipt import format_rupiah

_MODAL_CSS = """
{name} {{
    align: center middle;
    background: $background 60%;
}}

.dialog {{
    width: 64;
    height: auto;
    border: round $secondary;
    background: $panel;
    padding: 1 2;
}}

.dialog-title {{
    text-style: bold;
    margin-bottom: 1;
    color: white;
}}

.dialog-error {{
    color: #ffb3b3;
    margin-bottom: 1;
}}

.dialog-help {{
    color: #dddddd;
}}
"""

_ORDER_TYPES = (OrderType.DINE_IN, OrderType.TAKEAWAY, OrderType.PRE_ORDER)


@dataclass(frozen=True)
class CheckoutForm:
    """Validated checkout input."""

    customer_name: str
    order_type: OrderType
    payment_method: PaymentMethod
    table_number: str | None
    event_date: date | None


class CheckoutModal(ModalScreen[CheckoutForm | None]):
    """Collect name, order type, table or event date and payment method."""

    BINDINGS = [("escape", "cancel", "Cancel")]

    CSS = _MODAL_CSS.format(name="CheckoutModal")

    def __init__(self, lines: list[OrderLine], total: int) -> None:
        super().__init__()
        self.lines = lines
        self.total = total

    def compose(self) -> ComposeResult:
        with Container(classes="dialog"):
            yield Static(f"Ringkasan Pesanan  {format_rupiah(self.total)}", classes="dialog-title")
            yield Input(placeholder="Nama Lengkap", id="customer-name")
            with RadioSet(id="order-type"):
                yield RadioButton("Dine In", value=True)
                yield RadioButton("Takeaway")
                yield RadioButton("Pre Order")
            yield Input(placeholder="Nomor Meja", id="table-number")
            yield Input(placeholder="Tanggal Acara (YYYY-MM-DD)", id="event-date")
            yield Static(id="checkout-error", classes="dialog-error")
            with Horizontal():
                yield Button("Bayar QRIS", id="pay-qris", variant="warning")
                yield Button("Bayar Kasir", id="pay-cash")
            yield Static("Esc batal", classes="dialog-help")

    def _order_type(self) -> OrderType:
        index = self.query_one("#order-type", RadioSet).pressed_index
        return _ORDER_TYPES[index] if 0 <= index < len(_ORDER_TYPES) else OrderType.DINE_IN

    def on_button_pressed(self, event: Button.Pressed) -> None:
        method = PaymentMethod.QRIS if event.button.id == "pay-qris" else PaymentMethod.CASH
        name = self.query_one("#customer-name", Input).value
        order_type = self._order_type()
        try:
            event_date = validate_checkout(
                self.lines, name, order_type, self.query_one("#event-date", Input).value
            )
        except CheckoutError as exc:
            self.query_one("#checkout-error", Static).update(exc.message)
            return

        table = self.query_one("#table-number", Input).value.strip()
        self.dismiss(
            CheckoutForm(
                customer_name=name.strip(),
                order_type=order_type,
                payment_method=method,
                table_number=table if order_type is OrderType.DINE_IN and table else None,
                event_date=event_date,
            )
        )

    def action_cancel(self) -> None:
        self.dismiss(None)


class NoteModal(ModalScreen[str | None]):
    """Free-text request for one cart line."""

    BINDINGS = [("escape", "cancel", "Cancel")]

    CSS = _MODAL_CSS.format(name="NoteModal")

    def __init__(self, item_name: str, current: str = "") -> None:
        super().__init__()
        self.item_name = item_name
        self.current = current

    def compose(self) -> ComposeResult:
        with Container(classes="dialog"):
            yield Static(f"Catatan: {self.item_name}", classes="dialog-title")
            yield Input(value=self.current, placeholder="contoh: less salt", id="note-input")
            yield Static("Enter simpan, Esc batal", classes="dialog-help")

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.dismiss(event.value.strip())

    def action_cancel(self) -> None:
        self.dismiss(None)
