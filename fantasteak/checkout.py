"""Customer cart and checkout validation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Sequence
from urllib.parse import quote

from fantasteak.config import WHATSAPP_NUMBER
from fantasteak.data import BUSINESS_NAME, ORDER_TYPE_LABELS
from fantasteak.errors import CheckoutError
from fantasteak.models import MenuItem, OrderLine, OrderType, PaymentMethod
from fantasteak.receipt import format_rupiah

if TYPE_CHECKING:
    from fantasteak.sync import SyncClient

MISSING_NAME = "Nama wajib diisi!"
MISSING_EVENT_DATE = "Harap tentukan tanggal untuk Pre-Order!"
EMPTY_CART = "Keranjang masih kosong!"


@dataclass
class CartEntry:
    """A menu item in the cart with its quantity and note."""

    item: MenuItem
    quantity: int = 1
    notes: str = ""


class Cart:
    """Customer cart keyed by menu item id, in the order items were added."""

    def __init__(self) -> None:
        self.entries: list[CartEntry] = []

    def __len__(self) -> int:
        return len(self.entries)

    def _entry(self, menu_id: str) -> CartEntry | None:
        return next((entry for entry in self.entries if entry.item.id == menu_id), None)

    def add(self, item: MenuItem) -> bool:
        """Add one of ``item``; unavailable items are refused."""
        if not item.is_available:
            return False
        entry = self._entry(item.id)
        if entry is None:
            self.entries.append(CartEntry(item))
        else:
            entry.quantity += 1
        return True

    def remove(self, menu_id: str) -> None:
        """Take one away; the entry disappears at zero."""
        entry = self._entry(menu_id)
        if entry is None:
            return
        if entry.quantity > 1:
            entry.quantity -= 1
        else:
            self.entries.remove(entry)

    def set_notes(self, menu_id: str, notes: str) -> None:
        entry = self._entry(menu_id)
        if entry is not None:
            entry.notes = notes

    def quantity_of(self, menu_id: str) -> int:
        entry = self._entry(menu_id)
        return entry.quantity if entry else 0

    @property
    def total(self) -> int:
        return sum(entry.item.price * entry.quantity for entry in self.entries)

    def to_lines(self) -> list[OrderLine]:
        """Snapshot names and prices as they are now."""
        return [
            OrderLine(
                menu_id=entry.item.id,
                name_at_time=entry.item.name,
                price_at_time=entry.item.price,
                quantity=entry.quantity,
                notes=entry.notes.strip(),
            )
            for entry in self.entries
        ]

    def clear(self) -> None:
        self.entries.clear()


def parse_event_date(value: str | date | None) -> date | None:
    if isinstance(value, date):
        return value
    if not value or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


def validate_checkout(
    lines: Sequence[OrderLine],
    customer_name: str,
    order_type: OrderType,
    event_date: str | date | None = None,
) -> date | None:
    """Raise ``CheckoutError`` for input that must not reach the store.

    Returns the parsed event date for pre-orders, otherwise ``None``.
    """
    if not customer_name or not customer_name.strip():
        raise CheckoutError(MISSING_NAME)
    parsed = None
    if order_type is OrderType.PRE_ORDER:
        parsed = parse_event_date(event_date)
        if parsed is None:
            raise CheckoutError(MISSING_EVENT_DATE)
    if not lines:
        raise CheckoutError(EMPTY_CART)
    return parsed


async def checkout(
    sync: SyncClient,
    cart: Cart,
    customer_name: str,
    order_type: OrderType,
    payment_method: PaymentMethod,
    table_number: str | None = None,
    event_date: str | date | None = None,
) -> str:
    """Validate the form, create the order and empty the cart."""
    lines = cart.to_lines()
    parsed_date = validate_checkout(lines, customer_name, order_type, event_date)
    order_id = await sync.create_order(
        lines,
        customer_name,
        order_type,
        payment_method,
        table_number=table_number,
        event_date=parsed_date,
    )
    cart.clear()
    return order_id


def qris_confirmation_url(
    customer_name: str,
    total: int,
    order_type: OrderType,
    table_number: str | None = None,
    event_date: date | None = None,
) -> str:
    """WhatsApp link a QRIS customer follows to send their payment proof."""
    lines = [
        "*KONFIRMASI PEMBAYARAN QRIS*",
        "------------------------------------------",
        f"Halo Admin *{BUSINESS_NAME.title()}*, saya *{customer_name.strip()}*.",
        "Saya ingin mengonfirmasi pembayaran pesanan saya melalui QRIS.",
        "",
        "*Detail Pesanan:*",
        f"- Total Bayar: *{format_rupiah(total)}*",
        f"- Tipe Pesanan: *{ORDER_TYPE_LABELS[order_type.value]}*",
    ]
    if table_number:
        lines.append(f"- Nomor Meja: *{table_number}*")
    if event_date:
        lines.append(f"- Tanggal Acara: *{event_date.strftime('%d/%m/%Y')}*")
    lines.extend(
        [
            "",
            "*Mohon tunggu sebentar, berikut saya lampirkan Bukti Screenshot (SS) pembayarannya di bawah ini:*",
            "------------------------------------------",
        ]
    )
    message = "\n".join(lines)
    return f"https://wa.me/{WHATSAPP_NUMBER}?text={quote(message)}"
