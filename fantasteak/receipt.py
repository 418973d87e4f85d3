"""Receipt formatting: a structured receipt and the ESC/POS byte stream."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

from escpos.printer import Dummy

from fantasteak.config import RECEIPT_FEED_LINES, RECEIPT_WIDTH_CHARS
from fantasteak.data import (
    ADDRESS_LINES,
    BUSINESS_NAME,
    CLOSING_LINES,
    CONTACT_LINE,
    ORDER_TYPE_LABELS,
    PLACEHOLDER_TABLE,
    TAGLINE,
)
from fantasteak.models import Order, OrderLine

DIVIDER = "-" * RECEIPT_WIDTH_CHARS

_MONTHS_SHORT = ("Jan", "Feb", "Mar", "Apr", "Mei", "Jun", "Jul", "Agu", "Sep", "Okt", "Nov", "Des")
_MONTHS_LONG = (
    "Januari",
    "Februari",
    "Maret",
    "April",
    "Mei",
    "Juni",
    "Juli",
    "Agustus",
    "September",
    "Oktober",
    "November",
    "Desember",
)
_WEEKDAYS = ("Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu", "Minggu")


def format_amount(amount: int) -> str:
    """Group thousands the id-ID way: 935000 -> 935.000."""
    return f"{amount:,}".replace(",", ".")


def format_rupiah(amount: int) -> str:
    return f"Rp {format_amount(amount)}"


def format_order_time(value: datetime | None) -> str:
    if value is None:
        return "-"
    return f"{value.day} {_MONTHS_SHORT[value.month - 1]} {value.year} {value:%H:%M}"


def format_event_date(value: date) -> str:
    return f"{_WEEKDAYS[value.weekday()]}, {value.day} {_MONTHS_LONG[value.month - 1]} {value.year}"


@dataclass(frozen=True)
class ReceiptLine:
    """One order line as it appears on the receipt."""

    label: str
    subtotal: int
    note: str | None = None


@dataclass
class Receipt:
    """Everything a receipt shows, in display order."""

    header: list[str]
    meta: list[tuple[str, str]]
    lines: list[ReceiptLine]
    total: int
    footer: list[str] = field(default_factory=list)


def item_label(line: OrderLine) -> str:
    return f"{line.quantity}x {line.name_at_time.upper()}"


def build_receipt(order: Order) -> Receipt:
    meta = [
        ("Pelanggan", order.customer_name),
        ("No", order.id),
        ("Pesan", format_order_time(order.created_at)),
        ("Meja", order.table_number or PLACEHOLDER_TABLE),
        ("Tipe", ORDER_TYPE_LABELS[order.order_type.value]),
    ]
    if order.event_date is not None:
        meta.append(("Tgl Acara (PO)", format_event_date(order.event_date)))
    return Receipt(
        header=[BUSINESS_NAME, TAGLINE, *ADDRESS_LINES, CONTACT_LINE],
        meta=meta,
        lines=[ReceiptLine(item_label(line), line.subtotal, line.notes or None) for line in order.items],
        total=order.total,
        footer=list(CLOSING_LINES),
    )


def receipt_bytes(order: Order) -> bytes:
    """Render ``order`` as ESC/POS commands for the thermal printer.

    Field order, casing and divider placement are fixed; existing printers
    and reprints depend on this exact layout.
    """
    printer = Dummy()
    printer.hw("INIT")

    printer.set(align="center")
    printer.textln(BUSINESS_NAME)
    printer.textln(TAGLINE)
    for line in ADDRESS_LINES:
        printer.textln(line)
    printer.textln(CONTACT_LINE)
    printer.textln(DIVIDER)

    printer.set(align="left")
    printer.textln(f"Pelanggan: {order.customer_name}")
    printer.textln(f"No: {order.id}")
    printer.textln(f"Meja: {order.table_number or PLACEHOLDER_TABLE}")
    printer.textln(f"Tipe: {ORDER_TYPE_LABELS[order.order_type.value]}")
    printer.textln(DIVIDER)

    for line in order.items:
        printer.set(align="left")
        printer.textln(item_label(line))
        printer.set(align="right")
        printer.textln(format_rupiah(line.subtotal))
        if line.notes:
            printer.set(align="left")
            printer.textln(f"* {line.notes}")

    printer.set(align="left")
    printer.textln(DIVIDER)
    printer.set(align="right", bold=True)
    printer.textln(f"GRAND TOTAL: {format_rupiah(order.total)}")
    printer.set(align="center", bold=False)
    for line in CLOSING_LINES:
        printer.textln(line)
    printer.ln(RECEIPT_FEED_LINES)
    printer.cut()
    return printer.output
