"""Rich text rendering for orders, receipts, the cart and the dashboard."""

from __future__ import annotations

from rich.text import Text

from fantasteak.analytics import SalesStats
from fantasteak.checkout import Cart
from fantasteak.data import ORDER_TYPE_LABELS
from fantasteak.models import MenuItem, Order, OrderStatus
from fantasteak.receipt import DIVIDER, Receipt, format_rupiah


def status_style(status: OrderStatus) -> str:
    """Return a consistent badge style for order statuses."""
    if status is OrderStatus.PENDING:
        return "bold #0b1f0f on #f0a830"
    if status is OrderStatus.CONFIRMED:
        return "bold #ffffff on #2f6db5"
    if status is OrderStatus.CANCELLED:
        return "bold #ffffff on #b23a48"
    return "bold #0b1f0f on #5fbf72"


def format_order_card(order: Order) -> Text:
    """Queue entry: status, id, customer, type and each line with its note."""
    text = Text()
    text.append(f" {order.status.value} ", style=status_style(order.status))
    text.append(f" {order.id}  ", style="dim")
    text.append(order.customer_name.upper(), style="bold")
    text.append(f"  {format_rupiah(order.total)}")

    kind = ORDER_TYPE_LABELS[order.order_type.value]
    if order.table_number:
        kind = f"{kind} (Mj {order.table_number})"
    text.append(f"\n      {kind}", style="#f0a830")
    if order.event_date:
        text.append(f"  PO {order.event_date:%d/%m/%Y}", style="cyan")

    if not order.items:
        text.append("\n      (tanpa item)", style="bold red")
    for line in order.items:
        text.append(f"\n      {line.quantity}x {line.name_at_time}")
        if line.notes:
            text.append(f"  REQ: {line.notes}", style="italic #f0a830")
    return text


def format_receipt(receipt: Receipt) -> Text:
    text = Text(justify="left")
    for idx, line in enumerate(receipt.header):
        text.append(f"{line}\n", style="bold" if idx == 0 else "dim")
    text.append(f"{DIVIDER}\n")
    for label, value in receipt.meta:
        text.append(f"{label}: ", style="dim")
        text.append(f"{value}\n")
    text.append(f"{DIVIDER}\n")
    for line in receipt.lines:
        text.append(f"{line.label}\n")
        text.append(f"{format_rupiah(line.subtotal):>{len(DIVIDER)}}\n")
        if line.note:
            text.append(f"* {line.note}\n", style="italic")
    text.append(f"{DIVIDER}\n")
    text.append(f"{'GRAND TOTAL: ' + format_rupiah(receipt.total):>{len(DIVIDER)}}\n", style="bold")
    for line in receipt.footer:
        text.append(f"\n{line}", style="dim")
    return text


def format_menu_item(item: MenuItem, quantity: int = 0) -> Text:
    text = Text()
    if item.badge:
        text.append(f" {item.badge} ", style="bold #0b1f0f on #f0a830")
        text.append(" ")
    text.append(item.name, style="bold" if item.is_available else "dim strike")
    text.append(f"  {format_rupiah(item.price)}")
    if quantity:
        text.append(f"  x{quantity}", style="bold #5fbf72")
    return text


def format_cart(cart: Cart) -> Text:
    if not len(cart):
        return Text("(keranjang kosong)", style="dim")
    text = Text()
    for idx, entry in enumerate(cart.entries):
        if idx > 0:
            text.append("\n")
        text.append(f"{entry.quantity}x {entry.item.name}")
        text.append(f"  {format_rupiah(entry.item.price * entry.quantity)}", style="dim")
        if entry.notes:
            text.append(f"\n   * {entry.notes}", style="italic")
    text.append(f"\n\nTotal: {format_rupiah(cart.total)}", style="bold")
    return text


def format_sales(stats: SalesStats, bar_width: int = 24) -> Text:
    text = Text()
    text.append("Pendapatan hari ini: ", style="dim")
    text.append(f"{format_rupiah(stats.today_revenue)} ({stats.today_count} pesanan)\n", style="bold #f0a830")
    text.append("Total pendapatan:    ", style="dim")
    text.append(f"{format_rupiah(stats.total_revenue)}\n\n", style="bold")

    peak = max((day.revenue for day in stats.chart), default=0)
    for day in stats.chart:
        filled = round(bar_width * day.revenue / peak) if peak else 0
        text.append(f"{day.label} ")
        text.append("█" * filled, style="#f0a830")
        text.append(f" {format_rupiah(day.revenue)}\n", style="dim")
    return text
