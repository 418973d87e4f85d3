"""Receipt preview modal with a single-shot print action."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Static

from fantasteak.models import Order
from fantasteak.printer import PrinterTransport, print_receipt
from fantasteak.receipt import build_receipt
from fantasteak.rendering import format_receipt


class ReceiptModal(ModalScreen[None]):
    """Centered receipt preview; P prints, Esc/q closes."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
        ("p", "print", "Print"),
    ]

    CSS = """
    ReceiptModal {
        align: center middle;
        background: $background 60%;
    }

    #receipt-dialog {
        width: 44;
        height: 90%;
        border: round $secondary;
        background: white;
        color: black;
        padding: 1 2;
    }

    #receipt-help {
        margin-top: 1;
        color: #555555;
    }
    """

    def __init__(self, order: Order, transport: PrinterTransport) -> None:
        super().__init__()
        self.order = order
        self.transport = transport
        self.printing = False

    def compose(self) -> ComposeResult:
        with VerticalScroll(id="receipt-dialog"):
            yield Static(format_receipt(build_receipt(self.order)), id="receipt-body")
            yield Static("P cetak, Esc/q tutup", id="receipt-help")

    def action_close(self) -> None:
        self.dismiss()

    async def action_print(self) -> None:
        # One print in flight; the transport does not serialize calls.
        if self.printing:
            return
        self.printing = True
        help_text = self.query_one("#receipt-help", Static)
        help_text.update("Mencetak...")
        try:
            result = await print_receipt(self.order, self.transport)
        finally:
            self.printing = False
        if result.ok:
            help_text.update(f"{result.message}. P cetak ulang, Esc tutup")
            self.app.notify(result.message)
        else:
            help_text.update("Gagal mencetak. P coba lagi, Esc tutup")
            self.app.notify(result.message, severity="error", timeout=8)
