from dataclasses import replace
from datetime import date

from fantasteak.models import OrderType
from fantasteak.receipt import DIVIDER, build_receipt, format_rupiah, receipt_bytes

ESC_INIT = b"\x1b@"
ALIGN_RIGHT = b"\x1ba\x02"
BOLD_ON = b"\x1bE\x01"
CUT = b"\x1dV"


def test_format_rupiah_groups_thousands():
    assert format_rupiah(935000) == "Rp 935.000"
    assert format_rupiah(1250000) == "Rp 1.250.000"
    assert format_rupiah(0) == "Rp 0"


def test_printer_stream_layout(budi_order):
    stream = receipt_bytes(budi_order)
    divider = DIVIDER.encode()

    assert stream.startswith(ESC_INIT)
    header = stream.index(b"FANTASTEAK")
    first_divider = stream.index(divider)
    customer = stream.index(b"Pelanggan: Budi")
    order_id = stream.index(b"No: FT-00012")
    table = stream.index(b"Meja: -")
    order_type = stream.index(b"Tipe: DINE IN")
    wagyu = stream.index(b"2x WAGYU RIBEYE MB9+")
    wagyu_price = stream.index(b"Rp 900.000")
    note = stream.index(b"* less salt")
    lychee = stream.index(b"1x ICED LYCHEE TEA")
    lychee_price = stream.index(b"Rp 35.000")
    total = stream.index(b"GRAND TOTAL: Rp 935.000")
    last_divider = stream.rindex(divider, 0, total)
    cut = stream.rindex(CUT)

    assert header < first_divider < customer < order_id < table < order_type < wagyu
    assert wagyu < wagyu_price < note < lychee < lychee_price < last_divider < total < cut
    assert ALIGN_RIGHT in stream[wagyu:wagyu_price]
    assert BOLD_ON in stream[last_divider:total]
    assert stream.count(divider) == 3


def test_printer_stream_is_deterministic(budi_order):
    assert receipt_bytes(budi_order) == receipt_bytes(budi_order)


def test_table_number_printed_when_present(budi_order):
    stream = receipt_bytes(replace(budi_order, table_number="12"))
    assert b"Meja: 12" in stream


def test_structured_receipt(budi_order):
    receipt = build_receipt(replace(budi_order, order_type=OrderType.PRE_ORDER, event_date=date(2026, 12, 24)))

    assert receipt.header[0] == "FANTASTEAK"
    meta = dict(receipt.meta)
    assert meta["Pelanggan"] == "Budi"
    assert meta["No"] == "FT-00012"
    assert meta["Meja"] == "-"
    assert meta["Pesan"] == "19 Okt 2026 12:30"
    assert meta["Tgl Acara (PO)"] == "Kamis, 24 Desember 2026"
    assert [(line.label, line.subtotal, line.note) for line in receipt.lines] == [
        ("2x WAGYU RIBEYE MB9+", 900000, "less salt"),
        ("1x ICED LYCHEE TEA", 35000, None),
    ]
    assert receipt.total == 935000
    assert receipt.footer
