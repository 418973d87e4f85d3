"""Printer transports that push ESC/POS bytes to a thermal printer.

Each ``print`` call is single-shot: no retry, no queue, and concurrent calls
are not serialized. The cashier screen keeps one print in flight at a time
and lets the operator retry by hand.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Protocol, Sequence

from fantasteak.config import (
    PRINTER_BLE_CHARACTERISTIC_ID,
    PRINTER_BLE_CHUNK_SIZE,
    PRINTER_BLE_SCAN_TIMEOUT_S,
    PRINTER_BLE_SERVICE_ID,
    PRINTER_USB_PRODUCT_ID,
    PRINTER_USB_VENDOR_ID,
)
from fantasteak.models import Order
from fantasteak.receipt import receipt_bytes

logger = logging.getLogger(__name__)

_BLUETOOTH_BASE_UUID = "0000{:04x}-0000-1000-8000-00805f9b34fb"


def bluetooth_uuid(short_id: int) -> str:
    """Expand a 16-bit assigned id to its full 128-bit UUID string."""
    return _BLUETOOTH_BASE_UUID.format(short_id)


class PrintFailure(str, Enum):
    NO_DEVICE = "NO_DEVICE"
    CONNECTION_REFUSED = "CONNECTION_REFUSED"
    WRITE_REJECTED = "WRITE_REJECTED"
    RADIO_UNAVAILABLE = "RADIO_UNAVAILABLE"


FAILURE_MESSAGES: dict[PrintFailure, str] = {
    PrintFailure.NO_DEVICE: "Printer tidak ditemukan. Pastikan printer menyala dan sudah dipasangkan.",
    PrintFailure.CONNECTION_REFUSED: "Gagal terhubung ke printer. Matikan lalu nyalakan printer, kemudian coba lagi.",
    PrintFailure.WRITE_REJECTED: "Printer menolak data struk. Periksa kertas dan coba cetak ulang.",
    PrintFailure.RADIO_UNAVAILABLE: "Bluetooth tidak tersedia. Pastikan Bluetooth perangkat ini aktif.",
}


@dataclass(frozen=True)
class PrintResult:
    """Outcome of one print attempt."""

    ok: bool
    failure: PrintFailure | None = None
    message: str = ""

    @classmethod
    def success(cls) -> PrintResult:
        return cls(ok=True, message="Struk tercetak")

    @classmethod
    def failed(cls, failure: PrintFailure, detail: object = None) -> PrintResult:
        logger.warning("print failed: %s (%s)", failure.value, detail)
        return cls(ok=False, failure=failure, message=FAILURE_MESSAGES[failure])


class PrinterTransport(Protocol):
    async def print(self, payload: bytes) -> PrintResult: ...


DevicePicker = Callable[[Sequence[Any]], "Any | Awaitable[Any]"]


def check_printer_dependencies() -> tuple[bool, str]:
    """Check whether printer dependencies are importable."""
    try:
        import bleak  # noqa: F401
        from escpos.printer import Dummy  # noqa: F401
    except Exception as exc:
        return (False, f"Printer deps unavailable: {exc}")
    return (True, "Printer ready")


class BlePrinterTransport:
    """Bluetooth LE thermal printer reached through bleak.

    The printer is found by its advertised service id; ``device_picker``
    lets the operator choose when several printers answer, and returning
    ``None`` from it counts as no device.
    """

    def __init__(
        self,
        service_id: int = PRINTER_BLE_SERVICE_ID,
        characteristic_id: int = PRINTER_BLE_CHARACTERISTIC_ID,
        scan_timeout: float = PRINTER_BLE_SCAN_TIMEOUT_S,
        chunk_size: int = PRINTER_BLE_CHUNK_SIZE,
        device_picker: DevicePicker | None = None,
    ) -> None:
        self.service_uuid = bluetooth_uuid(service_id)
        self.characteristic_uuid = bluetooth_uuid(characteristic_id)
        self.scan_timeout = scan_timeout
        self.chunk_size = max(1, chunk_size)
        self.device_picker = device_picker

    async def _pick(self, devices: Sequence[Any]) -> Any:
        if not devices:
            return None
        if self.device_picker is None:
            return devices[0]
        choice = self.device_picker(devices)
        if inspect.isawaitable(choice):
            choice = await choice
        return choice

    async def print(self, payload: bytes) -> PrintResult:
        from bleak import BleakClient, BleakScanner
        from bleak.exc import BleakError

        try:
            devices = await BleakScanner.discover(timeout=self.scan_timeout, service_uuids=[self.service_uuid])
        except (BleakError, OSError) as exc:
            return PrintResult.failed(PrintFailure.RADIO_UNAVAILABLE, exc)

        try:
            device = await self._pick(devices)
        except Exception as exc:
            return PrintResult.failed(PrintFailure.NO_DEVICE, exc)
        if device is None:
            return PrintResult.failed(PrintFailure.NO_DEVICE, f"{len(devices)} found")

        client = BleakClient(device)
        try:
            await client.connect()
        except (BleakError, OSError, asyncio.TimeoutError) as exc:
            return PrintResult.failed(PrintFailure.CONNECTION_REFUSED, exc)

        try:
            characteristic = client.services.get_characteristic(self.characteristic_uuid)
            if characteristic is None:
                return PrintResult.failed(PrintFailure.WRITE_REJECTED, f"no characteristic {self.characteristic_uuid}")
            with_response = "write-without-response" not in characteristic.properties
            for start in range(0, len(payload), self.chunk_size):
                chunk = payload[start : start + self.chunk_size]
                await client.write_gatt_char(characteristic, chunk, response=with_response)
        except (BleakError, OSError, asyncio.TimeoutError) as exc:
            return PrintResult.failed(PrintFailure.WRITE_REJECTED, exc)
        finally:
            try:
                await client.disconnect()
            except (BleakError, OSError) as exc:
                logger.debug("disconnect after print failed: %s", exc)

        logger.info("printed %d bytes to %s", len(payload), getattr(device, "address", device))
        return PrintResult.success()


class UsbPrinterTransport:
    """Wired thermal printer through python-escpos."""

    def __init__(self, vendor_id: int = PRINTER_USB_VENDOR_ID, product_id: int = PRINTER_USB_PRODUCT_ID) -> None:
        self.vendor_id = vendor_id
        self.product_id = product_id

    def _send(self, payload: bytes) -> None:
        from escpos.printer import Usb

        printer = Usb(self.vendor_id, self.product_id)
        try:
            # The payload is finished ESC/POS; text() would re-encode it.
            printer._raw(payload)
        finally:
            printer.close()

    async def print(self, payload: bytes) -> PrintResult:
        from escpos.exceptions import DeviceNotFoundError, USBNotFoundError

        try:
            await asyncio.to_thread(self._send, payload)
        except (DeviceNotFoundError, USBNotFoundError) as exc:
            return PrintResult.failed(PrintFailure.NO_DEVICE, exc)
        except OSError as exc:
            return PrintResult.failed(PrintFailure.WRITE_REJECTED, exc)
        return PrintResult.success()


async def print_receipt(order: Order, transport: PrinterTransport) -> PrintResult:
    """Format ``order`` and send it once."""
    return await transport.print(receipt_bytes(order))
