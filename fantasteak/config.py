"""Runtime configuration defaults for the store, sync loop and printers."""

from __future__ import annotations

import logging
import os
from pathlib import Path


def _env(name: str, default: str) -> str:
    return os.environ.get(name, "").strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    return int(raw, 0)


DB_PATH = _env("FANTASTEAK_DB_PATH", "data/fantasteak.db")
LOG_PATH = _env("FANTASTEAK_LOG_PATH", "/tmp/fantasteak-debug.log")

# Change feed polling; every client process polls the shared store.
CHANGE_POLL_INTERVAL_S = float(_env("FANTASTEAK_POLL_INTERVAL", "0.5"))

# BLE thermal printers commonly advertise 0x18F0 with a writable 0x2AF1.
PRINTER_BLE_SERVICE_ID = _env_int("FANTASTEAK_PRINTER_SERVICE", 0x18F0)
PRINTER_BLE_CHARACTERISTIC_ID = _env_int("FANTASTEAK_PRINTER_CHARACTERISTIC", 0x2AF1)
PRINTER_BLE_SCAN_TIMEOUT_S = float(_env("FANTASTEAK_PRINTER_SCAN_TIMEOUT", "8.0"))
PRINTER_BLE_CHUNK_SIZE = _env_int("FANTASTEAK_PRINTER_CHUNK_SIZE", 180)

PRINTER_USB_VENDOR_ID = _env_int("FANTASTEAK_PRINTER_USB_VENDOR", 0x28E9)
PRINTER_USB_PRODUCT_ID = _env_int("FANTASTEAK_PRINTER_USB_PRODUCT", 0x0289)

# 58mm paper, font A.
RECEIPT_WIDTH_CHARS = 32
RECEIPT_FEED_LINES = 3

WHATSAPP_NUMBER = _env("FANTASTEAK_WHATSAPP_NUMBER", "6285854203343")


def configure_logging(path: str | None = None, level: int = logging.DEBUG) -> None:
    """Send package logs to a debug file; the terminal belongs to the TUI."""
    log_file = Path(path or LOG_PATH)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    root = logging.getLogger("fantasteak")
    root.setLevel(level)
    root.addHandler(handler)
