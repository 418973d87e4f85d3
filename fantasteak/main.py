"""Entry point: open the customer, cashier or admin screen."""

from __future__ import annotations

import argparse
import logging

from fantasteak.config import DB_PATH, configure_logging
from fantasteak.printer import BlePrinterTransport, UsbPrinterTransport
from fantasteak.store import SqliteOrderStore

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fantasteak", description="Fantasteak order desk")
    parser.add_argument("--role", choices=("customer", "cashier", "admin"), default="customer")
    parser.add_argument("--db", default=DB_PATH, help="shared order database file")
    parser.add_argument("--printer", choices=("ble", "usb"), default="ble", help="cashier receipt printer")
    parser.add_argument("--log", default=None, help="debug log file")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Run the Textual application for one role."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log)
    store = SqliteOrderStore(args.db)
    logger.info("starting %s on %s", args.role, args.db)

    if args.role == "cashier":
        from fantasteak.cashier_app import CashierApp

        transport = BlePrinterTransport() if args.printer == "ble" else UsbPrinterTransport()
        CashierApp(store, transport).run()
    elif args.role == "admin":
        from fantasteak.admin_app import AdminApp

        AdminApp(store).run()
    else:
        from fantasteak.customer_app import CustomerApp

        CustomerApp(store).run()


if __name__ == "__main__":
    main()
