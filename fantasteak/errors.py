"""Exceptions raised across store, lifecycle and checkout boundaries."""

from __future__ import annotations


class StoreError(RuntimeError):
    """The order store could not be read or written."""


class PartialOrderError(StoreError):
    """The order row was written but its line rows were not.

    The order is left in the store with zero lines and must be corrected
    by an operator.
    """

    def __init__(self, order_id: str, cause: BaseException | None = None) -> None:
        super().__init__(f"Order {order_id} saved without its items: {cause}")
        self.order_id = order_id
        self.cause = cause


class InvalidTransition(ValueError):
    """A status change that the order lifecycle does not allow."""

    def __init__(self, current: str, target: str, role: str) -> None:
        super().__init__(f"{role} cannot move an order from {current} to {target}")
        self.current = current
        self.target = target
        self.role = role


class CheckoutError(ValueError):
    """Checkout form input that blocks order submission."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
