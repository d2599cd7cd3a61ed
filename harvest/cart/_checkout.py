"""
Checkout — turn the derived cart into an order.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

import structlog
from kungfu import Error, LazyCoroResult, Ok, Result

from harvest.api import PLACE_ORDER, PlacedOrder
from harvest.cart._view import CartView
from harvest.mutation import MutationExecutor
from harvest.transport import TransportError

log = structlog.get_logger("harvest.cart")


class CheckoutErrorKind(Enum):
    """Checkout error kinds."""

    EMPTY_CART = auto()  # Nothing priceable in the cart
    REJECTED = auto()  # placeOrder failed


@dataclass(frozen=True, slots=True)
class CheckoutError:
    """Checkout error. cause holds the transport error for REJECTED."""

    kind: CheckoutErrorKind
    message: str
    cause: TransportError | None = None


def checkout(
    mutations: MutationExecutor,
    view: CartView,
) -> LazyCoroResult[PlacedOrder, CheckoutError]:
    """
    Place an order for the current derived cart.

    Only lines priced from a fresh catalog are ordered. The cart is
    cleared after the server accepts the order and kept otherwise.

    Example:
        match await checkout(ctx.mutations, view):
            case Ok(placed):
                print(placed.order_id)
            case Error(e):
                print(e.message)
    """

    async def execute() -> Result[PlacedOrder, CheckoutError]:
        summary = view.current
        if summary.is_empty:
            return Error(CheckoutError(CheckoutErrorKind.EMPTY_CART, "Your cart is empty. Cannot proceed."))

        result = await mutations.mutate(PLACE_ORDER, body=summary.order_payload())
        match result:
            case Ok(placed):
                log.debug("cart.checked_out", order_id=placed.order_id, total=summary.total)
                view.cart.clear()
                return Ok(placed)
            case Error(e):
                return Error(CheckoutError(CheckoutErrorKind.REJECTED, e.detail, cause=e))

    return LazyCoroResult(execute)


__all__ = ("CheckoutErrorKind", "CheckoutError", "checkout")
