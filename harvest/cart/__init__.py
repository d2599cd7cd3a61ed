"""
Cart — session quantities priced against the product cache.

    from harvest import cart as K

    view = K.CartView(ctx.cart, ctx.queries, api.GET_PRODUCTS)
    ctx.cart.add(product_id)
    view.current.total
    await K.checkout(ctx.mutations, view)
"""

from __future__ import annotations

from harvest.cart._state import CartState, CartStore, CartListener
from harvest.cart._derive import Priced, CartLine, CartSummary, derive_cart
from harvest.cart._view import CartView, SummaryListener
from harvest.cart._checkout import CheckoutErrorKind, CheckoutError, checkout

__all__ = (
    "CartState",
    "CartStore",
    "CartListener",
    "Priced",
    "CartLine",
    "CartSummary",
    "derive_cart",
    "CartView",
    "SummaryListener",
    "CheckoutErrorKind",
    "CheckoutError",
    "checkout",
)
