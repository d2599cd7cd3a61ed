"""
Cart view — live projection of cart + product catalog.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from harvest._types import Params
from harvest.cart._derive import CartSummary, derive_cart
from harvest.cart._state import CartState, CartStore
from harvest.query import QueryDefinition, QueryExecutor, Subscription
from harvest.store import CacheEntry

type SummaryListener = Callable[[CartSummary[Any]], None]


class CartView:
    """
    Recomputes the cart summary whenever the cart or the product entry changes.

    Subscribes to the product query like any other consumer, so the
    catalog is fetched on open and refetched after product writes.
    The summary is never stored; `current` derives it on every access.

    Example:
        view = CartView(cart, queries, api.GET_PRODUCTS)
        view.listen(render)
        ...
        view.close()
    """

    def __init__(
        self,
        cart: CartStore,
        queries: QueryExecutor,
        products: QueryDefinition[Any],
        params: Params = None,
    ) -> None:
        self._cart = cart
        self._queries = queries
        self._products = products
        self._params = params
        self._listeners: list[SummaryListener] = []
        self._remove_cart_listener = cart.listen(self._on_cart)
        self._subscription: Subscription = queries.subscribe(products, params, self._on_products)

    @property
    def cart(self) -> CartStore:
        return self._cart

    @property
    def subscription(self) -> Subscription:
        return self._subscription

    @property
    def active(self) -> bool:
        """False once closed or once its product subscription was detached."""
        return self._subscription.active

    @property
    def current(self) -> CartSummary[Any]:
        return derive_cart(self._cart.items, self._queries.select(self._products, self._params))

    def listen(self, listener: SummaryListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _emit(self, summary: CartSummary[Any]) -> None:
        for listener in tuple(self._listeners):
            listener(summary)

    def _on_cart(self, state: CartState) -> None:
        self._emit(derive_cart(state.items, self._queries.select(self._products, self._params)))

    def _on_products(self, entry: CacheEntry[Any]) -> None:
        self._emit(derive_cart(self._cart.items, entry))

    def close(self) -> None:
        self._remove_cart_listener()
        self._subscription.unsubscribe()
        self._listeners.clear()


__all__ = ("CartView", "SummaryListener")
