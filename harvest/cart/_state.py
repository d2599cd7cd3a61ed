"""
Cart state — product id → quantity for the current session.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

import structlog

log = structlog.get_logger("harvest.cart")


def _check_quantity(quantity: int) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise TypeError(f"quantity must be an int, got {type(quantity).__name__}")
    return quantity


# ═══════════════════════════════════════════════════════════════════════════════
# Cart State: Pure Transitions
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CartState:
    """
    Immutable cart contents.

    Invariant: every quantity is > 0. Transitions drop entries that
    would reach 0 instead of keeping them.
    """

    items: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))

    def _with(self, items: dict[str, int]) -> CartState:
        return CartState(items=MappingProxyType(items))

    def add(self, product_id: str) -> CartState:
        """One more unit; inserts the product if absent."""
        items = dict(self.items)
        items[product_id] = items.get(product_id, 0) + 1
        return self._with(items)

    def remove(self, product_id: str) -> CartState:
        """One unit less; deletes the entry at 0. Absent ids are a no-op."""
        if product_id not in self.items:
            return self
        items = dict(self.items)
        if items[product_id] > 1:
            items[product_id] -= 1
        else:
            del items[product_id]
        return self._with(items)

    def set_quantity(self, product_id: str, quantity: int) -> CartState:
        """Explicit quantity; <= 0 deletes the entry."""
        quantity = _check_quantity(quantity)
        items = dict(self.items)
        if quantity > 0:
            items[product_id] = quantity
        else:
            items.pop(product_id, None)
        return self._with(items)

    def clear(self) -> CartState:
        return CartState()

    @property
    def item_count(self) -> int:
        return sum(self.items.values())

    def __len__(self) -> int:
        return len(self.items)


# ═══════════════════════════════════════════════════════════════════════════════
# Cart Store: Session Holder
# ═══════════════════════════════════════════════════════════════════════════════

type CartListener = Callable[[CartState], None]


class CartStore:
    """
    Holds the session's CartState and notifies listeners on change.

    Example:
        cart = CartStore()
        cart.add("p1")
        cart.set_quantity("p1", 3)
        cart.state.items  # {"p1": 3}
    """

    def __init__(self) -> None:
        self._state = CartState()
        self._listeners: list[CartListener] = []

    @property
    def state(self) -> CartState:
        return self._state

    @property
    def items(self) -> Mapping[str, int]:
        return self._state.items

    def _commit(self, state: CartState) -> CartState:
        if state == self._state:
            return state
        self._state = state
        for listener in tuple(self._listeners):
            listener(state)
        return state

    def add(self, product_id: str) -> CartState:
        return self._commit(self._state.add(product_id))

    def remove(self, product_id: str) -> CartState:
        return self._commit(self._state.remove(product_id))

    def set_quantity(self, product_id: str, quantity: int) -> CartState:
        return self._commit(self._state.set_quantity(product_id, quantity))

    def clear(self) -> CartState:
        log.debug("cart.cleared", lines=len(self._state))
        return self._commit(self._state.clear())

    def listen(self, listener: CartListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove


__all__ = ("CartState", "CartStore", "CartListener")
