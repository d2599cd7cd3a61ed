"""
Cart derivation — priced lines joined from the product cache.

Pure: reads the quantity map and a product entry snapshot, returns a
summary. Nothing here is cached or mutated.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from harvest.store import CacheEntry, Status


class Priced(Protocol):
    """What the derivation needs from a product."""

    @property
    def id(self) -> str: ...

    @property
    def price(self) -> float: ...


@dataclass(frozen=True, slots=True)
class CartLine[P: Priced]:
    product_id: str
    quantity: int
    product: P

    @property
    def subtotal(self) -> float:
        return self.product.price * self.quantity


@dataclass(frozen=True, slots=True)
class CartSummary[P: Priced]:
    lines: tuple[CartLine[P], ...]

    @property
    def total(self) -> float:
        return sum((line.subtotal for line in self.lines), 0.0)

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def order_payload(self) -> dict[str, Any]:
        """placeOrder body with prices frozen at purchase."""
        return {
            "items": [
                {
                    "product_id": line.product_id,
                    "quantity": line.quantity,
                    "price_at_purchase": line.product.price,
                }
                for line in self.lines
            ],
            "total_amount": self.total,
        }


def _available[P: Priced](entry: CacheEntry[Any] | None) -> dict[str, P]:
    """Products usable for pricing; empty unless the entry is fresh."""
    if entry is None or entry.status is not Status.SUCCESS or entry.stale:
        return {}
    products: Iterable[P] = entry.data or ()
    return {product.id: product for product in products}


def derive_cart[P: Priced](
    items: Mapping[str, int],
    products: CacheEntry[Any] | None,
) -> CartSummary[P]:
    """
    Join the cart against the product entry.

    Lines keep cart order. A line is dropped when its quantity is not
    positive or its product is not in a fresh product entry.

    Example:
        summary = derive_cart({"p1": 2, "p2": 1}, products_entry)
        summary.total  # 2 * 50 + 1 * 30 = 130
    """
    catalog: dict[str, P] = _available(products)
    lines = tuple(
        CartLine(product_id=product_id, quantity=quantity, product=catalog[product_id])
        for product_id, quantity in items.items()
        if quantity > 0 and product_id in catalog
    )
    return CartSummary(lines=lines)


__all__ = ("Priced", "CartLine", "CartSummary", "derive_cart")
