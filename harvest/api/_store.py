"""
Pest-control store — products and orders.
"""

from __future__ import annotations

from collections.abc import Iterable

from harvest import mutation as M
from harvest import query as Q
from harvest._types import Params
from harvest.api._models import (
    Order,
    PlacedOrder,
    Product,
    parse_orders,
    parse_products,
)
from harvest.api._params import require
from harvest.tags import tag
from harvest.transport import Route

# ═══════════════════════════════════════════════════════════════════════════════
# Products
# ═══════════════════════════════════════════════════════════════════════════════


def _product_tags(params: Params, products: list[Product] | None) -> Iterable[str]:
    yield "Products"
    for product in products or ():
        yield tag("Products", product.id)


GET_PRODUCTS = Q.define("Products").decoding(parse_products).provides(_product_tags)
"""Catalog. Optional params: {"category": ...}."""

CREATE_PRODUCT = (
    M.define("createProduct")
    .decoding(Product.model_validate)
    .invalidates(["Products"])
)

UPDATE_PRODUCT = (
    M.define("updateProduct")
    .requires("product_id")
    .decoding(Product.model_validate)
    .invalidates(
        lambda params, _: ["Products", tag("Products", require(params, "product_id"))]
    )
)

DELETE_PRODUCT = M.define("deleteProduct").requires("product_id").invalidates("Products")


# ═══════════════════════════════════════════════════════════════════════════════
# Orders
# ═══════════════════════════════════════════════════════════════════════════════


def _all_orders_tags(params: Params, orders: list[Order] | None) -> Iterable[str]:
    for order in orders or ():
        yield tag("Orders", order.id)
    yield "Orders"


GET_USER_ORDERS = Q.define("UserOrders").decoding(parse_orders).provides(["Orders"])

GET_ALL_ORDERS = Q.define("AllOrders").decoding(parse_orders).provides(_all_orders_tags)

PLACE_ORDER = (
    M.define("placeOrder")
    .decoding(PlacedOrder.model_validate)
    .invalidates(["Orders"])
)


ROUTES = {
    GET_PRODUCTS.kind: Route("GET", "store/products"),
    CREATE_PRODUCT.kind: Route("POST", "store/products/admin"),
    UPDATE_PRODUCT.kind: Route("PUT", "store/products/admin/{product_id}"),
    DELETE_PRODUCT.kind: Route("DELETE", "store/products/admin/{product_id}"),
    GET_USER_ORDERS.kind: Route("GET", "store/orders/user"),
    GET_ALL_ORDERS.kind: Route("GET", "store/orders/all"),
    PLACE_ORDER.kind: Route("POST", "store/orders"),
}


__all__ = (
    "GET_PRODUCTS",
    "CREATE_PRODUCT",
    "UPDATE_PRODUCT",
    "DELETE_PRODUCT",
    "GET_USER_ORDERS",
    "GET_ALL_ORDERS",
    "PLACE_ORDER",
    "ROUTES",
)
