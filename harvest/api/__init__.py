"""
API — marketplace resource table.

Every resource kind with its route, the tags it provides and the tags
its writes invalidate:

    Lands        GET  lands                     Lands, Lands:<id>
    UserLands    GET  lands/user/{user_id}      UserLands:<user_id>
    Products     GET  store/products            Products, Products:<id>
    UserOrders   GET  store/orders/user         Orders
    AllOrders    GET  store/orders/all          Orders, Orders:<id>
    Profile      GET  profile/{user_id}         Profile:<user_id>

    createLand     → Lands, UserLands:<owner_id>
    updateLand     → Lands:<land_id>, UserLands:<owner_id>
    deleteLand     → Lands, UserLands:<owner_id>
    createProduct  → Products
    updateProduct  → Products, Products:<product_id>
    deleteProduct  → Products
    placeOrder     → Orders
    updateProfile  → Profile:<user_id>
    login / signup → (credentials stored in the session)
"""

from __future__ import annotations

from harvest.api._models import (
    Coordinates,
    Address,
    UserProfile,
    AuthResponse,
    Land,
    Product,
    OrderItem,
    Order,
    PlacedOrder,
)
from harvest.api._lands import (
    GET_LANDS,
    GET_USER_LANDS,
    CREATE_LAND,
    UPDATE_LAND,
    DELETE_LAND,
    ROUTES as _LAND_ROUTES,
)
from harvest.api._store import (
    GET_PRODUCTS,
    CREATE_PRODUCT,
    UPDATE_PRODUCT,
    DELETE_PRODUCT,
    GET_USER_ORDERS,
    GET_ALL_ORDERS,
    PLACE_ORDER,
    ROUTES as _STORE_ROUTES,
)
from harvest.api._users import (
    GET_PROFILE,
    UPDATE_PROFILE,
    LOGIN,
    SIGNUP,
    ROUTES as _USER_ROUTES,
)

ROUTES = {**_LAND_ROUTES, **_STORE_ROUTES, **_USER_ROUTES}
"""Resource kind → REST route, for HttpTransport."""

__all__ = (
    # Models
    "Coordinates",
    "Address",
    "UserProfile",
    "AuthResponse",
    "Land",
    "Product",
    "OrderItem",
    "Order",
    "PlacedOrder",
    # Lands
    "GET_LANDS",
    "GET_USER_LANDS",
    "CREATE_LAND",
    "UPDATE_LAND",
    "DELETE_LAND",
    # Store
    "GET_PRODUCTS",
    "CREATE_PRODUCT",
    "UPDATE_PRODUCT",
    "DELETE_PRODUCT",
    "GET_USER_ORDERS",
    "GET_ALL_ORDERS",
    "PLACE_ORDER",
    # Users
    "GET_PROFILE",
    "UPDATE_PROFILE",
    "LOGIN",
    "SIGNUP",
    # Routes
    "ROUTES",
)
