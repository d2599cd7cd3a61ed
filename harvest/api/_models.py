"""
Marketplace payload models.

Mongo `_id` fields are exposed as `id`.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from harvest.auth import AuthUser, Role


class _Document(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# ═══════════════════════════════════════════════════════════════════════════════
# Location
# ═══════════════════════════════════════════════════════════════════════════════


class Coordinates(_Document):
    type: Literal["Point"] = "Point"
    values: tuple[float, float]
    """[longitude, latitude]"""


class Address(_Document):
    street_address: str
    city: str
    state_province: str
    postal_code: str
    country: str
    coordinates: Coordinates | None = None
    landmark: str | None = None
    parcel_id: str | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Users
# ═══════════════════════════════════════════════════════════════════════════════


class UserProfile(_Document):
    id: str = Field(alias="_id")
    email: str
    full_name: str
    role: Role
    phone: str | None = None
    address: Address | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AuthResponse(_Document):
    """Login / signup response."""

    message: str | None = None
    token: str
    role: Role
    user_id: str
    full_name: str

    def to_user(self) -> AuthUser:
        return AuthUser(id=self.user_id, role=self.role, full_name=self.full_name)


# ═══════════════════════════════════════════════════════════════════════════════
# Lands
# ═══════════════════════════════════════════════════════════════════════════════


class Land(_Document):
    id: str = Field(alias="_id")
    owner_id: str
    title: str
    description: str | None = None
    location: Address | None = None
    area: float
    price_per_acre: float
    soil_type: str | None = None
    water_availability: Literal["high", "medium", "low", "seasonal"] | None = None
    status: Literal["available", "rented", "maintenance"] = "available"
    created_at: datetime | None = None
    updated_at: datetime | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Store
# ═══════════════════════════════════════════════════════════════════════════════


class Product(_Document):
    id: str = Field(alias="_id")
    name: str
    description: str | None = None
    category: Literal["Organic", "Biological", "Botanical", "Chemical"]
    price: float = Field(ge=0)
    stock_quantity: int = 0
    image_url: str | None = None

    @property
    def in_stock(self) -> bool:
        return self.stock_quantity > 0


class OrderItem(_Document):
    product_id: str
    quantity: int = Field(ge=1)
    price_at_purchase: float


class Order(_Document):
    id: str = Field(alias="_id")
    user_id: str
    items: list[OrderItem]
    total_amount: float
    status: Literal["Pending", "Processing", "Shipped", "Delivered", "Cancelled"] = "Pending"
    created_at: datetime | None = None


class PlacedOrder(_Document):
    """placeOrder response."""

    message: str | None = None
    order_id: str = Field(alias="orderId")
    order: Order | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Decoders
# ═══════════════════════════════════════════════════════════════════════════════

_lands = TypeAdapter(list[Land])
_products = TypeAdapter(list[Product])
_orders = TypeAdapter(list[Order])


def parse_lands(raw: object) -> list[Land]:
    return _lands.validate_python(raw)


def parse_products(raw: object) -> list[Product]:
    return _products.validate_python(raw)


def parse_orders(raw: object) -> list[Order]:
    return _orders.validate_python(raw)


__all__ = (
    "Coordinates",
    "Address",
    "UserProfile",
    "AuthResponse",
    "Land",
    "Product",
    "OrderItem",
    "Order",
    "PlacedOrder",
    "parse_lands",
    "parse_products",
    "parse_orders",
)
