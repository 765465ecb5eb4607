# app/schemas/cart.py
from datetime import datetime

from sqlmodel import SQLModel


class CartItemCreate(SQLModel):
    """
    Payload for adding a product to the cart (always +1).
    """

    product_id: int


class CartItemUpdate(SQLModel):
    """
    Payload for setting the quantity of a cart line.

    Values below 1 are accepted and ignored by the service.
    """

    quantity: int


class CartLineRead(SQLModel):
    """
    Read model for a single cart line joined with its product.
    """

    id: int
    product_id: int
    quantity: int
    name: str
    description: str | None = None
    price: float
    image_url: str | None = None
    category: str | None = None
    stock: int
    line_total: float
    created_at: datetime


class CartSummary(SQLModel):
    """
    Full cart response model with totals.
    """

    items: list[CartLineRead]
    total_quantity: int
    subtotal: float
    tax: float
    total: float


class CartCount(SQLModel):
    count: int
