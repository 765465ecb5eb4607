# app/schemas/checkout.py
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

PLACEHOLDER_ITEM_NAME = "Product"


def to_minor_units(price: float) -> int:
    """Currency amount to integer cents: round(price * 100)."""
    return int(round(price * 100))


class CheckoutSessionCreate(BaseModel):
    """
    Body of POST /api/create-checkout-session.

    The storefront sends camelCase keys. `items` is left untyped so the
    service can answer a missing/non-list/empty value with its own 400
    instead of a 422.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    order_id: str | int | None = None
    items: Any = None
    success_url: str | None = None
    cancel_url: str | None = None


class CheckoutLineItem(BaseModel):
    """
    One item of a checkout request. Missing fields fall back to
    price 0, quantity 1 and a placeholder name.
    """

    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    price: float | None = None
    quantity: int | None = None

    @property
    def display_name(self) -> str:
        return self.name or PLACEHOLDER_ITEM_NAME

    @property
    def unit_amount(self) -> int:
        return to_minor_units(self.price or 0)

    @property
    def resolved_quantity(self) -> int:
        return self.quantity or 1

    @property
    def amount_total(self) -> int:
        return self.unit_amount * self.resolved_quantity


class CheckoutSessionRead(BaseModel):
    id: str
    url: str | None = None


class CheckoutConfigRead(BaseModel):
    publishable_key: str | None = None
    enabled: bool
