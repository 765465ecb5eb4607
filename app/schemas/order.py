# app/schemas/order.py
import json
import logging
import uuid
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError
from sqlmodel import SQLModel

logger = logging.getLogger(__name__)

OrderStatus = Literal["pending", "processing", "completed", "cancelled"]
CheckoutState = Literal[
    "created",
    "session_requested",
    "session_confirmed",
    "session_failed",
    "paid",
]
CheckoutOutcome = Literal["success", "cancelled"]


class OrderLineSnapshot(BaseModel):
    """
    Immutable copy of one cart line captured at checkout time.

    Stored as JSON in `orders.items`; older rows may lack some keys,
    so everything except the shape is optional.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    product_id: int | None = None
    name: str | None = None
    price: float = 0.0
    image_url: str | None = None
    quantity: int = 0


_snapshot_list = TypeAdapter(list[OrderLineSnapshot])


def serialize_order_items(items: list[OrderLineSnapshot]) -> str:
    return _snapshot_list.dump_json(items).decode()


def parse_order_items(raw: str | list[Any] | None) -> list[OrderLineSnapshot]:
    """
    Parse `orders.items` into snapshots.

    Accepts the JSON text we write as well as an already-decoded list
    (jsonb columns). Unreadable payloads yield an empty list and
    malformed entries are skipped; both are logged.
    """
    if not raw:
        return []

    data: Any = raw
    if isinstance(raw, str):
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Could not decode order items: %.80r", raw)
            return []

    if not isinstance(data, list):
        logger.warning("Order items are not a list: %.80r", data)
        return []

    items: list[OrderLineSnapshot] = []
    for entry in data:
        try:
            items.append(OrderLineSnapshot.model_validate(entry))
        except ValidationError:
            logger.warning("Skipping malformed order line: %r", entry)
    return items


class OrderRead(SQLModel):
    """
    Order with its parsed line snapshot.
    """

    id: uuid.UUID
    user_id: uuid.UUID
    customer_email: str | None
    items: list[OrderLineSnapshot]
    item_count: int
    total_amount: float
    status: OrderStatus
    checkout_state: CheckoutState
    checkout_session_id: str | None = None
    created_at: datetime


class OrderStatusUpdate(SQLModel):
    """
    Admin payload to change order status.
    """

    model_config = ConfigDict(extra="forbid")

    status: OrderStatus


class CheckoutStartRead(SQLModel):
    """
    Result of starting checkout: the client redirects to `url`.
    """

    order_id: uuid.UUID
    session_id: str
    url: str


class CheckoutReturn(SQLModel):
    """
    What the storefront read from `?checkout=...&order_id=...` after
    coming back from the hosted payment page.
    """

    model_config = ConfigDict(extra="forbid")

    checkout: CheckoutOutcome
    order_id: uuid.UUID


class CheckoutReturnRead(SQLModel):
    order_id: uuid.UUID
    status: OrderStatus
    payment_verified: bool
    cart_cleared: bool
    cart_count: int
