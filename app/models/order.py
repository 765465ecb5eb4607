# app/models/order.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Order(SQLModel, table=True):
    """
    Customer order.

    `items` holds the JSON-serialized line snapshot taken at checkout
    (see app.schemas.order.OrderLineSnapshot). Product edits and deletes
    never touch it.
    """

    __tablename__ = "orders"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    user_id: uuid.UUID = Field(
        foreign_key="profiles.id",
        index=True,
    )

    customer_email: str | None = Field(
        default=None,
        description="Email of the customer at checkout time",
    )

    items: str = Field(
        default="[]",
        description="Serialized list of line snapshots",
    )

    # Subtotal plus 10% tax
    total_amount: float = Field(
        description="Final amount for this order (including tax)",
    )

    # pending | processing | completed | cancelled
    status: str = Field(
        default="pending",
        index=True,
        description="Order status lifecycle",
    )

    # created | session_requested | session_confirmed | session_failed | paid
    checkout_state: str = Field(
        default="created",
        description="Progress of the hosted checkout for this order",
    )

    checkout_session_id: str | None = Field(
        default=None,
        index=True,
        description="Stripe Checkout Session id",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
