# app/models/cart.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class CartLine(SQLModel, table=True):
    """
    Shopping cart entry for a user.
    One user should not have 2 rows for the same product; the service
    looks the pair up before inserting.
    """

    __tablename__ = "cart"

    id: int | None = Field(
        default=None,
        primary_key=True,
    )

    user_id: uuid.UUID = Field(
        foreign_key="profiles.id",
        index=True,
    )

    product_id: int = Field(
        foreign_key="products.id",
        index=True,
    )

    quantity: int = Field(
        default=1,
        ge=1,
        description="Must be >= 1",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
