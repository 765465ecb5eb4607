# app/models/product.py
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    """
    Catalog entry for Happy Toes.

    Created, edited and deleted only from the admin back-office.
    Stock is informational: orders never decrement it.
    """

    __tablename__ = "products"

    id: int | None = Field(
        default=None,
        primary_key=True,
    )

    name: str = Field(
        index=True,
        description="Display name of the sock/product",
    )

    description: str | None = Field(
        default=None,
        description="Optional long description",
    )

    price: float = Field(
        ge=0,
        description="Unit price",
    )

    image_url: str | None = Field(
        default=None,
        description="Externally hosted image URL",
    )

    category: str | None = Field(
        default=None,
        index=True,
    )

    stock: int = Field(
        default=0,
        ge=0,
        description="How many units currently in stock",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
