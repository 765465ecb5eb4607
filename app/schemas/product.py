# app/schemas/product.py
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class ProductRead(SQLModel):
    """
    Product as shown in the storefront and admin tables.
    """

    id: int
    name: str
    description: str | None = None
    price: float
    image_url: str | None = None
    category: str | None = None
    stock: int
    created_at: datetime


class ProductCreate(SQLModel):
    """
    Payload for creating a product (admin).

    - name and price are required
    - stock defaults to 0
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=255)
    description: str | None = None
    price: float = Field(ge=0)
    image_url: str | None = None
    category: str | None = Field(default=None, max_length=50)
    stock: int = Field(default=0, ge=0)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v

    @field_validator("description", "image_url", "category")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class ProductUpdate(SQLModel):
    """
    Partial update payload for a product (admin).
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=255)
    description: str | None = None
    price: float | None = Field(default=None, ge=0)
    image_url: str | None = None
    category: str | None = Field(default=None, max_length=50)
    stock: int | None = Field(default=None, ge=0)

    # Validators only run on fields present in the payload, so None here
    # is an explicit null for a NOT NULL column.
    @field_validator("name", "price", "stock", mode="before")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("cannot be null")
        return v

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v

    @field_validator("description", "image_url", "category")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class ProductInventorySummary(SQLModel):
    """
    Header cards of the admin products page.
    """

    product_count: int
    total_stock: int
    category_count: int
