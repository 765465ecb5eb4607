# app/schemas/stats.py
import uuid
from datetime import datetime

from pydantic import ConfigDict
from sqlmodel import SQLModel

from app.schemas.order import OrderStatus


class TopProduct(SQLModel):
    """
    Units sold per product across all order snapshots.
    """
    model_config = ConfigDict(extra="forbid")

    product_id: int
    name: str
    quantity: int
    image_url: str | None = None


class RecentOrderSummary(SQLModel):
    """
    Lightweight info for last N orders.
    """
    model_config = ConfigDict(extra="forbid")

    id: uuid.UUID
    created_at: datetime
    customer_email: str | None
    total_amount: float
    status: OrderStatus


class AdminDashboardStats(SQLModel):
    """
    Full payload for admin dashboard.
    """
    model_config = ConfigDict(extra="forbid")

    total_revenue: float
    completed_orders: int
    total_orders: int
    pending_orders: int
    total_customers: int
    product_count: int
    out_of_stock_count: int
    recent_orders: list[RecentOrderSummary]
    top_products: list[TopProduct]
