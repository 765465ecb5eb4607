# app/services/stats_service.py
from collections import Counter

from sqlmodel import Session

from app.models.order import Order
from app.models.product import Product
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.order import parse_order_items
from app.schemas.stats import (
    AdminDashboardStats,
    RecentOrderSummary,
    TopProduct,
)

UNKNOWN_PRODUCT = "Unknown product"


def units_sold_by_product(orders: list[Order]) -> Counter:
    """
    Units per product_id across every order snapshot.
    Lines without a product_id are ignored.
    """
    sold: Counter = Counter()
    for order in orders:
        for item in parse_order_items(order.items):
            if item.product_id is None:
                continue
            sold[item.product_id] += item.quantity
    return sold


def top_products(
    orders: list[Order],
    products: list[Product],
    limit: int = 3,
) -> list[TopProduct]:
    by_id = {p.id: p for p in products}
    ranked = sorted(units_sold_by_product(orders).items(), key=lambda kv: kv[1], reverse=True)

    result: list[TopProduct] = []
    for product_id, quantity in ranked[:limit]:
        product = by_id.get(product_id)
        result.append(
            TopProduct(
                product_id=product_id,
                name=product.name if product else UNKNOWN_PRODUCT,
                quantity=quantity,
                image_url=product.image_url if product else None,
            )
        )
    return result


class StatsService:
    """
    Admin dashboard numbers, computed by scanning all orders and
    products in memory.
    """

    def __init__(self, order_repo: OrderRepository, product_repo: ProductRepository):
        self.order_repo = order_repo
        self.product_repo = product_repo

    def get_admin_dashboard_stats(
        self,
        session: Session,
        top_n_products: int = 3,
        latest_n_orders: int = 5,
    ) -> AdminDashboardStats:
        orders = self.order_repo.list_all(session)
        products = self.product_repo.list(session)

        completed = [o for o in orders if o.status == "completed"]
        pending = [o for o in orders if o.status == "pending"]
        customers = {o.customer_email for o in orders if o.customer_email}

        # list_all is already newest first
        latest_orders = [
            RecentOrderSummary(
                id=o.id,
                created_at=o.created_at,
                customer_email=o.customer_email,
                total_amount=o.total_amount,
                status=o.status,
            )
            for o in orders[:latest_n_orders]
        ]

        return AdminDashboardStats(
            total_revenue=round(sum(o.total_amount or 0 for o in completed), 2),
            completed_orders=len(completed),
            total_orders=len(orders),
            pending_orders=len(pending),
            total_customers=len(customers),
            product_count=len(products),
            out_of_stock_count=sum(1 for p in products if not p.stock),
            recent_orders=latest_orders,
            top_products=top_products(orders, products, limit=top_n_products),
        )
