# app/services/cart_service.py
import uuid
from typing import Iterable, Protocol

from fastapi import HTTPException, status
from sqlmodel import Session

from app.models.cart import CartLine
from app.models.product import Product
from app.repositories.cart_repo import CartRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.cart import CartLineRead, CartSummary

# Fixed tax rate (10%)
TAX_RATE = 0.10


class PricedLine(Protocol):
    price: float | None
    quantity: int


def _money(value: float) -> float:
    return round(value, 2)


def compute_subtotal(lines: Iterable[PricedLine]) -> float:
    """Sum of price x quantity; a missing price counts as 0."""
    return _money(sum((line.price or 0) * line.quantity for line in lines))


def compute_tax(lines: Iterable[PricedLine]) -> float:
    return _money(compute_subtotal(lines) * TAX_RATE)


def compute_total(lines: Iterable[PricedLine]) -> float:
    return _money(compute_subtotal(lines) * (1 + TAX_RATE))


class CartService:
    """
    Business logic for cart operations.

    Responsibilities:
      - one line per (user, product): adding again bumps the quantity
      - ignore quantity updates below 1
      - compute line totals and cart totals

    Stock is not enforced here; the storefront disables the + button
    once a line reaches the product's stock.
    """

    def __init__(self, cart_repo: CartRepository, product_repo: ProductRepository):
        self.cart_repo = cart_repo
        self.product_repo = product_repo

    # ---- internal helpers ----

    def _get_own_line(self, session: Session, user_id: uuid.UUID, line_id: int) -> CartLine:
        line = self.cart_repo.get_by_id(session, line_id)
        if not line or line.user_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Item not found in cart",
            )
        return line

    @staticmethod
    def _line_read(line: CartLine, product: Product) -> CartLineRead:
        return CartLineRead(
            id=line.id,
            product_id=line.product_id,
            quantity=line.quantity,
            name=product.name,
            description=product.description,
            price=product.price,
            image_url=product.image_url,
            category=product.category,
            stock=product.stock,
            line_total=_money(product.price * line.quantity),
            created_at=line.created_at,
        )

    # ---- public operations ----

    def get_cart_summary(
        self,
        session: Session,
        user_id: uuid.UUID,
    ) -> CartSummary:
        """
        Return full cart summary:
          - list of CartLineRead (with line_total)
          - total_quantity
          - subtotal, tax, total
        """
        items = [
            self._line_read(line, product)
            for line, product in self.cart_repo.list_for_user(session, user_id)
        ]

        return CartSummary(
            items=items,
            total_quantity=sum(it.quantity for it in items),
            subtotal=compute_subtotal(items),
            tax=compute_tax(items),
            total=compute_total(items),
        )

    def count_items(self, session: Session, user_id: uuid.UUID) -> int:
        """Total quantity across the user's lines (navbar badge)."""
        return sum(
            line.quantity for line in self.cart_repo.list_lines_for_user(session, user_id)
        )

    def add_item(
        self,
        session: Session,
        user_id: uuid.UUID,
        product_id: int,
    ) -> CartSummary:
        """
        Add one unit of a product to the user's cart.

        Existing line => quantity + 1, otherwise a new line with quantity 1.
        """
        product = self.product_repo.get_by_id(session, product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )

        existing = self.cart_repo.get_item(session, user_id, product_id)
        if existing:
            existing.quantity += 1
            self.cart_repo.update(session, existing)
        else:
            self.cart_repo.create(
                session,
                CartLine(user_id=user_id, product_id=product_id, quantity=1),
            )

        return self.get_cart_summary(session, user_id)

    def update_quantity(
        self,
        session: Session,
        user_id: uuid.UUID,
        line_id: int,
        quantity: int,
    ) -> CartSummary:
        """
        Set the quantity of a cart line.

        quantity < 1 leaves the stored line untouched.
        """
        line = self._get_own_line(session, user_id, line_id)

        if quantity >= 1:
            line.quantity = quantity
            self.cart_repo.update(session, line)

        return self.get_cart_summary(session, user_id)

    def remove_item(
        self,
        session: Session,
        user_id: uuid.UUID,
        line_id: int,
    ) -> CartSummary:
        line = self._get_own_line(session, user_id, line_id)
        self.cart_repo.delete(session, line)
        return self.get_cart_summary(session, user_id)

    def clear_cart(
        self,
        session: Session,
        user_id: uuid.UUID,
    ) -> CartSummary:
        """
        Clear all items from the cart and return an empty summary.
        """
        self.cart_repo.clear_user_cart(session, user_id)
        return CartSummary(items=[], total_quantity=0, subtotal=0.0, tax=0.0, total=0.0)
