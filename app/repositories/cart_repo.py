# app/repositories/cart_repo.py
import uuid
from sqlmodel import Session, select
from app.models.cart import CartLine
from app.models.product import Product


class CartRepository:

    # Lines joined with their product, newest first
    def list_for_user(
        self, session: Session, user_id: uuid.UUID
    ) -> list[tuple[CartLine, Product]]:
        stmt = (
            select(CartLine, Product)
            .join(Product, Product.id == CartLine.product_id)
            .where(CartLine.user_id == user_id)
            .order_by(CartLine.created_at.desc(), CartLine.id.desc())
        )
        return list(session.exec(stmt).all())

    def list_lines_for_user(self, session: Session, user_id: uuid.UUID) -> list[CartLine]:
        stmt = select(CartLine).where(CartLine.user_id == user_id)
        return list(session.exec(stmt).all())

    def get_item(
        self, session: Session, user_id: uuid.UUID, product_id: int
    ) -> CartLine | None:
        stmt = select(CartLine).where(
            CartLine.user_id == user_id, CartLine.product_id == product_id
        )
        return session.exec(stmt).first()

    def get_by_id(self, session: Session, line_id: int) -> CartLine | None:
        return session.get(CartLine, line_id)

    # CRUD
    def create(self, session: Session, line: CartLine) -> CartLine:
        session.add(line)
        session.commit()
        session.refresh(line)
        return line

    def update(self, session: Session, line: CartLine) -> CartLine:
        session.add(line)
        session.commit()
        session.refresh(line)
        return line

    def delete(self, session: Session, line: CartLine) -> None:
        session.delete(line)
        session.commit()

    def clear_user_cart(self, session: Session, user_id: uuid.UUID) -> None:
        for row in self.list_lines_for_user(session, user_id):
            session.delete(row)
        session.commit()

    def delete_for_product(self, session: Session, product_id: int) -> None:
        """
        Drop every cart line pointing at a product. No commit; the
        caller deletes the product in the same transaction.
        """
        stmt = select(CartLine).where(CartLine.product_id == product_id)
        for row in session.exec(stmt).all():
            session.delete(row)
        session.flush()
