# app/routers/cart.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.auth import require_user
from app.database import get_session
from app.models.profile import Profile
from app.repositories.cart_repo import CartRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.cart import CartCount, CartItemCreate, CartItemUpdate, CartSummary
from app.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["Cart"])

cart_repo = CartRepository()
product_repo = ProductRepository()
service = CartService(cart_repo, product_repo)


@router.get("", response_model=CartSummary)
def get_my_cart(
    session: Session = Depends(get_session),
    current_user: Profile = Depends(require_user),
):
    """
    Get current user's cart with subtotal, 10% tax and total.

    Auth:
      - Only role='user' (customer) can access.
    """
    return service.get_cart_summary(session, current_user.id)


@router.get("/count", response_model=CartCount)
def get_cart_count(
    session: Session = Depends(get_session),
    current_user: Profile = Depends(require_user),
):
    """
    Total quantity in the cart, for the navbar badge.
    """
    return CartCount(count=service.count_items(session, current_user.id))


@router.post("", response_model=CartSummary)
def add_to_cart(
    payload: CartItemCreate,
    session: Session = Depends(get_session),
    current_user: Profile = Depends(require_user),
):
    """
    Add one unit of a product to the current user's cart.
    """
    return service.add_item(session, current_user.id, payload.product_id)


@router.patch("/{line_id}", response_model=CartSummary)
def update_cart_item(
    line_id: int,
    payload: CartItemUpdate,
    session: Session = Depends(get_session),
    current_user: Profile = Depends(require_user),
):
    """
    Set the quantity of a cart line. Quantities below 1 are ignored.
    """
    return service.update_quantity(
        session=session,
        user_id=current_user.id,
        line_id=line_id,
        quantity=payload.quantity,
    )


@router.delete("/{line_id}", response_model=CartSummary)
def remove_cart_item(
    line_id: int,
    session: Session = Depends(get_session),
    current_user: Profile = Depends(require_user),
):
    """
    Remove a line from the cart.
    """
    return service.remove_item(session, current_user.id, line_id)


@router.delete("", response_model=CartSummary)
def clear_cart(
    session: Session = Depends(get_session),
    current_user: Profile = Depends(require_user),
):
    """
    Clear the entire cart.
    """
    return service.clear_cart(session, current_user.id)
