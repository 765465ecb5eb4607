# app/routers/orders.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import require_user, require_admin
from app.core.config import get_settings
from app.core.payments import PaymentGateway, get_payment_gateway
from app.database import get_session
from app.models.profile import Profile
from app.repositories.order_repo import OrderRepository
from app.repositories.cart_repo import CartRepository
from app.repositories.product_repo import ProductRepository
from app.routers.checkout import get_checkout_service
from app.schemas.order import (
    CheckoutReturn,
    CheckoutReturnRead,
    CheckoutStartRead,
    OrderRead,
    OrderStatusUpdate,
)
from app.services.checkout_service import CheckoutService
from app.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])

settings = get_settings()

order_repo = OrderRepository()
cart_repo = CartRepository()
product_repo = ProductRepository()
service = OrderService(order_repo, cart_repo, product_repo, settings.CLIENT_ORIGIN)


# -------- User-facing endpoints --------


@router.post("/checkout", response_model=CheckoutStartRead)
def checkout(
    session: Session = Depends(get_session),
    current_user: Profile = Depends(require_user),
    checkout_service: CheckoutService = Depends(get_checkout_service),
):
    """
    Snapshot the cart into a pending order and open a Stripe session.

    The client redirects the browser to the returned `url`.
    """
    return service.begin_checkout(session, current_user, checkout_service)


@router.post("/checkout/return", response_model=CheckoutReturnRead)
def checkout_return(
    payload: CheckoutReturn,
    session: Session = Depends(get_session),
    current_user: Profile = Depends(require_user),
    gateway: PaymentGateway | None = Depends(get_payment_gateway),
):
    """
    Forwarded `?checkout=...&order_id=...` from the dashboard URL.

    The cart is cleared only once the payment is verified with Stripe.
    """
    return service.handle_return(session, current_user, payload, gateway)


@router.get("/me", response_model=list[OrderRead])
def list_my_orders(
    session: Session = Depends(get_session),
    current_user: Profile = Depends(require_user),
):
    """
    The authenticated user's orders, newest first.
    """
    return service.list_user_orders(session, current_user.id)


# -------- Admin endpoints --------


@router.get(
    "",
    response_model=list[OrderRead],
    dependencies=[Depends(require_admin)],
)
def list_all_orders(session: Session = Depends(get_session)):
    """
    List all orders (admin only).
    """
    return service.list_all_orders(session)


@router.get(
    "/{order_id}",
    response_model=OrderRead,
    dependencies=[Depends(require_admin)],
)
def get_order_admin(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    return service.get_order_admin(session, order_id)


@router.patch(
    "/{order_id}/status",
    response_model=OrderRead,
    dependencies=[Depends(require_admin)],
)
def update_order_status(
    order_id: uuid.UUID,
    payload: OrderStatusUpdate,
    session: Session = Depends(get_session),
):
    """
    Update order status (admin only).

      pending    -> processing, completed, cancelled

      processing -> completed, cancelled

      completed  -> cancelled

      cancelled  -> completed

    """
    return service.set_status(session, order_id, payload.status)


@router.post(
    "/{order_id}/toggle",
    response_model=OrderRead,
    dependencies=[Depends(require_admin)],
)
def toggle_order_status(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Approve / Disapprove button: completed <-> cancelled.
    """
    return service.toggle_status(session, order_id)


@router.delete(
    "/{order_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
def delete_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    service.delete_order(session, order_id)
    return None
