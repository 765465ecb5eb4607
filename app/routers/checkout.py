# app/routers/checkout.py
from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from sqlmodel import Session

from app.core.config import get_settings
from app.core.errors import CheckoutConfigurationError, CheckoutValidationError
from app.core.payments import PaymentGateway, get_payment_gateway
from app.database import get_session
from app.repositories.cart_repo import CartRepository
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.checkout import (
    CheckoutConfigRead,
    CheckoutSessionCreate,
    CheckoutSessionRead,
)
from app.services.checkout_service import CheckoutService
from app.services.order_service import OrderService

# Mounted under /api (no version prefix): the storefront calls these paths directly.
router = APIRouter(prefix="/api", tags=["Checkout"])

settings = get_settings()

order_service = OrderService(
    OrderRepository(), CartRepository(), ProductRepository(), settings.CLIENT_ORIGIN
)


def get_checkout_service(
    gateway: PaymentGateway | None = Depends(get_payment_gateway),
) -> CheckoutService:
    return CheckoutService(gateway)


@router.post("/create-checkout-session", response_model=CheckoutSessionRead)
def create_checkout_session(
    payload: CheckoutSessionCreate,
    checkout_service: CheckoutService = Depends(get_checkout_service),
):
    """
    Create a Stripe hosted Checkout session.

    Errors come back as `{"error": "..."}`:
      - 500 Stripe not configured
      - 400 no items
      - 500 Stripe rejected the request
    """
    return checkout_service.create_session(payload)


@router.get("/checkout-config", response_model=CheckoutConfigRead)
def checkout_config():
    """
    Publishable key for Stripe.js; checkout is disabled without both keys.
    """
    current = get_settings()
    return CheckoutConfigRead(
        publishable_key=current.STRIPE_PUBLISHABLE_KEY,
        enabled=bool(current.STRIPE_SECRET_KEY and current.STRIPE_PUBLISHABLE_KEY),
    )


@router.post("/stripe-webhook")
async def stripe_webhook(
    request: Request,
    session: Session = Depends(get_session),
    gateway: PaymentGateway | None = Depends(get_payment_gateway),
):
    """
    Stripe webhook: confirms or fails orders from signed events.

    The raw body is read on the event loop; order updates run in the
    threadpool.
    """
    if gateway is None or not gateway.webhook_secret:
        raise CheckoutConfigurationError("Stripe webhook is not configured on the server.")

    payload = await request.body()
    try:
        event = gateway.parse_webhook_event(payload, request.headers.get("stripe-signature"))
    except ValueError as exc:
        raise CheckoutValidationError("Invalid webhook payload.") from exc

    handled = await run_in_threadpool(order_service.handle_webhook_event, session, event)
    return {"received": True, "handled": handled}
