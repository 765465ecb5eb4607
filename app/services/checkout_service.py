# app/services/checkout_service.py
import logging

from pydantic import ValidationError

from app.core.errors import (
    CheckoutConfigurationError,
    CheckoutSessionError,
    CheckoutValidationError,
    PaymentProviderError,
)
from app.core.payments import PaymentGateway
from app.schemas.checkout import (
    CheckoutLineItem,
    CheckoutSessionCreate,
    CheckoutSessionRead,
)

logger = logging.getLogger(__name__)

CURRENCY = "usd"


def build_line_items(items: list) -> list[CheckoutLineItem]:
    """
    Read raw request items.

    Raises:
        CheckoutValidationError: if an item is not an object or has
            non-numeric price/quantity.
    """
    try:
        return [CheckoutLineItem.model_validate(item) for item in items]
    except ValidationError as exc:
        raise CheckoutValidationError("Invalid item in checkout request.") from exc


def to_stripe_line_item(item: CheckoutLineItem) -> dict:
    return {
        "price_data": {
            "currency": CURRENCY,
            "product_data": {"name": item.display_name},
            "unit_amount": item.unit_amount,
        },
        "quantity": item.resolved_quantity,
    }


def idempotency_key_for(order_id: str) -> str | None:
    return f"checkout-session-{order_id}" if order_id else None


class CheckoutService:
    """
    Creates Stripe hosted Checkout sessions.

    Stateless: nothing is persisted here. The order id only travels to
    Stripe as metadata and as the idempotency key.
    """

    def __init__(self, gateway: PaymentGateway | None):
        self.gateway = gateway

    def create_session(self, payload: CheckoutSessionCreate) -> CheckoutSessionRead:
        """
        Validate the request and open a hosted Checkout session.

        Order of checks:
          1. Stripe configured, else CheckoutConfigurationError (500)
          2. items is a non-empty list, else CheckoutValidationError (400)
          3. Stripe call; any provider error => CheckoutSessionError (500)
        """
        if self.gateway is None:
            raise CheckoutConfigurationError()

        items = payload.items
        if not isinstance(items, list) or not items:
            raise CheckoutValidationError()

        line_items = [to_stripe_line_item(item) for item in build_line_items(items)]
        order_id = str(payload.order_id or "")

        try:
            session = self.gateway.create_checkout_session(
                line_items=line_items,
                order_id=order_id,
                success_url=payload.success_url,
                cancel_url=payload.cancel_url,
                idempotency_key=idempotency_key_for(order_id),
            )
        except PaymentProviderError as exc:
            logger.error("Error creating checkout session for order %r: %s", order_id, exc)
            raise CheckoutSessionError() from exc

        logger.info(
            "Created Stripe Checkout session: id=%s url=%s status=%s",
            session.id,
            session.url,
            session.status,
        )
        return CheckoutSessionRead(id=session.id, url=session.url)
