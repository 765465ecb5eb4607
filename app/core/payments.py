# app/core/payments.py
from dataclasses import dataclass
from typing import Any

import stripe

from app.core.config import get_settings
from app.core.errors import PaymentProviderError


@dataclass(frozen=True)
class CheckoutSessionInfo:
    """The fields of a Stripe Checkout Session this backend reads."""

    id: str
    url: str | None = None
    status: str | None = None
    payment_status: str | None = None
    order_id: str | None = None


@dataclass(frozen=True)
class WebhookEvent:
    type: str
    session: CheckoutSessionInfo


def _field(obj: Any, key: str, default: Any = None) -> Any:
    try:
        value = obj[key]
    except (KeyError, TypeError):
        return default
    return default if value is None else value


def _session_info(obj: Any) -> CheckoutSessionInfo:
    metadata = _field(obj, "metadata", {})
    return CheckoutSessionInfo(
        id=_field(obj, "id", ""),
        url=_field(obj, "url"),
        status=_field(obj, "status"),
        payment_status=_field(obj, "payment_status"),
        order_id=_field(metadata, "orderId") or None,
    )


class PaymentGateway:
    """
    Thin wrapper around Stripe hosted Checkout.

    Every Stripe exception is re-raised as PaymentProviderError so the
    services never import stripe themselves.
    """

    def __init__(self, secret_key: str, webhook_secret: str | None = None):
        self.secret_key = secret_key
        self.webhook_secret = webhook_secret

    def create_checkout_session(
        self,
        *,
        line_items: list[dict[str, Any]],
        order_id: str,
        success_url: str | None,
        cancel_url: str | None,
        idempotency_key: str | None = None,
    ) -> CheckoutSessionInfo:
        params: dict[str, Any] = {
            "ui_mode": "hosted",
            "payment_method_types": ["card"],
            "mode": "payment",
            "line_items": line_items,
            "metadata": {"orderId": order_id},
            "success_url": success_url,
            "cancel_url": cancel_url,
        }
        if idempotency_key:
            params["idempotency_key"] = idempotency_key

        try:
            session = stripe.checkout.Session.create(api_key=self.secret_key, **params)
        except stripe.StripeError as exc:
            raise PaymentProviderError(str(exc)) from exc
        return _session_info(session)

    def retrieve_checkout_session(self, session_id: str) -> CheckoutSessionInfo:
        try:
            session = stripe.checkout.Session.retrieve(session_id, api_key=self.secret_key)
        except stripe.StripeError as exc:
            raise PaymentProviderError(str(exc)) from exc
        return _session_info(session)

    def parse_webhook_event(self, payload: bytes, signature: str | None) -> WebhookEvent:
        """
        Verify the Stripe-Signature header and decode the event.

        Raises:
            ValueError: if no webhook secret is configured, the payload is
                not JSON, or the signature does not match.
        """
        if not self.webhook_secret:
            raise ValueError("Stripe webhook secret is not configured")
        try:
            event = stripe.Webhook.construct_event(
                payload, signature or "", self.webhook_secret
            )
        except stripe.SignatureVerificationError as exc:
            raise ValueError("Invalid webhook signature") from exc

        data = _field(event, "data", {})
        return WebhookEvent(
            type=_field(event, "type", ""),
            session=_session_info(_field(data, "object", {})),
        )


def get_payment_gateway() -> PaymentGateway | None:
    """
    FastAPI dependency: the Stripe gateway, or None when
    STRIPE_SECRET_KEY is not set (checkout then answers 500).
    """
    settings = get_settings()
    if not settings.STRIPE_SECRET_KEY:
        return None
    return PaymentGateway(settings.STRIPE_SECRET_KEY, settings.STRIPE_WEBHOOK_SECRET)
