"""
Unit Tests: OrderService checkout flow

- begin_checkout(): snapshot, pending order, session, compensation
- handle_return(): cart cleared only after verified payment
- handle_webhook_event(): confirm / fail from Stripe events
"""
import json
import uuid

import pytest
from fastapi import HTTPException
from sqlmodel import select

from app.core.errors import PaymentProviderError
from app.core.payments import CheckoutSessionInfo, WebhookEvent
from app.models.order import Order
from app.schemas.order import CheckoutReturn
from app.services.checkout_service import CheckoutService


def all_orders(session):
    return session.exec(select(Order)).all()


@pytest.fixture
def filled_cart(customer, make_product, add_to_cart):
    crew = make_product(name="Cloud Crew Socks", price=10.00, image_url="https://cdn.test/crew.png")
    ankle = make_product(name="Ankle Socks", price=5.50)
    add_to_cart(customer, crew, quantity=2)
    add_to_cart(customer, ankle, quantity=1)
    return crew, ankle


@pytest.fixture
def started_order(session, order_service, customer, gateway, filled_cart):
    result = order_service.begin_checkout(session, customer, CheckoutService(gateway))
    return session.get(Order, result.order_id)


class TestBeginCheckout:

    def test_creates_pending_order_with_snapshot(self, session, order_service, customer, gateway, filled_cart):
        crew, ankle = filled_cart

        result = order_service.begin_checkout(session, customer, CheckoutService(gateway))

        order = session.get(Order, result.order_id)
        assert order.status == "pending"
        assert order.checkout_state == "session_confirmed"
        assert order.checkout_session_id == "cs_test_123"
        assert order.customer_email == "casey@example.com"
        assert order.total_amount == pytest.approx(28.05)

        items = {item["product_id"]: item for item in json.loads(order.items)}
        assert items[crew.id] == {
            "product_id": crew.id,
            "name": "Cloud Crew Socks",
            "price": 10.0,
            "image_url": "https://cdn.test/crew.png",
            "quantity": 2,
        }
        assert items[ankle.id]["quantity"] == 1

        assert result.session_id == "cs_test_123"
        assert result.url == "https://checkout.stripe.com/c/pay/cs_test_123"

    def test_redirect_urls_carry_order_id(self, session, order_service, customer, gateway, filled_cart):
        result = order_service.begin_checkout(session, customer, CheckoutService(gateway))

        kwargs = gateway.create_checkout_session.call_args.kwargs
        assert kwargs["success_url"] == (
            f"http://localhost:5173/dashboard?checkout=success&order_id={result.order_id}"
        )
        assert kwargs["cancel_url"] == (
            f"http://localhost:5173/dashboard?checkout=cancelled&order_id={result.order_id}"
        )
        assert kwargs["order_id"] == str(result.order_id)
        assert kwargs["idempotency_key"] == f"checkout-session-{result.order_id}"

    def test_cart_is_kept_until_payment(self, session, order_service, cart_service, customer, gateway, filled_cart):
        order_service.begin_checkout(session, customer, CheckoutService(gateway))

        assert cart_service.count_items(session, customer.id) == 3

    def test_empty_cart_has_no_side_effects(self, session, order_service, customer, gateway):
        with pytest.raises(HTTPException) as exc_info:
            order_service.begin_checkout(session, customer, CheckoutService(gateway))

        assert exc_info.value.status_code == 400
        assert all_orders(session) == []
        gateway.create_checkout_session.assert_not_called()

    def test_provider_failure_cancels_order(self, session, order_service, customer, gateway, filled_cart):
        gateway.create_checkout_session.side_effect = PaymentProviderError("api down")

        with pytest.raises(HTTPException) as exc_info:
            order_service.begin_checkout(session, customer, CheckoutService(gateway))

        assert exc_info.value.status_code == 500
        assert exc_info.value.detail == "Failed to start checkout: Failed to create checkout session."
        [order] = all_orders(session)
        assert order.status == "cancelled"
        assert order.checkout_state == "session_failed"

    def test_unconfigured_stripe_cancels_order(self, session, order_service, customer, filled_cart):
        with pytest.raises(HTTPException) as exc_info:
            order_service.begin_checkout(session, customer, CheckoutService(None))

        assert "Stripe is not configured" in exc_info.value.detail
        [order] = all_orders(session)
        assert order.status == "cancelled"

    def test_session_without_url_cancels_order(self, session, order_service, customer, gateway, filled_cart):
        gateway.create_checkout_session.return_value = CheckoutSessionInfo(id="cs_test_nourl")

        with pytest.raises(HTTPException) as exc_info:
            order_service.begin_checkout(session, customer, CheckoutService(gateway))

        assert exc_info.value.detail == "Failed to start checkout: No checkout URL returned from server"
        [order] = all_orders(session)
        assert order.checkout_state == "session_failed"

    def test_snapshot_survives_product_edit(self, session, order_service, customer, gateway, filled_cart):
        crew, _ = filled_cart
        result = order_service.begin_checkout(session, customer, CheckoutService(gateway))

        crew.name = "Renamed Socks"
        crew.price = 99.0
        session.add(crew)
        session.commit()

        [order_read] = order_service.list_user_orders(session, customer.id)
        assert order_read.id == result.order_id
        names = {item.name for item in order_read.items}
        assert "Cloud Crew Socks" in names
        assert order_read.item_count == 3


class TestHandleReturn:

    def test_success_with_paid_session_clears_cart(self, session, order_service, cart_service, customer, gateway, started_order):
        gateway.retrieve_checkout_session.return_value = CheckoutSessionInfo(
            id="cs_test_123", status="complete", payment_status="paid"
        )

        result = order_service.handle_return(
            session, customer, CheckoutReturn(checkout="success", order_id=started_order.id), gateway
        )

        gateway.retrieve_checkout_session.assert_called_once_with("cs_test_123")
        assert result.payment_verified is True
        assert result.cart_cleared is True
        assert result.cart_count == 0
        assert result.status == "processing"
        assert cart_service.count_items(session, customer.id) == 0

    def test_success_without_payment_keeps_cart(self, session, order_service, cart_service, customer, gateway, started_order):
        gateway.retrieve_checkout_session.return_value = CheckoutSessionInfo(
            id="cs_test_123", status="open", payment_status="unpaid"
        )

        result = order_service.handle_return(
            session, customer, CheckoutReturn(checkout="success", order_id=started_order.id), gateway
        )

        assert result.payment_verified is False
        assert result.cart_cleared is False
        assert result.cart_count == 3
        assert result.status == "pending"

    def test_success_when_stripe_unreachable_keeps_cart(self, session, order_service, customer, gateway, started_order):
        gateway.retrieve_checkout_session.side_effect = PaymentProviderError("timeout")

        result = order_service.handle_return(
            session, customer, CheckoutReturn(checkout="success", order_id=started_order.id), gateway
        )

        assert result.payment_verified is False
        assert result.cart_count == 3

    def test_success_after_webhook_does_not_call_stripe(self, session, order_service, customer, gateway, started_order):
        order_service.confirm_payment(session, started_order)

        result = order_service.handle_return(
            session, customer, CheckoutReturn(checkout="success", order_id=started_order.id), gateway
        )

        gateway.retrieve_checkout_session.assert_not_called()
        assert result.payment_verified is True
        assert result.cart_count == 0

    def test_cancelled_return_cancels_pending_order(self, session, order_service, customer, gateway, started_order):
        result = order_service.handle_return(
            session, customer, CheckoutReturn(checkout="cancelled", order_id=started_order.id), gateway
        )

        assert result.status == "cancelled"
        assert result.cart_count == 3
        gateway.retrieve_checkout_session.assert_not_called()

    def test_other_users_order_is_404(self, session, order_service, admin, gateway, started_order):
        with pytest.raises(HTTPException) as exc_info:
            order_service.handle_return(
                session, admin, CheckoutReturn(checkout="success", order_id=started_order.id), gateway
            )
        assert exc_info.value.status_code == 404


class TestWebhookEvents:

    def test_completed_and_paid_confirms_once(self, session, order_service, customer, started_order):
        event = WebhookEvent(
            type="checkout.session.completed",
            session=CheckoutSessionInfo(id="cs_test_123", payment_status="paid", order_id=str(started_order.id)),
        )

        assert order_service.handle_webhook_event(session, event) is True
        assert order_service.handle_webhook_event(session, event) is True

        session.refresh(started_order)
        assert started_order.status == "processing"
        assert started_order.checkout_state == "paid"

    def test_completed_but_unpaid_is_ignored(self, session, order_service, started_order):
        event = WebhookEvent(
            type="checkout.session.completed",
            session=CheckoutSessionInfo(id="cs_test_123", payment_status="unpaid", order_id=str(started_order.id)),
        )

        assert order_service.handle_webhook_event(session, event) is False
        session.refresh(started_order)
        assert started_order.status == "pending"

    def test_expired_session_fails_order(self, session, order_service, started_order):
        event = WebhookEvent(
            type="checkout.session.expired",
            session=CheckoutSessionInfo(id="cs_test_123", order_id=str(started_order.id)),
        )

        order_service.handle_webhook_event(session, event)

        session.refresh(started_order)
        assert started_order.status == "cancelled"
        assert started_order.checkout_state == "session_failed"

    @pytest.mark.parametrize("reference", [None, "", "not-a-uuid", str(uuid.uuid4())])
    def test_unknown_order_is_ignored(self, session, order_service, reference):
        event = WebhookEvent(
            type="checkout.session.completed",
            session=CheckoutSessionInfo(id="cs_test_x", payment_status="paid", order_id=reference),
        )

        assert order_service.handle_webhook_event(session, event) is False


class TestOrdersApi:

    def test_checkout_endpoint(self, client, filled_cart):
        response = client.post("/api/v1/orders/checkout")

        assert response.status_code == 200
        assert response.json()["url"] == "https://checkout.stripe.com/c/pay/cs_test_123"

    def test_checkout_endpoint_empty_cart(self, client):
        response = client.post("/api/v1/orders/checkout")

        assert response.status_code == 400
        assert response.json() == {"detail": "Your cart is empty!"}

    def test_my_orders_newest_first(self, client, session, customer):
        from datetime import datetime, timedelta, timezone

        now = datetime.now(timezone.utc)
        for days_ago in (2, 0, 1):
            session.add(
                Order(
                    user_id=customer.id,
                    customer_email=customer.email,
                    items="[]",
                    total_amount=float(days_ago),
                    created_at=now - timedelta(days=days_ago),
                )
            )
        session.commit()

        response = client.get("/api/v1/orders/me")

        assert [o["total_amount"] for o in response.json()] == [0.0, 1.0, 2.0]


class TestOrderHistoryImages:

    def test_missing_image_falls_back_to_current_product(self, session, order_service, customer, make_product):
        product = make_product(name="Cloud Crew Socks", image_url="https://cdn.test/crew-v2.png")
        stored_items = json.dumps([
            {"product_id": product.id, "name": "Cloud Crew Socks", "price": 10.0, "quantity": 1},
            {"product_id": product.id, "name": "Cloud Crew Socks", "price": 10.0,
             "image_url": "https://cdn.test/crew-v1.png", "quantity": 1},
            {"product_id": 9999, "name": "Retired Socks", "price": 4.0, "quantity": 2},
        ])
        order = Order(user_id=customer.id, customer_email=customer.email, items=stored_items, total_amount=26.4)
        session.add(order)
        session.commit()

        [order_read] = order_service.list_user_orders(session, customer.id)

        assert [item.image_url for item in order_read.items] == [
            "https://cdn.test/crew-v2.png",
            "https://cdn.test/crew-v1.png",
            None,
        ]
        session.refresh(order)
        assert order.items == stored_items
