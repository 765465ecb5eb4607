# app/services/order_service.py
import logging
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from app.core.errors import CheckoutError, CheckoutSessionError, PaymentProviderError
from app.core.payments import PaymentGateway, WebhookEvent
from app.models.order import Order
from app.models.profile import Profile
from app.repositories.cart_repo import CartRepository
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.checkout import CheckoutSessionCreate
from app.schemas.order import (
    CheckoutReturn,
    CheckoutReturnRead,
    CheckoutStartRead,
    OrderLineSnapshot,
    OrderRead,
    parse_order_items,
    serialize_order_items,
)
from app.services.cart_service import compute_total
from app.services.checkout_service import CheckoutService

logger = logging.getLogger(__name__)

# Admin transitions enforced server-side. `cancelled -> completed` is the
# "Approve" half of the back-office toggle.
ORDER_STATUS_TRANSITIONS: dict[str, set[str]] = {
    "pending": {"processing", "completed", "cancelled"},
    "processing": {"completed", "cancelled"},
    "completed": {"cancelled"},
    "cancelled": {"completed"},
}

PAYMENT_CONFIRMED_EVENTS = {
    "checkout.session.completed",
    "checkout.session.async_payment_succeeded",
}
PAYMENT_FAILED_EVENTS = {
    "checkout.session.expired",
    "checkout.session.async_payment_failed",
}


def next_toggle_status(current: str) -> str:
    """Approve/Disapprove button: completed flips to cancelled, all else to completed."""
    return "cancelled" if current == "completed" else "completed"


class OrderService:
    """
    Business logic for orders.

    Responsibilities:
      - Snapshot the cart into a pending order and open a Stripe session
      - Compensate (cancel the order) when the session cannot be created
      - Confirm payment from a verified source before clearing the cart
      - Admin status transitions, toggle and deletion
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        cart_repo: CartRepository,
        product_repo: ProductRepository,
        client_origin: str,
    ):
        self.order_repo = order_repo
        self.cart_repo = cart_repo
        self.product_repo = product_repo
        self.client_origin = client_origin.rstrip("/")

    # -------- Checkout flow --------

    def begin_checkout(
        self,
        session: Session,
        user: Profile,
        checkout: CheckoutService,
    ) -> CheckoutStartRead:
        """
        Turn the user's cart into a pending order and a hosted session.

        Steps:
          1. Cart must be non-empty (no side effect otherwise).
          2. Snapshot cart lines + product data.
          3. Insert Order(status='pending', checkout_state='created').
          4. checkout_state='session_requested', ask Stripe for a session.
          5. Success: store session id, checkout_state='session_confirmed'.
          6. Failure: compensate (cancelled / session_failed) and raise.

        The cart is NOT cleared here; that waits for a verified payment.
        """
        lines = self.cart_repo.list_for_user(session, user.id)
        if not lines:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Your cart is empty!",
            )

        snapshot = [
            OrderLineSnapshot(
                product_id=product.id,
                name=product.name,
                price=product.price,
                image_url=product.image_url,
                quantity=line.quantity,
            )
            for line, product in lines
        ]

        order = self.order_repo.create(
            session,
            Order(
                user_id=user.id,
                customer_email=user.email,
                items=serialize_order_items(snapshot),
                total_amount=compute_total(snapshot),
                status="pending",
                checkout_state="created",
            ),
        )

        order.checkout_state = "session_requested"
        order = self.order_repo.update(session, order)

        request = CheckoutSessionCreate(
            order_id=str(order.id),
            items=[item.model_dump() for item in snapshot],
            success_url=self._return_url("success", order.id),
            cancel_url=self._return_url("cancelled", order.id),
        )

        try:
            created = checkout.create_session(request)
            if not created.url:
                raise CheckoutSessionError("No checkout URL returned from server")
        except CheckoutError as exc:
            self._compensate(session, order, exc.message)
            raise HTTPException(
                status_code=exc.status_code,
                detail=f"Failed to start checkout: {exc.message}",
            ) from exc

        order.checkout_session_id = created.id
        order.checkout_state = "session_confirmed"
        self.order_repo.update(session, order)

        return CheckoutStartRead(order_id=order.id, session_id=created.id, url=created.url)

    def handle_return(
        self,
        session: Session,
        user: Profile,
        payload: CheckoutReturn,
        gateway: PaymentGateway | None,
    ) -> CheckoutReturnRead:
        """
        React to the customer landing back on the dashboard.

        - cancelled: an unpaid pending order is cancelled, cart kept.
        - success: only trusted once the order is paid, either already
          (webhook) or after asking Stripe for the session here.
        """
        order = self._get_own_order(session, user.id, payload.order_id)

        if payload.checkout == "cancelled":
            if order.checkout_state != "paid" and order.status == "pending":
                self._transition(order, "cancelled")
                order = self.order_repo.update(session, order)
            verified = False
        else:
            verified = order.checkout_state == "paid"
            if not verified and self._session_is_paid(gateway, order):
                order = self.confirm_payment(session, order)
                verified = True

        return CheckoutReturnRead(
            order_id=order.id,
            status=order.status,
            payment_verified=verified,
            cart_cleared=verified,
            cart_count=sum(
                line.quantity
                for line in self.cart_repo.list_lines_for_user(session, user.id)
            ),
        )

    def confirm_payment(self, session: Session, order: Order) -> Order:
        """
        Record a verified payment. Idempotent.

        pending -> processing, then the customer's cart is cleared.
        """
        if order.checkout_state == "paid":
            return order

        order.checkout_state = "paid"
        if order.status == "pending":
            self._transition(order, "processing")
        elif order.status == "cancelled":
            logger.warning("Payment received for cancelled order %s", order.id)

        order = self.order_repo.update(session, order)
        self.cart_repo.clear_user_cart(session, order.user_id)
        logger.info("Payment confirmed for order %s", order.id)
        return order

    def fail_checkout(self, session: Session, order: Order) -> Order:
        """Stripe gave up on the session (expired / async failure)."""
        if order.checkout_state == "paid":
            return order

        order.checkout_state = "session_failed"
        if order.status == "pending":
            self._transition(order, "cancelled")
        return self.order_repo.update(session, order)

    def handle_webhook_event(self, session: Session, event: WebhookEvent) -> bool:
        """
        Apply a verified Stripe event. Returns False when the event was
        ignored (other type, unknown order, unpaid completion).
        """
        if event.type not in PAYMENT_CONFIRMED_EVENTS | PAYMENT_FAILED_EVENTS:
            return False

        order = self._order_from_reference(session, event.session.order_id)
        if order is None:
            logger.warning(
                "Stripe event %s for unknown order %r", event.type, event.session.order_id
            )
            return False

        if event.type in PAYMENT_FAILED_EVENTS:
            self.fail_checkout(session, order)
            return True

        if event.session.payment_status != "paid":
            return False

        self.confirm_payment(session, order)
        return True

    # -------- User-facing reads --------

    def list_user_orders(self, session: Session, user_id: uuid.UUID) -> list[OrderRead]:
        """
        The user's orders, newest first.

        Lines saved without an image show the product's current image
        when the product still exists. Stored snapshots are left as is.
        """
        orders = [self._build_order_dto(o) for o in self.order_repo.list_for_user(session, user_id)]

        missing = {
            item.product_id
            for order in orders
            for item in order.items
            if not item.image_url and item.product_id is not None
        }
        images: dict[int, str] = {}
        for product_id in missing:
            product = self.product_repo.get_by_id(session, product_id)
            if product and product.image_url:
                images[product_id] = product.image_url

        if not images:
            return orders
        for order in orders:
            order.items = [
                item.model_copy(update={"image_url": images[item.product_id]})
                if not item.image_url and item.product_id in images
                else item
                for item in order.items
            ]
        return orders

    # -------- Admin operations --------

    def list_all_orders(self, session: Session) -> list[OrderRead]:
        return [self._build_order_dto(o) for o in self.order_repo.list_all(session)]

    def get_order_admin(self, session: Session, order_id: uuid.UUID) -> OrderRead:
        return self._build_order_dto(self._get_order(session, order_id))

    def set_status(self, session: Session, order_id: uuid.UUID, new_status: str) -> OrderRead:
        """
        Admin status change, validated against ORDER_STATUS_TRANSITIONS.

        Setting the current status is a no-op; invalid transitions => 400.
        """
        order = self._get_order(session, order_id)
        if self._transition(order, new_status):
            order = self.order_repo.update(session, order)
        return self._build_order_dto(order)

    def toggle_status(self, session: Session, order_id: uuid.UUID) -> OrderRead:
        order = self._get_order(session, order_id)
        return self.set_status(session, order_id, next_toggle_status(order.status))

    def delete_order(self, session: Session, order_id: uuid.UUID) -> None:
        order = self._get_order(session, order_id)
        self.order_repo.delete(session, order)

    # -------- Helpers --------

    def _return_url(self, outcome: str, order_id: uuid.UUID) -> str:
        return f"{self.client_origin}/dashboard?checkout={outcome}&order_id={order_id}"

    def _compensate(self, session: Session, order: Order, reason: str) -> None:
        logger.warning("Checkout for order %s failed, cancelling it: %s", order.id, reason)
        order.checkout_state = "session_failed"
        order.status = "cancelled"
        self.order_repo.update(session, order)

    def _session_is_paid(self, gateway: PaymentGateway | None, order: Order) -> bool:
        if gateway is None or not order.checkout_session_id:
            return False
        try:
            info = gateway.retrieve_checkout_session(order.checkout_session_id)
        except PaymentProviderError as exc:
            logger.error(
                "Could not verify checkout session %s: %s", order.checkout_session_id, exc
            )
            return False
        return info.payment_status == "paid"

    @staticmethod
    def _transition(order: Order, new_status: str) -> bool:
        current = order.status
        if current == new_status:
            return False
        if new_status not in ORDER_STATUS_TRANSITIONS.get(current, set()):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid status transition: {current} -> {new_status}",
            )
        order.status = new_status
        return True

    def _get_order(self, session: Session, order_id: uuid.UUID) -> Order:
        order = self.order_repo.get_by_id(session, order_id)
        if not order:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )
        return order

    def _get_own_order(self, session: Session, user_id: uuid.UUID, order_id: uuid.UUID) -> Order:
        order = self.order_repo.get_by_id(session, order_id)
        if not order or order.user_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )
        return order

    def _order_from_reference(self, session: Session, reference: str | None) -> Order | None:
        if not reference:
            return None
        try:
            order_id = uuid.UUID(reference)
        except ValueError:
            return None
        return self.order_repo.get_by_id(session, order_id)

    def _build_order_dto(self, order: Order) -> OrderRead:
        items = parse_order_items(order.items)
        return OrderRead(
            id=order.id,
            user_id=order.user_id,
            customer_email=order.customer_email,
            items=items,
            item_count=sum(it.quantity for it in items),
            total_amount=order.total_amount,
            status=order.status,
            checkout_state=order.checkout_state,
            checkout_session_id=order.checkout_session_id,
            created_at=order.created_at,
        )
