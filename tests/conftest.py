"""
Pytest fixtures shared by the test suite.

Provides an in-memory SQLite session, customer/admin profiles, a mocked
Stripe gateway and TestClients wired to them.
"""
import os
import uuid
from unittest.mock import MagicMock

import pytest

# Set required environment variables before importing app modules
# These are required for app/core/config.py to load properly
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("CLIENT_ORIGIN", "http://localhost:5173")

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import SQLModel, Session, create_engine  # noqa: E402

from app.core.auth import get_current_user  # noqa: E402
from app.core.payments import (  # noqa: E402
    CheckoutSessionInfo,
    PaymentGateway,
    get_payment_gateway,
)
from app.database import get_session  # noqa: E402
from app.main import app  # noqa: E402
from app.models.cart import CartLine  # noqa: E402
from app.models.product import Product  # noqa: E402
from app.models.profile import Profile  # noqa: E402
from app.repositories.cart_repo import CartRepository  # noqa: E402
from app.repositories.order_repo import OrderRepository  # noqa: E402
from app.repositories.product_repo import ProductRepository  # noqa: E402
from app.services.cart_service import CartService  # noqa: E402
from app.services.order_service import OrderService  # noqa: E402

CLIENT_ORIGIN = "http://localhost:5173"


@pytest.fixture
def engine():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def customer(session):
    profile = Profile(
        id=uuid.uuid4(),
        email="casey@example.com",
        full_name="Casey Customer",
        role="user",
    )
    session.add(profile)
    session.commit()
    session.refresh(profile)
    return profile


@pytest.fixture
def admin(session):
    profile = Profile(
        id=uuid.uuid4(),
        email="admin@happytoes.test",
        full_name="Ada Admin",
        role="admin",
    )
    session.add(profile)
    session.commit()
    session.refresh(profile)
    return profile


@pytest.fixture
def make_product(session):
    """Factory inserting a product row."""

    def _make(name="Cloud Crew Socks", price=10.0, stock=10, category="Crew", **extra):
        product = Product(name=name, price=price, stock=stock, category=category, **extra)
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    return _make


@pytest.fixture
def add_to_cart(session):
    """Factory inserting a cart line directly."""

    def _add(user, product, quantity=1):
        line = CartLine(user_id=user.id, product_id=product.id, quantity=quantity)
        session.add(line)
        session.commit()
        session.refresh(line)
        return line

    return _add


@pytest.fixture
def cart_service():
    return CartService(CartRepository(), ProductRepository())


@pytest.fixture
def order_service():
    return OrderService(OrderRepository(), CartRepository(), ProductRepository(), CLIENT_ORIGIN)


@pytest.fixture
def gateway():
    """Mock Stripe gateway returning an open session."""
    gateway = MagicMock(spec=PaymentGateway)
    gateway.webhook_secret = "whsec_test"
    gateway.create_checkout_session.return_value = CheckoutSessionInfo(
        id="cs_test_123",
        url="https://checkout.stripe.com/c/pay/cs_test_123",
        status="open",
        payment_status="unpaid",
    )
    return gateway


def _build_client(session, user, gateway):
    def _get_session():
        yield session

    app.dependency_overrides[get_session] = _get_session
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    if user is not None:
        app.dependency_overrides[get_current_user] = lambda: user
    return TestClient(app)


@pytest.fixture
def client(session, customer, gateway):
    """TestClient authenticated as the customer."""
    yield _build_client(session, customer, gateway)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_client(session, admin, gateway):
    """TestClient authenticated as the admin."""
    yield _build_client(session, admin, gateway)
    app.dependency_overrides.clear()


@pytest.fixture
def unconfigured_client(session, customer):
    """Customer TestClient with no Stripe secret configured."""
    yield _build_client(session, customer, None)
    app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client(session, gateway):
    """TestClient that resolves identity from real Authorization headers."""
    yield _build_client(session, None, gateway)
    app.dependency_overrides.clear()
