"""Pytest configuration: in-memory SQLite, fake collaborators, eager Celery."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from dataclasses import replace
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.api import create_app
from storefront.api import deps
from storefront.celery_worker import celery_app
from storefront.data.database import get_db, init_db
from storefront.domain.entities import AuthenticatedUser, CatalogProduct, PaymentResult

celery_app.conf.task_always_eager = True


# ---------------------------------------------------------------------------
# Fakes for the external collaborators
# ---------------------------------------------------------------------------


class FakeCatalog:
    def __init__(self):
        self.products = {
            1: CatalogProduct(1, "Merino Crewneck Sweater", Decimal("50.00"), "/img/merino.jpg", "SWT-001", 10),
            2: CatalogProduct(2, "Organic Cotton Tee", Decimal("25.00"), "/img/tee.jpg", "TEE-002", 50),
            3: CatalogProduct(3, "Relaxed Chino", Decimal("12.50"), None, None, 5),
        }

    def fetch_product(self, product_id):
        return self.products.get(product_id)

    def set_price(self, product_id, price):
        self.products[product_id] = replace(self.products[product_id], price=Decimal(price))

    def rename(self, product_id, name):
        self.products[product_id] = replace(self.products[product_id], name=name)

    def remove(self, product_id):
        self.products.pop(product_id, None)


class FakeAuth:
    def __init__(self):
        self.sessions = {
            "token-alice": AuthenticatedUser(id="user-alice", email="alice@example.com"),
            "token-bob": AuthenticatedUser(id="user-bob", email="bob@example.com"),
            "token-admin": AuthenticatedUser(id="user-admin", email="ops@example.com", role="admin"),
        }

    def fetch_session(self, token):
        return self.sessions.get(token)


class FakePayments:
    def confirm(self, payment_intent_id, payment_method="card"):
        if payment_intent_id.startswith("pi_declined"):
            return PaymentResult(False, payment_method, payment_intent_id, "card_declined")
        return PaymentResult(True, payment_method, payment_intent_id)


class FakeLocks:
    def __init__(self):
        self.held = {}

    def acquire(self, key, token, ttl):
        if key in self.held:
            return False
        self.held[key] = token
        return True

    def release(self, key, token):
        if self.held.get(key) == token:
            del self.held[key]
            return True
        return False


class FakeNotifications:
    def __init__(self):
        self.sent = []

    def send_order_confirmation(self, order_number, email):
        self.sent.append(("confirmation", order_number, email))

    def send_status_update(self, order_number, email, status):
        self.sent.append(("status", order_number, status))

    def record_completed_order(self, order_number, user_id, total):
        self.sent.append(("loyalty", order_number, user_id, total))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def catalog():
    return FakeCatalog()


@pytest.fixture()
def auth():
    return FakeAuth()


@pytest.fixture()
def payments():
    return FakePayments()


@pytest.fixture()
def locks():
    return FakeLocks()


@pytest.fixture()
def notifications():
    return FakeNotifications()


@pytest.fixture()
def app(session_factory, catalog, auth, payments, locks, notifications):
    app = create_app()

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[deps.get_product_client] = lambda: catalog
    app.dependency_overrides[deps.get_auth_client] = lambda: auth
    app.dependency_overrides[deps.get_payment_client] = lambda: payments
    app.dependency_overrides[deps.get_lock_service] = lambda: locks
    app.dependency_overrides[deps.get_notification_service] = lambda: notifications
    return app


@pytest.fixture()
def client(app):
    return TestClient(app)


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


ADDRESS = {
    "first_name": "Alice",
    "last_name": "Liddell",
    "address_line1": "1 Rabbit Hole Lane",
    "city": "Portland",
    "state": "OR",
    "zip_code": "97201",
}
