import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BASE_URL", "http://localhost:5000")

import datetime

import pytest

from zykli import create_app
from zykli.config import Config
from zykli.exceptions import GatewayError
from zykli.extensions import db
from zykli.services import user_service

T0 = datetime.datetime(2026, 3, 10, 9, 0, 0)


class TestingConfig(Config):
    __test__ = False

    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    REDIS_URL = None
    ALLOW_DIRECT_UPGRADE = True
    RAZORPAY_KEY_ID = "rzp_test_key"
    RAZORPAY_KEY_SECRET = "rzp_test_secret"
    RAZORPAY_WEBHOOK_SECRET = None
    LOG_LEVEL = "WARNING"


class FakeGateway:
    """In-memory stand-in for the Razorpay adapters."""

    name = "fake"
    denial_reason = "NotPaid"

    def __init__(self):
        self.orders = []
        self.paid_orders = set()
        self.down = False

    def create_order(self, amount, receipt):
        if self.down:
            raise GatewayError("Payment gateway timed out")
        order = {
            "id": f"order_test_{len(self.orders) + 1}",
            "entity": "order",
            "amount": int(round(amount * 100)),
            "currency": "INR",
            "receipt": receipt,
            "status": "created",
        }
        self.orders.append(order)
        return order

    def is_paid(self, order_id, proof):
        if self.down:
            raise GatewayError("Payment gateway timed out")
        return order_id in self.paid_orders


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    app.extensions["payment_gateway"] = FakeGateway()
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def gateway(app):
    return app.extensions["payment_gateway"]


@pytest.fixture
def make_user(app):
    counter = {"n": 0}

    def _make(now=T0, **overrides):
        counter["n"] += 1
        data = {
            "username": f"user{counter['n']}",
            "email": f"user{counter['n']}@example.com",
            "password": "s3cret-pass",
        }
        data.update(overrides)
        return user_service.register_user(data, now=now)

    return _make


@pytest.fixture
def auth_headers(client):
    def _login(username="alice", email="alice@example.com", password="s3cret-pass"):
        client.post("/api/register", json={"username": username, "email": email, "password": password})
        resp = client.post("/api/login", json={"email": email, "password": password})
        token = resp.get_json()["data"]["token"]
        return {"Authorization": f"Bearer {token}"}

    return _login
