"""Shared pytest fixtures for order assistant tests."""

import os

# Keep the module-level engine off disk before the package is imported.
os.environ.setdefault("DATABASE_URL", "sqlite://")

from dataclasses import dataclass, field
from datetime import datetime, timedelta

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from order_assistant.auth import create_token, hash_password
from order_assistant.config import Settings
from order_assistant.db import Base
from order_assistant.models import Customer, CustomerProduct, Order, OrderItem, Product, User

PASSWORD = "s3cret-pass"
PASSWORD_HASH = hash_password(PASSWORD)


@dataclass
class SeededData:
    """Ids created by the ``seeded`` fixture."""

    customer_id: str
    other_customer_id: str
    user_id: int
    other_user_id: int
    product_ids: dict[str, str] = field(default_factory=dict)


@pytest.fixture
def engine():
    """In-memory SQLite shared by every connection of one test."""
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seeded(db_session):
    """Two customers, each with a bound user; customer one has a catalog and orders."""
    customer = Customer(name="Harbor Diner")
    other = Customer(name="Other Cafe")
    db_session.add_all([customer, other])
    db_session.flush()

    user = User(name="Buyer", email="buyer@example.com", password_hash=PASSWORD_HASH, customer_id=customer.id)
    other_user = User(name="Other", email="other@example.com", password_hash=PASSWORD_HASH, customer_id=other.id)
    db_session.add_all([user, other_user])
    db_session.flush()

    catalog = [
        ("NAP-100", "White Dinner Napkins", "Napkins", "the usual napkins for the dining room"),
        ("CUP-012", "12oz Hot Cups", "Cups", "coffee station"),
        ("LID-016", "Flat Lids for Cold Cups", "Lids", ""),
    ]
    product_ids = {}
    for item_number, description, category, note in catalog:
        p = Product(item_number=item_number, description=description, category=category)
        db_session.add(p)
        db_session.flush()
        db_session.add(CustomerProduct(customer_id=customer.id, product_id=p.id, notes=note))
        product_ids[item_number] = p.id

    outsider = Product(item_number="GLV-NTL", description="Nitrile Gloves", category="Gloves")
    db_session.add(outsider)
    db_session.flush()
    product_ids["GLV-NTL"] = outsider.id

    now = datetime(2024, 5, 20, 12, 0, 0)
    for days_ago, items in (
        (1, [("NAP-100", 4)]),
        (8, [("CUP-012", 10), ("GLV-NTL", 2)]),
        (15, [("LID-016", 6)]),
        (22, [("NAP-100", 1)]),
    ):
        order = Order(customer_id=customer.id, status="confirmed", created_at=now - timedelta(days=days_ago))
        db_session.add(order)
        db_session.flush()
        for item_number, qty in items:
            db_session.add(OrderItem(order_id=order.id, product_id=product_ids[item_number], quantity=qty))

    db_session.commit()
    return SeededData(
        customer_id=customer.id,
        other_customer_id=other.id,
        user_id=user.id,
        other_user_id=other_user.id,
        product_ids=product_ids,
    )


@pytest.fixture
def auth_header(seeded):
    return {"Authorization": f"Bearer {create_token(seeded.user_id)}"}


@pytest.fixture
def offline_settings():
    """No generation credential: the local matcher answers."""
    return Settings(anthropic_api_key="")


@pytest.fixture
def online_settings():
    return Settings(
        anthropic_api_key="test-key",
        anthropic_model="test-model",
        anthropic_base_url="https://generation.test",
        generation_max_tokens=1000,
        generation_timeout_seconds=5.0,
    )


class RecordingHandler:
    """httpx MockTransport handler that records requests and replays a response."""

    def __init__(self, response=None, exc: Exception | None = None):
        self.response = response
        self.exc = exc
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        if callable(self.response):
            return self.response(request)
        return self.response or envelope("{}")


def envelope(text: str) -> httpx.Response:
    """A Messages API success body whose single text block is ``text``."""
    return httpx.Response(
        200,
        json={
            "id": "msg_1",
            "type": "message",
            "role": "assistant",
            "model": "test-model",
            "content": [{"type": "text", "text": text}],
            "stop_reason": "end_turn",
            "stop_sequence": None,
            "usage": {"input_tokens": 10, "output_tokens": 5},
        },
    )


@pytest.fixture
def recording_handler():
    return RecordingHandler


@pytest.fixture
def make_envelope():
    return envelope
