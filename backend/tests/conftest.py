import os
import tempfile

# must be set before bakery.config is imported
os.environ.setdefault(
    "DATABASE_URL", f"sqlite:///{os.path.join(tempfile.gettempdir(), 'bakery_test.db')}"
)
os.environ.setdefault("PAYMENT_MOCK_DELAY_MS", "0")

import pytest
from fastapi.testclient import TestClient

from bakery.db import SessionLocal, init_db
from bakery.main import app
from bakery.models.address import Address
from bakery.models.product import Product
from bakery.utils.security import create_access_token


@pytest.fixture(autouse=True)
def reset_db():
    init_db(reset=True)
    yield


@pytest.fixture
def db():
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def make_product():
    def _make(title="Cookie", stock=5, price_cents=250):
        s = SessionLocal()
        try:
            p = Product(title=title, slug=title.lower(), price_cents=price_cents, stock=stock)
            s.add(p)
            s.commit()
            return p.id
        finally:
            s.close()

    return _make


@pytest.fixture
def make_address():
    def _make(user_id, city="Amman"):
        s = SessionLocal()
        try:
            a = Address(
                user_id=user_id,
                full_name="Test Buyer",
                phone="0790000000",
                street="Rainbow St 1",
                city=city,
            )
            s.add(a)
            s.commit()
            return a.id
        finally:
            s.close()

    return _make


def auth_headers(user_id, role="USER"):
    return {"Authorization": f"Bearer {create_access_token(user_id, role=role)}"}


def product_stock(product_id):
    s = SessionLocal()
    try:
        return s.get(Product, product_id).stock
    finally:
        s.close()


def set_stock(product_id, stock):
    s = SessionLocal()
    try:
        s.get(Product, product_id).stock = stock
        s.commit()
    finally:
        s.close()
