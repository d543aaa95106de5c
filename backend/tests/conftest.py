"""
Shared fixtures: a throwaway SQLite file, a fresh schema per test,
a seeded two-product catalogue and auth headers for both roles.

Environment is set before tillpoint is imported because Settings reads it
at import time.
"""
import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="tillpoint-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["ENVIRONMENT"] = "test"
os.environ["ALLOWED_HOSTS"] = "testserver"
os.environ["LOG_LEVEL"] = "WARNING"

from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import tillpoint.models  # noqa: E402,F401
from tillpoint.core.security import create_access_token, get_password_hash  # noqa: E402
from tillpoint.db.base import Base  # noqa: E402
from tillpoint.db.session import engine, SessionLocal  # noqa: E402
from tillpoint.main import app  # noqa: E402
from tillpoint.models.enums import PaymentMethod, UserRole  # noqa: E402
from tillpoint.models.product import Product  # noqa: E402
from tillpoint.models.user import User  # noqa: E402
from tillpoint.schemas.sale import CartLine, SaleCreate  # noqa: E402

PASSWORD = "correct-horse-battery"
# bcrypt is slow on purpose; hash once for the whole run
_PASSWORD_HASH = get_password_hash(PASSWORD)


@pytest.fixture(autouse=True)
def fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


def _make_user(db, email, role):
    user = User(email=email, name=email.split("@")[0].title(), hashed_password=_PASSWORD_HASH, role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin_user(db):
    return _make_user(db, "owner@example.com", UserRole.ADMIN.value)


@pytest.fixture
def till_user(db):
    return _make_user(db, "cashier@example.com", UserRole.USER.value)


def _bearer(user):
    return {"Authorization": f"Bearer {create_access_token(subject=str(user.id), role=user.role)}"}


@pytest.fixture
def admin_headers(admin_user):
    return _bearer(admin_user)


@pytest.fixture
def user_headers(till_user):
    return _bearer(till_user)


@pytest.fixture
def products(db):
    """P1 at 10.00 and P2 at 5.00, ten of each in stock."""
    p1 = Product(name="Smart Key Shell", category="Casing", price=Decimal("10.00"),
                 stock=10, min_stock=2, status="In Stock")
    p2 = Product(name="CR2032 Battery", category="Battery", price=Decimal("5.00"),
                 stock=10, min_stock=2, status="In Stock")
    db.add_all([p1, p2])
    db.commit()
    db.refresh(p1)
    db.refresh(p2)
    return p1, p2


def make_sale(lines, method=PaymentMethod.CASH, customer="Ali", amount_paid=None, **extra):
    """SaleCreate from (product, quantity) pairs."""
    return SaleCreate(
        customer_name=customer,
        items=[CartLine(product_id=p.id, quantity=q) for p, q in lines],
        payment_method=method,
        amount_paid=amount_paid,
        **extra,
    )
