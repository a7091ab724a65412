# tests/conftest.py
import os
import tempfile

# Configuration is read at import time, so the environment is prepared first
_DB_DIR = tempfile.mkdtemp(prefix="quotation-tests-")
os.environ["DB_TYPE"] = "sqlite"
os.environ["SQLITE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/test.db"
os.environ.setdefault("JWT_SECRET", "test-secret")

from decimal import Decimal

import pytest
from httpx import AsyncClient, ASGITransport

from main import app
from quotation_backend.core.db import AsyncSessionLocal, Base, engine
from quotation_backend.core.enums import UserRole
from quotation_backend.core.security import create_access_token, hash_password
from quotation_backend.models.product_models import Product
from quotation_backend.models.user_models import User


@pytest.fixture
async def setup_db():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(setup_db):
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
async def users(db_session):
    admin = User(username="admin_1", password_hash=hash_password("admin123"), role=UserRole.ADMIN.value)
    sales = User(username="sales_1", password_hash=hash_password("sales123"), role=UserRole.SALES.value)
    db_session.add_all([admin, sales])
    await db_session.commit()
    return {"admin": admin, "sales": sales}


def _auth_headers(user: User) -> dict:
    token = create_access_token(
        {"sub": user.username, "user_id": user.id, "role": user.role},
        token_version=0,
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(users):
    return _auth_headers(users["admin"])


@pytest.fixture
def sales_headers(users):
    return _auth_headers(users["sales"])


@pytest.fixture
async def products(db_session):
    widget = Product(name="Arduino Uno", sku="ARD-UNO", description="Microcontroller board", price=Decimal("25.00"))
    cable = Product(name="USB Cable", sku="USB-A-B", description="1m USB A to B", price=Decimal("10.00"))
    retired = Product(name="Old Sensor", sku="OLD-1", price=Decimal("5.00"), is_active=False)
    db_session.add_all([widget, cable, retired])
    await db_session.commit()
    return {"widget": widget, "cable": cable, "retired": retired}


@pytest.fixture
async def client(setup_db):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def quotation_payload(products):
    return {
        "customer_name": "Jane Buyer",
        "customer_email": "jane@example.com",
        "customer_company": "Acme Labs",
        "items": [
            {"product_id": products["widget"].id, "quantity": 2},
            {"product_id": products["cable"].id, "quantity": 1},
        ],
        "discount_percentage": 10,
        "tax_percentage": 5,
        "shipping_amount": 5,
        "currency": "USD",
        "terms_and_conditions": "Payment due within 30 days.",
    }
