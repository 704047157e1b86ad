import os

# Settings are read once at import time; pin them before the app is imported.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["OBSERVABILITY_ENABLED"] = "false"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["ADMIN_EMAILS"] = "admin@shopeasy.io"
os.environ["CHECKOUT_RATE_LIMIT"] = "1000/minute"

from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from main import create_app
from services.product_service.models import Product
from shared.config.database import Base, get_db

ADMIN_EMAIL = "admin@shopeasy.io"
SHOPPER_EMAIL = "shopper@shopeasy.io"
PASSWORD = "s3cret-pass"

SHIPPING = {
    "full_name": "Ada Lovelace",
    "phone": "555-0100",
    "street": "12 Analytical Way",
    "city": "London",
    "state": "LDN",
    "zip_code": "N1 9GU",
}


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
def app(session_factory):
    app = create_app()

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


async def auth_headers(client: AsyncClient, email: str, password: str = PASSWORD) -> dict:
    await client.post("/auth/register", json={"email": email, "password": password})
    resp = await client.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
async def shopper_headers(client):
    return await auth_headers(client, SHOPPER_EMAIL)


@pytest.fixture
async def admin_headers(client):
    return await auth_headers(client, ADMIN_EMAIL)


@pytest.fixture
def make_product(session_factory):
    async def _make(**overrides) -> Product:
        data = {
            "name": "Desk Lamp",
            "description": "Warm white LED lamp",
            "price": Decimal("10.00"),
            "image_url": None,
            "stock_quantity": 5,
            "category": "home",
        }
        data.update(overrides)
        async with session_factory() as session:
            product = Product(**data)
            session.add(product)
            await session.commit()
            await session.refresh(product)
            return product

    return _make


@pytest.fixture
async def cart_id(client):
    resp = await client.post("/cart/", json={})
    assert resp.status_code == 201
    return resp.json()["session_id"]
