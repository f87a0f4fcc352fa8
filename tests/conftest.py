import os
import uuid

# Must be set before kvb_crm.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("DEV_MODE", "true")
os.environ.setdefault("EMAIL_REDIRECT_TO", "")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from kvb_crm.core.security import ROLE_COOKIES, create_access_token, get_password_hash
from kvb_crm.database import get_session
from kvb_crm.main import app
from kvb_crm.models.product import Product
from kvb_crm.repositories.user_repo import get_principal_repository
from kvb_crm.services.email_service import MockEmailService, set_email_service
from kvb_crm.services.upload_service import MockUploadProvider, set_upload_provider

TEST_PASSWORD = "secret123"

PRINCIPAL_DEFAULTS = {
    "admin": {"full_name": "Admin User"},
    "sales": {"full_name": "Sales User", "region": "North"},
    "worker": {"full_name": "Worker User", "specialization": "Solar installation"},
    "customer": {
        "full_name": "Customer User",
        "phone": "9999999999",
        "address": "12 Solar Street",
        "region": "South",
    },
}


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session(engine):
    maker = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with maker() as session:
        yield session


@pytest.fixture
async def client(session):
    async def override_get_session():
        yield session

    app.dependency_overrides[get_session] = override_get_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def email_outbox():
    """Fresh mock mailer per test; sent messages are kept on the instance."""
    service = MockEmailService()
    set_email_service(service)
    yield service
    set_email_service(None)


@pytest.fixture(autouse=True)
def uploads():
    provider = MockUploadProvider()
    set_upload_provider(provider)
    yield provider
    set_upload_provider(None)


@pytest.fixture
def make_principal(session):
    async def _make(role, **overrides):
        data = {
            "email": f"{role}-{uuid.uuid4().hex[:8]}@example.com",
            "password_hash": get_password_hash(TEST_PASSWORD),
            **PRINCIPAL_DEFAULTS[role],
            **overrides,
        }
        return await get_principal_repository(role, session).create(data)

    return _make


@pytest.fixture
def auth_headers():
    def _headers(principal):
        token = create_access_token(principal.id, principal.role)
        return {"Cookie": f"{ROLE_COOKIES[principal.role]}={token}"}

    return _headers


@pytest.fixture
async def admin(make_principal):
    return await make_principal("admin")


@pytest.fixture
async def sales(make_principal):
    return await make_principal("sales")


@pytest.fixture
async def worker(make_principal):
    return await make_principal("worker")


@pytest.fixture
async def customer(make_principal):
    return await make_principal("customer")


@pytest.fixture
async def product(session):
    product = Product(
        name="Solar Panel 5kW",
        description="Rooftop panel kit",
        price=1000.0,
        category="panels",
        stock=4,
        specifications={"capacity": "5kW"},
        images=["https://files.local/products/panel.jpg", "https://files.local/products/side.jpg"],
    )
    session.add(product)
    await session.commit()
    await session.refresh(product)
    return product
