"""
VetDesk Backend — Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Service tests run against a fresh in-memory SQLite database built
       from the ORM metadata. API tests drive the FastAPI app through
       httpx's ASGITransport with the session and storage dependencies
       overridden, so no PostgreSQL or S3 is needed.

Fixture Hierarchy (all function-scoped):
    db_engine ─┬─ db_session ── make_user / user / other_user
               └─ test_client (dependency overrides) ── login()
    storage: InMemoryStorageClient recording deleted keys
"""

import os

# Settings are read at import time: configure the environment first.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["USE_IN_MEMORY_STORAGE"] = "true"
os.environ["PASSWORD_HASH_ITERATIONS"] = "1000"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import date, datetime, timezone  # noqa: E402
from typing import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from vetdesk.config import settings  # noqa: E402
from vetdesk.database import (  # noqa: E402
    Base,
    discard_after_commit_callbacks,
    get_db_session,
    run_after_commit_callbacks,
)
from vetdesk.models import (  # noqa: E402
    Customer,
    Pet,
    PetGender,
    PetType,
    Treatment,
    User,
    Visit,
    VisitStatus,
)
from vetdesk.services.security import hash_password  # noqa: E402
from vetdesk.services.storage import InMemoryStorageClient, get_storage_client  # noqa: E402

PASSWORD = "correct-horse-battery"


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════


@pytest_asyncio.fixture
async def db_engine():
    """
    A private in-memory database per test.

    StaticPool keeps the single connection alive, so every session sees
    the same in-memory database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def storage():
    return InMemoryStorageClient(base_url="https://storage.test/bucket")


# ══════════════════════════════════════════════════════════════════════════
# Data builders
# ══════════════════════════════════════════════════════════════════════════


@pytest.fixture
def make_user(db_session):
    async def _make(email: str = "dr.cohen@vetclinic.io", name: str = "Dr. Cohen") -> User:
        user = User(email=email, name=name, password_hash=hash_password(PASSWORD))
        db_session.add(user)
        await db_session.flush()
        return user
    return _make


@pytest_asyncio.fixture
async def user(make_user) -> User:
    return await make_user()


@pytest_asyncio.fixture
async def other_user(make_user) -> User:
    return await make_user(email="someone.else@vetclinic.io", name="Someone Else")


@pytest.fixture
def make_customer(db_session):
    async def _make(owner: User, name: str = "Dana Levi", **fields) -> Customer:
        customer = Customer(user_id=owner.id, name=name, **fields)
        db_session.add(customer)
        await db_session.flush()
        return customer
    return _make


@pytest.fixture
def make_pet(db_session):
    async def _make(customer: Customer, name: str = "Rex", **fields) -> Pet:
        fields.setdefault("type", PetType.DOG)
        fields.setdefault("gender", PetGender.MALE)
        pet = Pet(customer_id=customer.id, name=name, **fields)
        db_session.add(pet)
        await db_session.flush()
        return pet
    return _make


@pytest.fixture
def make_treatment(db_session):
    async def _make(owner: User, name: str = "Rabies vaccine", price_cents: int = 12000) -> Treatment:
        treatment = Treatment(user_id=owner.id, name=name, price_cents=price_cents)
        db_session.add(treatment)
        await db_session.flush()
        return treatment
    return _make


@pytest.fixture
def make_visit(db_session):
    async def _make(pet: Pet, start: datetime, **fields) -> Visit:
        fields.setdefault("status", VisitStatus.SCHEDULED)
        visit = Visit(customer_id=pet.customer_id, pet_id=pet.id, scheduled_start_at=start, **fields)
        db_session.add(visit)
        await db_session.flush()
        return visit
    return _make


@pytest.fixture
def sample_dates():
    return {
        "start": datetime(2025, 8, 2, 9, 0, tzinfo=timezone.utc),
        "due": date(2026, 8, 2),
    }


# ══════════════════════════════════════════════════════════════════════════
# API client
# ══════════════════════════════════════════════════════════════════════════


@pytest_asyncio.fixture
async def test_client(session_factory, storage):
    """
    HTTPX AsyncClient wired to the FastAPI app.

    Each request gets its own session on the test database and commits or
    rolls back exactly like the production dependency.
    """
    from vetdesk.main import app

    async def override_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                discard_after_commit_callbacks(session)
                await session.rollback()
                raise
            else:
                await run_after_commit_callbacks(session)

    app.dependency_overrides[get_db_session] = override_db_session
    app.dependency_overrides[get_storage_client] = lambda: storage

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


async def register_and_login(client: AsyncClient, email: str, name: str = "Clinic User") -> dict:
    """Registers (if needed) and logs in; the client then carries that user's cookie."""
    await client.post("/api/auth/register", json={"email": email, "name": name, "password": PASSWORD})
    response = await client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
    assert response.status_code == 200, response.text
    token = response.cookies.get(settings.session_cookie_name)
    client.cookies.clear()
    client.cookies.set(settings.session_cookie_name, token)
    return response.json()["user"]


@pytest.fixture
def login():
    return register_and_login
