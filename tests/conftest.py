"""Shared fixtures for Baby Tracker tests.

Every test gets its own in-memory SQLite database (aiosqlite + StaticPool),
so no PostgreSQL is required. Set TEST_DATABASE_URL to run against a real
server instead.
"""

import os
import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite://")

# Ensure settings can be loaded without .env
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-unit-tests")
os.environ.setdefault("DATABASE_URL", TEST_DATABASE_URL)

from babytracker.core.security import CallerIdentity, create_access_token  # noqa: E402
from babytracker.database import Base, build_engine  # noqa: E402


def _engine_kwargs() -> dict:
    if TEST_DATABASE_URL.startswith("sqlite"):
        return {
            "connect_args": {"check_same_thread": False},
            "poolclass": StaticPool,
        }
    return {}


# ---------------------------------------------------------------------------
# Per-test database
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture()
async def engine():
    import babytracker.models  # noqa: F401 (populates Base.metadata)

    engine = build_engine(TEST_DATABASE_URL, **_engine_kwargs())
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture()
async def db_session(engine):
    session_factory = async_sessionmaker(
        bind=engine, class_=AsyncSession, expire_on_commit=False,
    )
    async with session_factory() as session:
        yield session
        await session.rollback()


# ---------------------------------------------------------------------------
# Reset rate-limiter counters before every test
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _reset_rate_limits():
    """Clear in-memory rate-limit counters so tests never block each other."""
    from babytracker.core.rate_limit import limiter

    storage = getattr(limiter, "_storage", None)
    if storage is not None and hasattr(storage, "reset"):
        storage.reset()


# ---------------------------------------------------------------------------
# HTTP test client
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture()
async def client(db_session: AsyncSession):
    from babytracker.database import get_db
    from babytracker.main import app

    async def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def committing_client(engine):
    """Client whose requests each get their own session, committed at the end.

    Use it to check what a request leaves behind after it returns.
    """
    from babytracker.database import get_db
    from babytracker.main import app

    session_factory = async_sessionmaker(
        bind=engine, class_=AsyncSession, expire_on_commit=False,
    )

    async def _override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Callers
# ---------------------------------------------------------------------------

def make_caller(name: str) -> CallerIdentity:
    return CallerIdentity(
        user_id=f"{name}-{uuid.uuid4().hex[:8]}",
        email=f"{name}@example.com",
        name=name.capitalize(),
    )


def auth_headers(caller: CallerIdentity) -> dict[str, str]:
    token = create_access_token(
        {"sub": caller.user_id, "email": caller.email, "name": caller.name}
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def alice() -> CallerIdentity:
    """Creates families in most tests, hence their owner."""
    return make_caller("alice")


@pytest.fixture()
def bob() -> CallerIdentity:
    return make_caller("bob")


@pytest.fixture()
def carol() -> CallerIdentity:
    return make_caller("carol")


@pytest.fixture()
def mallory() -> CallerIdentity:
    """Never a member of anything."""
    return make_caller("mallory")


@pytest.fixture()
def headers_for():
    return auth_headers


@pytest.fixture()
def caller_factory():
    """Build extra callers: ``caller_factory("b")`` has email b@example.com."""
    return make_caller


# ---------------------------------------------------------------------------
# A family owned by alice, with bob as parent and one baby
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture()
async def household(db_session: AsyncSession, alice, bob):
    """Keys: family, baby, bob_member"""
    from babytracker.schemas.baby import BabyCreate
    from babytracker.services import baby_service, family_service, invitation_service

    family = await family_service.create_family(db_session, alice, "Smiths")
    baby = await baby_service.create_baby(db_session, alice, family.id, BabyCreate(name="Jo"))
    invitation = await invitation_service.invite_member(db_session, alice, family.id, bob.email)
    bob_member = await invitation_service.accept_invitation(db_session, bob, invitation.token)
    return {"family": family, "baby": baby, "bob_member": bob_member}
