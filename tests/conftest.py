"""
Los Inmaduros Backend — Test Configuration (conftest.py)
=========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets a fresh in-memory SQLite database (aiosqlite) with
       all tables created from the ORM metadata, and a FastAPI app whose
       database and auth dependencies point at it.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── db_engine / session_factory / db_session: isolated database
    ├── auth_state: who the API believes is calling (None → 401)
    ├── app / client: FastAPI app + HTTPX AsyncClient (ASGI transport)
    ├── user / other_user / admin_user: persisted users
    ├── route: one catalog route
    └── route_call_factory: creates route calls organized by anyone
"""

import os
import tempfile

# Override settings for testing BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["STORAGE_BACKEND"] = "local"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="inmaduros_test_")
os.environ["ENVIRONMENT"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import datetime, timedelta, timezone
from typing import Any, AsyncGenerator, Dict, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import inmaduros.models  # noqa: F401  (registers every table)
from inmaduros.auth import get_current_user
from inmaduros.database import Base, get_db_session
from inmaduros.exceptions import UnauthorizedError
from inmaduros.main import create_app
from inmaduros.models import (
    MeetingPoint,
    MeetingPointType,
    Route,
    RouteCall,
    RouteCallStatus,
    RoutePace,
    User,
    UserRole,
)

# 1x1 transparent PNG
PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00"
    b"\x1f\x15\xc4\x89\x00\x00\x00\rIDATx\x9cc\xf8\x0f\x00\x00\x01\x01\x00\x05\x18\xd8N\x00"
    b"\x00\x00\x00IEND\xaeB`\x82"
)

MAPS_URL = "https://maps.app.goo.gl/gCJfpLSoy3D454Y19"


def future(days: int = 7) -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=days)


def iso(value: datetime) -> str:
    return value.isoformat().replace("+00:00", "Z")


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    """In-memory SQLite shared by every session of one test (StaticPool)."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for service-level tests and for arranging data."""
    async with session_factory() as session:
        yield session


# ══════════════════════════════════════════════════════════════════════════
# Application
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def auth_state() -> Dict[str, Optional[User]]:
    """Set `auth_state["user"]` to act as that user; None means anonymous."""
    return {"user": None}


@pytest.fixture
def app(session_factory, auth_state):
    application = create_app()

    async def override_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def override_current_user() -> User:
        if auth_state["user"] is None:
            raise UnauthorizedError(message="No authentication token provided")
        return auth_state["user"]

    application.dependency_overrides[get_db_session] = override_db_session
    application.dependency_overrides[get_current_user] = override_current_user
    return application


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ══════════════════════════════════════════════════════════════════════════
# Data
# ══════════════════════════════════════════════════════════════════════════

async def create_user(session_factory, clerk_id: str, email: str, name: str, role: UserRole = UserRole.USER) -> User:
    async with session_factory() as session:
        user = User(clerk_id=clerk_id, email=email, name=name, last_name="Tester", role=role)
        session.add(user)
        await session.commit()
        return user


@pytest_asyncio.fixture
async def user(session_factory, auth_state) -> User:
    """The default caller: every API test runs authenticated as this user."""
    created = await create_user(session_factory, "user_alice", "alice@example.com", "Alice")
    auth_state["user"] = created
    return created


@pytest_asyncio.fixture
async def other_user(session_factory) -> User:
    return await create_user(session_factory, "user_bob", "bob@example.com", "Bob")


@pytest_asyncio.fixture
async def admin_user(session_factory) -> User:
    return await create_user(session_factory, "user_admin", "admin@example.com", "Admin", UserRole.ADMIN)


@pytest_asyncio.fixture
async def route(session_factory) -> Route:
    async with session_factory() as session:
        created = Route(
            name="Héroes",
            slug="heroes",
            image="https://example.com/heroes.webp",
            approximate_distance="18 km",
            description="Ruta muy disfrutable.",
            map_embed_url="https://www.google.com/maps/d/embed?mid=abc",
            levels=["INTERMEDIATE", "ADVANCED"],
        )
        session.add(created)
        await session.commit()
        return created


@pytest.fixture
def route_call_factory(session_factory):
    """Create route calls directly in the database (bypasses date validation)."""

    async def _create(
        organizer: User,
        route: Optional[Route] = None,
        date_route: Optional[datetime] = None,
        status: RouteCallStatus = RouteCallStatus.SCHEDULED,
        **extra: Any,
    ) -> RouteCall:
        async with session_factory() as session:
            route_call = RouteCall(
                route_id=route.id if route else None,
                custom_route_name=None if route else "Ruta nocturna",
                organizer_id=organizer.id,
                title=route.name if route else "Ruta nocturna",
                image=route.image if route else None,
                date_route=date_route or future(),
                pace=RoutePace.GUSANO,
                status=status,
                meeting_points=[
                    MeetingPoint(type=MeetingPointType.PRIMARY, name="Explanada", location=MAPS_URL)
                ],
                **extra,
            )
            session.add(route_call)
            await session.commit()
            return route_call

    return _create
