"""
Pytest configuration and fixtures for integration tests.

This module provides:
- A file-backed SQLite database per test session
- Database migration application via Alembic
- Test session management with per-test table cleanup
- FastAPI test client with dependency overrides (database, geocoder)
- Factory fixtures for creating test data
"""

import os
from typing import AsyncGenerator

import httpx
import pytest
from alembic import command
from alembic.config import Config
from httpx import ASGITransport, AsyncClient
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool
from sqlmodel.ext.asyncio.session import AsyncSession

from app.clients.geocoder import MapQuestGeocoder
from app.database import get_session
from app.dependencies import get_geocoder
from app.main import app
from app.models import Bootcamp, Course, Review, User
from tests.factories import BootcampFactory, CourseFactory, ReviewFactory, UserFactory
from tests.utils import mapquest_location, mapquest_payload

# Addresses the fake geocoder knows; anything else geocodes to "no match".
KNOWN_LOCATIONS = {
    "233 Bay State Rd Boston MA 02215": mapquest_location(
        42.350846, -71.105446, "233 Bay State Rd", "Boston", "MA", "02215"
    ),
    "45 Upper College Rd Kingston RI 02881": mapquest_location(
        41.480700, -71.522800, "45 Upper College Rd", "Kingston", "RI", "02881"
    ),
    "02118": mapquest_location(42.338800, -71.072600, "", "Boston", "MA", "02118"),
}


# =============================================================================
# Session-scoped fixtures (shared across all tests)
# =============================================================================


@pytest.fixture(scope="session")
def test_database_path(tmp_path_factory) -> str:
    """Path of the SQLite database file used by the whole test session."""
    return str(tmp_path_factory.mktemp("db") / "devcamper_test.sqlite")


@pytest.fixture(scope="session")
def apply_migrations(test_database_path: str):
    """
    Apply Alembic migrations to the test database once per session.

    Alembic runs synchronously, so it gets the plain ``sqlite://`` URL.
    """
    alembic_ini_path = os.path.join(
        os.path.dirname(os.path.dirname(__file__)), "alembic.ini"
    )
    alembic_cfg = Config(alembic_ini_path)
    alembic_cfg.set_main_option("sqlalchemy.url", f"sqlite:///{test_database_path}")
    command.upgrade(alembic_cfg, "head")

    yield


@pytest.fixture(scope="session")
def test_engine(test_database_path: str, apply_migrations) -> AsyncEngine:
    """
    Create an async SQLAlchemy engine connected to the test database.

    Uses NullPool so no connection outlives the event loop of its test.
    """
    return create_async_engine(
        f"sqlite+aiosqlite:///{test_database_path}",
        echo=False,
        poolclass=NullPool,
        future=True,
    )


# =============================================================================
# Function-scoped fixtures (fresh for each test)
# =============================================================================


@pytest.fixture
async def test_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """
    Provide a database session for a single test.

    Services commit, so isolation comes from deleting every row after the
    test instead of rolling back an outer transaction.
    """
    session = AsyncSession(test_engine, expire_on_commit=False)

    try:
        yield session
    finally:
        await session.rollback()
        for model in (Review, Course, Bootcamp, User):
            await session.execute(delete(model))
        await session.commit()
        await session.close()


def _geocoder_handler(request: httpx.Request) -> httpx.Response:
    location = KNOWN_LOCATIONS.get(request.url.params.get("location"))
    return httpx.Response(200, json=mapquest_payload(location))


@pytest.fixture
async def fake_geocoder() -> AsyncGenerator[MapQuestGeocoder, None]:
    """MapQuest client answering from KNOWN_LOCATIONS instead of the network."""
    geocoder = MapQuestGeocoder(
        api_key="test-key",
        transport=httpx.MockTransport(_geocoder_handler),
        backoff_base=0,
    )
    yield geocoder
    await geocoder.close()


@pytest.fixture
async def client(
    test_session: AsyncSession, fake_geocoder: MapQuestGeocoder
) -> AsyncGenerator[AsyncClient, None]:
    """
    Provide an async HTTP client for testing FastAPI endpoints.

    The database session and geocoder dependencies are overridden so API
    calls share the test session and never leave the process.
    """

    async def override_get_session():
        yield test_session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_geocoder] = lambda: fake_geocoder

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# =============================================================================
# Factory fixtures for creating test data
# =============================================================================


async def _persist(session: AsyncSession, instance):
    session.add(instance)
    await session.commit()
    await session.refresh(instance)
    return instance


@pytest.fixture
async def user_factory(test_session: AsyncSession):
    """
    Factory fixture for creating User instances in the test database.

    Usage:
        user = await user_factory(name="Jane Doe", role="publisher")
    """

    async def _create_user(**kwargs) -> User:
        return await _persist(test_session, UserFactory.build(**kwargs))

    return _create_user


@pytest.fixture
async def bootcamp_factory(test_session: AsyncSession):
    """
    Factory fixture for creating Bootcamp instances in the test database.

    Usage:
        bootcamp = await bootcamp_factory(name="Devworks Bootcamp", housing=True)
    """

    async def _create_bootcamp(**kwargs) -> Bootcamp:
        return await _persist(test_session, BootcampFactory.build(**kwargs))

    return _create_bootcamp


@pytest.fixture
async def course_factory(test_session: AsyncSession):
    """
    Factory fixture for creating Course instances in the test database.

    Aggregates are not recomputed; create courses through the API for that.

    Usage:
        course = await course_factory(bootcamp_id=bootcamp.id, tuition=8000)
    """

    async def _create_course(**kwargs) -> Course:
        return await _persist(test_session, CourseFactory.build(**kwargs))

    return _create_course


@pytest.fixture
async def review_factory(test_session: AsyncSession):
    """
    Factory fixture for creating Review instances in the test database.

    Usage:
        review = await review_factory(bootcamp_id=bootcamp.id, user_id=user.id, rating=8)
    """

    async def _create_review(**kwargs) -> Review:
        return await _persist(test_session, ReviewFactory.build(**kwargs))

    return _create_review
