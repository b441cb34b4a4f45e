from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")

from collections.abc import AsyncIterator  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from registry_api.core.settings import Settings, get_settings  # noqa: E402
from registry_api.db import models  # noqa: E402
from registry_api.db.base import Base  # noqa: E402
from registry_api.db.repositories import InstitutionRepository, UserRepository  # noqa: E402
from registry_api.db.session import SessionFactory, session_scope  # noqa: E402
from registry_api.main import create_app  # noqa: E402
from registry_api.services.institutions import InstitutionService  # noqa: E402

_TEST_DB_PATH = "test.db"


class StubNotifier:
    """Records every notification instead of sending email."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []
        self.fail_with: Exception | None = None

    async def send_submission_received(self, *, name: str, email: str) -> None:
        self._record("submission_received", email)

    async def send_approval_notice(self, institution: models.Institution) -> None:
        self._record("approved", institution.email)

    async def send_rejection_notice(self, institution: models.Institution) -> None:
        self._record("denied", institution.email)

    def _record(self, kind: str, email: str) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append((kind, email))


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with SQLite database."""
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite+aiosqlite:///{_TEST_DB_PATH}",
        DB_SCHEMA=None,
        CORS_ORIGINS=["http://localhost:3000"],
        LOG_LEVEL="DEBUG",
        WEB_BASE_URL="https://registry.test",
    )


@pytest.fixture
async def session_maker(test_settings: Settings) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    """Create a fresh schema and yield a sessionmaker bound to it."""
    engine = create_async_engine(test_settings.database_url)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()

    # Clean up test database
    if os.path.exists(_TEST_DB_PATH):
        os.remove(_TEST_DB_PATH)


@pytest.fixture
def session_factory(session_maker: async_sessionmaker[AsyncSession]) -> SessionFactory:
    return session_scope(session_maker)


@pytest.fixture
async def db_session(session_maker: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    async with session_maker() as session:
        yield session


@pytest.fixture
def notifier() -> StubNotifier:
    return StubNotifier()


@pytest.fixture
def institution_repository(session_factory: SessionFactory) -> InstitutionRepository:
    return InstitutionRepository(session_factory)


@pytest.fixture
def user_repository(session_factory: SessionFactory) -> UserRepository:
    return UserRepository(session_factory)


@pytest.fixture
def institution_service(
    institution_repository: InstitutionRepository,
    user_repository: UserRepository,
    notifier: StubNotifier,
) -> InstitutionService:
    return InstitutionService(
        institutions=institution_repository,
        users=user_repository,
        notifier=notifier,
    )


@pytest.fixture
def app(test_settings: Settings, session_factory: SessionFactory, notifier: StubNotifier):
    """Create FastAPI app for testing."""
    from registry_api.api.deps import get_db_session, get_notifier, get_session_factory

    async def _override_get_db_session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app = create_app()
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_db_session] = _override_get_db_session
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_notifier] = lambda: notifier
    return app


@pytest.fixture
async def async_client(app) -> AsyncIterator[AsyncClient]:
    """Create async test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client


@pytest.fixture
def signup_payload() -> dict[str, Any]:
    return {
        "name": "Acme Univ",
        "email": "a@acme.edu",
        "account_number": "123",
        "address": "1 Main St",
        "phone": "5551234",
    }


@pytest.fixture
def make_institution(institution_repository: InstitutionRepository):
    """Insert an institution directly through the repository."""
    counter = {"value": 0}

    async def _make(**overrides: Any) -> models.Institution:
        counter["value"] += 1
        index = counter["value"]
        values: dict[str, Any] = {
            "name": f"Institution {index}",
            "email": f"office{index}@example.edu",
            "account_number": f"ACC-{index:03d}",
            "address": f"{index} College Road",
            "phone": f"55500{index:02d}",
        }
        values.update(overrides)
        return await institution_repository.insert(values)

    return _make


@pytest.fixture
def make_user(user_repository: UserRepository):
    async def _make(**overrides: Any) -> models.UserAccount:
        values: dict[str, Any] = {
            "name": "Ada",
            "lastname": "Lovelace",
            "email": "ada@example.com",
        }
        values.update(overrides)
        return await user_repository.insert(values)

    return _make
