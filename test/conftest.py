"""
Test Configuration and Fixtures

This module provides:
- A throwaway SQLite store per test session (DATABASE_URL override)
- Schema reset for integration tests
- A TestClient backed by the test app lifespan
- Token helpers for organizer and participant identities

Architecture:
- Unit tests (@pytest.mark.unit): AsyncMock repositories, no store
- Integration tests: real repositories against the SQLite store
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# settings is built at import time, so DATABASE_URL must already be set
# =============================================================================
import os
from pathlib import Path
import tempfile


def _early_setup_test_environment() -> None:
    """Set test environment variables before any module imports."""
    worker_id = os.environ.get('PYTEST_XDIST_WORKER', 'master')
    db_dir = Path(tempfile.mkdtemp(prefix=f'registration_test_{worker_id}_'))
    os.environ['DATABASE_URL'] = f'sqlite+aiosqlite:///{db_dir / "registration_test.db"}'

    # Create test log directory
    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['LOG_DIR'] = str(test_log_dir)

    # No backoff sleeps in tests
    os.environ['STORE_RETRY_BASE_DELAY'] = '0'
    os.environ['STORE_RETRY_MAX_DELAY'] = '0'
    os.environ['WAITLIST_AUTO_PROMOTE'] = 'true'
    os.environ['DEPLOY_ENV'] = 'test'


# Call immediately to set env vars before any imports
_early_setup_test_environment()

from collections.abc import AsyncGenerator, AsyncIterator, Callable, Generator  # noqa: E402
from contextlib import asynccontextmanager  # noqa: E402
from datetime import datetime, timedelta, timezone  # noqa: E402
from uuid import UUID  # noqa: E402

from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
import pytest  # noqa: E402
from uuid_utils.compat import uuid7  # noqa: E402

from src.platform.app_factory import create_app  # noqa: E402
from src.platform.config.di import container  # noqa: E402
from src.platform.config.wire_modules import WIRE_MODULES  # noqa: E402
from src.platform.database.orm_db_setting import (  # noqa: E402
    Database,
    create_db_and_tables,
    drop_db_and_tables,
    engine_manager,
)
from src.platform.logging.loguru_io import Logger  # noqa: E402
from src.service.registration.domain.entity.user_entity import UserEntity, UserRole  # noqa: E402
from src.service.registration.driving_adapter.http_controller.auth.jwt_auth import (  # noqa: E402
    JwtAuth,
)


# =============================================================================
# Store Fixtures
# =============================================================================
@pytest.fixture
async def clean_database() -> AsyncGenerator[None, None]:
    """Fresh schema for one async integration test, engines disposed on the same loop"""
    await drop_db_and_tables()
    await create_db_and_tables()
    yield
    await engine_manager.dispose()


@pytest.fixture
def database() -> Database:
    return Database(read_only=False)


@pytest.fixture
def read_database() -> Database:
    return Database(read_only=True)


# =============================================================================
# HTTP Fixtures
# =============================================================================
@asynccontextmanager
async def lifespan_for_tests(app: FastAPI) -> AsyncIterator[None]:
    """Fresh schema and DI wiring, no tracing exporter"""
    Logger.base.info('🧪 [Test App] Starting up...')
    await drop_db_and_tables()
    await create_db_and_tables()
    container.wire(modules=WIRE_MODULES)

    yield

    await engine_manager.dispose()
    container.unwire()
    Logger.base.info('🧪 [Test App] Shutdown complete')


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    app = create_app(lifespan=lifespan_for_tests, title_suffix=' (Test)')
    with TestClient(app) as test_client:
        yield test_client


# =============================================================================
# Identity Fixtures
# =============================================================================
@pytest.fixture
def make_user() -> Callable[..., UserEntity]:
    def _make_user(
        role: UserRole = UserRole.PARTICIPANT,
        *,
        user_id: UUID | None = None,
        email: str | None = None,
        display_name: str | None = None,
    ) -> UserEntity:
        user_id = user_id or uuid7()
        return UserEntity(
            id=user_id,
            email=email or f'{role.value}-{str(user_id)[-6:]}@example.com',
            display_name=display_name or f'{role.value.capitalize()} {str(user_id)[-4:]}',
            role=role,
        )

    return _make_user


@pytest.fixture
def organizer(make_user: Callable[..., UserEntity]) -> UserEntity:
    return make_user(UserRole.ORGANIZER, display_name='Olivia Organizer')


@pytest.fixture
def participant(make_user: Callable[..., UserEntity]) -> UserEntity:
    return make_user(UserRole.PARTICIPANT, display_name='Pat Participant')


@pytest.fixture
def auth_headers() -> Callable[[UserEntity], dict[str, str]]:
    def _auth_headers(user: UserEntity) -> dict[str, str]:
        token = JwtAuth().create_jwt_token(user)
        return {'Authorization': f'Bearer {token}'}

    return _auth_headers


# =============================================================================
# Time Fixtures
# =============================================================================
@pytest.fixture
def next_week() -> datetime:
    return (datetime.now(timezone.utc) + timedelta(days=7)).replace(microsecond=0)
