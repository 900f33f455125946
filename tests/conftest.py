"""
Shared pytest fixtures and configuration
"""
import json
import pytest
from pathlib import Path
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker

from app.main import app
from app.database import init_db
from app.dependencies import get_content_service
from app.apps.content.schemas import KNOWN_RESOURCES
from app.apps.content.services import ContentService, HealthState
from app.apps.content.services.db_store import DatabaseContentStore
from app.apps.content.services.file_store import FileContentStore, default_file_paths

STRUCT_ID = "content-struct"


class FakeClock:
    """Manually advanced monotonic clock for reconnect cooldown tests"""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def write_json():
    """Write a legacy JSON file the way the old admin backend left them"""
    def _write(path: Path, data) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
    return _write


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "public"
    directory.mkdir()
    return directory


@pytest.fixture
async def test_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """
    File-backed SQLite database per test.
    Note: aiosqlite must be installed for async SQLite support
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'content.db'}")
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine: AsyncEngine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def health(clock: FakeClock) -> HealthState:
    return HealthState(clock=clock)


@pytest.fixture
def file_store(data_dir: Path) -> FileContentStore:
    return FileContentStore(default_file_paths(data_dir, [*KNOWN_RESOURCES, STRUCT_ID]))


@pytest.fixture
def db_store(session_factory, health: HealthState) -> DatabaseContentStore:
    return DatabaseContentStore(session_factory, health)


@pytest.fixture
def make_service(test_engine, db_store, file_store, health):
    """Build a ContentService; the database is not initialized until connect()"""
    def _make(initializer=None, reconnect_cooldown: float = 15.0) -> ContentService:
        async def default_initializer():
            await init_db(test_engine)

        return ContentService(
            db_store=db_store,
            file_store=file_store,
            health=health,
            initializer=initializer or default_initializer,
            struct_id=STRUCT_ID,
            reconnect_cooldown=reconnect_cooldown,
            retry_delay=0,
        )
    return _make


@pytest.fixture
async def service(make_service) -> AsyncGenerator[ContentService, None]:
    """Content service with a connected (healthy) database"""
    content_service = make_service()
    assert await content_service.connect(retries=1)
    yield content_service
    await content_service.shutdown()


@pytest.fixture
async def client(service: ContentService) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTP client bound to the app with the content service overridden.
    """
    app.dependency_overrides[get_content_service] = lambda: service

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client

    # Cleanup
    app.dependency_overrides.clear()
