"""
Pytest fixtures for ModelVault tests.

Every test gets its own SQLite file and its own artifact directory, both
under pytest's tmp_path. The app's session and artifact store
dependencies are overridden to point at them.
"""

import os
import tempfile
import uuid
from typing import AsyncGenerator, Callable, Dict, Optional

# Settings are read once at import time, so the environment has to be in
# place before anything from modelvault is imported
_tmp_root = tempfile.mkdtemp(prefix="modelvault-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_tmp_root, 'unused.db')}"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only-0123456789"
os.environ["PROJECT_DIR"] = os.path.join(_tmp_root, "project")

from modelvault.config import get_settings

get_settings.cache_clear()

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from modelvault.database import get_db
from modelvault.kernel.identity.jwt import get_token_service
from modelvault.kernel.identity.password import hash_password
from modelvault.kernel.models import Base, User
from modelvault.kernel.permissions import Permission
from modelvault.kernel.storage import ArtifactStore, StorageConfig, get_artifact_store
from modelvault.main import app

USER = int(Permission.USER)
ADMIN = int(Permission.ADMIN)
USER_ADMIN = int(Permission.USER | Permission.ADMIN)

DEFAULT_PASSWORD = "secret-pass"


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    """Cheap hashes; the cost factor is irrelevant to behaviour."""
    monkeypatch.setattr("modelvault.kernel.identity.password.BCRYPT_ROUNDS", 4)


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """Test database engine on a fresh SQLite file."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(db_engine) -> async_sessionmaker:
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """A session for tests that talk to the kernel directly."""
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def store(tmp_path) -> ArtifactStore:
    """Artifact store rooted in the test's temporary directory."""
    artifact_store = ArtifactStore(StorageConfig(project_dir=tmp_path / "project"))
    artifact_store.ensure_layout()
    return artifact_store


@pytest_asyncio.fixture
async def client(session_maker, store) -> AsyncGenerator[AsyncClient, None]:
    """Async client against the app, wired to the test database and store."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_artifact_store] = lambda: store
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.pop(get_db, None)
        app.dependency_overrides.pop(get_artifact_store, None)


@pytest.fixture
def make_user(session_maker) -> Callable:
    """Factory creating committed users: `await make_user(permissions=USER)`."""

    async def _make_user(
        permissions: int = USER,
        email: Optional[str] = None,
        name: str = "Test User",
        password: str = DEFAULT_PASSWORD,
    ) -> User:
        user = User(
            id=uuid.uuid4(),
            email=email or f"user-{uuid.uuid4().hex[:8]}@modelvault.dev",
            name=name,
            password_hash=hash_password(password),
            permissions=permissions,
            default_lang="pl",
        )
        async with session_maker() as session:
            session.add(user)
            await session.commit()
        return user

    return _make_user


def auth_headers(user: User) -> Dict[str, str]:
    """Token header for a user, as issued at login."""
    token = get_token_service().issue(user)
    return {get_settings().token_header: token}


@pytest.fixture
def headers_for() -> Callable[[User], Dict[str, str]]:
    return auth_headers


@pytest_asyncio.fixture
async def admin(make_user) -> User:
    return await make_user(permissions=USER_ADMIN, email="admin@modelvault.dev", name="Admin")


@pytest.fixture
def admin_headers(admin) -> Dict[str, str]:
    return auth_headers(admin)
