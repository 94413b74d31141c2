"""Service test fixtures — async DB + FastAPI test client.

Invariants:
    - Every test gets a fresh SQLite database file under tmp_path
    - Foreign keys enforced exactly as in production (DatabaseSessionManager pragma)
    - get_db dependency overridden to use the test DB session
    - db_manager patched so the readiness probe sees the test engine

Design Decisions:
    - File-backed SQLite instead of :memory: every pooled connection sees the
      same database, so service and assertion sessions are truly separate
    - Seed data inserted through the ORM, never through the sync endpoint, so
      sync tests start from a known stored state
"""

import pytest
from httpx import ASGITransport, AsyncClient

from app.db.base import Base
from app.infrastructure.database import get_db, DatabaseSessionManager
import app.infrastructure.database as db_module
from app.main import app
from app.models.user import User
from app.models.project import Project


@pytest.fixture
async def db_manager(tmp_path):
    manager = DatabaseSessionManager(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", pool_size=5, max_overflow=5,
    )
    async with manager.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield manager
    await manager.dispose()


@pytest.fixture
def test_session_factory(db_manager):
    return db_manager._session_factory


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def asgi_transport(db_manager, test_session_factory):
    """ASGI transport with the DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    original_manager = db_module.db_manager
    db_module.db_manager = db_manager

    yield ASGITransport(app=app)

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
async def client(asgi_transport):
    """FastAPI test client with DB dependency overridden."""
    async with AsyncClient(transport=asgi_transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def seed_users(test_db):
    """Three users: ana (owner), ben and cleo (members)."""
    users = [
        User(id="u-ana", name="Ana", email="ana@example.com", avatar="ana.png"),
        User(id="u-ben", name="Ben", email="ben@example.com"),
        User(id="u-cleo", name="Cleo", email="cleo@example.com"),
    ]
    test_db.add_all(users)
    await test_db.commit()
    return {u.name.lower(): u for u in users}


@pytest.fixture
async def seed_project(test_db, seed_users):
    """An empty project owned by ana with ben and cleo as members."""
    project = Project(
        id="p-1",
        title="Commuter bikes",
        owner=seed_users["ana"],
        members=[seed_users["ben"], seed_users["cleo"]],
    )
    test_db.add(project)
    await test_db.commit()
    return project


@pytest.fixture
async def other_project(test_db, seed_users):
    project = Project(id="p-2", title="Other", owner=seed_users["ben"])
    test_db.add(project)
    await test_db.commit()
    return project
