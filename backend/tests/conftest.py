"""
Shared fixtures: an in-memory SQLite database per test, an HTTP client bound
to the app with get_db overridden, and a few ready-made users.
"""
import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENABLE_CACHE", "false")

import httpx  # noqa: E402
import pytest  # noqa: E402

from app.database import build_engine, build_session_maker, get_db, init_db  # noqa: E402
from app.main import app  # noqa: E402
from app.services.auth import auth_service  # noqa: E402

PASSWORD = "correct-horse-battery"


@pytest.fixture
async def engine():
    test_engine = build_engine("sqlite+aiosqlite:///:memory:")
    await init_db(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_maker(engine):
    return build_session_maker(engine)


@pytest.fixture
async def db(session_maker):
    """Session for service-level tests; HTTP tests open their own sessions instead"""
    async with session_maker() as session:
        yield session


@pytest.fixture
async def client(session_maker):
    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c
    app.dependency_overrides.clear()


async def _create_user(session_maker, **kwargs):
    # Own short-lived session: the in-memory database has a single shared
    # connection, so no session may keep a transaction open between steps
    async with session_maker() as session:
        return await auth_service.create_user(session, password=PASSWORD, **kwargs)


@pytest.fixture
async def admin(session_maker):
    return await _create_user(session_maker, name="Site Admin", email="admin@example.com", is_admin=True)


@pytest.fixture
async def author(session_maker):
    return await _create_user(session_maker, name="Alice Writer", email="alice@example.com")


@pytest.fixture
async def other_author(session_maker):
    return await _create_user(session_maker, name="Bob Writer", email="bob@example.com")


def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {auth_service.create_access_token(user.id)}"}


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def author_headers(author):
    return auth_headers(author)


@pytest.fixture
def other_headers(other_author):
    return auth_headers(other_author)


@pytest.fixture
def headers_for():
    return auth_headers
