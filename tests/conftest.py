import os

import bcrypt
import pytest

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "correct-horse-battery"

# Settings are read at import time, so configure the environment first
os.environ["DATABASE_URL"] = ""
os.environ["ADMIN_USERNAME"] = ADMIN_USERNAME
os.environ["ADMIN_PASSWORD_HASH"] = bcrypt.hashpw(
    ADMIN_PASSWORD.encode("utf-8"), bcrypt.gensalt(rounds=4)
).decode("utf-8")
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["COOKIE_SECURE"] = "false"
os.environ["SEED_DB_ON_START"] = "false"

import httpx  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from portfolio_api.database import create_tables, get_db  # noqa: E402
from portfolio_api.main import app  # noqa: E402
from portfolio_api.schemas import GalleryImageCreate, UploaderProfile  # noqa: E402
from portfolio_api.services import feed_service  # noqa: E402


@pytest.fixture
def uploader():
    return UploaderProfile(name="admin", avatar_url="/images/logo.jpg")


@pytest.fixture
async def engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_images(db, uploader):
    """Create n images in feed order and return them."""

    async def _make_images(n: int):
        images = []
        for i in range(n):
            data = GalleryImageCreate(src=f"https://cdn.example.com/{i}.jpg", caption=f"Image {i}")
            images.append(await feed_service.create_image(db, data, uploader))
        return images

    return _make_images


@pytest.fixture
async def client(session_factory):
    """HTTP client against the app, backed by the per-test database."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
async def admin_client(client):
    """Client carrying a Bearer token for the admin."""
    response = await client.post(
        "/api/auth/login",
        json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200
    client.headers["Authorization"] = f"Bearer {response.json()['access_token']}"
    return client
