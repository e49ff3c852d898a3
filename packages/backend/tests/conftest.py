"""Test fixtures — a fresh in-memory database and media root per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets its own in-memory SQLite engine (aiosqlite). StaticPool
   keeps one connection alive so every session sees the same database.
2. get_db is overridden to hand each request its own session from that
   engine, mirroring production where every request gets a fresh session.
3. The media host writes under tmp_path and temp uploads are spooled to
   tmp_path, so tests can assert on the files left behind.

Unlike mocking auth away, these fixtures register and log in real users;
the refresh-token and ownership rules are exactly what's under test.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from vidtube.config import settings
from vidtube.db.engine import get_db
from vidtube.db.models import Base
from vidtube.main import app
from vidtube.media.host import LocalMediaHost, get_media_host

TEST_DB_URL = "sqlite+aiosqlite://"
DEFAULT_PASSWORD = "password123"

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
MP4_BYTES = b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 128


@pytest_asyncio.fixture()
async def engine():
    engine = create_async_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(engine):
    """Per-request sessions bound to the test engine."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture()
def temp_dir(tmp_path, monkeypatch):
    path = tmp_path / "temp"
    path.mkdir()
    monkeypatch.setattr(settings, "temp_dir", str(path))
    return path


@pytest.fixture()
def media(tmp_path):
    return LocalMediaHost(str(tmp_path / "media"), "/media")


@pytest_asyncio.fixture()
async def client(session_factory, media, temp_dir):
    """HTTP client with the database and media host overridden for testing."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_media_host] = lambda: media

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ═══════════════════════════════════════════════════════════
# Helpers, exposed as fixtures returning coroutines
# ═══════════════════════════════════════════════════════════


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def register_user(client):
    async def _register(
        username: str,
        password: str = DEFAULT_PASSWORD,
        email=None,
        with_cover: bool = False,
    ) -> dict:
        files = {"avatar": ("avatar.png", PNG_BYTES, "image/png")}
        if with_cover:
            files["cover_image"] = ("cover.png", PNG_BYTES, "image/png")
        r = await client.post(
            "/api/v1/users/register",
            data={
                "full_name": username.title(),
                "email": email or f"{username}@example.com",
                "username": username,
                "password": password,
            },
            files=files,
        )
        assert r.status_code == 201, r.text
        return r.json()["data"]

    return _register


@pytest.fixture()
def login(client):
    async def _login(username: str, password: str = DEFAULT_PASSWORD) -> dict:
        r = await client.post(
            "/api/v1/users/login",
            json={"username": username, "password": password},
        )
        assert r.status_code == 200, r.text
        return r.json()["data"]

    return _login


@pytest.fixture()
def signup(register_user, login):
    """Register + login. Returns {"user", "tokens", "headers"}."""

    async def _signup(username: str, **kwargs) -> dict:
        user = await register_user(username, **kwargs)
        tokens = await login(username, kwargs.get("password", DEFAULT_PASSWORD))
        return {
            "user": user,
            "tokens": tokens,
            "headers": bearer(tokens["access_token"]),
        }

    return _signup


@pytest.fixture()
def upload_video(client):
    async def _upload(headers: dict, title: str = "First video", description: str = "Hello") -> dict:
        r = await client.post(
            "/api/v1/videos",
            data={"title": title, "description": description},
            files={
                "video_file": ("clip.mp4", MP4_BYTES, "video/mp4"),
                "thumbnail": ("thumb.png", PNG_BYTES, "image/png"),
            },
            headers=headers,
        )
        assert r.status_code == 201, r.text
        return r.json()["data"]

    return _upload
