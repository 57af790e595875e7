import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("LLM_PROVIDER", "gemini")

import json

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.api.deps import get_http_client, get_redis
from app.core.security import create_access_token
from app.database import Base, get_db
from app.main import app as fastapi_app
from app.models.user import Profile, User
from app.models.user_settings import UserSettings


class FakeRedis:
    """In-memory stand-in for the two Redis calls the generation lock uses."""

    def __init__(self):
        self.store: dict[str, str] = {}

    async def set(self, key, value, nx=False, ex=None):
        if nx and key in self.store:
            return None
        self.store[key] = value
        return True

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                removed += 1
        return removed


class ProviderStub:
    """Records outbound provider requests and replies with a canned response."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.body: object = None
        self.error: Exception | None = None
        self.content: bytes | None = None

    def reply_with_text(self, text: str, provider: str = "gemini") -> None:
        if provider == "gemini":
            self.body = {"candidates": [{"content": {"parts": [{"text": text}]}}]}
        else:
            self.body = {"choices": [{"message": {"role": "assistant", "content": text}}]}

    def reply_with_cards(self, cards: list[dict], provider: str = "gemini") -> None:
        self.reply_with_text(json.dumps({"flashcards": cards}), provider)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.content is not None:
            return httpx.Response(self.status_code, content=self.content)
        return httpx.Response(self.status_code, json=self.body)


@pytest.fixture
async def engine():
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
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db(session_factory) -> AsyncSession:
    async with session_factory() as session:
        yield session


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def provider_stub():
    return ProviderStub()


@pytest.fixture
async def http_client(provider_stub):
    async with httpx.AsyncClient(transport=httpx.MockTransport(provider_stub.handler)) as client:
        yield client


async def make_user(
    session_factory, email: str, gemini_api_key: str | None = "gemini-test-key-1234",
) -> User:
    async with session_factory() as session:
        user = User(email=email, password_hash="not-a-real-hash")
        session.add(user)
        await session.flush()
        session.add(Profile(id=user.id, email=email, full_name="Test User"))
        session.add(UserSettings(user_id=user.id, gemini_api_key=gemini_api_key))
        await session.commit()
        return user


@pytest.fixture
async def user(session_factory) -> User:
    return await make_user(session_factory, "alice@example.com")


@pytest.fixture
async def other_user(session_factory) -> User:
    return await make_user(session_factory, "bob@example.com")


@pytest.fixture
async def keyless_user(session_factory) -> User:
    return await make_user(session_factory, "carol@example.com", gemini_api_key=None)


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _headers


@pytest.fixture
async def client(session_factory, fake_redis, http_client):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_redis] = lambda: fake_redis
    fastapi_app.dependency_overrides[get_http_client] = lambda: http_client

    transport = httpx.ASGITransport(app=fastapi_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    fastapi_app.dependency_overrides.clear()
