"""Pytest configuration and fixtures."""

import os
from collections.abc import AsyncGenerator
from typing import Any

# Set test environment before importing app
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from shortener.config import Settings
from shortener.database import close_db, init_db
from shortener.main import create_app
from shortener.models import ShortUrl, User
from shortener.models.base import utcnow
from shortener.services.auth import create_session_token, hash_password
from shortener.services.email import EmailBackend, EmailService

TEST_PASSWORD = "password123"


class RecordingEmailBackend(EmailBackend):
    """Email backend that keeps sent messages in memory."""

    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []
        self.fail = False

    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        text: str | None = None,
    ) -> bool:
        if self.fail:
            return False
        self.sent.append({"to": to, "subject": subject, "html": html, "text": text})
        return True


@pytest.fixture
def settings() -> Settings:
    """Settings injected into the app under test."""
    return Settings(
        environment="test",
        database_url="sqlite+aiosqlite://",
        session_secret="test-session-secret-with-32-characters",
        bcrypt_rounds=4,
        app_url="http://test",
        email_backend="console",
    )


@pytest.fixture
def email_backend() -> RecordingEmailBackend:
    return RecordingEmailBackend()


@pytest.fixture
async def app(settings: Settings, email_backend: RecordingEmailBackend) -> AsyncGenerator[FastAPI, None]:
    """Application with a fresh in-memory database."""
    app = create_app(settings)
    app.state.email_service = EmailService(email_backend, settings)
    await init_db(app.state.engine)
    yield app
    await close_db(app.state.engine)


@pytest.fixture
async def session(app: FastAPI) -> AsyncGenerator[AsyncSession, None]:
    """Database session on the app's engine."""
    async with app.state.session_factory() as session:
        yield session


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


async def create_user(
    session: AsyncSession,
    name: str,
    email: str,
    verified: bool = True,
    password: str = TEST_PASSWORD,
) -> User:
    user = User(
        name=name,
        email=email,
        password_hash=await hash_password(password, rounds=4),
        email_verified_at=utcnow() if verified else None,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


@pytest.fixture
async def user(session: AsyncSession) -> User:
    """Create a verified test user."""
    return await create_user(session, "Test User", "test@example.com")


@pytest.fixture
async def unverified_user(session: AsyncSession) -> User:
    """Create a test user who has not verified their email."""
    return await create_user(session, "Pending User", "pending@example.com", verified=False)


@pytest.fixture
async def other_user(session: AsyncSession) -> User:
    """A second verified user."""
    return await create_user(session, "Other User", "other@example.com")


@pytest.fixture
async def short_url(session: AsyncSession, user: User) -> ShortUrl:
    """Create a short URL owned by the test user."""
    mapping = ShortUrl(short_code="ytbe", long_url="http://youtube.com", owner_id=user.id)
    session.add(mapping)
    await session.commit()
    await session.refresh(mapping)
    return mapping


@pytest.fixture
def user_token(user: User, settings: Settings) -> str:
    """Create a session token for the test user."""
    return create_session_token(user.id, settings)


@pytest.fixture
def auth_headers(user_token: str) -> dict[str, str]:
    """Create authorization headers for the test user."""
    return {"Authorization": f"Bearer {user_token}"}


# Helper to make authenticated requests
class AuthenticatedClient:
    """Wrapper for AsyncClient with authentication."""

    def __init__(self, client: AsyncClient, headers: dict[str, str]):
        self.client = client
        self.headers = headers

    async def request(self, method: str, url: str, **kwargs: Any) -> Any:
        kwargs.setdefault("headers", {}).update(self.headers)
        return await self.client.request(method, url, **kwargs)

    async def get(self, url: str, **kwargs: Any) -> Any:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> Any:
        return await self.request("POST", url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> Any:
        return await self.request("PUT", url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", url, **kwargs)


@pytest.fixture
def authenticated_client(client: AsyncClient, auth_headers: dict[str, str]) -> AuthenticatedClient:
    """Create an authenticated test client."""
    return AuthenticatedClient(client, auth_headers)
