"""Authentication endpoint tests."""

from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from shortener.config import Settings
from shortener.models import ActionToken, User
from shortener.models.base import utcnow
from tests.conftest import TEST_PASSWORD, RecordingEmailBackend

REGISTRATION = {"name": "New User", "email": "NewUser@Example.com", "password": "newPassword"}


async def register(client: AsyncClient, **overrides: str) -> dict:
    response = await client.post("/auth/register", json={**REGISTRATION, **overrides})
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_register(client: AsyncClient, email_backend: RecordingEmailBackend):
    """Test registering creates an unverified account and sends a link."""
    response = await client.post("/auth/register", json=REGISTRATION)
    assert response.status_code == 201
    data = response.json()

    assert data["user"]["email"] == "newuser@example.com"
    assert data["user"]["name"] == "New User"
    assert data["user"]["email_verified_at"] is None
    assert "password_hash" not in data["user"]

    token = data["action_token"]
    assert token["entity_id"] == data["user"]["id"]
    assert token["action_name"] == "verify_email"
    assert token["executed_at"] is None

    assert data["verification_sent"]["to"] == "newuser@example.com"
    assert len(email_backend.sent) == 1
    assert f"http://test/auth/verify-email/{token['id']}" in email_backend.sent[0]["text"]


@pytest.mark.asyncio
async def test_register_duplicate_email(client: AsyncClient):
    """Test that registering the same email twice fails."""
    await register(client)

    response = await client.post(
        "/auth/register",
        json={**REGISTRATION, "name": "Someone Else", "email": "newuser@example.com"},
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid data input"}


@pytest.mark.asyncio
async def test_register_duplicate_name(client: AsyncClient):
    await register(client)

    response = await client.post(
        "/auth/register",
        json={**REGISTRATION, "email": "another@example.com"},
    )
    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("field", "value"),
    [("name", ""), ("email", ""), ("email", "not-an-email"), ("password", "")],
)
async def test_register_validation(client: AsyncClient, field: str, value: str):
    """Test that missing or malformed fields are rejected with field errors."""
    response = await client.post("/auth/register", json={**REGISTRATION, field: value})
    assert response.status_code == 400
    errors = response.json()["errors"]
    assert [error["field"] for error in errors] == [field]


@pytest.mark.asyncio
async def test_register_email_failure(client: AsyncClient, email_backend: RecordingEmailBackend):
    """Test that a failed verification email surfaces as a server error."""
    email_backend.fail = True

    response = await client.post("/auth/register", json=REGISTRATION)
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to send verification email"}


@pytest.mark.asyncio
async def test_verify_email(client: AsyncClient):
    """Test verifying a fresh token, then reusing it."""
    data = await register(client)
    token_id = data["action_token"]["id"]

    response = await client.get(f"/auth/verify-email/{token_id}")
    assert response.status_code == 200
    assert response.json() == {"message": "Email verified successfully", "verified": True}

    response = await client.get(f"/auth/verify-email/{token_id}")
    assert response.status_code == 401
    assert response.json() == {"error": "Email already verified"}

    response = await client.get(f"/users/{data['user']['id']}")
    assert response.json()["email_verified_at"] is not None


@pytest.mark.asyncio
async def test_verify_email_invalid_token(client: AsyncClient):
    response = await client.get("/auth/verify-email/invalid-token")
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid verification request"}


@pytest.mark.asyncio
async def test_verify_email_expired(client: AsyncClient, session: AsyncSession):
    """Test that an expired token is rejected."""
    data = await register(client)
    token_id = data["action_token"]["id"]

    token = await session.get(ActionToken, token_id)
    assert token is not None
    token.expires_at = utcnow() - timedelta(seconds=1)
    await session.commit()

    response = await client.get(f"/auth/verify-email/{token_id}")
    assert response.status_code == 401
    assert response.json() == {"error": "Verification request has expired"}


@pytest.mark.asyncio
async def test_login(client: AsyncClient, user: User, settings: Settings):
    """Test login returns a token and sets the session cookie."""
    response = await client.post(
        "/auth/login",
        json={"email": "TEST@example.com", "password": TEST_PASSWORD},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["access_token"]
    assert data["user"]["id"] == user.id
    assert response.cookies[settings.session_cookie_name] == data["access_token"]
    assert "httponly" in response.headers["set-cookie"].lower()


@pytest.mark.asyncio
async def test_login_invalid_email(client: AsyncClient, user: User):
    response = await client.post(
        "/auth/login",
        json={"email": "nobody@example.com", "password": TEST_PASSWORD},
    )
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid email"}


@pytest.mark.asyncio
async def test_login_invalid_password(client: AsyncClient, user: User):
    response = await client.post(
        "/auth/login",
        json={"email": user.email, "password": "wrong-password"},
    )
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid password"}


@pytest.mark.asyncio
async def test_login_unverified(client: AsyncClient, unverified_user: User):
    """Test that unverified accounts cannot log in."""
    response = await client.post(
        "/auth/login",
        json={"email": unverified_user.email, "password": TEST_PASSWORD},
    )
    assert response.status_code == 401
    assert response.json() == {"error": "You have to verify your email before logging in"}


@pytest.mark.asyncio
async def test_login_unverified_wrong_password(client: AsyncClient, unverified_user: User):
    """The verification gate is reported before a password mismatch."""
    response = await client.post(
        "/auth/login",
        json={"email": unverified_user.email, "password": "wrong-password"},
    )
    assert response.status_code == 401
    assert response.json() == {"error": "You have to verify your email before logging in"}


@pytest.mark.asyncio
async def test_login_validation(client: AsyncClient):
    response = await client.post("/auth/login", json={"email": "test@example.com", "password": ""})
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "password"


@pytest.mark.asyncio
async def test_login_already_logged_in_cookie(client: AsyncClient, user: User):
    """Test that a second login with a live session cookie conflicts."""
    credentials = {"email": user.email, "password": TEST_PASSWORD}
    response = await client.post("/auth/login", json=credentials)
    assert response.status_code == 200

    response = await client.post("/auth/login", json=credentials)
    assert response.status_code == 409
    assert response.json() == {"error": "User already logged in"}


@pytest.mark.asyncio
async def test_login_already_logged_in_header(client: AsyncClient, user: User, auth_headers: dict[str, str]):
    response = await client.post(
        "/auth/login",
        json={"email": user.email, "password": TEST_PASSWORD},
        headers=auth_headers,
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_login_with_stale_token(client: AsyncClient, user: User):
    """An invalid token does not count as being logged in."""
    response = await client.post(
        "/auth/login",
        json={"email": user.email, "password": TEST_PASSWORD},
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_logout(client: AsyncClient, user: User, settings: Settings):
    """Test logout clears the session cookie."""
    response = await client.post("/auth/login", json={"email": user.email, "password": TEST_PASSWORD})
    assert response.status_code == 200

    response = await client.post("/auth/logout")
    assert response.status_code == 200
    assert response.json() == {"message": "Logout successful"}
    assert client.cookies.get(settings.session_cookie_name) is None

    response = await client.post("/auth/logout")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_logout_not_logged_in(client: AsyncClient):
    response = await client.post("/auth/logout")
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized - Missing token"}


@pytest.mark.asyncio
async def test_logout_invalid_token(client: AsyncClient):
    response = await client.post("/auth/logout", headers={"Authorization": "Bearer invalid-token"})
    assert response.status_code == 403
    assert response.json() == {"error": "Forbidden - Invalid token"}


@pytest.mark.asyncio
async def test_resend_verification(client: AsyncClient, email_backend: RecordingEmailBackend):
    """Test resending issues a new token while the old one stays usable."""
    data = await register(client)
    first_token_id = data["action_token"]["id"]

    response = await client.request(
        "GET",
        "/auth/resend-verification",
        json={"email": REGISTRATION["email"], "password": REGISTRATION["password"]},
    )
    assert response.status_code == 201
    resent = response.json()
    assert resent["action_token"]["id"] != first_token_id
    assert resent["action_token"]["entity_id"] == data["user"]["id"]
    assert len(email_backend.sent) == 2

    response = await client.get(f"/auth/verify-email/{first_token_id}")
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_resend_verification_invalid_email(client: AsyncClient):
    response = await client.request(
        "GET",
        "/auth/resend-verification",
        json={"email": "nobody@example.com", "password": "password"},
    )
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid email"}


@pytest.mark.asyncio
async def test_resend_verification_invalid_password(client: AsyncClient, unverified_user: User):
    response = await client.request(
        "GET",
        "/auth/resend-verification",
        json={"email": unverified_user.email, "password": "wrong-password"},
    )
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid password"}


@pytest.mark.asyncio
async def test_resend_verification_short_password(client: AsyncClient):
    response = await client.request(
        "GET",
        "/auth/resend-verification",
        json={"email": "test@example.com", "password": "12345"},
    )
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "password"


@pytest.mark.asyncio
async def test_resend_verification_already_verified(client: AsyncClient, user: User):
    response = await client.request(
        "GET",
        "/auth/resend-verification",
        json={"email": user.email, "password": TEST_PASSWORD},
    )
    assert response.status_code == 401
    assert response.json() == {"error": "Email already verified"}
