"""Authentication service: registration, sessions and email verification."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

import bcrypt
from fastapi.concurrency import run_in_threadpool
from jose import JWTError, jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from shortener.config import Settings
from shortener.errors import (
    AlreadyVerified,
    DuplicateKey,
    EmailDeliveryError,
    Expired,
    InvalidEmail,
    InvalidPassword,
    InvalidSessionToken,
    InvalidToken,
)
from shortener.models import ActionToken, User
from shortener.models.base import utcnow
from shortener.services.email import EmailMessage, EmailService

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


async def hash_password(password: str, rounds: int) -> str:
    """Hash a password with bcrypt off the event loop."""

    def _hash() -> str:
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=rounds)).decode()

    return await run_in_threadpool(_hash)


async def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time comparison of a password against a bcrypt hash."""

    def _check() -> bool:
        return bcrypt.checkpw(password.encode(), password_hash.encode())

    return await run_in_threadpool(_check)


def create_session_token(account_id: str, settings: Settings) -> str:
    """Create a signed session JWT for an account."""
    now = utcnow()
    payload = {
        "sub": account_id,
        "exp": now + timedelta(minutes=settings.session_expiration_minutes),
        "iat": now,
    }
    return jwt.encode(payload, settings.session_secret, algorithm=settings.jwt_algorithm)


def decode_session_token(token: str, settings: Settings) -> str:
    """Validate a session JWT and return the account id it carries."""
    try:
        payload = jwt.decode(
            token,
            settings.session_secret,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as e:
        raise InvalidSessionToken(f"Invalid token: {e}") from e

    account_id = payload.get("sub")
    if not account_id:
        raise InvalidSessionToken("Invalid token: missing account ID")
    return account_id


class LoginOutcome(str, Enum):
    NOT_FOUND = "not_found"
    PASSWORD_MISMATCH = "password_mismatch"
    SUCCESS = "success"


@dataclass
class LoginResult:
    """Outcome of a credential check. `token` is only set by login()."""

    outcome: LoginOutcome
    user: User | None = None
    token: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is LoginOutcome.SUCCESS


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    stmt = select(User).where(User.email == normalize_email(email))
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def register(
    session: AsyncSession,
    settings: Settings,
    name: str,
    email: str,
    password: str,
) -> User:
    """Create an unverified account.

    Raises:
        DuplicateKey: name or email is already taken
    """
    email = normalize_email(email)
    user = User(
        name=name,
        email=email,
        password_hash=await hash_password(password, settings.bcrypt_rounds),
    )
    session.add(user)
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        logger.info(f"Registration rejected, duplicate name or email: {email}")
        raise DuplicateKey() from e

    await session.refresh(user)
    logger.info(f"Registered user {user.id}")
    return user


async def create_verification_token(
    session: AsyncSession,
    settings: Settings,
    account_id: str,
) -> ActionToken:
    """Issue a new email verification token. Earlier tokens stay valid."""
    token = ActionToken.issue(
        entity_id=account_id,
        lifetime=timedelta(minutes=settings.verification_token_expiration_minutes),
    )
    session.add(token)
    await session.commit()
    await session.refresh(token)
    return token


async def send_verification_email(
    email_service: EmailService,
    email: str,
    token_id: str,
) -> EmailMessage:
    """Send the verification link for a token.

    Raises:
        EmailDeliveryError: the backend could not deliver the message
    """
    message = email_service.compose_verification_email(to=email, token_id=token_id)
    if not await email_service.send(message):
        raise EmailDeliveryError()
    return message


async def check_credentials(session: AsyncSession, email: str, password: str) -> LoginResult:
    user = await get_user_by_email(session, email)
    if not user:
        return LoginResult(LoginOutcome.NOT_FOUND)
    if not await verify_password(password, user.password_hash):
        return LoginResult(LoginOutcome.PASSWORD_MISMATCH, user=user)
    return LoginResult(LoginOutcome.SUCCESS, user=user)


async def login(
    session: AsyncSession,
    settings: Settings,
    email: str,
    password: str,
) -> LoginResult:
    """Check credentials and issue a session token on success.

    The email-verified gate is enforced by the caller, since a mismatch and a
    missing account are reported differently to the client.
    """
    result = await check_credentials(session, email, password)
    if result.succeeded and result.user:
        result.token = create_session_token(result.user.id, settings)
    return result


async def verify_email(
    session: AsyncSession,
    token_id: str,
    now: datetime | None = None,
) -> User:
    """Execute a verification token and mark its account verified.

    Both writes are committed together.

    Raises:
        InvalidToken: token does not exist
        AlreadyVerified: token was already executed
        Expired: `now` is past the token's expiry
    """
    now = now or utcnow()

    token = await session.get(ActionToken, token_id)
    if not token:
        raise InvalidToken()
    if token.is_executed:
        raise AlreadyVerified()
    if token.is_expired(now):
        raise Expired()

    user = await session.get(User, token.entity_id)
    if not user:
        raise InvalidToken()

    user.email_verified_at = now
    token.executed_at = now
    try:
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info(f"Verified email for user {user.id}")
    return user


async def resend_verification(
    session: AsyncSession,
    settings: Settings,
    email_service: EmailService,
    email: str,
    password: str,
) -> tuple[ActionToken, EmailMessage]:
    """Issue and send a fresh verification token after re-checking credentials.

    Raises:
        InvalidEmail: no account for the email
        InvalidPassword: password does not match
        AlreadyVerified: account is already verified
    """
    result = await check_credentials(session, email, password)
    if result.outcome is LoginOutcome.NOT_FOUND or not result.user:
        raise InvalidEmail()
    if result.outcome is LoginOutcome.PASSWORD_MISMATCH:
        raise InvalidPassword()

    user = result.user
    if user.is_verified:
        raise AlreadyVerified()

    token = await create_verification_token(session, settings, user.id)
    message = await send_verification_email(email_service, user.email, token.id)
    logger.info(f"Resent verification email for user {user.id}")
    return token, message
