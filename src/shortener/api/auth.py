"""Authentication endpoints."""

import logging

from fastapi import APIRouter, Response, status
from pydantic import BaseModel, EmailStr, Field

from shortener.api.deps import (
    CurrentAccountId,
    CurrentAccountIdOptional,
    EmailServiceDep,
    SessionDep,
    SettingsDep,
)
from shortener.errors import AlreadyLoggedIn, EmailNotVerified, InvalidEmail, InvalidPassword
from shortener.models.action_token import ActionTokenRead
from shortener.models.user import UserRead
from shortener.schemas import MessageResponse, NonEmptyStr, Password
from shortener.services import auth as auth_service
from shortener.services.auth import LoginOutcome

logger = logging.getLogger(__name__)

router = APIRouter()


class RegisterRequest(BaseModel):
    """Request body for registration."""

    name: NonEmptyStr
    email: EmailStr
    password: Password


class LoginRequest(BaseModel):
    """Request body for login."""

    email: EmailStr
    password: Password


class ResendRequest(BaseModel):
    """Request body for resending the verification email."""

    email: EmailStr
    password: Password = Field(min_length=6)


class SentEmail(BaseModel):
    to: str
    subject: str
    text: str


class RegisterResponse(BaseModel):
    message: str
    user: UserRead
    action_token: ActionTokenRead
    verification_sent: SentEmail


class ResendResponse(BaseModel):
    message: str
    action_token: ActionTokenRead
    verification_sent: SentEmail


class TokenResponse(BaseModel):
    """Response containing the session token."""

    access_token: str
    token_type: str = "bearer"
    user: UserRead


class VerifyResponse(BaseModel):
    message: str
    verified: bool


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    session: SessionDep,
    settings: SettingsDep,
    email_service: EmailServiceDep,
):
    """Create an account and email it a verification link."""
    user = await auth_service.register(
        session,
        settings,
        name=request.name,
        email=request.email,
        password=request.password,
    )
    token = await auth_service.create_verification_token(session, settings, user.id)
    message = await auth_service.send_verification_email(email_service, user.email, token.id)

    return RegisterResponse(
        message="User created successfully",
        user=UserRead.model_validate(user),
        action_token=ActionTokenRead.model_validate(token),
        verification_sent=SentEmail(**message.summary()),
    )


@router.post("/login", response_model=TokenResponse)
async def login(
    request: LoginRequest,
    response: Response,
    session: SessionDep,
    settings: SettingsDep,
    current_account_id: CurrentAccountIdOptional,
):
    """
    Log in with email and password.

    The session token is returned in the body and set as an httpOnly cookie.
    """
    if current_account_id:
        raise AlreadyLoggedIn()

    result = await auth_service.login(session, settings, request.email, request.password)
    if not result.succeeded:
        logger.warning(f"Login failed for {request.email}: {result.outcome.value}")

    if result.outcome is LoginOutcome.NOT_FOUND or not result.user:
        raise InvalidEmail()
    if not result.user.is_verified:
        raise EmailNotVerified()
    if result.outcome is LoginOutcome.PASSWORD_MISMATCH:
        raise InvalidPassword()

    response.set_cookie(
        key=settings.session_cookie_name,
        value=result.token or "",
        max_age=settings.session_expiration_minutes * 60,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )
    logger.info(f"User {result.user.id} logged in")

    return TokenResponse(
        access_token=result.token or "",
        user=UserRead.model_validate(result.user),
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response, settings: SettingsDep, account_id: CurrentAccountId):
    """
    Logout endpoint.

    Session tokens are stateless, so this only clears the cookie.
    """
    response.delete_cookie(settings.session_cookie_name)
    logger.info(f"User {account_id} logged out")
    return MessageResponse(message="Logout successful")


@router.get("/verify-email/{token_id}", response_model=VerifyResponse)
async def verify_email(token_id: str, session: SessionDep):
    """Execute an email verification token."""
    await auth_service.verify_email(session, token_id)
    return VerifyResponse(message="Email verified successfully", verified=True)


@router.get(
    "/resend-verification",
    response_model=ResendResponse,
    status_code=status.HTTP_201_CREATED,
)
async def resend_verification(
    request: ResendRequest,
    session: SessionDep,
    settings: SettingsDep,
    email_service: EmailServiceDep,
):
    """Issue a new verification token for an unverified account."""
    token, message = await auth_service.resend_verification(
        session,
        settings,
        email_service,
        email=request.email,
        password=request.password,
    )
    return ResendResponse(
        message="Email verification resent",
        action_token=ActionTokenRead.model_validate(token),
        verification_sent=SentEmail(**message.summary()),
    )
