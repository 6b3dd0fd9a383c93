"""FastAPI dependencies for dependency injection."""

import logging
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from shortener.config import Settings
from shortener.database import get_session
from shortener.errors import Forbidden, InvalidSessionToken, Unauthorized
from shortener.services.auth import decode_session_token
from shortener.services.email import EmailService

logger = logging.getLogger(__name__)


def get_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings


def get_email_service(request: Request) -> EmailService:
    return request.app.state.email_service


SettingsDep = Annotated[Settings, Depends(get_settings)]
SessionDep = Annotated[AsyncSession, Depends(get_session)]
EmailServiceDep = Annotated[EmailService, Depends(get_email_service)]


def get_presented_token(request: Request, settings: SettingsDep) -> str | None:
    """Session token from the Authorization header, else from the session cookie.

    The header may carry `Bearer <token>` or the bare token.
    """
    authorization = request.headers.get("Authorization")
    if authorization:
        scheme, _, credentials = authorization.strip().partition(" ")
        token = credentials.strip() if scheme.lower() == "bearer" else authorization.strip()
        if token:
            return token
    return request.cookies.get(settings.session_cookie_name) or None


PresentedToken = Annotated[str | None, Depends(get_presented_token)]


async def get_current_account_id(token: PresentedToken, settings: SettingsDep) -> str:
    """Account id from a valid session token, 401 when absent and 403 when invalid."""
    if not token:
        raise Unauthorized()

    try:
        return decode_session_token(token, settings)
    except InvalidSessionToken as e:
        logger.debug(f"Session token rejected: {e!r}")
        raise Forbidden() from e


def get_current_account_id_optional(token: PresentedToken, settings: SettingsDep) -> str | None:
    """Account id when a valid session token is presented, None otherwise."""
    if not token:
        return None
    try:
        return decode_session_token(token, settings)
    except InvalidSessionToken:
        return None


CurrentAccountId = Annotated[str, Depends(get_current_account_id)]
CurrentAccountIdOptional = Annotated[str | None, Depends(get_current_account_id_optional)]
