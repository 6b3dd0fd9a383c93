"""Account lookup and profile updates."""

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shortener.config import Settings
from shortener.errors import DuplicateKey, NotFound
from shortener.models import User
from shortener.services.auth import hash_password, normalize_email

logger = logging.getLogger(__name__)


async def get_account(session: AsyncSession, account_id: str) -> User | None:
    return await session.get(User, account_id)


async def update_account(
    session: AsyncSession,
    settings: Settings,
    account_id: str,
    fields: dict[str, Any],
) -> User:
    """Apply name/email/password changes to an account.

    Raises:
        NotFound: the account does not exist
        DuplicateKey: the new name or email is taken
    """
    user = await get_account(session, account_id)
    if not user:
        raise NotFound("User not found")

    if fields.get("name") is not None:
        user.name = fields["name"]
    if fields.get("email") is not None:
        user.email = normalize_email(fields["email"])
    if fields.get("password") is not None:
        user.password_hash = await hash_password(fields["password"], settings.bcrypt_rounds)

    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise DuplicateKey() from e

    await session.refresh(user)
    logger.info(f"Updated user {account_id}")
    return user
