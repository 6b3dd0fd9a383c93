"""Short URL service: code generation and CRUD over mappings."""

import logging
import secrets
from collections.abc import Sequence
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from shortener.errors import AlreadyExists, DuplicateKey, NotFound
from shortener.models import ShortUrl

logger = logging.getLogger(__name__)

SHORT_CODE_BYTES = 4
UPDATABLE_FIELDS = ("short_code", "long_url")


def generate_short_code() -> str:
    """Random 8-character lowercase hex code. Callers must check uniqueness."""
    return secrets.token_hex(SHORT_CODE_BYTES)


async def get_by_short_code(session: AsyncSession, short_code: str) -> ShortUrl | None:
    stmt = select(ShortUrl).where(ShortUrl.short_code == short_code)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_owned(session: AsyncSession, mapping_id: str, owner_id: str) -> ShortUrl:
    """Fetch a mapping owned by `owner_id`; foreign mappings look missing."""
    mapping = await session.get(ShortUrl, mapping_id)
    if not mapping or mapping.owner_id != owner_id:
        raise NotFound("Short URL not found")
    return mapping


async def create_mapping(
    session: AsyncSession,
    long_url: str,
    owner_id: str,
    short_code: str | None = None,
) -> ShortUrl:
    """Create a mapping, generating a code when none is given.

    The lookup is a fast path; the unique index on short_code decides races.

    Raises:
        AlreadyExists: the code is already mapped
    """
    short_code = short_code or generate_short_code()

    if await get_by_short_code(session, short_code):
        raise AlreadyExists()

    mapping = ShortUrl(short_code=short_code, long_url=long_url, owner_id=owner_id)
    session.add(mapping)
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise AlreadyExists() from e

    await session.refresh(mapping)
    logger.info(f"Created short code {short_code} for user {owner_id}")
    return mapping


async def resolve(session: AsyncSession, short_code: str) -> str | None:
    """Return the long URL for a code, or None."""
    mapping = await get_by_short_code(session, short_code)
    if not mapping:
        return None
    return mapping.long_url


async def list_for_owner(session: AsyncSession, owner_id: str) -> Sequence[ShortUrl]:
    stmt = select(ShortUrl).where(ShortUrl.owner_id == owner_id)
    result = await session.execute(stmt)
    return result.scalars().all()


async def update_mapping(
    session: AsyncSession,
    mapping_id: str,
    fields: dict[str, Any],
    owner_id: str,
) -> ShortUrl:
    """Merge short_code and/or long_url into an existing mapping.

    Raises:
        NotFound: no such mapping for this owner
        DuplicateKey: the new short code is taken
    """
    mapping = await get_owned(session, mapping_id, owner_id)

    for field, value in fields.items():
        if field in UPDATABLE_FIELDS and value is not None:
            setattr(mapping, field, value)

    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise DuplicateKey() from e

    await session.refresh(mapping)
    logger.info(f"Updated short URL {mapping_id}")
    return mapping


async def delete_mapping(session: AsyncSession, mapping_id: str, owner_id: str) -> None:
    """Raises NotFound when the mapping does not exist for this owner."""
    mapping = await get_owned(session, mapping_id, owner_id)
    await session.delete(mapping)
    await session.commit()
    logger.info(f"Deleted short URL {mapping_id}")
