"""SQLModel database models."""

from shortener.models.action_token import VERIFY_EMAIL, ActionToken
from shortener.models.base import TimestampMixin
from shortener.models.short_url import ShortUrl
from shortener.models.user import User

__all__ = [
    "VERIFY_EMAIL",
    "ActionToken",
    "ShortUrl",
    "TimestampMixin",
    "User",
]
