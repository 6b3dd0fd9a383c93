"""User account model."""

from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from shortener.models.base import TimestampMixin, generate_nanoid


class User(TimestampMixin, SQLModel, table=True):
    """Registered account. Login is gated on email_verified_at."""

    __tablename__ = "users"

    id: str = Field(default_factory=generate_nanoid, primary_key=True, max_length=21)
    name: str = Field(unique=True, index=True, max_length=255)
    email: str = Field(unique=True, index=True, max_length=255)
    password_hash: str = Field(max_length=255)
    email_verified_at: datetime | None = Field(
        default=None,
        sa_type=DateTime(timezone=True),  # type: ignore[call-overload]
        description="Set once an email verification token is executed",
    )

    @property
    def is_verified(self) -> bool:
        return self.email_verified_at is not None


class UserRead(SQLModel):
    """Schema for reading a user."""

    id: str
    name: str
    email: str
    email_verified_at: datetime | None
    created_at: datetime
