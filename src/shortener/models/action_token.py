"""Single-use action tokens (email verification)."""

from datetime import datetime, timedelta

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from shortener.models.base import as_utc, generate_nanoid, utcnow

VERIFY_EMAIL = "verify_email"


class ActionToken(SQLModel, table=True):
    """Time-limited token authorizing one action for an account."""

    __tablename__ = "action_tokens"

    id: str = Field(default_factory=generate_nanoid, primary_key=True, max_length=21)
    entity_id: str = Field(foreign_key="users.id", index=True, max_length=21)
    action_name: str = Field(default=VERIFY_EMAIL, max_length=50)
    created_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[call-overload]
    )
    expires_at: datetime = Field(
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[call-overload]
    )
    executed_at: datetime | None = Field(
        default=None,
        sa_type=DateTime(timezone=True),  # type: ignore[call-overload]
    )

    @classmethod
    def issue(cls, entity_id: str, lifetime: timedelta, action_name: str = VERIFY_EMAIL) -> "ActionToken":
        """Build a token that expires `lifetime` after its creation time."""
        created_at = utcnow()
        return cls(
            entity_id=entity_id,
            action_name=action_name,
            created_at=created_at,
            expires_at=created_at + lifetime,
        )

    @property
    def is_executed(self) -> bool:
        return self.executed_at is not None

    def is_expired(self, now: datetime) -> bool:
        return as_utc(now) > as_utc(self.expires_at)


class ActionTokenRead(SQLModel):
    """Schema for reading an action token."""

    id: str
    entity_id: str
    action_name: str
    created_at: datetime
    expires_at: datetime
    executed_at: datetime | None
