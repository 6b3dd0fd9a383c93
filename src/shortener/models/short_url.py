"""Short code to long URL mapping model."""

from sqlmodel import Field, SQLModel

from shortener.models.base import TimestampMixin, generate_nanoid


class ShortUrl(TimestampMixin, SQLModel, table=True):
    """A short code owned by one account."""

    __tablename__ = "short_urls"

    id: str = Field(default_factory=generate_nanoid, primary_key=True, max_length=21)
    short_code: str = Field(unique=True, index=True, max_length=255)
    long_url: str = Field(max_length=2048)
    owner_id: str = Field(foreign_key="users.id", index=True, max_length=21)


class ShortUrlRead(SQLModel):
    """Schema for reading a short URL mapping."""

    id: str
    short_code: str
    long_url: str
    owner_id: str
