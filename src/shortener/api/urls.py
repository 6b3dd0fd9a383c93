"""Short URL endpoints."""

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel, ConfigDict, Field, model_validator

from shortener.api.deps import CurrentAccountId, SessionDep
from shortener.models.short_url import ShortUrlRead
from shortener.schemas import MessageResponse, NonEmptyStr
from shortener.services import urls as url_service

router = APIRouter()


class ShortUrlCreate(BaseModel):
    """Schema for creating a short URL. A code is generated when omitted."""

    model_config = ConfigDict(populate_by_name=True)

    short_url: NonEmptyStr | None = Field(default=None, alias="shortUrl")
    long_url: NonEmptyStr = Field(alias="longUrl")


class ShortUrlUpdate(BaseModel):
    """Schema for updating a short URL."""

    model_config = ConfigDict(populate_by_name=True)

    short_url: NonEmptyStr | None = Field(default=None, alias="shortUrl")
    long_url: NonEmptyStr | None = Field(default=None, alias="longUrl")

    @model_validator(mode="after")
    def require_a_field(self) -> "ShortUrlUpdate":
        if self.short_url is None and self.long_url is None:
            raise ValueError("Provide shortUrl or longUrl")
        return self


class LongUrlResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    long_url: str = Field(alias="longUrl")


class ShortUrlUpdateResponse(BaseModel):
    message: str
    url: ShortUrlRead


@router.post("", response_model=ShortUrlRead, status_code=status.HTTP_201_CREATED)
async def create_short_url(url_in: ShortUrlCreate, session: SessionDep, account_id: CurrentAccountId):
    """Create a short URL owned by the logged-in user."""
    mapping = await url_service.create_mapping(
        session,
        long_url=url_in.long_url,
        owner_id=account_id,
        short_code=url_in.short_url,
    )
    return ShortUrlRead.model_validate(mapping)


@router.get("/list", response_model=list[ShortUrlRead])
async def list_short_urls(session: SessionDep, account_id: CurrentAccountId):
    """List the logged-in user's short URLs."""
    mappings = await url_service.list_for_owner(session, account_id)
    if not mappings:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No urls found",
        )
    return [ShortUrlRead.model_validate(mapping) for mapping in mappings]


@router.get("/show-long-url/{short_code}", response_model=LongUrlResponse)
async def show_long_url(short_code: str, session: SessionDep):
    """Look up the long URL behind a short code without redirecting."""
    long_url = await url_service.resolve(session, short_code)
    if not long_url:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Long URL not found",
        )
    return LongUrlResponse(message="Long url found successfully", long_url=long_url)


@router.put(
    "/update/{url_id}",
    response_model=ShortUrlUpdateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def update_short_url(
    url_id: str,
    url_in: ShortUrlUpdate,
    session: SessionDep,
    account_id: CurrentAccountId,
):
    """Change the code and/or target of one of the user's short URLs."""
    mapping = await url_service.update_mapping(
        session,
        url_id,
        {"short_code": url_in.short_url, "long_url": url_in.long_url},
        owner_id=account_id,
    )
    return ShortUrlUpdateResponse(
        message="Short URL updated successfully",
        url=ShortUrlRead.model_validate(mapping),
    )


@router.delete("/delete/{url_id}", response_model=MessageResponse)
async def delete_short_url(url_id: str, session: SessionDep, account_id: CurrentAccountId):
    """Delete one of the user's short URLs."""
    await url_service.delete_mapping(session, url_id, owner_id=account_id)
    return MessageResponse(message="Short URL deleted successfully")


# Registered last so the fixed paths above take precedence
@router.get("/{short_code}", response_class=RedirectResponse, status_code=status.HTTP_302_FOUND)
async def redirect_short_url(short_code: str, session: SessionDep, _account_id: CurrentAccountId):
    """Redirect to the long URL behind a short code."""
    long_url = await url_service.resolve(session, short_code)
    if not long_url:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Long URL not found",
        )
    return RedirectResponse(long_url, status_code=status.HTTP_302_FOUND)
