"""User endpoints."""

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, EmailStr

from shortener.api.deps import CurrentAccountId, SessionDep, SettingsDep
from shortener.models.user import UserRead
from shortener.schemas import NonEmptyStr, Password
from shortener.services import users as user_service

router = APIRouter()


class UserUpdate(BaseModel):
    """Schema for updating a user. Omitted fields are left unchanged."""

    name: NonEmptyStr | None = None
    email: EmailStr | None = None
    password: Password | None = None


class UserUpdateResponse(BaseModel):
    message: str
    user: UserRead


@router.get("/{user_id}", response_model=UserRead)
async def get_user(user_id: str, session: SessionDep):
    """Get a user by ID."""
    user = await user_service.get_account(session, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return UserRead.model_validate(user)


@router.put(
    "/update/{user_id}",
    response_model=UserUpdateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def update_user(
    user_id: str,
    user_in: UserUpdate,
    session: SessionDep,
    settings: SettingsDep,
    account_id: CurrentAccountId,
):
    """Update the logged-in user's name, email or password."""
    if user_id != account_id:
        if not await user_service.get_account(session, user_id):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found",
            )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Cannot update another user",
        )

    user = await user_service.update_account(
        session,
        settings,
        user_id,
        user_in.model_dump(exclude_unset=True),
    )
    return UserUpdateResponse(message="User updated successfully", user=UserRead.model_validate(user))
