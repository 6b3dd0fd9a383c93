"""Common schemas used across the API."""

from typing import Annotated

from pydantic import AfterValidator, BaseModel, StringConstraints

# bcrypt only looks at the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


def _check_password_bytes(value: str) -> str:
    if len(value.encode()) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes long")
    return value


NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
Password = Annotated[str, StringConstraints(min_length=1), AfterValidator(_check_password_bytes)]


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str


class FieldError(BaseModel):
    field: str
    message: str


class ValidationErrorResponse(BaseModel):
    """Request validation failure, one entry per offending field."""

    errors: list[FieldError]


class MessageResponse(BaseModel):
    """Standard success response."""

    message: str
