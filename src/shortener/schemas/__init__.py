"""Pydantic schemas for API requests/responses."""

from shortener.schemas.common import (
    ErrorResponse,
    FieldError,
    MessageResponse,
    NonEmptyStr,
    Password,
    ValidationErrorResponse,
)

__all__ = [
    "ErrorResponse",
    "FieldError",
    "MessageResponse",
    "NonEmptyStr",
    "Password",
    "ValidationErrorResponse",
]
