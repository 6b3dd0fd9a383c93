"""Main API router that aggregates all route modules."""

from typing import Any

from fastapi import APIRouter

from shortener.api import auth, health, urls, users
from shortener.schemas import ErrorResponse, ValidationErrorResponse

# Shapes rendered by shortener.api.errors, documented on every non-health route
ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ValidationErrorResponse, "description": "Invalid request body"},
    401: {"model": ErrorResponse, "description": "Missing session or bad credentials"},
    403: {"model": ErrorResponse, "description": "Invalid session token"},
    404: {"model": ErrorResponse, "description": "Not found"},
}

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"], responses=ERROR_RESPONSES)
api_router.include_router(users.router, prefix="/users", tags=["users"], responses=ERROR_RESPONSES)
api_router.include_router(urls.router, prefix="/url", tags=["urls"], responses=ERROR_RESPONSES)
