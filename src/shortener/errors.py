"""Domain errors raised by services and rendered by the API layer."""

from fastapi import status


class ShortenerError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal Server Error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class InternalError(ShortenerError):
    pass


class EmailDeliveryError(InternalError):
    message = "Failed to send verification email"


class DuplicateKey(ShortenerError):
    """A unique constraint (account name/email, short code) was violated."""

    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid data input"


class Unauthorized(ShortenerError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Unauthorized - Missing token"


class InvalidEmail(Unauthorized):
    message = "Invalid email"


class InvalidPassword(Unauthorized):
    message = "Invalid password"


class EmailNotVerified(Unauthorized):
    message = "You have to verify your email before logging in"


class InvalidToken(Unauthorized):
    message = "Invalid verification request"


class AlreadyVerified(Unauthorized):
    message = "Email already verified"


class Expired(Unauthorized):
    message = "Verification request has expired"


class Forbidden(ShortenerError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Forbidden - Invalid token"


class AlreadyExists(Forbidden):
    message = "Url already exists"


class NotFound(ShortenerError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class AlreadyLoggedIn(ShortenerError):
    status_code = status.HTTP_409_CONFLICT
    message = "User already logged in"


class InvalidSessionToken(Exception):
    """Session token could not be decoded (bad signature, expired, malformed)."""

    pass
