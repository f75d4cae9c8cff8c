from typing import Optional


class GameApiError(Exception):
    """Base class for errors that map onto an HTTP status at the API boundary."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(GameApiError):
    status_code = 400
    default_message = "Invalid request"


class DuplicateUsernameError(ValidationError):
    default_message = "User already exists"


class AuthenticationError(GameApiError):
    status_code = 401
    default_message = "Not authenticated"


class AuthorizationError(GameApiError):
    status_code = 403
    default_message = "Access denied"


class NotFoundError(GameApiError):
    status_code = 404
    default_message = "Not found"
