from .api_tags import APITags
from .env import Environment, get_env, initialize_environment, reset_environment
from .errors import (
    GameApiError,
    ValidationError,
    DuplicateUsernameError,
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
)
