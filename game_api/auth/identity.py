import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import APIKeyHeader

from ..core.errors import AuthenticationError
from ..models.records import User
from ..repositories.user_repository import UserRepository, get_user_repository

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-API-Key"

api_key_header = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)


async def authenticate(api_key: Optional[str], repo: UserRepository) -> Optional[User]:
    """Map an API key onto its user. Plain equality lookup, no expiry."""
    if not api_key:
        return None
    return await repo.get_user_by_api_key(api_key)


async def get_current_user(
    api_key: Optional[str] = Depends(api_key_header),
    repo: UserRepository = Depends(get_user_repository),
) -> User:
    if not api_key:
        raise AuthenticationError("API key missing")

    user = await authenticate(api_key, repo)
    if user is None:
        logger.info("Rejected request with unknown API key")
        raise AuthenticationError("Invalid API key")
    return user
