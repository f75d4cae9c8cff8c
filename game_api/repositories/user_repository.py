import logging
import uuid
from typing import Optional

from fastapi import Depends

from ..core.errors import DuplicateUsernameError
from ..database.json_store import JsonStore, get_json_store
from ..models.records import User

logger = logging.getLogger(__name__)


def generate_api_key() -> str:
    return str(uuid.uuid4()) + uuid.uuid4().hex


class UserRepository:
    def __init__(self, store: JsonStore):
        self.store = store
        self.collection = store.users

    async def create_user(self, username: str) -> User:
        """Register a new user and issue their API key.

        Raises:
            DuplicateUsernameError: if the username is already taken. The
                collection is left untouched in that case.
        """
        async with self.collection.transaction() as users:
            if any(u.get("username") == username for u in users):
                raise DuplicateUsernameError("User already exists")

            user = User(username=username, api_key=generate_api_key())
            users.append(user.to_document())

        logger.info(f"User registered: {user.username} ({user.id})")
        return user

    async def get_user_by_api_key(self, api_key: str) -> Optional[User]:
        users = await self.collection.snapshot()
        data = next((u for u in users if u.get("apiKey") == api_key), None)
        return User(**data) if data else None

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        users = await self.collection.snapshot()
        data = next((u for u in users if u.get("id") == user_id), None)
        return User(**data) if data else None


def get_user_repository(store: JsonStore = Depends(get_json_store)) -> UserRepository:
    """Dependency injector for UserRepository"""
    return UserRepository(store)
