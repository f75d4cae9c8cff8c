import logging
from typing import Any

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from game_api.core import APITags, ValidationError
from game_api.models import User
from game_api.repositories import UserRepository, get_user_repository

logger = logging.getLogger(__name__)

auth_router = APIRouter(prefix="/auth", tags=[APITags.AUTH])


class RegisterRequest(BaseModel):
    username: Any = Field(None, description="Unique username")


class RegisterResponse(BaseModel):
    message: str
    user: User


@auth_router.post(
    "/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED
)
async def register(
    request: RegisterRequest,
    repo: UserRepository = Depends(get_user_repository),
):
    """
    Register a new user. The response carries the API key the user must send
    in the X-API-Key header on every protected request.
    """
    if not isinstance(request.username, str) or not request.username.strip():
        raise ValidationError("Invalid username")
    username = request.username.strip()

    user = await repo.create_user(username)
    return RegisterResponse(message="User registered successfully", user=user)
