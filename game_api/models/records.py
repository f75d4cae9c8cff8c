from datetime import datetime, timezone
from typing import Any, Dict, List
from uuid import uuid4

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid4())


class Record(BaseModel):
    """Base for persisted records: snake_case in Python, camelCase on disk and wire."""

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class User(Record):
    id: str = Field(default_factory=new_id, description="Opaque user ID")
    username: str = Field(..., min_length=1, description="Unique username")
    api_key: str = Field(..., description="Secret token sent as X-API-Key")
    created_at: datetime = Field(default_factory=utcnow)


class Player(Record):
    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1)
    joined_at: datetime = Field(default_factory=utcnow)


class Move(Record):
    id: str = Field(default_factory=new_id)
    player_id: str = Field(..., description="ID of the player who made the move")
    data: Dict[str, Any] = Field(default_factory=dict, description="Opaque move payload")
    timestamp: datetime = Field(default_factory=utcnow)


class Game(Record):
    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1)
    owner_id: str = Field(..., description="ID of the user who created the game")
    players: List[Player] = Field(default_factory=list)
    moves: List[Move] = Field(default_factory=list)
    status: str = Field("active", description="Free-form game status")
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def find_player(self, player_id: str):
        return next((p for p in self.players if p.id == player_id), None)

    def find_move(self, move_id: str):
        return next((m for m in self.moves if m.id == move_id), None)
