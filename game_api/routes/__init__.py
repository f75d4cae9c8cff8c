from .auth import auth_router
from .games import games_router
from .realtime import realtime_router
