from .user_repository import UserRepository, get_user_repository, generate_api_key
from .games_repository import GamesRepository, get_games_repository
