from .identity import authenticate, get_current_user, API_KEY_HEADER
from .policy import is_owner, is_owner_or_player, require_owner, require_owner_or_player
