from enum import Enum


class APITags(str, Enum):
    AUTH = "Authentication"
    GAMES = "Games"
    PLAYERS = "Players"
    MOVES = "Moves"
    REALTIME = "Realtime"
    SYSTEM = "System"
