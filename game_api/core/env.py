import os
from typing import List, Optional
from dotenv import load_dotenv


class Environment:
    def __init__(self, dotenv_path=".env"):
        load_dotenv(dotenv_path)

        # Server config
        self.host = os.getenv("HOST", "0.0.0.0")
        self.port = int(os.getenv("PORT", 3000))
        self.app_env = os.getenv("APP_ENV", "development")
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

        # Storage config
        self.data_dir = os.getenv("DATA_DIR", os.path.join(os.getcwd(), "data"))

        # CORS config
        raw_origins = os.getenv("CORS_ORIGINS", "*")
        self.cors_origins: List[str] = [
            origin.strip() for origin in raw_origins.split(",") if origin.strip()
        ]

    def __str__(self):
        return (
            f"Server -> Host: {self.host}, Port: {self.port}, Env: {self.app_env}, "
            f"Log level: {self.log_level}\n"
            f"Storage -> Data dir: {self.data_dir}\n"
            f"CORS -> Origins: {', '.join(self.cors_origins) or 'none'}"
        )

    def get_storage_config(self) -> dict:
        """Get storage configuration as a dictionary."""
        return {
            "data_dir": self.data_dir,
            "users_file": os.path.join(self.data_dir, "users.json"),
            "games_file": os.path.join(self.data_dir, "games.json"),
        }

    def validate(self) -> bool:
        """Validate that the configuration is usable."""
        return self.port > 0 and bool(self.data_dir)


# Global environment instance
_global_env: Optional[Environment] = None


def initialize_environment(dotenv_path: str = ".env") -> Environment:
    """
    Initialize the global environment instance.

    Args:
        dotenv_path: Path to the .env file

    Returns:
        Environment: The initialized environment instance

    Raises:
        ValueError: If the configuration is invalid
    """
    global _global_env

    _global_env = Environment(dotenv_path)

    if not _global_env.validate():
        raise ValueError(
            "Invalid environment configuration. Please check PORT and DATA_DIR."
        )

    return _global_env


def get_environment_or_default(dotenv_path: str = ".env") -> Environment:
    """Get the global environment instance or create a default one."""
    global _global_env

    if _global_env is None:
        _global_env = Environment(dotenv_path)

    return _global_env


def get_env() -> Environment:
    """Shorter alias for dependency injection with auto-initialization."""
    return get_environment_or_default()


def reset_environment():
    """
    Reset the global environment instance.
    Useful for testing or reloading configuration.
    """
    global _global_env
    _global_env = None
