import asyncio
import json
import logging
import os
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Optional

from fastapi import Depends

from ..core.env import Environment, get_env

logger = logging.getLogger(__name__)


class JsonCollection:
    """A record family stored as one JSON array in one file.

    Every operation reads the whole file and every write replaces it. Last
    write wins; there is no indexing and no partial update.
    """

    def __init__(self, path: str):
        self.path = path
        self.name = os.path.splitext(os.path.basename(path))[0]
        self._lock = asyncio.Lock()

    def initialize(self):
        """Create the backing file (and its directory) if it does not exist yet."""
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        if not os.path.exists(self.path):
            self.write([])
            logger.info(f"Created empty collection file {self.path}")

    def read(self) -> List[Dict[str, Any]]:
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                records = json.load(fh)
        except FileNotFoundError:
            logger.warning(f"Collection file {self.path} missing, treating as empty")
            return []
        except json.JSONDecodeError as e:
            logger.warning(f"Collection file {self.path} is not valid JSON ({e}), treating as empty")
            return []

        if not isinstance(records, list):
            logger.warning(f"Collection file {self.path} does not hold a JSON array, treating as empty")
            return []
        return records

    def write(self, records: List[Dict[str, Any]]):
        with open(self.path, "w", encoding="utf-8") as fh:
            json.dump(records, fh, indent=2)
        logger.debug(f"Wrote {len(records)} records to {self.name}")

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[List[Dict[str, Any]], None]:
        """
        Read-modify-write cycle over the whole collection.

        The yielded list is written back when the block exits normally. If the
        block raises, nothing is written.
        """
        async with self._lock:
            records = self.read()
            yield records
            self.write(records)

    async def snapshot(self) -> List[Dict[str, Any]]:
        async with self._lock:
            return self.read()


class JsonStore:
    def __init__(self, env: Environment):
        self.env = env
        config = env.get_storage_config()
        self.data_dir = config["data_dir"]
        self.users = JsonCollection(config["users_file"])
        self.games = JsonCollection(config["games_file"])

    def initialize(self):
        """Create the data directory and empty collections."""
        try:
            os.makedirs(self.data_dir, exist_ok=True)
            self.users.initialize()
            self.games.initialize()
            logger.info(f"JSON store ready at {self.data_dir}")
        except OSError as e:
            logger.error(f"Failed to initialize JSON store at {self.data_dir}: {e}")
            raise

    def health_check(self) -> bool:
        """Check that both collection files exist and the directory is writable."""
        try:
            return (
                os.path.isfile(self.users.path)
                and os.path.isfile(self.games.path)
                and os.access(self.data_dir, os.W_OK)
            )
        except OSError as e:
            logger.error(f"Storage health check failed: {e}")
            return False


# Singleton instance
_json_store: Optional[JsonStore] = None


def _get_json_store(env: Environment = None) -> JsonStore:
    """Get or create the JSON store singleton."""
    global _json_store
    if _json_store is None:
        if env is None:
            env = Environment()
        _json_store = JsonStore(env)
    return _json_store


def get_json_store(env: Environment = Depends(get_env)) -> JsonStore:
    return _get_json_store(env)


async def startup_store(env: Environment):
    """Create the data directory and collection files on startup."""
    store = _get_json_store(env)
    store.initialize()


async def shutdown_store():
    """Drop the store singleton on shutdown."""
    global _json_store
    if _json_store:
        _json_store = None
        logger.info("JSON store released")
