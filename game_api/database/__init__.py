from .json_store import (
    JsonCollection,
    JsonStore,
    get_json_store,
    startup_store,
    shutdown_store,
)
