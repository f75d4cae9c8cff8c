from .connection_registry import (
    Connection,
    ConnectionState,
    ConnectionRegistry,
    get_connection_registry,
    startup_connection_registry,
    shutdown_connection_registry,
)
from .event_publisher import GameEventPublisher, get_event_publisher
