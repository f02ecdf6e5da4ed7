"""Store handle and process-wide connection lifecycle."""

from tablekit.store.connection import (
    Store,
    connect,
    connected,
    disconnect,
    get_store,
    is_connected,
)

__all__ = ["Store", "connect", "connected", "disconnect", "get_store", "is_connected"]
