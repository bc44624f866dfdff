"""
Storage Services Package

Provides abstract interfaces and concrete implementations for the two
stores the intake form uses: the remote progress store (HTTP) and the
local session store (JSON file).
"""

from tax_intake.services.storage.interface import (
    ConnectionError,
    RemoteStoreInterface,
    ResponseError,
    SessionStoreInterface,
    StorageError,
)
from tax_intake.services.storage.apps_script import (
    AppsScriptClient,
    AppsScriptRemoteStore,
)
from tax_intake.services.storage.local import (
    InMemorySessionStore,
    JsonFileSessionStore,
)

__all__ = [
    # Interfaces
    "RemoteStoreInterface",
    "SessionStoreInterface",
    # Exceptions
    "ConnectionError",
    "ResponseError",
    "StorageError",
    # Remote store
    "AppsScriptClient",
    "AppsScriptRemoteStore",
    # Local session stores
    "InMemorySessionStore",
    "JsonFileSessionStore",
]
