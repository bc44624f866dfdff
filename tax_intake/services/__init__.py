"""Services package."""

from tax_intake.services.storage import (
    AppsScriptClient,
    AppsScriptRemoteStore,
    ConnectionError,
    InMemorySessionStore,
    JsonFileSessionStore,
    RemoteStoreInterface,
    ResponseError,
    SessionStoreInterface,
    StorageError,
)

__all__ = [
    "AppsScriptClient",
    "AppsScriptRemoteStore",
    "ConnectionError",
    "InMemorySessionStore",
    "JsonFileSessionStore",
    "RemoteStoreInterface",
    "ResponseError",
    "SessionStoreInterface",
    "StorageError",
]
