"""
Abstract Storage Interfaces

DESIGN DECISION: Both stores the intake form talks to sit behind an
abstract interface. This allows us to:
1. Swap the spreadsheet-backed web app for a real API later
2. Use in-memory stores for testing
3. Keep the session and auto-save logic decoupled from transport

There are two stores:
- RemoteStoreInterface: the opaque remote key-value store that owns
  the saved progress, reached over HTTP
- SessionStoreInterface: the local persistent key-value store that
  remembers which remote session this profile is using
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class RemoteStoreInterface(ABC):
    """
    Abstract interface for the remote progress store.

    Implementations raise StorageError (or a subclass) on any failure;
    they never retry on their own.
    """

    @abstractmethod
    async def create_session(self, email: str) -> str:
        """
        Ask the remote store for a new session.

        Args:
            email: Email the session belongs to

        Returns:
            The new session id

        Raises:
            StorageError: If the request fails or is refused
        """
        pass

    @abstractmethod
    async def save_progress(
        self,
        session_id: str,
        email: str,
        form_data: dict[str, Any],
    ) -> bool:
        """
        Persist form data under a session. Last write wins.

        Args:
            session_id: Session to save under
            email: Email of the session owner
            form_data: Full FormSnapshot to store

        Returns:
            True if the remote store accepted the write

        Raises:
            StorageError: If the request fails or is refused
        """
        pass

    @abstractmethod
    async def load_progress(self, session_id: str) -> Optional[dict[str, Any]]:
        """
        Fetch the saved form data of a session.

        Args:
            session_id: Session to load

        Returns:
            The stored FormSnapshot, or None if nothing is stored

        Raises:
            StorageError: If the request fails
        """
        pass


class SessionStoreInterface(ABC):
    """
    Abstract interface for the local session store.

    A plain key-value store that survives restarts. The session record is
    kept under a single fixed key.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[dict[str, Any]]:
        """Return the record stored under key, or None."""
        pass

    @abstractmethod
    def set(self, key: str, value: dict[str, Any]) -> None:
        """Store a JSON-serializable record under key."""
        pass

    @abstractmethod
    def clear(self, key: str) -> None:
        """Remove the record under key. Missing keys are ignored."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ConnectionError(StorageError):
    """Could not reach the storage backend."""
    pass


class ResponseError(StorageError):
    """The backend answered, but refused the request or sent garbage."""

    def __init__(self, message: str, payload: Optional[Any] = None):
        self.payload = payload
        super().__init__(message)
