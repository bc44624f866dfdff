"""
Session and access errors.

SessionError is non-blocking: the UI shows a notice and the user keeps
working. AccessError is terminal for the landing page.
"""

from enum import Enum


class SessionErrorKind(str, Enum):
    """Which session operation failed."""
    INIT_FAILED = "InitFailed"
    LOAD_FAILED = "LoadFailed"
    SAVE_FAILED = "SaveFailed"


class SessionError(Exception):
    """A session operation against the remote or local store failed."""

    def __init__(self, kind: SessionErrorKind, message: str):
        self.kind = kind
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.kind.value}: {super().__str__()}"


class AccessError(Exception):
    """The visitor did not present a valid access token."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Access denied: {reason}")
