"""
Shared fixtures.

No real network calls: the remote store is an in-memory fake and the
local session store is InMemorySessionStore.
"""

import copy
from typing import Any, Optional

import pytest

from tax_intake.audit import AuditLogger
from tax_intake.models.audit import AuditEvent
from tax_intake.services.storage import (
    ConnectionError,
    InMemorySessionStore,
    RemoteStoreInterface,
)
from tax_intake.session import SessionManager


class FakeRemoteStore(RemoteStoreInterface):
    """Remote store held in a dict, with call counters and failure switches."""

    def __init__(self):
        self.progress: dict[str, dict[str, Any]] = {}
        self.saves: list[tuple[str, str, dict[str, Any]]] = []
        self.create_calls = 0
        self.load_calls = 0
        self.fail_create = False
        self.fail_load = False
        self.fail_saves = 0
        self._next_id = 1

    async def create_session(self, email: str) -> str:
        self.create_calls += 1
        if self.fail_create:
            raise ConnectionError("remote store unreachable")
        session_id = f"session-{self._next_id}"
        self._next_id += 1
        return session_id

    async def save_progress(
        self,
        session_id: str,
        email: str,
        form_data: dict[str, Any],
    ) -> bool:
        if self.fail_saves:
            self.fail_saves -= 1
            raise ConnectionError("remote store unreachable")
        self.saves.append((session_id, email, copy.deepcopy(form_data)))
        self.progress[session_id] = copy.deepcopy(form_data)
        return True

    async def load_progress(self, session_id: str) -> Optional[dict[str, Any]]:
        self.load_calls += 1
        if self.fail_load:
            raise ConnectionError("remote store unreachable")
        data = self.progress.get(session_id)
        return copy.deepcopy(data) if data is not None else None


class RecordingSink:
    """Audit sink that keeps every event."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    def __call__(self, event: AuditEvent) -> None:
        self.events.append(event)

    def types(self) -> list[str]:
        return [e.event_type.value for e in self.events]


@pytest.fixture
def remote_store() -> FakeRemoteStore:
    return FakeRemoteStore()


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def audit_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def audit_logger(audit_sink) -> AuditLogger:
    return AuditLogger(sink=audit_sink)


@pytest.fixture
def session_manager(remote_store, session_store, audit_logger) -> SessionManager:
    return SessionManager(
        remote_store=remote_store,
        session_store=session_store,
        storage_key="formSession",
        audit_logger=audit_logger,
    )
