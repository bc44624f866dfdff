"""
Session Manager

Establishes the session that ties saved progress to an email address.

Rules:
1. One session per local profile. If a record exists it is returned
   unchanged; the remote store is not asked again.
2. Starting over discards only the local record. Remote data stays.
3. No retries here. Failures surface as SessionError with a kind
   (InitFailed / LoadFailed / SaveFailed); retry policy belongs to the
   auto-save coordinator.
"""

from typing import Any, Optional

from pydantic import ValidationError

from tax_intake.audit import AuditLogger
from tax_intake.config import get_settings
from tax_intake.models.audit import AuditEventBuilder, AuditEventType
from tax_intake.models.forms import FormSnapshot
from tax_intake.models.session import Session
from tax_intake.services.storage import (
    RemoteStoreInterface,
    SessionStoreInterface,
    StorageError,
)
from tax_intake.session.errors import SessionError, SessionErrorKind


class SessionManager:
    """
    Owns the local session record and talks to the remote store on its
    behalf.
    """

    def __init__(
        self,
        remote_store: RemoteStoreInterface,
        session_store: SessionStoreInterface,
        storage_key: Optional[str] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._remote = remote_store
        self._local = session_store
        self._key = storage_key or get_settings().session.storage_key
        self._audit = audit_logger or AuditLogger()

    def current_session(self) -> Optional[Session]:
        """
        The session stored locally, if any.

        A record that no longer parses is treated as no session.

        Raises:
            StorageError: If the local store cannot be read
        """
        record = self._local.get(self._key)
        if record is None:
            return None
        try:
            return Session.model_validate(record)
        except ValidationError as e:
            self._audit.log(AuditEventBuilder.session_error(
                AuditEventType.SYSTEM_ERROR,
                error_code="CORRUPT_SESSION_RECORD",
                error_message=str(e),
            ))
            return None

    async def initialize_session(self, email: str) -> Session:
        """
        Return the active session, creating one for email if none exists.

        Idempotent: a second call with the local record untouched returns
        the same session without contacting the remote store.

        Raises:
            SessionError: kind InitFailed
        """
        try:
            existing = self.current_session()
        except StorageError as e:
            raise self._fail(SessionErrorKind.INIT_FAILED, e)

        if existing is not None:
            self._audit.log(
                AuditEventBuilder.session_resumed(existing.session_id, existing.email)
            )
            return existing

        try:
            session_id = await self._remote.create_session(email)
            session = Session(session_id=session_id, email=email)
            self._local.set(self._key, session.to_record())
        except (StorageError, ValidationError) as e:
            raise self._fail(SessionErrorKind.INIT_FAILED, e)

        self._audit.log(AuditEventBuilder.session_created(session.session_id, session.email))
        return session

    async def load_form_progress(self) -> Optional[FormSnapshot]:
        """
        Fetch the saved snapshot of the active session.

        Returns None when there is no session or nothing saved for it;
        neither is an error.

        Raises:
            SessionError: kind LoadFailed
        """
        try:
            session = self.current_session()
            if session is None:
                return None
            snapshot = await self._remote.load_progress(session.session_id)
        except StorageError as e:
            raise self._fail(SessionErrorKind.LOAD_FAILED, e)

        if snapshot is not None:
            self._audit.log(
                AuditEventBuilder.progress_loaded(session.session_id, sorted(snapshot))
            )
        return snapshot

    async def save_form_progress(self, form_data: dict[str, Any]) -> Session:
        """
        Persist a snapshot under the active session.

        Refreshes last_active locally once the remote store accepted it.

        Raises:
            SessionError: kind SaveFailed, also when no session is active
        """
        try:
            session = self.current_session()
        except StorageError as e:
            raise SessionError(SessionErrorKind.SAVE_FAILED, str(e)) from e
        if session is None:
            raise SessionError(SessionErrorKind.SAVE_FAILED, "No active session")

        try:
            await self._remote.save_progress(session.session_id, session.email, form_data)
        except StorageError as e:
            raise SessionError(SessionErrorKind.SAVE_FAILED, str(e)) from e

        touched = session.touched()
        try:
            self._local.set(self._key, touched.to_record())
        except StorageError as e:
            # The remote write succeeded; a stale timestamp is harmless
            self._audit.log(AuditEventBuilder.session_error(
                AuditEventType.SYSTEM_ERROR,
                error_code="SESSION_TOUCH_FAILED",
                error_message=str(e),
                session_id=session.session_id,
            ))
            return session
        return touched

    def start_new_session(self) -> None:
        """
        Discard the local session record.

        The next initialize_session() call creates a fresh remote session.
        Data already saved remotely is left alone.
        """
        try:
            previous = self.current_session()
        except StorageError:
            previous = None
        self._local.clear(self._key)
        self._audit.log(
            AuditEventBuilder.session_cleared(previous.session_id if previous else None)
        )

    def _fail(self, kind: SessionErrorKind, cause: Exception) -> SessionError:
        event_type = {
            SessionErrorKind.INIT_FAILED: AuditEventType.SESSION_INIT_FAILED,
            SessionErrorKind.LOAD_FAILED: AuditEventType.PROGRESS_LOAD_FAILED,
            SessionErrorKind.SAVE_FAILED: AuditEventType.SAVE_FAILED,
        }[kind]
        self._audit.log(AuditEventBuilder.session_error(
            event_type,
            error_code=kind.value,
            error_message=str(cause),
        ))
        error = SessionError(kind, str(cause))
        error.__cause__ = cause
        return error
