"""
Auto-Save Coordinator

Every page funnels its record through one coordinator, which owns the
in-memory FormSnapshot and decides when it goes to the remote store.

GUARANTEES:
1. Debounce: edits to a page restart that page's quiet window, so a
   burst of keystrokes becomes a single remote write
2. Ordering: writes are serialized and each one sends the FULL snapshot
   as it is when the write starts, tagged with a revision number. A
   write whose revision is not newer than the last persisted one is
   skipped, so an older snapshot never lands after a newer one
3. Teardown: leaving a page flushes (or explicitly drops) its pending
   save; nothing fires after the page is gone
4. Never blocking: failed saves are retried, then logged and reported
   to error listeners. They are never raised into the page

DESIGN DECISION: Sending the whole snapshot instead of a per-page diff
makes every write self-contained. With "last write wins" on the remote
side, a lost or reordered diff would silently drop data.
"""

import asyncio
import copy
from typing import Any, Callable, Optional

from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from tax_intake.audit import AuditLogger
from tax_intake.autosave.debouncer import Debouncer
from tax_intake.autosave.indicator import SavingIndicator
from tax_intake.config import get_settings
from tax_intake.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from tax_intake.models.forms import FormSnapshot
from tax_intake.session.errors import SessionError
from tax_intake.session.manager import SessionManager


ErrorListener = Callable[[SessionError], None]


class AutoSaveCoordinator:
    """
    Debounced, sequenced persistence of the FormSnapshot.

    Usage (inside a running event loop):
        coordinator = AutoSaveCoordinator(session_manager)
        coordinator.schedule_save("income", income_record)
        ...
        await coordinator.page_exit("income")
        await coordinator.close()
    """

    def __init__(
        self,
        session_manager: SessionManager,
        debounce_seconds: Optional[float] = None,
        indicator: Optional[SavingIndicator] = None,
        retry_attempts: Optional[int] = None,
        retry_wait_min: Optional[float] = None,
        retry_wait_max: Optional[float] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        settings = get_settings().autosave
        self._session_manager = session_manager
        self._debounce_seconds = (
            settings.debounce_seconds if debounce_seconds is None else debounce_seconds
        )
        self._indicator = indicator or SavingIndicator(settings.indicator_min_seconds)
        self._retry_attempts = retry_attempts or settings.retry_attempts
        self._retry_wait_min = (
            settings.retry_wait_min_seconds if retry_wait_min is None else retry_wait_min
        )
        self._retry_wait_max = (
            settings.retry_wait_max_seconds if retry_wait_max is None else retry_wait_max
        )
        self._audit = audit_logger or AuditLogger()

        self._snapshot: FormSnapshot = {}
        self._debouncers: dict[str, Debouncer] = {}
        self._lock = asyncio.Lock()
        self._revision = 0
        self._persisted_revision = 0
        self._in_flight = 0
        self._error_listeners: list[ErrorListener] = []
        self._closed = False

        self.last_error: Optional[SessionError] = None

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def snapshot(self) -> FormSnapshot:
        """Copy of the in-memory snapshot."""
        return copy.deepcopy(self._snapshot)

    @property
    def revision(self) -> int:
        """Number of the latest change merged into the snapshot."""
        return self._revision

    @property
    def persisted_revision(self) -> int:
        """Latest revision the remote store confirmed."""
        return self._persisted_revision

    @property
    def has_unsaved_changes(self) -> bool:
        return self._revision > self._persisted_revision

    @property
    def indicator(self) -> SavingIndicator:
        return self._indicator

    @property
    def closed(self) -> bool:
        return self._closed

    def pending_pages(self) -> list[str]:
        """Pages whose quiet window is still open."""
        return [name for name, d in self._debouncers.items() if d.pending]

    def on_error(self, listener: ErrorListener) -> None:
        """Register a callback for saves that failed after all retries."""
        self._error_listeners.append(listener)

    # -------------------------------------------------------------------------
    # Scheduling
    # -------------------------------------------------------------------------

    def load_snapshot(self, snapshot: FormSnapshot) -> None:
        """
        Seed the snapshot with data that is already stored remotely.

        Does not schedule a write.
        """
        self._snapshot = copy.deepcopy(snapshot)
        self._persisted_revision = self._revision

    def schedule_save(self, page_name: str, page_data: dict[str, Any]) -> None:
        """
        Replace a page's entry in the snapshot and restart its quiet window.

        Must be called from inside a running event loop.
        """
        if self._closed:
            raise RuntimeError("Auto-save coordinator is closed")

        self._snapshot[page_name] = copy.deepcopy(page_data)
        self._revision += 1

        debouncer = self._debouncers.get(page_name)
        if debouncer is None:
            debouncer = Debouncer(self._debounce_seconds)
            self._debouncers[page_name] = debouncer
        debouncer.schedule(self._persist)

        self._indicator.show()
        self._audit.log(AuditEvent(
            event_type=AuditEventType.SAVE_SCHEDULED,
            severity=AuditSeverity.DEBUG,
            page=page_name,
            description=f"Save scheduled for '{page_name}'",
            details={"revision": self._revision},
            is_user_action=True,
        ))

    async def flush(self) -> None:
        """Persist every pending page now, keeping the debouncers."""
        for debouncer in list(self._debouncers.values()):
            await debouncer.flush()
        self._update_indicator()

    async def page_exit(self, page_name: str, flush: bool = True) -> None:
        """
        Tear down a page's debouncer.

        With flush, its pending save runs now; otherwise it is dropped.
        Dropped edits stay in the in-memory snapshot and go out with the
        next write from any other page.
        """
        debouncer = self._debouncers.pop(page_name, None)
        if debouncer is None:
            return

        if not flush and debouncer.pending:
            self._audit.log(AuditEvent(
                event_type=AuditEventType.SAVE_DROPPED,
                page=page_name,
                description=f"Pending save for '{page_name}' dropped on exit",
            ))
        await debouncer.close(flush=flush)
        self._update_indicator()

    async def close(self, flush: bool = True) -> None:
        """Leave every page, wait for writes in flight, hide the indicator."""
        if self._closed:
            return
        for page_name in list(self._debouncers):
            await self.page_exit(page_name, flush=flush)
        async with self._lock:
            pass
        self._indicator.close()
        self._closed = True

    async def reset(self, flush: bool = True) -> None:
        """
        Leave every page and start from an empty snapshot.

        Used when the user starts a new session.
        """
        for page_name in list(self._debouncers):
            await self.page_exit(page_name, flush=flush)
        async with self._lock:
            self._snapshot = {}
            self._persisted_revision = self._revision
            self.last_error = None
        self._indicator.close()

    # -------------------------------------------------------------------------
    # Persisting
    # -------------------------------------------------------------------------

    async def _persist(self) -> None:
        self._in_flight += 1
        try:
            async with self._lock:
                revision = self._revision
                if revision <= self._persisted_revision:
                    self._audit.log(AuditEvent(
                        event_type=AuditEventType.SAVE_SKIPPED,
                        severity=AuditSeverity.DEBUG,
                        description=f"Revision {revision} already persisted",
                        details={"revision": revision},
                    ))
                    return

                form_data = copy.deepcopy(self._snapshot)
                try:
                    session = await self._save_with_retry(form_data)
                except SessionError as e:
                    self._report_failure(revision, e)
                    return

                self._persisted_revision = revision
                self.last_error = None
                self._audit.log(AuditEventBuilder.save_persisted(
                    session.session_id, revision, sorted(form_data)
                ))
        finally:
            self._in_flight -= 1
            self._update_indicator()

    async def _save_with_retry(self, form_data: FormSnapshot):
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential(
                multiplier=1,
                min=self._retry_wait_min,
                max=self._retry_wait_max,
            ),
            retry=retry_if_exception_type(SessionError),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await self._session_manager.save_form_progress(form_data)

    def _report_failure(self, revision: int, error: SessionError) -> None:
        self.last_error = error
        self._audit.log(AuditEventBuilder.save_failed(revision, str(error)))
        for listener in list(self._error_listeners):
            try:
                listener(error)
            except Exception as e:
                self._audit.log(AuditEvent(
                    event_type=AuditEventType.SYSTEM_ERROR,
                    severity=AuditSeverity.ERROR,
                    description="Auto-save error listener raised",
                    error_message=str(e),
                ))

    def _update_indicator(self) -> None:
        busy = self._in_flight > 0 or any(d.pending for d in self._debouncers.values())
        if busy:
            self._indicator.show()
        else:
            self._indicator.hide()
