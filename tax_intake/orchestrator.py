"""
Main Orchestrator for Tax Intake

This module ties together all the components and defines the
landing flow:

    access link -> decode email -> session (create or resume)
    -> load saved progress -> wizard with auto-save attached

DESIGN DECISION: The orchestrator enforces the boundaries:
- No session and no form without a valid access token
- Session and progress failures never block the wizard; they become
  notices and the user keeps typing
- Every step is audited
"""

from collections.abc import Mapping
from typing import Optional, Union

from tax_intake.audit import AuditLogger, configure_logging, create_correlation_id
from tax_intake.autosave import AutoSaveCoordinator
from tax_intake.config import get_settings
from tax_intake.forms import IntakeForm
from tax_intake.models.audit import AuditEventBuilder
from tax_intake.models.session import Session
from tax_intake.services.storage import (
    AppsScriptRemoteStore,
    JsonFileSessionStore,
    RemoteStoreInterface,
    SessionStoreInterface,
    StorageError,
)
from tax_intake.session import (
    AccessError,
    SessionError,
    SessionManager,
    resolve_access_email,
)


class IntakeFlow:
    """
    Orchestrates one visit to the intake wizard.

    Flow:
    1. Access → Decode the email from the link (blocking on failure)
    2. Session → Resume the stored session, or create one remotely
    3. Resume → Load saved progress into the pages
    4. Edit → Every change is auto-saved through the coordinator
    5. Finish → Flush pending saves

    Only step 1 can stop the user. Steps 2 and 3 degrade to notices.
    """

    def __init__(
        self,
        session_manager: SessionManager,
        coordinator: AutoSaveCoordinator,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._session_manager = session_manager
        self._coordinator = coordinator
        self._audit_logger = audit_logger or AuditLogger()
        self._form: Optional[IntakeForm] = None

    @property
    def form(self) -> Optional[IntakeForm]:
        return self._form

    @property
    def coordinator(self) -> AutoSaveCoordinator:
        return self._coordinator

    @property
    def session_manager(self) -> SessionManager:
        return self._session_manager

    async def start(
        self,
        query: Union[str, Mapping],
    ) -> tuple[IntakeForm, Optional[Session], list[str]]:
        """
        Run the landing flow for an access link.

        Returns:
            (form, session, notices)

        session is None if it could not be established; the form still
        works but nothing is saved until a session exists.

        Raises:
            AccessError: If the link carries no valid access token
        """
        correlation_id = create_correlation_id()
        audit = self._audit_logger.bind(correlation_id)

        try:
            email = resolve_access_email(query)
        except AccessError as e:
            audit.log(AuditEventBuilder.access_denied(e.reason, correlation_id))
            raise

        audit.log(AuditEventBuilder.access_granted(email, correlation_id))
        notices: list[str] = []

        # A link for another person must not resume the stored session
        try:
            existing = self._session_manager.current_session()
        except StorageError as e:
            notices.append(f"Your saved session could not be read and was discarded ({e}).")
            self._discard_local_session(notices)
        else:
            if existing is not None and existing.email != email:
                self._discard_local_session(notices)

        form = IntakeForm(audit_logger=audit)
        form.attach(self._coordinator)
        self._form = form

        session = await self._establish_session(email, form, notices)
        return form, session, notices

    async def start_new_session(self, email: str) -> tuple[IntakeForm, Optional[Session], list[str]]:
        """
        Start over: flush pending saves to the old session, discard the
        local record, and open a fresh session with an empty form.

        Data already saved remotely is not deleted.
        """
        await self._coordinator.reset(flush=True)
        notices: list[str] = []
        self._discard_local_session(notices)

        if self._form is not None:
            for page in self._form.pages.values():
                page.detach()

        form = IntakeForm(audit_logger=self._audit_logger)
        form.attach(self._coordinator)
        self._form = form

        session = await self._establish_session(email, form, notices)
        return form, session, notices

    async def leave_page(self, name: str, flush: bool = True) -> None:
        if self._form is not None:
            await self._form.leave_page(name, flush=flush)

    async def finish(self) -> None:
        """Flush every pending save and stop auto-saving."""
        await self._coordinator.close(flush=True)

    def _discard_local_session(self, notices: list[str]) -> None:
        try:
            self._session_manager.start_new_session()
        except StorageError as e:
            notices.append(f"Your previous session could not be discarded ({e}).")

    async def _establish_session(
        self,
        email: str,
        form: IntakeForm,
        notices: list[str],
    ) -> Optional[Session]:
        try:
            session = await self._session_manager.initialize_session(email)
        except SessionError as e:
            notices.append(f"Your progress cannot be saved right now ({e}).")
            return None

        try:
            rejected = await form.resume(self._session_manager)
        except SessionError as e:
            notices.append(f"Your saved progress could not be loaded ({e}).")
            return session

        if rejected:
            notices.append(
                "Some saved answers could not be restored: " + ", ".join(sorted(rejected))
            )
        return session


def create_app_components(
    remote_store: Optional[RemoteStoreInterface] = None,
    session_store: Optional[SessionStoreInterface] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> IntakeFlow:
    """
    Factory function to create all application components.

    Args:
        remote_store: Defaults to the Apps Script endpoint from settings.
        session_store: Defaults to the JSON file from settings.
        audit_logger: Defaults to local-only logging.

    Returns:
        An IntakeFlow wired to a SessionManager and AutoSaveCoordinator
    """
    configure_logging(get_settings().app.debug_mode)

    audit_logger = audit_logger or AuditLogger()
    remote_store = remote_store or AppsScriptRemoteStore()
    session_store = session_store or JsonFileSessionStore()

    session_manager = SessionManager(
        remote_store=remote_store,
        session_store=session_store,
        audit_logger=audit_logger,
    )
    coordinator = AutoSaveCoordinator(
        session_manager,
        audit_logger=audit_logger,
    )

    return IntakeFlow(
        session_manager=session_manager,
        coordinator=coordinator,
        audit_logger=audit_logger,
    )
