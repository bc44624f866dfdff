"""
IntakeForm: every wizard page plus the cross-page summary.

The net income summary shown beside each page depends on three pages
(income, costs, expenses) and the tax questions. It is recomputed from
the full current records whenever any page changes.

RESUME POLICY: saved data is validated page by page. A page whose saved
record does not fit its schema is rejected and keeps its defaults; the
other pages still load. Unknown keys are ignored. The rejected data is
not written back until the user edits something, at which point the
full snapshot (without it) replaces the remote copy.
"""

from typing import Callable, Optional

from pydantic import ValidationError

from tax_intake.audit import AuditLogger
from tax_intake.forms.base import FormPage
from tax_intake.forms.pages import (
    BalancePage,
    CompanyDetailsPage,
    CostsPage,
    ExpensesPage,
    IncomePage,
    PartnersPage,
    TaxQuestionsPage,
    TransactionsPage,
)
from tax_intake.forms.summary import compute_summary
from tax_intake.models.audit import AuditEventBuilder
from tax_intake.models.forms import FormSnapshot, PageName, SummaryTotals


# Derived sections older clients stored next to the pages
DERIVED_KEYS = frozenset({"summary"})

SummaryListener = Callable[[SummaryTotals], None]


class IntakeForm:
    """All pages of one intake, wired to a shared summary."""

    def __init__(self, audit_logger: Optional[AuditLogger] = None):
        self._audit = audit_logger or AuditLogger()

        self.income = IncomePage()
        self.costs = CostsPage()
        self.expenses = ExpensesPage()
        self.tax_questions = TaxQuestionsPage()
        self.partners = PartnersPage()
        self.balance = BalancePage()
        self.company_details = CompanyDetailsPage()
        self.transactions = TransactionsPage()

        self._pages: dict[str, FormPage] = {
            page.name.value: page
            for page in (
                self.income,
                self.costs,
                self.expenses,
                self.tax_questions,
                self.partners,
                self.balance,
                self.company_details,
                self.transactions,
            )
        }
        self._summary_listeners: list[SummaryListener] = []
        self._coordinator = None
        self._summary = self._compute_summary()

        for page in self._pages.values():
            page.subscribe(self._on_page_changed)

    @property
    def pages(self) -> dict[str, FormPage]:
        return dict(self._pages)

    def page(self, name: str) -> FormPage:
        key = name.value if isinstance(name, PageName) else name
        try:
            return self._pages[key]
        except KeyError:
            raise KeyError(f"Unknown page: {name}")

    @property
    def summary(self) -> SummaryTotals:
        return self._summary

    def on_summary(self, listener: SummaryListener) -> None:
        self._summary_listeners.append(listener)

    def snapshot(self) -> FormSnapshot:
        return {name: page.to_record() for name, page in self._pages.items()}

    # -------------------------------------------------------------------------
    # Auto-save wiring
    # -------------------------------------------------------------------------

    def attach(self, coordinator) -> None:
        """Route every page's changes to an AutoSaveCoordinator."""
        self._coordinator = coordinator
        for page in self._pages.values():
            page.attach(coordinator)

    async def leave_page(self, name: str, flush: bool = True) -> None:
        """Page exit: flush or drop its pending save. It keeps auto-saving if revisited."""
        page = self.page(name)
        await page.leave(flush=flush)
        if self._coordinator is not None:
            page.attach(self._coordinator)

    # -------------------------------------------------------------------------
    # Resume
    # -------------------------------------------------------------------------

    def apply_snapshot(self, snapshot: FormSnapshot, session_id: Optional[str] = None) -> list[str]:
        """
        Load saved page records. Returns the names of rejected pages.
        """
        rejected = []
        for name, record in snapshot.items():
            if name in DERIVED_KEYS:
                continue

            page = self._pages.get(name)
            if page is None:
                rejected.append(name)
                self._audit.log(AuditEventBuilder.page_rejected(name, "unknown page", session_id))
                continue

            if not isinstance(record, dict):
                rejected.append(name)
                self._audit.log(AuditEventBuilder.page_rejected(
                    name, f"expected an object, got {type(record).__name__}", session_id
                ))
                continue

            try:
                page.load_record(record)
            except ValidationError as e:
                rejected.append(name)
                self._audit.log(AuditEventBuilder.page_rejected(name, str(e), session_id))

        return rejected

    async def resume(self, session_manager) -> list[str]:
        """
        Load the saved progress of the active session into the pages.

        Returns the names of rejected pages. The coordinator (if attached)
        is seeded with the loaded snapshot without writing it back.

        Raises:
            SessionError: kind LoadFailed
        """
        saved = await session_manager.load_form_progress()
        if not saved:
            return []

        session = session_manager.current_session()
        rejected = self.apply_snapshot(saved, session.session_id if session else None)
        if self._coordinator is not None:
            self._coordinator.load_snapshot(self.snapshot())
        return rejected

    # -------------------------------------------------------------------------
    # Summary
    # -------------------------------------------------------------------------

    def _compute_summary(self) -> SummaryTotals:
        return compute_summary(
            self.income._record,
            self.costs._record,
            self.expenses._record,
            self.tax_questions._record,
        )

    def _on_page_changed(self, page: FormPage) -> None:
        summary = self._compute_summary()
        if summary == self._summary:
            return
        self._summary = summary
        for listener in list(self._summary_listeners):
            listener(summary)
