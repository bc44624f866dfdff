"""
Wizard pages.

One FormPage subclass per step of the intake wizard. Each page knows
its record schema, which amounts may go negative, and the helpers its
list sections need. Cross-page totals live in IntakeForm.
"""

from typing import Any, Optional

from tax_intake.formatting.currency import to_monetary_string
from tax_intake.forms.base import FormPage
from tax_intake.forms.summary import (
    compute_balance_summary,
    cost_of_goods_sold,
    partner_totals,
    total_costs,
    total_expenses,
    total_revenue,
)
from tax_intake.models.forms import (
    BalanceRecord,
    BalanceSummary,
    CompanyDetailsRecord,
    CostsRecord,
    ExpensesRecord,
    IncomeRecord,
    PageName,
    PartnersRecord,
    TaxQuestionsRecord,
    TransactionsRecord,
)


def _yes_no(answer: Optional[bool]) -> str:
    if answer is None:
        return ""
    return "yes" if answer else "no"


class IncomePage(FormPage):
    """What income did the company have?"""

    name = PageName.INCOME
    record_type = IncomeRecord

    def _recompute(self) -> None:
        self.total_revenue = to_monetary_string(total_revenue(self._record))

    def add_other_income(self, description: str, amount: Any = "0.00") -> int:
        return self.add_item("other_items", description=description, amount=amount)

    def remove_other_income(self, item_id: int) -> None:
        self.remove_item("other_items", item_id)


class CostsPage(FormPage):
    """
    What costs did the company have?

    Cost of goods sold is derived from the inventory values, not typed in.
    """

    name = PageName.COSTS
    record_type = CostsRecord

    def _recompute(self) -> None:
        self.cost_of_goods_sold = to_monetary_string(cost_of_goods_sold(self._record))
        self.total_costs = to_monetary_string(total_costs(self._record))


class ExpensesPage(FormPage):
    """What expenses did the company have? Seeded with the common categories."""

    name = PageName.EXPENSES
    record_type = ExpensesRecord

    def _recompute(self) -> None:
        self.total_expenses = to_monetary_string(total_expenses(self._record))

    def add_expense(self, description: str, amount: Any = "0.00") -> int:
        if not description or not description.strip():
            raise ValueError("An expense needs a description")
        return self.add_item("items", description=description.strip(), amount=amount)

    def remove_expense(self, item_id: int) -> None:
        self.remove_item("items", item_id)


class TaxQuestionsPage(FormPage):
    """State/local tax payments and 1099 contractors."""

    name = PageName.TAX_QUESTIONS
    record_type = TaxQuestionsRecord

    def answer_state_tax(self, paid: bool) -> None:
        self.set_value("state_tax.paid", paid)

    def answer_form_1099(self, contracted: bool) -> None:
        self.set_value("form_1099.contracted", contracted)

    def attach_document(self, question: str, filename: Optional[str]) -> None:
        """Record the file name of a supporting document ("state_tax" or "form_1099")."""
        if question not in ("state_tax", "form_1099"):
            raise KeyError(f"Unknown tax question: {question}")
        self.set_value(f"{question}.document", filename)


class PartnersPage(FormPage):
    """Company partners and their contributions."""

    name = PageName.PARTNERS
    record_type = PartnersRecord

    def _recompute(self) -> None:
        self.total_contributed, self.total_withdrawn = partner_totals(self._record)

    def add_partner(self, **fields: Any) -> int:
        if not str(fields.get("name", "")).strip():
            raise ValueError("A partner needs a name")
        return self.add_item("partners", **fields)

    def update_partner(self, partner_id: int, **fields: Any) -> None:
        self.update_item("partners", partner_id, **fields)

    def remove_partner(self, partner_id: int) -> None:
        self.remove_item("partners", partner_id)


class BalancePage(FormPage):
    """
    Closing balance sheet.

    Bank balances may be negative (overdraft); every other amount may not.
    """

    name = PageName.BALANCE
    record_type = BalanceRecord
    negative_fields = frozenset({
        "assets.bank_balance",
        "assets.other_bank_account",
    })

    def _recompute(self) -> None:
        self.summary: BalanceSummary = compute_balance_summary(self._record)

    def add_other_asset(self, description: str, amount: Any = "0.00") -> int:
        return self.add_item("assets.other_assets", description=description, amount=amount)

    def remove_other_asset(self, item_id: int) -> None:
        self.remove_item("assets.other_assets", item_id)


class CompanyDetailsPage(FormPage):
    """Main activities, customer locations and sales platforms."""

    name = PageName.COMPANY_DETAILS
    record_type = CompanyDetailsRecord


class TransactionsPage(FormPage):
    """Transactions with related persons."""

    name = PageName.TRANSACTIONS
    record_type = TransactionsRecord

    def answer_has_transactions(self, has_transactions: Optional[bool]) -> None:
        self.set_value("has_transactions", _yes_no(has_transactions))

    def answer_has_more(self, has_more: Optional[bool]) -> None:
        self.set_value("additional_transactions.has_more", _yes_no(has_more))

    def attach_document(self, filename: Optional[str]) -> None:
        self.set_value("first_transaction.document", filename)


PAGE_TYPES: tuple[type[FormPage], ...] = (
    IncomePage,
    CostsPage,
    ExpensesPage,
    TaxQuestionsPage,
    PartnersPage,
    BalancePage,
    CompanyDetailsPage,
    TransactionsPage,
)
