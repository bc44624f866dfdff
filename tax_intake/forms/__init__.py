"""
Forms package: wizard pages, the intake form that holds them, and the
summary calculations.
"""

from tax_intake.forms.base import FieldState, FormPage
from tax_intake.forms.intake import IntakeForm
from tax_intake.forms.pages import (
    PAGE_TYPES,
    BalancePage,
    CompanyDetailsPage,
    CostsPage,
    ExpensesPage,
    IncomePage,
    PartnersPage,
    TaxQuestionsPage,
    TransactionsPage,
)
from tax_intake.forms.summary import (
    compute_balance_summary,
    compute_summary,
    cost_of_goods_sold,
    partner_totals,
    summarize_totals,
    total_costs,
    total_expenses,
    total_revenue,
)

__all__ = [
    "FieldState",
    "FormPage",
    "IntakeForm",
    "PAGE_TYPES",
    "BalancePage",
    "CompanyDetailsPage",
    "CostsPage",
    "ExpensesPage",
    "IncomePage",
    "PartnersPage",
    "TaxQuestionsPage",
    "TransactionsPage",
    "compute_balance_summary",
    "compute_summary",
    "cost_of_goods_sold",
    "partner_totals",
    "summarize_totals",
    "total_costs",
    "total_expenses",
    "total_revenue",
]
