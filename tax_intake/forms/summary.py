"""
Summary calculations.

Pure functions of the current page records. Totals are recomputed from
the full records on every change, never adjusted incrementally, so the
result does not depend on the order of updates.

    net income = total revenue - total costs - total expenses
    COGS       = initial inventory + purchases - final inventory
"""

from decimal import Decimal
from typing import Iterable, Optional

from tax_intake.formatting.currency import Amount, to_decimal, to_monetary_string
from tax_intake.models.forms import (
    BalanceRecord,
    BalanceSummary,
    CostsRecord,
    ExpensesRecord,
    IncomeRecord,
    LineItem,
    PartnersRecord,
    SummaryTotals,
    TaxQuestionsRecord,
)


def _sum(values: Iterable[Amount]) -> Decimal:
    return sum((to_decimal(v) for v in values), Decimal("0"))


def _sum_items(items: Iterable[LineItem]) -> Decimal:
    return _sum(item.amount for item in items)


def total_revenue(income: IncomeRecord) -> Decimal:
    return _sum([
        income.services,
        income.products,
        income.interest,
        income.other,
    ]) + _sum_items(income.other_items)


def cost_of_goods_sold(costs: CostsRecord) -> Decimal:
    inventory = costs.inventory
    return (
        to_decimal(inventory.initial_value)
        + to_decimal(inventory.purchases)
        - to_decimal(inventory.final_value)
    )


def total_costs(costs: CostsRecord) -> Decimal:
    return cost_of_goods_sold(costs) + to_decimal(costs.services.cost)


def total_expenses(
    expenses: ExpensesRecord,
    tax_questions: Optional[TaxQuestionsRecord] = None,
) -> Decimal:
    """
    Expense items plus the tax question amounts.

    A tax question amount only counts once the question is answered yes.
    """
    total = _sum_items(expenses.items)
    if tax_questions is not None:
        if tax_questions.state_tax.paid:
            total += to_decimal(tax_questions.state_tax.amount)
        if tax_questions.form_1099.contracted:
            total += to_decimal(tax_questions.form_1099.amount)
    return total


def summarize_totals(revenue: Amount, costs: Amount, expenses: Amount) -> SummaryTotals:
    """Build a SummaryTotals from the three totals, deriving net income."""
    revenue_value = to_decimal(revenue)
    costs_value = to_decimal(costs)
    expenses_value = to_decimal(expenses)
    return SummaryTotals(
        total_revenue=to_monetary_string(revenue_value),
        total_costs=to_monetary_string(costs_value),
        total_expenses=to_monetary_string(expenses_value),
        net_income=to_monetary_string(revenue_value - costs_value - expenses_value),
    )


def compute_summary(
    income: IncomeRecord,
    costs: CostsRecord,
    expenses: ExpensesRecord,
    tax_questions: Optional[TaxQuestionsRecord] = None,
) -> SummaryTotals:
    return summarize_totals(
        total_revenue(income),
        total_costs(costs),
        total_expenses(expenses, tax_questions),
    )


def compute_balance_summary(balance: BalanceRecord) -> BalanceSummary:
    assets = balance.assets
    liabilities = balance.liabilities

    assets_total = _sum([
        assets.bank_balance,
        assets.other_bank_account,
        assets.prepaid_expenses,
        assets.durable_goods,
    ]) + _sum_items(assets.other_assets)
    liabilities_total = _sum([
        liabilities.accounts_payable,
        liabilities.financing,
        liabilities.other_loans,
        liabilities.payments_in_advance,
    ])

    return BalanceSummary(
        total_assets=to_monetary_string(assets_total),
        total_liabilities=to_monetary_string(liabilities_total),
        equity=to_monetary_string(assets_total - liabilities_total),
    )


def partner_totals(partners: PartnersRecord) -> tuple[str, str]:
    """(total contributed, total withdrawn) across all partners."""
    contributed = _sum(p.amount_contributed for p in partners.partners)
    withdrawn = _sum(p.amount_withdrawn for p in partners.partners)
    return to_monetary_string(contributed), to_monetary_string(withdrawn)
