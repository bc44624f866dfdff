"""
Data Models Package

Pydantic models for the session record, the page records of the
intake wizard, derived summaries and validation issues.
"""

from tax_intake.models.forms import (
    DEFAULT_EXPENSE_CATEGORIES,
    AdditionalTransactions,
    Assets,
    BalanceRecord,
    BalanceSummary,
    CompanyDetailsRecord,
    ContractorAnswer,
    CostsRecord,
    ExpensesRecord,
    FirstTransaction,
    FormSnapshot,
    IncomeRecord,
    InventoryCosts,
    Liabilities,
    LineItem,
    PageName,
    Partner,
    PartnersRecord,
    RecordModel,
    ServiceCosts,
    StateTaxAnswer,
    SummaryTotals,
    TaxQuestionsRecord,
    TransactionsRecord,
    is_money_field,
)
from tax_intake.models.issues import AmountIssue, AmountIssueType
from tax_intake.models.session import Session
from tax_intake.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Page records
    "DEFAULT_EXPENSE_CATEGORIES",
    "AdditionalTransactions",
    "Assets",
    "BalanceRecord",
    "CompanyDetailsRecord",
    "ContractorAnswer",
    "CostsRecord",
    "ExpensesRecord",
    "FirstTransaction",
    "FormSnapshot",
    "IncomeRecord",
    "InventoryCosts",
    "Liabilities",
    "LineItem",
    "PageName",
    "Partner",
    "PartnersRecord",
    "RecordModel",
    "ServiceCosts",
    "StateTaxAnswer",
    "TaxQuestionsRecord",
    "TransactionsRecord",
    "is_money_field",
    # Summaries
    "BalanceSummary",
    "SummaryTotals",
    # Validation
    "AmountIssue",
    "AmountIssueType",
    # Session
    "Session",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
