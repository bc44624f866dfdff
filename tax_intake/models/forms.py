"""
Page Record Models for the Tax Intake Wizard

One model per wizard page. These are the canonical schemas: a record
coming back from the remote store is validated against them on resume,
and a page that does not fit is rejected instead of merged.

DESIGN DECISION: Monetary fields are plain strings. While a field is
being edited it may hold a half-typed value such as "12."; the
canonical two-decimal form is written when the field is blurred.

All models serialize with camelCase keys (model_dump(by_alias=True))
to match the JSON shape the remote store already holds.
"""

from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Literal, Optional

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    field_validator,
)
from pydantic.alias_generators import to_camel


# =============================================================================
# PAGE NAMES
# =============================================================================

class PageName(str, Enum):
    """Keys of the FormSnapshot, one per wizard page."""
    INCOME = "income"
    COSTS = "costs"
    EXPENSES = "expenses"
    TAX_QUESTIONS = "taxQuestions"
    PARTNERS = "partners"
    BALANCE = "balance"
    COMPANY_DETAILS = "companyDetails"
    TRANSACTIONS = "transactions"


# page name -> JSON record of that page
FormSnapshot = dict[str, dict[str, Any]]


# =============================================================================
# SHARED TYPES
# =============================================================================

def _coerce_amount(value: Any) -> Any:
    """Accept numbers from older records; keep strings as they are."""
    if value is None:
        return "0.00"
    if isinstance(value, bool):
        raise ValueError("Amount cannot be a boolean")
    if isinstance(value, (int, float, Decimal)):
        return f"{Decimal(str(value)):.2f}"
    return value


MoneyStr = Annotated[str, BeforeValidator(_coerce_amount)]
YesNo = Literal["", "yes", "no"]


def is_money_field(model_cls: type[BaseModel], name: str) -> bool:
    """True if the named field of model_cls is declared as MoneyStr."""
    info = model_cls.model_fields.get(name)
    if info is None:
        return False
    return any(
        isinstance(meta, BeforeValidator) and meta.func is _coerce_amount
        for meta in info.metadata
    )


class RecordModel(BaseModel):
    """Base for every page record and sub-section."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
        extra="ignore",
    )

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


def _require_unique_ids(items: list) -> list:
    seen = set()
    for item in items:
        if item.id in seen:
            raise ValueError(f"Duplicate item id: {item.id}")
        seen.add(item.id)
    return items


class LineItem(RecordModel):
    """A user-added row in a list-valued section."""
    id: int = Field(..., ge=1)
    description: str = Field(default="", max_length=200)
    amount: MoneyStr = "0.00"


# =============================================================================
# INCOME
# =============================================================================

class IncomeRecord(RecordModel):
    services: MoneyStr = "0.00"
    products: MoneyStr = "0.00"
    interest: MoneyStr = "0.00"
    other: MoneyStr = "0.00"
    other_description: str = ""
    other_items: list[LineItem] = Field(default_factory=list)

    @field_validator("other_items")
    @classmethod
    def unique_other_items_ids(cls, v: list) -> list:
        return _require_unique_ids(v)


# =============================================================================
# COSTS
# =============================================================================

class InventoryCosts(RecordModel):
    """Inventory values used to derive cost of goods sold."""
    initial_value: MoneyStr = "0.00"
    purchases: MoneyStr = "0.00"
    final_value: MoneyStr = "0.00"


class ServiceCosts(RecordModel):
    cost: MoneyStr = "0.00"


class CostsRecord(RecordModel):
    inventory: InventoryCosts = Field(default_factory=InventoryCosts)
    services: ServiceCosts = Field(default_factory=ServiceCosts)


# =============================================================================
# EXPENSES
# =============================================================================

DEFAULT_EXPENSE_CATEGORIES = (
    "Advertising",
    "Accounting",
    "Bank services charges (card fees)",
    "Company fees and licenses",
    "Consulting services",
    "State or local taxes",
    "Interest expenses",
    "Administrative expenses",
)


def default_expense_items() -> list[LineItem]:
    return [
        LineItem(id=index, description=description)
        for index, description in enumerate(DEFAULT_EXPENSE_CATEGORIES, start=1)
    ]


class ExpensesRecord(RecordModel):
    items: list[LineItem] = Field(default_factory=default_expense_items)

    @field_validator("items")
    @classmethod
    def unique_items_ids(cls, v: list) -> list:
        return _require_unique_ids(v)


# =============================================================================
# TAX QUESTIONS
# =============================================================================

class StateTaxAnswer(RecordModel):
    """Did the company pay state or local taxes, and how much."""
    paid: Optional[bool] = None
    amount: MoneyStr = "0.00"
    document: Optional[str] = Field(
        default=None,
        description="File name of the supporting document"
    )


class ContractorAnswer(RecordModel):
    """Did the company hire contractors who received a 1099."""
    contracted: Optional[bool] = None
    amount: MoneyStr = "0.00"
    document: Optional[str] = None


class TaxQuestionsRecord(RecordModel):
    state_tax: StateTaxAnswer = Field(default_factory=StateTaxAnswer)
    form_1099: ContractorAnswer = Field(default_factory=ContractorAnswer)


# =============================================================================
# PARTNERS
# =============================================================================

class Partner(RecordModel):
    id: int = Field(..., ge=1)
    name: str = Field(default="", max_length=200)
    phone: str = Field(default="", max_length=50)
    email: str = Field(default="", max_length=320)
    country: str = ""
    city: str = ""
    address: str = ""
    postal_code: str = Field(default="", max_length=20)
    amount_contributed: MoneyStr = "0.00"
    amount_withdrawn: MoneyStr = "0.00"


class PartnersRecord(RecordModel):
    partners: list[Partner] = Field(default_factory=list)

    @field_validator("partners")
    @classmethod
    def unique_partners_ids(cls, v: list) -> list:
        return _require_unique_ids(v)


# =============================================================================
# BALANCE SHEET
# =============================================================================

class Assets(RecordModel):
    bank_balance: MoneyStr = "0.00"
    other_bank_account: MoneyStr = "0.00"
    prepaid_expenses: MoneyStr = "0.00"
    durable_goods: MoneyStr = "0.00"
    other_assets: list[LineItem] = Field(default_factory=list)

    @field_validator("other_assets")
    @classmethod
    def unique_other_assets_ids(cls, v: list) -> list:
        return _require_unique_ids(v)


class Liabilities(RecordModel):
    accounts_payable: MoneyStr = "0.00"
    financing: MoneyStr = "0.00"
    other_loans: MoneyStr = "0.00"
    payments_in_advance: MoneyStr = "0.00"


class BalanceRecord(RecordModel):
    assets: Assets = Field(default_factory=Assets)
    liabilities: Liabilities = Field(default_factory=Liabilities)


# =============================================================================
# COMPANY DETAILS
# =============================================================================

class CompanyDetailsRecord(RecordModel):
    main_activities: str = Field(default="", max_length=2000)
    customers_location: str = Field(default="", max_length=2000)
    platforms: str = Field(default="", max_length=2000)


# =============================================================================
# TRANSACTIONS
# =============================================================================

class FirstTransaction(RecordModel):
    transaction_description: str = ""
    person_type: str = ""
    person_name: str = ""
    amount_paid: MoneyStr = "0.00"
    amount_received: MoneyStr = "0.00"
    document: Optional[str] = None


class AdditionalTransactions(RecordModel):
    has_more: YesNo = ""
    person_type: str = ""
    person_name: str = ""
    amount_paid: MoneyStr = "0.00"
    amount_received: MoneyStr = "0.00"
    payment_reason: str = ""


class TransactionsRecord(RecordModel):
    has_transactions: YesNo = ""
    first_transaction: FirstTransaction = Field(default_factory=FirstTransaction)
    additional_transactions: AdditionalTransactions = Field(
        default_factory=AdditionalTransactions
    )


# =============================================================================
# DERIVED SUMMARIES
# =============================================================================

class SummaryTotals(RecordModel):
    """
    Net income summary shown beside every page.

    Derived from the page records; never persisted as authoritative.
    """
    model_config = ConfigDict(frozen=True)

    total_revenue: str = "0.00"
    total_costs: str = "0.00"
    total_expenses: str = "0.00"
    net_income: str = "0.00"


class BalanceSummary(RecordModel):
    """Closing balance totals."""
    model_config = ConfigDict(frozen=True)

    total_assets: str = "0.00"
    total_liabilities: str = "0.00"
    equity: str = "0.00"
