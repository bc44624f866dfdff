"""
Tests for Tax Intake

Test strategy:
1. Unit tests for individual components (models, formatter, stores)
2. Integration tests for flows (with an in-memory remote store)
3. No real network calls in tests (use fakes and mocks)
"""

import pytest
from datetime import datetime, timezone
from uuid import uuid4

from pydantic import ValidationError

from tax_intake.models import (
    DEFAULT_EXPENSE_CATEGORIES,
    BalanceRecord,
    CostsRecord,
    ExpensesRecord,
    IncomeRecord,
    LineItem,
    PartnersRecord,
    Session,
    SummaryTotals,
    TaxQuestionsRecord,
    TransactionsRecord,
    is_money_field,
)
from tax_intake.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


class TestPageRecords:
    """Tests for the page record models."""

    def test_income_defaults(self):
        """Every amount starts at 0.00."""
        income = IncomeRecord()
        assert income.services == "0.00"
        assert income.other_items == []

    def test_serializes_with_camel_case_keys(self):
        """Records use the key names the remote store holds."""
        record = IncomeRecord(other_description="Royalties").to_record()
        assert record["otherDescription"] == "Royalties"
        assert "otherItems" in record

    def test_accepts_camel_case_input(self):
        costs = CostsRecord.model_validate({
            "inventory": {"initialValue": "10.00", "finalValue": "2.00"},
        })
        assert costs.inventory.initial_value == "10.00"
        assert costs.inventory.final_value == "2.00"

    def test_numeric_amounts_from_older_records(self):
        """Numbers are coerced to two-decimal strings."""
        income = IncomeRecord.model_validate({"services": 1500, "products": 2.5})
        assert income.services == "1500.00"
        assert income.products == "2.50"

    def test_boolean_amount_rejected(self):
        with pytest.raises(ValidationError):
            IncomeRecord.model_validate({"services": True})

    def test_unknown_keys_ignored(self):
        income = IncomeRecord.model_validate({"services": "1.00", "legacyField": 3})
        assert income.services == "1.00"

    def test_expenses_seeded_with_default_categories(self):
        expenses = ExpensesRecord()
        assert [i.description for i in expenses.items] == list(DEFAULT_EXPENSE_CATEGORIES)
        assert [i.id for i in expenses.items] == list(range(1, 9))

    def test_duplicate_item_ids_rejected(self):
        with pytest.raises(ValidationError, match="Duplicate item id"):
            ExpensesRecord(items=[
                LineItem(id=1, description="A"),
                LineItem(id=1, description="B"),
            ])

    def test_item_id_must_be_positive(self):
        with pytest.raises(ValidationError):
            LineItem(id=0)

    def test_partner_list_round_trips_through_aliases(self):
        record = PartnersRecord.model_validate({
            "partners": [{"id": 1, "name": "Ana", "postalCode": "33101", "amountContributed": 500}],
        })
        dumped = record.to_record()
        assert dumped["partners"][0]["postalCode"] == "33101"
        assert dumped["partners"][0]["amountContributed"] == "500.00"

    def test_tax_answers_start_unanswered(self):
        questions = TaxQuestionsRecord()
        assert questions.state_tax.paid is None
        assert questions.form_1099.contracted is None

    def test_transactions_yes_no_choices(self):
        assert TransactionsRecord(has_transactions="yes").has_transactions == "yes"
        with pytest.raises(ValidationError):
            TransactionsRecord(has_transactions="maybe")

    def test_is_money_field(self):
        assert is_money_field(IncomeRecord, "services")
        assert not is_money_field(IncomeRecord, "other_description")
        assert not is_money_field(IncomeRecord, "missing")

    def test_balance_nested_sections(self):
        record = BalanceRecord().to_record()
        assert set(record) == {"assets", "liabilities"}
        assert record["assets"]["bankBalance"] == "0.00"

    def test_summary_totals_are_frozen(self):
        summary = SummaryTotals(total_revenue="1.00")
        with pytest.raises(ValidationError):
            summary.total_revenue = "2.00"


class TestSessionModel:
    """Tests for the session record."""

    def test_parses_stored_record(self):
        session = Session.model_validate({
            "sessionId": "abc",
            "email": "Owner@Example.com",
            "lastActive": "2024-01-01T00:00:00+00:00",
        })
        assert session.session_id == "abc"
        assert session.email == "owner@example.com"
        assert session.last_active == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_to_record_uses_stored_keys(self):
        record = Session(session_id="abc", email="a@b.co").to_record()
        assert set(record) == {"sessionId", "email", "lastActive"}

    def test_touched_only_changes_last_active(self):
        session = Session(
            session_id="abc",
            email="a@b.co",
            last_active=datetime(2020, 1, 1, tzinfo=timezone.utc),
        )
        touched = session.touched()
        assert touched.session_id == session.session_id
        assert touched.email == session.email
        assert touched.last_active > session.last_active

    def test_empty_session_id_rejected(self):
        with pytest.raises(ValidationError):
            Session(session_id="", email="a@b.co")


class TestAuditModels:
    """Tests for audit event models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.SESSION_CREATED,
            description="Test event",
        )
        assert event.event_type == AuditEventType.SESSION_CREATED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        correlation_id = uuid4()
        event = AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            correlation_id=correlation_id,
            description="Test",
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "save_failed"
        assert log_dict["severity"] == "error"
        assert log_dict["correlation_id"] == str(correlation_id)

    def test_builder_session_created(self):
        event = AuditEventBuilder.session_created("s-1", "a@b.co")
        assert event.event_type == AuditEventType.SESSION_CREATED
        assert event.session_id == "s-1"

    def test_builder_access_denied_is_warning(self):
        event = AuditEventBuilder.access_denied("missing access token")
        assert event.severity == AuditSeverity.WARNING
        assert event.error_message == "missing access token"
        assert event.is_user_action is True

    def test_builder_save_failed(self):
        event = AuditEventBuilder.save_failed(3, "SaveFailed: boom", session_id="s-1")
        assert event.severity == AuditSeverity.ERROR
        assert event.details == {"revision": 3}

    def test_builder_truncates_long_errors(self):
        event = AuditEventBuilder.page_rejected("income", "x" * 5000)
        assert len(event.error_message) == 1000
        assert event.page == "income"

    def test_long_page_name_fits_the_event(self):
        event = AuditEventBuilder.page_rejected("p" * 2000, "unknown page")
        assert event.page == "p" * 2000
        assert len(event.description) <= 500
