"""Tests for the currency formatter."""

from decimal import Decimal

import pytest

from tax_intake.formatting import (
    check_amount,
    format_on_blur,
    normalize,
    sanitize,
    to_decimal,
    to_monetary_string,
    unformat,
)
from tax_intake.models.issues import AmountIssueType


class TestSanitize:
    """Keystroke cleaning."""

    def test_keeps_first_dot_and_merges_the_rest(self):
        """Digits after extra dots join the fractional part."""
        assert sanitize("12.34.56") == "12.3456"

    def test_strips_symbols_and_separators(self):
        assert sanitize("$1,200") == "1200"
        assert sanitize("abc") == ""

    def test_keeps_trailing_dot_while_typing(self):
        assert sanitize("12.") == "12."

    def test_empty_input(self):
        assert sanitize("") == ""
        assert sanitize(None) == ""

    def test_minus_dropped_by_default(self):
        assert sanitize("-50") == "50"

    def test_minus_kept_when_allowed(self):
        assert sanitize("-1,500.5", allow_negative=True) == "-1500.5"

    def test_minus_in_the_middle_is_not_a_sign(self):
        assert sanitize("15-00", allow_negative=True) == "1500"


class TestFormatOnBlur:
    """Display formatting."""

    @pytest.mark.parametrize("raw, expected", [
        ("1234.5", "1,234.50"),
        ("1,234.50", "1,234.50"),
        ("0.005", "0.01"),
        ("1000000", "1,000,000.00"),
        ("12.", "12.00"),
    ])
    def test_formats_two_decimals_with_separators(self, raw, expected):
        assert format_on_blur(raw) == expected

    def test_more_digits_than_default_precision(self):
        digits = "9" * 30
        assert format_on_blur(digits + ".999") == f"{int(digits) + 1:,}.00"

    def test_unparseable_becomes_zero(self):
        """Empty and garbage input degrade to 0.00."""
        assert format_on_blur("") == "0.00"
        assert format_on_blur("abc") == "0.00"
        assert format_on_blur(None) == "0.00"

    def test_non_finite_becomes_zero(self):
        assert format_on_blur("NaN") == "0.00"
        assert format_on_blur("Infinity") == "0.00"

    def test_negative_zero_renders_as_zero(self):
        assert format_on_blur("-0.001") == "0.00"

    @pytest.mark.parametrize("raw", ["12.34.56", "$1,200", "abc", "", "0.999", "1234567.891"])
    def test_idempotent_after_sanitize(self, raw):
        """Formatting an already formatted value changes nothing."""
        once = format_on_blur(sanitize(raw))
        assert format_on_blur(once) == once

    @pytest.mark.parametrize("raw", ["0", "7", "1234.56", "99999.99", "0.10"])
    def test_unformat_recovers_the_number(self, raw):
        assert Decimal(unformat(format_on_blur(raw))) == Decimal(raw)


class TestNormalize:
    """Canonical stored form."""

    def test_two_decimals_without_separators(self):
        assert normalize("1,234.5") == "1234.50"
        assert normalize(100) == "100.00"
        assert normalize(None) == "0.00"

    def test_negative_only_when_allowed(self):
        assert normalize("-20") == "20.00"
        assert normalize("-20", allow_negative=True) == "-20.00"


class TestDecimalHelpers:
    """Lenient parsing for summary math."""

    def test_to_decimal_reads_partial_input(self):
        assert to_decimal("12.") == Decimal("12")
        assert to_decimal("1,000.25") == Decimal("1000.25")

    def test_to_decimal_falls_back_to_zero(self):
        assert to_decimal("-") == Decimal("0")
        assert to_decimal("abc") == Decimal("0")
        assert to_decimal(None) == Decimal("0")

    def test_to_monetary_string(self):
        assert to_monetary_string(Decimal("0.1") + Decimal("0.2")) == "0.30"
        assert to_monetary_string(Decimal("-5")) == "-5.00"


class TestCheckAmount:
    """Validation messages shown before the 0.00 fallback."""

    def test_valid_amount_has_no_issue(self):
        assert check_amount("1234.56") is None

    def test_empty_or_partial_input_has_no_issue(self):
        assert check_amount("") is None
        assert check_amount("-") is None
        assert check_amount(".") is None

    def test_unparseable(self):
        issue = check_amount("12abc", field="services")
        assert issue.issue_type == AmountIssueType.UNPARSEABLE
        assert issue.field == "services"
        assert issue.kind == "ValidationError"

    def test_negative_rejected_by_default(self):
        issue = check_amount("-10")
        assert issue.issue_type == AmountIssueType.NEGATIVE

    def test_negative_allowed(self):
        assert check_amount("-10", allow_negative=True) is None

    def test_too_large(self):
        issue = check_amount("1001", max_amount=1000)
        assert issue.issue_type == AmountIssueType.TOO_LARGE
        assert "1,000.00" in issue.message
