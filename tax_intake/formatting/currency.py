"""
Currency Formatter

DESIGN DECISION: Every page parses, cleans and formats money through
this module. There is exactly one implementation of the rules:

1. While typing:  sanitize()        keeps digits and the first dot
2. On blur:       format_on_blur()  two decimals + thousands separators
3. For storage:   unformat()        separators removed again

Formatting NEVER raises. Unparseable input degrades to "0.00" so the
user is never blocked; check_amount() lets callers show a message
before that fallback happens.

Amounts are handled as Decimal, not float, so "0.10" + "0.20" sums to
exactly "0.30".
"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Optional, Union

from tax_intake.config import get_settings
from tax_intake.models.issues import AmountIssue, AmountIssueType


ZERO_AMOUNT = "0.00"
THOUSANDS_SEPARATOR = ","

_CENT = Decimal("0.01")
_DISALLOWED_CHARS = re.compile(r"[^0-9.]")

Amount = Union[str, int, float, Decimal, None]


def sanitize(raw: Optional[str], allow_negative: bool = False) -> str:
    """
    Clean raw keystroke input.

    Strips every character that is not a digit or a dot. When more than
    one dot is present the first one is kept and the digits after the
    others are appended to the fractional part:

        "12.34.56" -> "12.3456"
        "$1,200"   -> "1200"
        "12."      -> "12."     (left alone so the user can keep typing)

    With allow_negative, a leading minus sign survives.
    """
    if not raw:
        return ""

    text = str(raw)
    negative = allow_negative and text.lstrip().startswith("-")

    cleaned = _DISALLOWED_CHARS.sub("", text)
    whole, dot, fraction = cleaned.partition(".")
    if dot:
        cleaned = f"{whole}.{fraction.replace('.', '')}"

    if negative:
        return f"-{cleaned}"
    return cleaned


def unformat(display: Optional[str]) -> str:
    """Remove thousands separators, leaving a plain decimal string."""
    if not display:
        return ""
    return str(display).replace(THOUSANDS_SEPARATOR, "")


def _parse(value: Amount) -> Optional[Decimal]:
    """Parse an amount, returning None when it is not a finite number."""
    if value is None:
        return None
    if isinstance(value, Decimal):
        parsed = value
    else:
        candidate = unformat(str(value)).strip()
        if not candidate:
            return None
        try:
            parsed = Decimal(candidate)
        except InvalidOperation:
            return None

    if not parsed.is_finite():
        return None
    return parsed


def _round_cents(value: Decimal) -> Optional[Decimal]:
    with localcontext() as ctx:
        # Room for every integer digit plus the cents
        ctx.prec = max(ctx.prec, value.adjusted() + 4)
        try:
            rounded = value.quantize(_CENT, rounding=ROUND_HALF_UP)
        except InvalidOperation:
            return None
    # Avoid rendering "-0.00"
    if rounded == 0:
        return abs(rounded)
    return rounded


def format_on_blur(raw: Amount) -> str:
    """
    Format a value for display once the user leaves the field.

        "1234.5"    -> "1,234.50"
        "1,234.50"  -> "1,234.50"
        ""          -> "0.00"
        "abc"       -> "0.00"

    Never raises.
    """
    parsed = _parse(raw)
    if parsed is None:
        return ZERO_AMOUNT

    rounded = _round_cents(parsed)
    if rounded is None:
        return ZERO_AMOUNT
    return f"{rounded:,.2f}"


def normalize(raw: Amount, allow_negative: bool = False) -> str:
    """
    Canonical stored form of an amount: two decimals, no separators.

    This is what gets persisted; the display form is only for the view.
    """
    text = raw if isinstance(raw, str) else ("" if raw is None else str(raw))
    return unformat(format_on_blur(sanitize(text, allow_negative=allow_negative)))


def to_decimal(value: Amount) -> Decimal:
    """
    Lenient parse used for summary math.

    Half-typed values ("12.", "-") count as what they read as so far;
    anything unparseable counts as zero.
    """
    parsed = _parse(value)
    if parsed is None:
        return Decimal("0")
    return parsed


def to_monetary_string(value: Decimal) -> str:
    """Render a computed Decimal in canonical stored form."""
    rounded = _round_cents(value)
    if rounded is None:
        return ZERO_AMOUNT
    return f"{rounded:.2f}"


def check_amount(
    raw: Amount,
    allow_negative: bool = False,
    max_amount: Optional[float] = None,
    field: Optional[str] = None,
) -> Optional[AmountIssue]:
    """
    Report a problem with a monetary input, if there is one.

    Empty input is not an issue (it formats to "0.00"). Returns None
    when the value is acceptable for a field with this sign policy.
    """
    text = "" if raw is None else str(raw)
    # Nothing typed yet, or only a sign or dot so far
    if unformat(text).strip() in ("", "-", ".", "-."):
        return None

    parsed = _parse(text)
    if parsed is None:
        return AmountIssue(
            field=field,
            issue_type=AmountIssueType.UNPARSEABLE,
            message=f"'{text}' is not a valid amount and will be saved as {ZERO_AMOUNT}",
            raw_value=text,
        )

    if parsed < 0 and not allow_negative:
        return AmountIssue(
            field=field,
            issue_type=AmountIssueType.NEGATIVE,
            message="Amount cannot be negative",
            raw_value=text,
        )

    if max_amount is None:
        max_amount = get_settings().app.max_amount

    if abs(parsed) > Decimal(str(max_amount)):
        return AmountIssue(
            field=field,
            issue_type=AmountIssueType.TOO_LARGE,
            message=f"Amount exceeds the maximum of {format_on_blur(max_amount)}",
            raw_value=text,
        )

    return None
