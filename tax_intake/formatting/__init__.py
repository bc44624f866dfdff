"""Money formatting package."""

from tax_intake.formatting.currency import (
    ZERO_AMOUNT,
    check_amount,
    format_on_blur,
    normalize,
    sanitize,
    to_decimal,
    to_monetary_string,
    unformat,
)

__all__ = [
    "ZERO_AMOUNT",
    "check_amount",
    "format_on_blur",
    "normalize",
    "sanitize",
    "to_decimal",
    "to_monetary_string",
    "unformat",
]
