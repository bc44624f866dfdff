"""
Validation issue models.

Issues are reported, never raised: a bad amount in one field must not
stop the user from filling out the rest of the page.
"""

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class AmountIssueType(str, Enum):
    """Why a monetary input was flagged."""
    UNPARSEABLE = "unparseable"
    NEGATIVE = "negative"
    TOO_LARGE = "too_large"


class AmountIssue(BaseModel):
    """
    A problem found in a monetary input.

    The formatter still falls back to "0.00" for unparseable input;
    this model only carries the message shown before that happens.
    """
    model_config = ConfigDict(frozen=True)

    kind: Literal["ValidationError"] = "ValidationError"
    field: Optional[str] = Field(
        default=None,
        description="Field the issue belongs to, when known"
    )
    issue_type: AmountIssueType
    message: str = Field(..., max_length=300)
    raw_value: str = Field(
        default="",
        description="The input that was flagged"
    )
