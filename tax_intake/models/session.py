"""
Session model.

A session ties the intake progress to an email address. It lives in the
local session store and is reused on every later visit until the user
explicitly starts over.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Session(BaseModel):
    """
    The locally persisted session record.

    Serialized with the camelCase keys the remote store and earlier
    clients use: {"sessionId", "email", "lastActive"}.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    session_id: str = Field(
        ...,
        alias="sessionId",
        min_length=1,
        description="Opaque identifier issued by the remote store"
    )
    email: str = Field(
        ...,
        min_length=3,
        max_length=320,
        description="Email the session was created for"
    )
    last_active: datetime = Field(
        default_factory=utc_now,
        alias="lastActive",
        description="Last time progress was saved (UTC)"
    )

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()

    def touched(self) -> "Session":
        """Copy of this session with last_active set to now."""
        return self.model_copy(update={"last_active": utc_now()})

    def to_record(self) -> dict:
        """Serialize for the local session store."""
        return self.model_dump(mode="json", by_alias=True)
