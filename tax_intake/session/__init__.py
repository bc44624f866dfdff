"""Session package: access gate, session manager and their errors."""

from tax_intake.session.access import (
    ACCESS_PARAM,
    decode_access_token,
    encode_access_token,
    resolve_access_email,
)
from tax_intake.session.errors import AccessError, SessionError, SessionErrorKind
from tax_intake.session.manager import SessionManager

__all__ = [
    "ACCESS_PARAM",
    "AccessError",
    "SessionError",
    "SessionErrorKind",
    "SessionManager",
    "decode_access_token",
    "encode_access_token",
    "resolve_access_email",
]
