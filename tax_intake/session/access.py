"""
Access gate for the landing page.

Visitors arrive with a link carrying ``?user=<base64 email>``. Without a
decodable email there is no session and no form: the landing page shows
a blocking access-denied view instead.
"""

import base64
import binascii
import re
from collections.abc import Mapping
from typing import Union
from urllib.parse import parse_qs, urlsplit

from tax_intake.session.errors import AccessError


ACCESS_PARAM = "user"

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

QueryParams = Union[str, Mapping]


def _query_value(query: QueryParams) -> str:
    if isinstance(query, Mapping):
        value = query.get(ACCESS_PARAM)
        # parse_qs-style mappings hold lists
        if isinstance(value, (list, tuple)):
            value = value[0] if value else None
        return (value or "").strip()

    text = query or ""
    if "://" in text or text.startswith(("/", "#")):
        parts = urlsplit(text)
        # Hash-routed apps carry the query after the fragment marker
        text = parts.query or parts.fragment.partition("?")[2]
    values = parse_qs(text.lstrip("?")).get(ACCESS_PARAM, [])
    return values[0].strip() if values else ""


def _b64decode(token: str) -> bytes:
    padded = token + "=" * (-len(token) % 4)
    try:
        if "-" in token or "_" in token:
            return base64.urlsafe_b64decode(padded)
        return base64.b64decode(padded, validate=True)
    except (binascii.Error, ValueError):
        raise AccessError("access token is not valid base64")


def decode_access_token(token: str) -> str:
    """
    Decode a base64-encoded email.

    Raises:
        AccessError: If the token is empty, not base64, or not an email
    """
    token = (token or "").strip()
    if not token:
        raise AccessError("missing access token")

    # "+" becomes " " when a token is passed through a query string unquoted
    token = token.replace(" ", "+")

    try:
        email = _b64decode(token).decode("utf-8").strip()
    except UnicodeDecodeError:
        raise AccessError("access token does not contain text")

    if not _EMAIL_PATTERN.match(email):
        raise AccessError("access token does not contain an email address")
    return email.lower()


def resolve_access_email(query: QueryParams) -> str:
    """
    Extract and decode the access email from a query.

    Accepts a raw query string ("user=..."), a full URL, or a mapping of
    query parameters.

    Raises:
        AccessError: If the user parameter is missing or invalid
    """
    return decode_access_token(_query_value(query))


def encode_access_token(email: str) -> str:
    """Build the token for an email (used when generating invite links)."""
    return base64.b64encode(email.strip().encode("utf-8")).decode("ascii")
