from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# Limits count code points after str.strip(), which trims Python's whitespace set.
MAX_USER_LENGTH = 50
MAX_MESSAGE_LENGTH = 500

INVALID_TYPE = "INVALID_TYPE"
REQUIRED = "REQUIRED"
TOO_LONG = "TOO_LONG"

# Order matters: "&" goes first so later entities are not escaped twice.
HTML_REPLACEMENTS = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#39;"),
)


class ValidationError(Exception):
    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


@dataclass(frozen=True)
class SanitizedEntry:
    user: str
    message: str


def escape_html(value: str) -> str:
    for char, entity in HTML_REPLACEMENTS:
        value = value.replace(char, entity)
    return value


def validate_entry(payload: Any) -> SanitizedEntry:
    """Check a raw ``{user, message}`` payload and return it trimmed and escaped.

    Checks run in a fixed order and the first failure wins: both fields must
    be strings, both must be non-empty after trimming, and each must fit its
    length limit. Lengths are measured before escaping.
    """
    # Arrays and scalars carry no fields, so they fail the type check below.
    if not isinstance(payload, dict):
        payload = {}
    user = payload.get("user")
    message = payload.get("message")

    if not isinstance(user, str) or not isinstance(message, str):
        raise ValidationError(INVALID_TYPE, 'Fields "user" and "message" must be strings.')

    user = user.strip()
    message = message.strip()

    if not user or not message:
        raise ValidationError(REQUIRED, 'Both "user" and "message" are required.')

    if len(user) > MAX_USER_LENGTH:
        raise ValidationError(TOO_LONG, f"User is limited to {MAX_USER_LENGTH} characters.")

    if len(message) > MAX_MESSAGE_LENGTH:
        raise ValidationError(TOO_LONG, f"Message is limited to {MAX_MESSAGE_LENGTH} characters.")

    return SanitizedEntry(user=escape_html(user), message=escape_html(message))
