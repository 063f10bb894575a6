"""Per-field validation rules.

Each rule maps a raw field value to an optional error message. Rules are
pure: they read nothing but their argument, so a result can always be
re-derived from the latest committed value.
"""

import re
from typing import Optional

from ..models.form import CUSTOMER_EMAIL, REASON, TRANSACTION_ID


EMAIL_PATTERN = re.compile(
    r"^(?:[a-zA-Z0-9_'^&+{}=!-]+(?:\.[a-zA-Z0-9_'^&+{}=!-]+)*"
    r'|"(?:[^"\\]|\\.)+")'
    r"@(?:[a-zA-Z0-9-]+\.)+[a-zA-Z]{2,}$"
)

TRANSACTION_ID_REQUIRED = "Transaction ID is required."
EMAIL_REQUIRED = "Customer email is required."
EMAIL_INVALID = "Enter a valid email address."
REASON_REQUIRED = "Choose a reason for the dispute."


def is_valid_email(value: str) -> bool:
    """Return True if the trimmed value is a well-formed email address."""
    trimmed = value.strip()
    return bool(trimmed) and EMAIL_PATTERN.match(trimmed) is not None


def validate_field(field: str, raw_value: str) -> Optional[str]:
    """
    Validate a single field value.

    Args:
        field: Field name
        raw_value: Value as typed, untrimmed

    Returns:
        Error message, or None when the value is acceptable
    """
    trimmed = (raw_value or "").strip()

    if field == TRANSACTION_ID:
        if not trimmed:
            return TRANSACTION_ID_REQUIRED
    elif field == CUSTOMER_EMAIL:
        if not trimmed:
            return EMAIL_REQUIRED
        if not EMAIL_PATTERN.match(trimmed):
            return EMAIL_INVALID
    elif field == REASON:
        if not trimmed:
            return REASON_REQUIRED

    return None
