"""
Format checks for insurance identifiers entered by hand or read off a card.
"""

import re
from typing import Optional

from models import ValidationOutcome

MAX_IDENTIFIER_LENGTH = 50
MIN_MEMBER_ID_LENGTH = 3
IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z0-9\s\-]+$")


def validate_member_id(member_id: Optional[str]) -> ValidationOutcome:
    if not member_id or not isinstance(member_id, str) or not member_id.strip():
        return ValidationOutcome(valid=False, error="Member ID is required")

    trimmed = member_id.strip()
    if len(trimmed) < MIN_MEMBER_ID_LENGTH:
        return ValidationOutcome(valid=False, error=f"Member ID must be at least {MIN_MEMBER_ID_LENGTH} characters")
    if len(trimmed) > MAX_IDENTIFIER_LENGTH:
        return ValidationOutcome(valid=False, error=f"Member ID must be less than {MAX_IDENTIFIER_LENGTH} characters")
    if not IDENTIFIER_PATTERN.match(trimmed):
        return ValidationOutcome(valid=False, error="Member ID contains invalid characters")

    return ValidationOutcome(valid=True)


def validate_group_number(group_number: Optional[str]) -> ValidationOutcome:
    """Group number is optional; only a present value is checked."""
    if group_number is None or group_number == "":
        return ValidationOutcome(valid=True)
    if not isinstance(group_number, str):
        return ValidationOutcome(valid=False, error="Group number must be a string")

    trimmed = group_number.strip()
    if len(trimmed) > MAX_IDENTIFIER_LENGTH:
        return ValidationOutcome(valid=False, error=f"Group number must be less than {MAX_IDENTIFIER_LENGTH} characters")
    if trimmed and not IDENTIFIER_PATTERN.match(trimmed):
        return ValidationOutcome(valid=False, error="Group number contains invalid characters")

    return ValidationOutcome(valid=True)
