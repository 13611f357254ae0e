# 📄 File: user_directory/shared/utils/validators.py
# 🧭 Purpose (Layman Explanation):
# Small checks that tell us whether an identifier or a phone number looks right.
# 🧪 Purpose (Technical Summary):
# Format validators for record identifiers (UUID strings) and phone numbers,
# returning ValidationResult objects instead of raising.
# 🔗 Dependencies:
# re, uuid
# 🔄 Connected Modules / Calls From:
# Record codec (identifier policy), directory service (opportunistic phone check)

import re
import uuid
from typing import List

# International format: leading plus, at least five digits
PHONE_PATTERN = re.compile(r'^\+\d{5,}$')


class ValidationResult:
    """Outcome of a format check, with collected error messages."""

    def __init__(self, is_valid: bool = True, errors: List[str] = None):
        self.is_valid = is_valid
        self.errors = errors or []

    def add_error(self, error: str):
        self.errors.append(error)
        self.is_valid = False

    def __bool__(self) -> bool:
        return self.is_valid


def validate_uuid(uuid_string: str) -> ValidationResult:
    """
    Validate UUID format.

    Args:
        uuid_string: UUID string to validate

    Returns:
        ValidationResult: Validation result
    """
    result = ValidationResult(True)

    if not uuid_string or not isinstance(uuid_string, str):
        result.add_error("UUID is required")
        return result

    try:
        uuid.UUID(uuid_string)
    except ValueError:
        result.add_error(f"invalid UUID format: {uuid_string}")

    return result


def validate_phone_number(phone: str) -> ValidationResult:
    """
    Validate phone number format against ``^\\+\\d{5,}$``.

    Args:
        phone: Phone number to validate

    Returns:
        ValidationResult: Validation result
    """
    result = ValidationResult(True)

    if not phone or not isinstance(phone, str):
        result.add_error("Phone number is required")
        return result

    if not PHONE_PATTERN.match(phone):
        result.add_error("Invalid phone number format")

    return result
