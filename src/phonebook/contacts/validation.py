"""
Field validation for contacts.

`validate_contact` reports problems as values; `ensure_valid` is the
raising form used by the stores at write time.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from phonebook.contacts.errors import ValidationError

NAME_MIN_LENGTH = 3
NUMBER_MIN_LENGTH = 8

# "09-1234567", "040-22334455" or a plain digit run; ASCII digits only
NUMBER_PATTERN = re.compile(r"^(\d{2,3}-)?\d+$", re.ASCII)


@dataclass(frozen=True)
class FieldError:
    field: str
    value: str
    message: str


def normalize_name(value: Optional[str]) -> str:
    return str(value or "").strip()


def name_key(value: Optional[str]) -> str:
    """Key used for name uniqueness: trimmed and case-insensitive."""
    return normalize_name(value).casefold()


def _check_length(field: str, value: str, minimum: int) -> Optional[FieldError]:
    if not value:
        return FieldError(field, value, f"{field} is required")
    if len(value) < minimum:
        return FieldError(
            field,
            value,
            f"{field} '{value}' is shorter than the minimum allowed length ({minimum})",
        )
    return None


def validate_contact(name: Optional[str], number: Optional[str]) -> List[FieldError]:
    n = normalize_name(name)
    num = str(number or "").strip()

    errors: List[FieldError] = []
    name_err = _check_length("name", n, NAME_MIN_LENGTH)
    if name_err:
        errors.append(name_err)

    number_err = _check_length("number", num, NUMBER_MIN_LENGTH)
    if number_err:
        errors.append(number_err)
    elif not NUMBER_PATTERN.match(num):
        errors.append(FieldError("number", num, f"{num} is not a valid phone number"))
    return errors


def ensure_valid(name: Optional[str], number: Optional[str]) -> Tuple[str, str]:
    """Return the cleaned (name, number) pair or raise ValidationError."""
    errors = validate_contact(name, number)
    if errors:
        raise ValidationError(errors)
    return normalize_name(name), str(number or "").strip()
