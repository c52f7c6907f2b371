"""
Contact store errors.

Everything the store raises on purpose derives from ContactError; any other
exception coming out of a store call is an unanticipated failure.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
    from phonebook.contacts.validation import FieldError


class ContactError(Exception):
    """Base class for contact store errors."""


class ValidationError(ContactError):
    """One or more fields failed their length or format constraint."""

    def __init__(self, errors: List["FieldError"]):
        self.errors = list(errors)
        super().__init__("; ".join(e.message for e in self.errors) or "invalid contact")

    @property
    def fields(self) -> List[str]:
        return [e.field for e in self.errors]


class DuplicateNameError(ContactError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"name must be unique: '{name}' is already in the phonebook")


class NotFoundError(ContactError):
    def __init__(self, contact_id: str):
        self.contact_id = contact_id
        super().__init__(f"contact not found: {contact_id}")
