"""Contact model, validation and stores."""

from phonebook.contacts.errors import (
    ContactError,
    DuplicateNameError,
    NotFoundError,
    ValidationError,
)
from phonebook.contacts.models import Contact
from phonebook.contacts.store import ContactStore, MemoryContactStore, store_from_config

__all__ = [
    "Contact",
    "ContactError",
    "ContactStore",
    "DuplicateNameError",
    "MemoryContactStore",
    "NotFoundError",
    "ValidationError",
    "store_from_config",
]
