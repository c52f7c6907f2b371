"""
Request/response schemas for the contacts API (Pydantic).
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

from phonebook.contacts.models import Contact


class ContactIn(BaseModel):
    """Body of POST/PUT /api/contacts. Presence is checked by the route."""

    model_config = ConfigDict(strict=True)

    name: Optional[str] = None
    number: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return bool(self.name) and bool(self.number)


class ContactOut(BaseModel):
    id: str
    name: str
    number: str

    @classmethod
    def from_contact(cls, contact: Contact) -> "ContactOut":
        return cls(id=contact.id, name=contact.name, number=contact.number)


class ErrorBody(BaseModel):
    error: str
