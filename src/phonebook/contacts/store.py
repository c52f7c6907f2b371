from __future__ import annotations

import asyncio
import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from loguru import logger

from phonebook.contacts.errors import DuplicateNameError, NotFoundError
from phonebook.contacts.models import Contact
from phonebook.contacts.validation import ensure_valid, name_key


def new_contact_id() -> str:
    return uuid.uuid4().hex


class ContactStore(ABC):
    """
    Contact collection with write-time validation.

    Stores are constructed explicitly and handed to whoever needs them;
    `initialize()` must be awaited before use and `shutdown()` when done.
    Names are unique case-insensitively; the check and the write happen as
    one atomic step in every backend.
    """

    async def initialize(self) -> None:
        return None

    async def shutdown(self) -> None:
        return None

    @abstractmethod
    async def list_all(self) -> List[Contact]:
        """All contacts in insertion order."""

    @abstractmethod
    async def get_by_id(self, contact_id: str) -> Optional[Contact]:
        """The contact with that id, or None."""

    @abstractmethod
    async def create(self, name: str, number: str) -> Contact:
        """
        Validate and persist a new contact.

        Raises:
            ValidationError: a field fails its length or format check
            DuplicateNameError: the name is already taken
        """

    @abstractmethod
    async def update_by_id(self, contact_id: str, name: str, number: str) -> Contact:
        """
        Replace name and number of an existing contact, keeping its id.

        Raises:
            ValidationError, DuplicateNameError, NotFoundError
        """

    @abstractmethod
    async def delete_by_id(self, contact_id: str) -> bool:
        """Remove the contact. Returns False when nothing was removed."""

    @abstractmethod
    async def count(self) -> int:
        ...


class MemoryContactStore(ContactStore):
    """Process-local store. Nothing survives a restart."""

    def __init__(self) -> None:
        self._contacts: Dict[str, Contact] = {}
        self._lock = asyncio.Lock()

    async def list_all(self) -> List[Contact]:
        return list(self._contacts.values())

    async def get_by_id(self, contact_id: str) -> Optional[Contact]:
        return self._contacts.get(str(contact_id))

    async def create(self, name: str, number: str) -> Contact:
        name, number = ensure_valid(name, number)
        async with self._lock:
            if self._find_by_name(name) is not None:
                raise DuplicateNameError(name)
            contact = Contact(id=new_contact_id(), name=name, number=number)
            self._contacts[contact.id] = contact
        logger.debug(f"Created contact {contact.id} ({contact.name})")
        return contact

    async def update_by_id(self, contact_id: str, name: str, number: str) -> Contact:
        name, number = ensure_valid(name, number)
        contact_id = str(contact_id)
        async with self._lock:
            if contact_id not in self._contacts:
                raise NotFoundError(contact_id)
            clash = self._find_by_name(name)
            if clash is not None and clash.id != contact_id:
                raise DuplicateNameError(name)
            contact = Contact(id=contact_id, name=name, number=number)
            self._contacts[contact_id] = contact
        logger.debug(f"Updated contact {contact_id}")
        return contact

    async def delete_by_id(self, contact_id: str) -> bool:
        async with self._lock:
            removed = self._contacts.pop(str(contact_id), None)
        return removed is not None

    async def count(self) -> int:
        return len(self._contacts)

    def _find_by_name(self, name: str) -> Optional[Contact]:
        key = name_key(name)
        for c in self._contacts.values():
            if name_key(c.name) == key:
                return c
        return None


def store_from_config(cfg: Optional[Dict[str, Any]] = None) -> ContactStore:
    """
    Build a contact store from the `store` config section.

    Supported backends: "sqlite" (default) and "memory".
    """
    cfg = dict(cfg or {})
    backend = str(cfg.get("backend") or "sqlite").strip().lower()

    if backend == "memory":
        return MemoryContactStore()
    if backend == "sqlite":
        from phonebook.contacts.sqlite_store import SqliteContactStore

        return SqliteContactStore(cfg.get("db_path") or "data/phonebook.db")
    raise ValueError(f"Unknown store backend: {backend}")
