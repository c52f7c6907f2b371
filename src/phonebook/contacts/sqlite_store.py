"""
SqliteContactStore - durable contact collection on a local SQLite file.

Uniqueness of names is enforced by a UNIQUE index on the normalized name
key, so an insert or rename that collides fails as a whole.
"""

from __future__ import annotations

import asyncio
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from loguru import logger

from phonebook.contacts.errors import DuplicateNameError, NotFoundError
from phonebook.contacts.models import Contact
from phonebook.contacts.store import ContactStore, new_contact_id
from phonebook.contacts.validation import ensure_valid, name_key


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _row_to_contact(row: sqlite3.Row) -> Contact:
    return Contact(id=row["id"], name=row["name"], number=row["number"])


class SqliteContactStore(ContactStore):
    def __init__(self, db_path: str = "data/phonebook.db"):
        self._db_path = Path(db_path)
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = asyncio.Lock()

    @property
    def db_path(self) -> Path:
        return self._db_path

    async def initialize(self) -> None:
        if self._conn is not None:
            return

        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        self._conn.row_factory = sqlite3.Row

        await self._create_tables()
        logger.info(f"Contact store initialized at {self._db_path}")

    async def shutdown(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.info("Contact store closed")

    async def _create_tables(self) -> None:
        conn = self._require_conn()
        async with self._lock:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS contacts (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    name_key TEXT NOT NULL,
                    number TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )
            cur.execute(
                "CREATE UNIQUE INDEX IF NOT EXISTS idx_contacts_name_key ON contacts(name_key)"
            )
            conn.commit()

    def _require_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("contact store is not initialized")
        return self._conn

    async def list_all(self) -> List[Contact]:
        conn = self._require_conn()
        async with self._lock:
            rows = conn.execute(
                "SELECT id, name, number FROM contacts ORDER BY created_at, rowid"
            ).fetchall()
        return [_row_to_contact(r) for r in rows]

    async def get_by_id(self, contact_id: str) -> Optional[Contact]:
        conn = self._require_conn()
        async with self._lock:
            row = conn.execute(
                "SELECT id, name, number FROM contacts WHERE id = ?", (str(contact_id),)
            ).fetchone()
        return _row_to_contact(row) if row else None

    async def create(self, name: str, number: str) -> Contact:
        name, number = ensure_valid(name, number)
        conn = self._require_conn()
        contact = Contact(id=new_contact_id(), name=name, number=number)
        now = _utc_now_iso()

        async with self._lock:
            try:
                with conn:
                    conn.execute(
                        """
                        INSERT INTO contacts (id, name, name_key, number, created_at, updated_at)
                        VALUES (?, ?, ?, ?, ?, ?)
                        """,
                        (contact.id, contact.name, name_key(name), contact.number, now, now),
                    )
            except sqlite3.IntegrityError as e:
                raise DuplicateNameError(name) from e

        logger.debug(f"Created contact {contact.id} ({contact.name})")
        return contact

    async def update_by_id(self, contact_id: str, name: str, number: str) -> Contact:
        name, number = ensure_valid(name, number)
        conn = self._require_conn()
        contact_id = str(contact_id)

        async with self._lock:
            try:
                with conn:
                    cur = conn.execute(
                        """
                        UPDATE contacts
                        SET name = ?, name_key = ?, number = ?, updated_at = ?
                        WHERE id = ?
                        """,
                        (name, name_key(name), number, _utc_now_iso(), contact_id),
                    )
            except sqlite3.IntegrityError as e:
                raise DuplicateNameError(name) from e

        if cur.rowcount == 0:
            raise NotFoundError(contact_id)

        logger.debug(f"Updated contact {contact_id}")
        return Contact(id=contact_id, name=name, number=number)

    async def delete_by_id(self, contact_id: str) -> bool:
        conn = self._require_conn()
        async with self._lock:
            with conn:
                cur = conn.execute("DELETE FROM contacts WHERE id = ?", (str(contact_id),))
        removed = cur.rowcount > 0
        if removed:
            logger.debug(f"Deleted contact {contact_id}")
        return removed

    async def count(self) -> int:
        conn = self._require_conn()
        async with self._lock:
            row = conn.execute("SELECT COUNT(*) AS n FROM contacts").fetchone()
        return int(row["n"])
