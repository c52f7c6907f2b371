from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Contact:
    id: str
    name: str
    number: str
