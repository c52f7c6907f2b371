"""
Phonebook - a small contacts REST service.

A validated, persistent contact store behind a FastAPI JSON API.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
