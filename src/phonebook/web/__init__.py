"""HTTP API."""

from phonebook.web.server import WebServer

__all__ = ["WebServer"]
