"""Command line interface."""

from phonebook.cli.commands import cli

__all__ = ["cli"]
