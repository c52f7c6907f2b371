"""Configuration loading."""

from phonebook.config.manager import ConfigManager

__all__ = ["ConfigManager"]
