"""
Phonebook - contacts REST service

Main entry point. Equivalent to the installed `phonebook` command.
"""

import sys
from pathlib import Path

# Allow running from a checkout without installing.
sys.path.insert(0, str(Path(__file__).resolve().parent / "src"))

from phonebook.cli.commands import cli  # noqa: E402


if __name__ == "__main__":
    cli()
