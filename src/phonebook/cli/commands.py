"""
Phonebook command line.

    phonebook serve [--host HOST] [--port PORT]
    phonebook list
    phonebook add NAME NUMBER
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from phonebook import __version__
from phonebook.config.manager import ConfigManager
from phonebook.contacts.errors import DuplicateNameError, ValidationError
from phonebook.contacts.store import store_from_config

console = Console()


def setup_logging(level: str = "INFO", log_file: Optional[str] = "logs/phonebook.log"):
    """Configure logging."""
    # Remove default handler
    logger.remove()

    # Console handler
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        level=level,
        colorize=True,
    )

    # File handler
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            level="DEBUG",
            rotation="10 MB",
            retention="7 days",
            compression="zip",
        )


async def load_config(args: argparse.Namespace) -> ConfigManager:
    config = ConfigManager(args.config)
    await config.load()
    if args.debug:
        config.set("app.debug", True)
    return config


async def run_web_server(config: ConfigManager, host: Optional[str] = None, port: Optional[int] = None):
    """Run the web server against the configured store."""
    from phonebook.web.server import WebServer

    server = WebServer(
        store=store_from_config(config.section("store")),
        host=host or config.get("server.host", "127.0.0.1"),
        port=int(port or config.get("server.port", 3001)),
        cors_origins=config.get("server.cors_origins"),
        static_dir=config.get("server.static_dir"),
    )
    await server.start()


async def list_contacts(config: ConfigManager) -> int:
    store = store_from_config(config.section("store"))
    await store.initialize()
    try:
        contacts = await store.list_all()
    finally:
        await store.shutdown()

    table = Table(title="phonebook")
    table.add_column("name", style="cyan")
    table.add_column("number")
    table.add_column("id", style="dim")
    for c in contacts:
        table.add_row(escape(c.name), c.number, c.id)
    console.print(table)
    return 0


async def add_contact(config: ConfigManager, name: str, number: str) -> int:
    store = store_from_config(config.section("store"))
    await store.initialize()
    try:
        contact = await store.create(name, number)
    except (ValidationError, DuplicateNameError) as e:
        console.print(f"[red]error:[/red] {escape(str(e))}")
        return 1
    finally:
        await store.shutdown()

    console.print(escape(f"added {contact.name} number {contact.number} to phonebook"))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="phonebook",
        description="Phonebook - contacts REST service",
    )
    parser.add_argument(
        "--config",
        type=str,
        default="config.yaml",
        help="Path to configuration file"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"Phonebook {__version__}"
    )

    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", type=str, default=None, help="Host for web server")
    serve.add_argument("--port", type=int, default=None, help="Port for web server (default: 3001)")

    sub.add_parser("list", help="Print all contacts")

    add = sub.add_parser("add", help="Add a contact")
    add.add_argument("name")
    add.add_argument("number")

    return parser


async def main(args: argparse.Namespace) -> int:
    config = await load_config(args)
    debug = bool(config.get("app.debug"))
    setup_logging(
        level="DEBUG" if debug else config.get("logging.level", "INFO"),
        log_file=config.get("logging.file"),
    )

    if args.command == "add":
        return await add_contact(config, args.name, args.number)
    if args.command == "list":
        return await list_contacts(config)

    await run_web_server(config, getattr(args, "host", None), getattr(args, "port", None))
    return 0


def cli(argv: Optional[List[str]] = None):
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        code = asyncio.run(main(args))
    except KeyboardInterrupt:
        logger.info("Shutdown requested")
        code = 0
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        code = 1

    if code:
        sys.exit(code)
