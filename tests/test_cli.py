import sys

import pytest
import yaml
from loguru import logger

from phonebook.cli.commands import build_parser, cli


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "store": {"backend": "sqlite", "db_path": str(tmp_path / "phonebook.db")},
                "logging": {"file": ""},
            }
        ),
        encoding="utf-8",
    )
    yield path
    logger.remove()
    logger.add(sys.stderr)


def test_add_then_list(config_file, capsys):
    cli(["--config", str(config_file), "add", "Ada Lovelace", "09-1234567"])
    out = capsys.readouterr().out
    assert "added Ada Lovelace number 09-1234567 to phonebook" in out

    cli(["--config", str(config_file), "list"])
    out = capsys.readouterr().out
    assert "Ada Lovelace" in out
    assert "09-1234567" in out


def test_add_invalid_exits_with_error(config_file, capsys):
    with pytest.raises(SystemExit) as exc:
        cli(["--config", str(config_file), "add", "Al", "12345678"])
    assert exc.value.code == 1
    assert "shorter than the minimum allowed length" in capsys.readouterr().out


def test_add_duplicate_exits_with_error(config_file, capsys):
    cli(["--config", str(config_file), "add", "Ada Lovelace", "09-1234567"])
    with pytest.raises(SystemExit) as exc:
        cli(["--config", str(config_file), "add", "ada lovelace", "12345678"])
    assert exc.value.code == 1
    assert "name must be unique" in capsys.readouterr().out


def test_parser_serve_options():
    args = build_parser().parse_args(["serve", "--port", "4000"])
    assert args.command == "serve"
    assert args.port == 4000
    assert args.host is None
