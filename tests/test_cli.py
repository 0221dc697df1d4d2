"""CLI tests against an on-disk application (no server process)."""

import json
from argparse import Namespace
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from main import build_parser, cmd_list, cmd_serve, cmd_show


def test_parser_show_defaults():
    args = build_parser().parse_args(["show", "Shop"])

    assert args.command == "show"
    assert args.name == "Shop"
    assert args.version == "1"
    assert args.service is None
    assert args.json is False


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_list_command_json(app_file: Path, capsys):
    rc = cmd_list(Namespace(app=app_file, json=True))

    assert rc == 0
    assert json.loads(capsys.readouterr().out) == [{"name": "Shop", "versions": ["1", "2"]}]


def test_list_command_text(app_file: Path, capsys):
    rc = cmd_list(Namespace(app=app_file, json=False))

    assert rc == 0
    assert "Shop: v1, v2" in capsys.readouterr().out


def test_list_command_bad_application(tmp_path: Path, capsys):
    rc = cmd_list(Namespace(app=tmp_path / "absent.yaml", json=False))

    assert rc == 2
    assert "Application file not found" in capsys.readouterr().err


def test_show_command_prints_api(app_file: Path, capsys):
    rc = cmd_show(Namespace(app=app_file, name="Shop", version="1", service=None, json=False))

    out = capsys.readouterr().out
    assert rc == 0
    assert "Shop v1: 2 services" in out
    assert "order  /order[/:order_id]" in out
    assert "[entity] PATCH" in out
    assert "field sku (required): Product SKU" in out
    assert "ping  /ping" in out


def test_show_command_single_service_json(app_file: Path, capsys):
    rc = cmd_show(Namespace(app=app_file, name="Shop", version="1", service="order", json=True))

    data = json.loads(capsys.readouterr().out)
    assert rc == 0
    assert data["name"] == "order"
    assert data["description"] == "Orders placed by customers."
    assert [op["http_method"] for op in data["entity_operations"]] == ["GET", "PATCH", "DELETE"]


def test_show_command_missing_service(app_file: Path, capsys):
    rc = cmd_show(Namespace(app=app_file, name="Shop", version="2", service="ping", json=False))

    assert rc == 1
    assert "Service 'ping' not found in Shop v2" in capsys.readouterr().err


@patch("main.subprocess.Popen")
def test_serve_command_runs_uvicorn(mock_popen, app_file: Path):
    proc = MagicMock()
    proc.returncode = 0
    mock_popen.return_value = proc

    rc = cmd_serve(Namespace(host="127.0.0.1", port=8123, reload=True, app=app_file))

    assert rc == 0
    cmd = mock_popen.call_args.args[0]
    assert cmd[1:4] == ["-m", "uvicorn", "api.app:app"]
    assert "--reload" in cmd
    assert "8123" in cmd
    assert mock_popen.call_args.kwargs["env"]["APP_CONFIG_PATH"] == str(app_file.resolve())
