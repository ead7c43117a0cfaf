# -*- coding: utf-8 -*-
"""Location: ./tests/unit/pushgateway/test_cli.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Push Gateway Contributors

Tests for the ``pushgateway`` console script.
"""

# Standard
import json
import sys

# Third-Party
import pytest

# First-Party
from pushgateway import __version__, cli


def run_cli(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["pushgateway", *args])
    cli.main()


def test_version(monkeypatch, capsys):
    run_cli(monkeypatch, "--version")
    assert capsys.readouterr().out.strip() == f"pushgateway {__version__}"


def test_defaults_are_injected(monkeypatch):
    captured = {}
    monkeypatch.setattr(cli.uvicorn, "main", lambda: captured.setdefault("argv", list(sys.argv)))
    run_cli(monkeypatch, "--reload")
    assert captured["argv"] == ["pushgateway", cli.DEFAULT_APP, "--reload", "--host", cli.DEFAULT_HOST, "--port", str(cli.DEFAULT_PORT)]


def test_explicit_app_and_port(monkeypatch):
    assert cli._insert_defaults(["other:app", "--port", "9000"]) == ["other:app", "--port", "9000", "--host", cli.DEFAULT_HOST]


def test_validate_config(monkeypatch, capsys, tmp_path):
    good = tmp_path / "good.env"
    good.write_text("PORT=9000\n", encoding="utf-8")
    run_cli(monkeypatch, "--validate-config", str(good))
    assert "is valid" in capsys.readouterr().out

    bad = tmp_path / "bad.env"
    bad.write_text("PORT=not-a-port\n", encoding="utf-8")
    with pytest.raises(SystemExit) as exc_info:
        run_cli(monkeypatch, "--validate-config", str(bad))
    assert exc_info.value.code == 1


def test_validate_webhooks(monkeypatch, capsys, tmp_path):
    good = tmp_path / "webhooks.yaml"
    good.write_text("webhooks:\n  - name: github\n    file: github.lua\n", encoding="utf-8")
    run_cli(monkeypatch, "--validate-webhooks", str(good))
    assert "1 webhook record(s)" in capsys.readouterr().out

    bad = tmp_path / "bad.yaml"
    bad.write_text("webhooks:\n  - file: nameless.lua\n", encoding="utf-8")
    with pytest.raises(SystemExit):
        run_cli(monkeypatch, "--validate-webhooks", str(bad))

    with pytest.raises(SystemExit):
        run_cli(monkeypatch, "--validate-webhooks", str(tmp_path / "absent.yaml"))


def test_config_schema(monkeypatch, tmp_path):
    output = tmp_path / "schema.json"
    run_cli(monkeypatch, "--config-schema", str(output))
    assert "webhook_max_workers" in json.loads(output.read_text(encoding="utf-8"))["properties"]
