# -*- coding: utf-8 -*-
"""Location: ./tests/unit/pushgateway/test_config.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Push Gateway Contributors

Test the configuration module.
"""

# Standard
from pathlib import Path

# Third-Party
from pydantic import ValidationError
import pytest

# First-Party
from pushgateway.config import get_settings, Settings


def test_defaults():
    s = Settings(_env_file=None)
    assert (s.host, s.port) == ("127.0.0.1", 8080)
    assert s.webhooks_enabled
    assert s.user_signature_header == "X-User-Signature"
    assert s.device_signature_header == "X-Device-Signature"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PLUGIN_PATH", "/srv/plugins")
    monkeypatch.setenv("WEBHOOK_MAX_WORKERS", "2")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    s = Settings(_env_file=None)
    assert s.webhook_root == Path("/srv/plugins/webhook")
    assert s.webhook_max_workers == 2
    assert s.log_level == "DEBUG"


def test_env_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("PORT=9090\nLOG_FORMAT=JSON\n", encoding="utf-8")
    s = Settings(_env_file=str(env_file))
    assert (s.port, s.log_format) == (9090, "json")


@pytest.mark.parametrize("field,value", [("log_level", "chatty"), ("log_format", "xml"), ("port", 0), ("webhook_max_workers", 0)])
def test_invalid_values(field, value):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **{field: value})


def test_secret_is_masked():
    assert "my-test-salt" not in repr(Settings(_env_file=None))


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
