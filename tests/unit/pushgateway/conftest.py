# -*- coding: utf-8 -*-
"""Location: ./tests/unit/pushgateway/conftest.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Push Gateway Contributors

Shared fixtures for the gateway unit tests.
"""

# Standard
from pathlib import Path
from typing import Callable

# Third-Party
from cryptography.hazmat.primitives.asymmetric import ed25519
import pytest

# First-Party
from pushgateway.config import Settings
from pushgateway.services.account_service import InMemoryAccountService

_GITHUB_SCRIPT = """
local req=ctx:request()
req:token()
req:body()
req:header("")
req:header("host")
req:header("user-agent")
req:header("content-length")
assert(string.len(req:url()) > 0, "url error")
assert(req:query("xyz") == nil, "query error")
assert(req:query("abc") == "123", "query error")
assert(ctx:env("z") == nil, "env error")
return 201,ctx:env("x")
"""


@pytest.fixture
def github_script() -> str:
    """Script exercising every request accessor, returning 201 and env x."""
    return _GITHUB_SCRIPT


@pytest.fixture
def plugin_dir(tmp_path: Path) -> Path:
    """A plugin directory with an empty ``webhook`` folder."""
    (tmp_path / "webhook").mkdir()
    return tmp_path


@pytest.fixture
def write_script(plugin_dir: Path) -> Callable[[str, str], Path]:
    """Write a Lua script under ``<plugin_dir>/webhook``."""

    def _write(name: str, source: str) -> Path:
        path = plugin_dir / "webhook" / name
        path.write_text(source, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def test_settings(plugin_dir: Path) -> Settings:
    """Settings with cheap Argon2 parameters and no config file."""
    return Settings(
        _env_file=None,
        plugin_path=str(plugin_dir),
        webhook_config_file=str(plugin_dir / "webhooks.yaml"),
        webhook_max_workers=4,
        argon2id_time_cost=1,
        argon2id_memory_cost=8,
        argon2id_parallelism=1,
    )


@pytest.fixture
def account_service() -> InMemoryAccountService:
    """An in-memory account store with cheap sealing."""
    return InMemoryAccountService(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture
def user_key() -> ed25519.Ed25519PrivateKey:
    """A user signing key."""
    return ed25519.Ed25519PrivateKey.generate()


@pytest.fixture
def device_key() -> ed25519.Ed25519PrivateKey:
    """A device signing key."""
    return ed25519.Ed25519PrivateKey.generate()
