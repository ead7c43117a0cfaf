# -*- coding: utf-8 -*-
"""Location: ./tests/unit/pushgateway/webhooks/test_registry.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Push Gateway Contributors

Tests for the webhook plugin registry.
"""

# Third-Party
import pytest

# First-Party
from pushgateway.webhooks.errors import PluginLoadError, WebhookNotFoundError
from pushgateway.webhooks.registry import PluginDescriptor, WebhookRegistry


def test_last_registration_wins(tmp_path):
    registry = WebhookRegistry()
    first = registry.register("github", "")
    second = registry.register("github", str(tmp_path / "github.lua"), {"x": "123"})
    registry.register("other", "other.lua")

    assert registry.resolve("github") is second
    assert registry.resolve("github") is not first
    assert registry.plugin_count == 2


def test_resolve_is_case_sensitive():
    registry = WebhookRegistry()
    registry.register("github", "github.lua")
    with pytest.raises(WebhookNotFoundError):
        registry.resolve("GitHub")


def test_not_found_is_a_lookup_error():
    with pytest.raises(LookupError):
        WebhookRegistry().resolve("missing")


def test_unregister_and_clear():
    registry = WebhookRegistry()
    registry.register("a", "a.lua")
    registry.register("b", "b.lua")

    registry.unregister("a")
    registry.unregister("never-registered")
    assert [p.name for p in registry.get_all_plugins()] == ["b"]

    registry.clear()
    assert registry.plugin_count == 0


def test_env_is_read_only():
    descriptor = PluginDescriptor("p", "p.lua", {"x": 1})
    with pytest.raises(TypeError):
        descriptor.env["x"] = 2


class TestLoadSource:
    def test_reads_file(self, tmp_path):
        path = tmp_path / "hook.lua"
        path.write_text("return 204", encoding="utf-8")
        assert PluginDescriptor("hook", str(path)).load_source() == "return 204"

    def test_empty_path(self):
        with pytest.raises(PluginLoadError):
            PluginDescriptor("hook", "").load_source()

    def test_missing_file(self, tmp_path):
        with pytest.raises(PluginLoadError):
            PluginDescriptor("hook", str(tmp_path / "x.lua")).load_source()

    def test_inline_source(self):
        assert PluginDescriptor("hook", "", inline=True).load_source() == ""

    def test_repr_hides_env(self):
        text = repr(PluginDescriptor("hook", "hook.lua", {"secret": "value"}))
        assert "hook.lua" in text
        assert "value" not in text
