# -*- coding: utf-8 -*-
"""Location: ./pushgateway/webhooks/registry.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Push Gateway Contributors

Webhook plugin registry.
Module that stores webhook plugin descriptors and resolves request path
segments to them.
"""

# Standard
import logging
from pathlib import Path
import threading
from types import MappingProxyType
from typing import Any, Mapping, Optional, TYPE_CHECKING

# First-Party
from pushgateway.webhooks.errors import PluginLoadError, WebhookNotFoundError

if TYPE_CHECKING:
    # First-Party
    from pushgateway.webhooks.runtime import CompiledScript

logger = logging.getLogger(__name__)


class PluginDescriptor:
    """A registered webhook plugin.

    Everything but ``compiled_state`` is fixed at registration. The
    compiled state is filled in on first successful compile and never
    cleared. ``lock`` serializes every use of that compiled state.

    Examples:
        >>> desc = PluginDescriptor("inline", "return 201", {"x": 1}, inline=True)
        >>> desc.load_source()
        'return 201'
        >>> desc.env["x"]
        1
        >>> desc.compiled_state is None
        True
    """

    def __init__(self, name: str, script_source: str, env: Optional[Mapping[str, Any]] = None, inline: bool = False):
        """Initialize a descriptor.

        Args:
            name: the plugin name.
            script_source: a file path, or the Lua source itself when ``inline``.
            env: static env values for the plugin.
            inline: whether ``script_source`` is source code.
        """
        self.name = name
        self.script_source = script_source
        self.inline = inline
        self.env: Mapping[str, Any] = MappingProxyType(dict(env or {}))
        self.compiled_state: Optional["CompiledScript"] = None
        self.lock = threading.Lock()

    def load_source(self) -> str:
        """Return the plugin's Lua source.

        Returns:
            The script source.

        Raises:
            PluginLoadError: if no file is configured or it cannot be read.
        """
        if self.inline:
            return self.script_source
        if not self.script_source:
            raise PluginLoadError(f"Webhook {self.name} has no script file configured")
        try:
            return Path(self.script_source).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PluginLoadError(f"Webhook {self.name} script {self.script_source!r} cannot be read: {e}") from e

    def __repr__(self) -> str:
        """Describe the descriptor without its env values.

        Returns:
            A short representation.
        """
        source = "<inline>" if self.inline else repr(self.script_source)
        return f"PluginDescriptor(name={self.name!r}, source={source}, compiled={self.compiled_state is not None})"


class WebhookRegistry:
    """Registry for webhook plugins.

    Examples:
        >>> registry = WebhookRegistry()
        >>> _ = registry.register("github", "/etc/webhooks/a.lua")
        >>> _ = registry.register("github", "/etc/webhooks/b.lua", {"x": "1"})
        >>> registry.resolve("github").script_source
        '/etc/webhooks/b.lua'
        >>> registry.plugin_count
        1
        >>> registry.resolve("GitHub")
        Traceback (most recent call last):
        ...
        pushgateway.webhooks.errors.WebhookNotFoundError: Webhook 'GitHub' not found
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._plugins: dict[str, PluginDescriptor] = {}
        self._lock = threading.Lock()

    def register(self, name: str, script_source: str, env: Optional[Mapping[str, Any]] = None, inline: bool = False) -> PluginDescriptor:
        """Register a plugin, replacing any earlier one with the same name.

        Args:
            name: the plugin name.
            script_source: a file path, or the Lua source when ``inline``.
            env: static env values.
            inline: whether ``script_source`` is source code.

        Returns:
            The new descriptor.
        """
        descriptor = PluginDescriptor(name, script_source, env, inline=inline)
        with self._lock:
            replaced = name in self._plugins
            self._plugins[name] = descriptor
        if replaced:
            logger.info(f"Replaced webhook plugin: {name}")
        else:
            logger.info(f"Registered webhook plugin: {name}")
        return descriptor

    def unregister(self, name: str) -> None:
        """Remove a plugin if present.

        Args:
            name: the plugin name.
        """
        with self._lock:
            removed = self._plugins.pop(name, None)
        if removed:
            logger.info(f"Unregistered webhook plugin: {name}")

    def resolve(self, name: str) -> PluginDescriptor:
        """Find a plugin by exact, case-sensitive name.

        Args:
            name: the request path segment.

        Returns:
            The descriptor.

        Raises:
            WebhookNotFoundError: if no plugin has that name.
        """
        descriptor = self._plugins.get(name)
        if descriptor is None:
            raise WebhookNotFoundError(name)
        return descriptor

    def get_all_plugins(self) -> list[PluginDescriptor]:
        """Get all registered plugins.

        Returns:
            A list of descriptors.
        """
        return list(self._plugins.values())

    @property
    def plugin_count(self) -> int:
        """Return the number of plugins registered.

        Returns:
            The number of plugins registered.
        """
        return len(self._plugins)

    def clear(self) -> None:
        """Remove every plugin."""
        with self._lock:
            self._plugins.clear()
