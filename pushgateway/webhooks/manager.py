# -*- coding: utf-8 -*-
"""Location: ./pushgateway/webhooks/manager.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Push Gateway Contributors

Webhook manager.
Module that loads webhook plugin configuration into the registry and runs
plugins off the event loop.

Every plugin is dispatched through its own single-thread lane, so calls
queued behind a busy plugin never hold a worker another plugin needs. A
semaphore caps how many scripts run at once across all lanes.
"""

# Standard
import asyncio
from concurrent.futures import ThreadPoolExecutor
import logging
from pathlib import Path
import threading
from typing import Any, Iterable, Optional

# Third-Party
from pydantic import ValidationError
import yaml

# First-Party
from pushgateway.webhooks.executor import WebhookExecutor
from pushgateway.webhooks.loader.config import ConfigLoader
from pushgateway.webhooks.models import ExecutionResult, RequestContext, WebhookConfig
from pushgateway.webhooks.registry import PluginDescriptor, WebhookRegistry

logger = logging.getLogger(__name__)


class WebhookManager:
    """Webhook manager for the webhook plugin lifecycle.

    Examples:
        >>> manager = WebhookManager(webhooks=[{"name": "ping", "script": "return 204"}, {"file": "nameless.lua"}])
        >>> manager.initialize()
        >>> manager.plugin_count
        1
        >>> manager.resolve("ping").inline
        True
        >>> manager.shutdown()
    """

    def __init__(
        self,
        config: str = "",
        webhooks: Optional[Iterable[dict[str, Any]]] = None,
        webhook_root: Optional[Path | str] = None,
        max_workers: int = 8,
        executor: Optional[WebhookExecutor] = None,
    ):
        """Initialize the webhook manager.

        Args:
            config: webhook configuration file path.
            webhooks: configuration records, registered after those of ``config``.
            webhook_root: directory relative script paths resolve against.
            max_workers: how many scripts may run at the same time.
            executor: the plugin executor.
        """
        self._config_path = config
        self._records: list[dict[str, Any]] = list(webhooks or [])
        self._webhook_root = Path(webhook_root) if webhook_root else None
        self._registry = WebhookRegistry()
        self._executor = executor or WebhookExecutor()
        self._lanes: dict[PluginDescriptor, ThreadPoolExecutor] = {}
        self._lanes_lock = threading.Lock()
        self._slots = threading.BoundedSemaphore(max_workers)
        self._initialized = False

    @property
    def registry(self) -> WebhookRegistry:
        """The plugin registry.

        Returns:
            The registry.
        """
        return self._registry

    @property
    def plugin_count(self) -> int:
        """Number of plugins registered.

        Returns:
            The number of plugins registered.
        """
        return self._registry.plugin_count

    @property
    def initialized(self) -> bool:
        """Webhook manager initialized.

        Returns:
            True if the manager is initialized.
        """
        return self._initialized

    def _load_records(self) -> list[dict[str, Any]]:
        """Collect raw records from the config file and the constructor.

        Returns:
            The records in registration order.
        """
        records: list[dict[str, Any]] = []
        if self._config_path:
            try:
                records.extend(ConfigLoader.load_config(self._config_path).webhooks)
            except FileNotFoundError:
                logger.warning(f"Webhook config {self._config_path} not found, no webhooks loaded from it")
            except (OSError, yaml.YAMLError, ValidationError, TypeError) as e:
                logger.error(f"Webhook config {self._config_path} could not be loaded: {e}")
        records.extend(self._records)
        return records

    def _resolve_source(self, config: WebhookConfig) -> tuple[str, bool]:
        """Work out the script source of a record.

        Args:
            config: the validated record.

        Returns:
            The source (path or inline code) and whether it is inline.
        """
        if config.script is not None:
            return config.script, True
        if not config.file:
            return "", False
        path = Path(config.file)
        if not path.is_absolute() and self._webhook_root is not None:
            path = self._webhook_root / path
        return str(path), False

    def initialize(self) -> None:
        """Register every valid configuration record.

        Invalid records are logged and skipped. Scripts are not read here,
        so a broken plugin never prevents startup.
        """
        if self._initialized:
            return

        for index, record in enumerate(self._load_records()):
            try:
                config = WebhookConfig.model_validate(record)
            except ValidationError as e:
                logger.error(f"Skipping invalid webhook record #{index}: {e.errors(include_url=False)}")
                continue
            source, inline = self._resolve_source(config)
            self._registry.register(config.name, source, config.env, inline=inline)

        self._initialized = True
        logger.info(f"Webhook manager initialized with {self.plugin_count} plugins")

    def resolve(self, name: str) -> PluginDescriptor:
        """Find a registered plugin.

        Args:
            name: the plugin name.

        Returns:
            The descriptor.
        """
        return self._registry.resolve(name)

    def execute(self, descriptor: PluginDescriptor, request_context: RequestContext) -> ExecutionResult:
        """Run a plugin on the calling thread.

        Args:
            descriptor: the plugin.
            request_context: the request.

        Returns:
            The execution result.
        """
        return self._executor.execute(descriptor, request_context)

    def _lane(self, descriptor: PluginDescriptor) -> ThreadPoolExecutor:
        """Get the single-thread executor that runs a plugin.

        Args:
            descriptor: the plugin.

        Returns:
            The plugin's lane, created on first use.
        """
        with self._lanes_lock:
            lane = self._lanes.get(descriptor)
            if lane is None:
                lane = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"webhook-{descriptor.name}")
                self._lanes[descriptor] = lane
            return lane

    def _run_in_slot(self, descriptor: PluginDescriptor, request_context: RequestContext) -> ExecutionResult:
        """Run a plugin once a script slot is free."""
        with self._slots:
            return self._executor.execute(descriptor, request_context)

    async def invoke(self, descriptor: PluginDescriptor, request_context: RequestContext) -> ExecutionResult:
        """Run a plugin on its lane.

        Args:
            descriptor: the plugin.
            request_context: the request.

        Returns:
            The execution result.
        """
        if not self._initialized:
            self.initialize()
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._lane(descriptor), self._run_in_slot, descriptor, request_context)

    def shutdown(self) -> None:
        """Stop every plugin lane and forget every plugin."""
        with self._lanes_lock:
            lanes = list(self._lanes.values())
            self._lanes.clear()
        for lane in lanes:
            lane.shutdown(wait=True)
        self._registry.clear()
        self._initialized = False
        logger.info("Webhook manager shut down")
