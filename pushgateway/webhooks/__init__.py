# -*- coding: utf-8 -*-
"""Location: ./pushgateway/webhooks/__init__.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Push Gateway Contributors

Webhook plugin engine.
Exposes the components that bind ``/v1/webhook/{name}`` requests to
sandboxed Lua scripts:
- Registry
- Executor
- Manager
- Models
- Errors
"""

# First-Party
from pushgateway.webhooks.bridge import ContextBridge, RequestBridge
from pushgateway.webhooks.errors import (
    DetachedContextError,
    PluginLoadError,
    ScriptCompileError,
    ScriptRuntimeError,
    WebhookError,
    WebhookExecutionError,
    WebhookNotFoundError,
)
from pushgateway.webhooks.executor import interpret_return, WebhookExecutor
from pushgateway.webhooks.loader.config import ConfigLoader
from pushgateway.webhooks.manager import WebhookManager
from pushgateway.webhooks.models import ExecutionResult, RequestContext, WebhookConfig, WebhooksConfig
from pushgateway.webhooks.registry import PluginDescriptor, WebhookRegistry
from pushgateway.webhooks.runtime import CompiledScript, LuaScriptRuntime

__all__ = [
    "CompiledScript",
    "ConfigLoader",
    "ContextBridge",
    "DetachedContextError",
    "ExecutionResult",
    "interpret_return",
    "LuaScriptRuntime",
    "PluginDescriptor",
    "PluginLoadError",
    "RequestBridge",
    "RequestContext",
    "ScriptCompileError",
    "ScriptRuntimeError",
    "WebhookConfig",
    "WebhookError",
    "WebhookExecutionError",
    "WebhookExecutor",
    "WebhookManager",
    "WebhookNotFoundError",
    "WebhookRegistry",
    "WebhooksConfig",
]
