# -*- coding: utf-8 -*-
"""Location: ./pushgateway/webhooks/errors.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Push Gateway Contributors

Webhook engine errors.

Examples:
    >>> issubclass(WebhookNotFoundError, LookupError)
    True
    >>> issubclass(ScriptCompileError, WebhookExecutionError)
    True
    >>> issubclass(DetachedContextError, ScriptRuntimeError)
    True
"""


class WebhookError(Exception):
    """Base class for webhook engine errors."""


class WebhookNotFoundError(WebhookError, LookupError):
    """No webhook plugin is registered under the requested name.

    Examples:
        >>> str(WebhookNotFoundError("github"))
        "Webhook 'github' not found"
    """

    def __init__(self, name: str):
        """Initialize the error.

        Args:
            name: the unknown plugin name.
        """
        self.name = name
        super().__init__(f"Webhook '{name}' not found")


class WebhookExecutionError(WebhookError):
    """A webhook plugin could not serve the request."""


class PluginLoadError(WebhookExecutionError):
    """The plugin's script source could not be read."""


class ScriptCompileError(PluginLoadError):
    """The plugin's script source does not compile."""


class ScriptRuntimeError(WebhookExecutionError):
    """The plugin's script raised while running."""


class DetachedContextError(ScriptRuntimeError):
    """A context bridge was used outside of the invocation it was built for."""
