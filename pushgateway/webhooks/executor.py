# -*- coding: utf-8 -*-
"""Location: ./pushgateway/webhooks/executor.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Push Gateway Contributors

Webhook plugin executor.
Compiles a plugin's script on first use, runs it against one request with a
fresh ``ctx`` bridge and turns its return values into an ``ExecutionResult``.

Each plugin gets its own Lua runtime. Calls against the same plugin are
serialized by the descriptor lock; calls against different plugins do not
contend with each other.
"""

# Standard
import logging
from typing import Any, Callable, Sequence

# First-Party
from pushgateway.webhooks.bridge import ContextBridge
from pushgateway.webhooks.models import DEFAULT_CONTENT_TYPE, DEFAULT_STATUS_CODE, ExecutionResult, RequestContext
from pushgateway.webhooks.registry import PluginDescriptor
from pushgateway.webhooks.runtime import CompiledScript, LuaScriptRuntime

logger = logging.getLogger(__name__)

CONTEXT_GLOBAL = "ctx"
MIN_STATUS_CODE = 100
MAX_STATUS_CODE = 599


def coerce_status(value: Any) -> int:
    """Interpret the first return value of a script as an HTTP status.

    Args:
        value: the returned value.

    Returns:
        The status code, or 200 for non-numeric or out of range values.

    Examples:
        >>> coerce_status(201), coerce_status(404.0)
        (201, 404)
        >>> coerce_status("201"), coerce_status(True), coerce_status(42), coerce_status(None)
        (200, 200, 200, 200)
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_STATUS_CODE
    try:
        status = int(value)
    except (OverflowError, ValueError):
        return DEFAULT_STATUS_CODE
    if MIN_STATUS_CODE <= status <= MAX_STATUS_CODE:
        return status
    return DEFAULT_STATUS_CODE


def coerce_text(value: Any, default: str = "") -> str:
    """Interpret a returned value as text, the way Lua converts numbers.

    Args:
        value: the returned value.
        default: result for values that are neither strings nor numbers.

    Returns:
        The text.

    Examples:
        >>> coerce_text("abc"), coerce_text(123), coerce_text(1.0), coerce_text(0.5)
        ('abc', '123', '1.0', '0.5')
        >>> coerce_text(None), coerce_text(False), coerce_text(b"raw")
        ('', '', 'raw')
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return f"{value:.1f}" if value.is_integer() else f"{value:.14g}"
    return default


def coerce_body(value: Any) -> str | bytes:
    """Interpret a returned value as a response body.

    Binary strings are kept as bytes.

    Args:
        value: the returned value.

    Returns:
        The body.

    Examples:
        >>> coerce_body(b"\\xff\\x00"), coerce_body(12), coerce_body({})
        (b'\\xff\\x00', '12', '')
    """
    if isinstance(value, bytes):
        return value
    return coerce_text(value)


def coerce_content_type(value: Any) -> str:
    """Interpret a returned value as a ``Content-Type`` header value.

    Args:
        value: the returned value.

    Returns:
        The content type, or the default when the value is not a string or
        cannot be sent as a header (non latin-1 or control characters).

    Examples:
        >>> coerce_content_type("application/json")
        'application/json'
        >>> coerce_content_type("text/plain\\r\\nX-Injected: 1") == DEFAULT_CONTENT_TYPE
        True
        >>> coerce_content_type("text/plain; name=\\u263a") == DEFAULT_CONTENT_TYPE
        True
    """
    if not isinstance(value, (str, bytes)):
        return DEFAULT_CONTENT_TYPE
    text = coerce_text(value)
    if not text or any(ord(char) < 0x20 or ord(char) == 0x7F for char in text):
        return DEFAULT_CONTENT_TYPE
    try:
        text.encode("latin-1")
    except UnicodeEncodeError:
        return DEFAULT_CONTENT_TYPE
    return text


def interpret_return(values: Sequence[Any]) -> ExecutionResult:
    """Map a script's return values onto an HTTP result.

    ``()`` gives the defaults, ``(S)`` a bare status, ``(S, B)`` a status
    and body, and ``(S, C, B)`` status, content type and body.

    Args:
        values: up to three returned values.

    Returns:
        The execution result.

    Examples:
        >>> interpret_return(())
        ExecutionResult(status_code=200, content_type='text/plain; charset=utf-8', body='')
        >>> interpret_return((201, "abc")).body
        'abc'
        >>> interpret_return((201, "application/json; charset=utf-8", "{}")).content_type
        'application/json; charset=utf-8'
    """
    if not values:
        return ExecutionResult()
    status_code = coerce_status(values[0])
    content_type = DEFAULT_CONTENT_TYPE
    body = ""
    if len(values) == 2:
        body = coerce_body(values[1])
    elif len(values) >= 3:
        content_type = coerce_content_type(values[1])
        body = coerce_body(values[2])
    return ExecutionResult(status_code=status_code, content_type=content_type, body=body)


class WebhookExecutor:
    """Runs webhook plugins."""

    def __init__(self, runtime_factory: Callable[[], LuaScriptRuntime] = LuaScriptRuntime):
        """Initialize the executor.

        Args:
            runtime_factory: creates the per-plugin Lua runtime.
        """
        self._runtime_factory = runtime_factory

    def _ensure_compiled(self, descriptor: PluginDescriptor) -> CompiledScript:
        """Compile the plugin's script unless a compiled form is cached.

        Callers hold ``descriptor.lock``. Failures leave nothing cached so
        the next call tries again.

        Args:
            descriptor: the plugin.

        Returns:
            The compiled script.
        """
        if descriptor.compiled_state is not None:
            return descriptor.compiled_state
        source = descriptor.load_source()
        runtime = self._runtime_factory()
        compiled = runtime.compile(source, name=descriptor.name)
        descriptor.compiled_state = compiled
        logger.info(f"Webhook plugin {descriptor.name} compiled")
        return compiled

    def compile(self, descriptor: PluginDescriptor) -> CompiledScript:
        """Compile a plugin ahead of its first request.

        Args:
            descriptor: the plugin.

        Returns:
            The compiled script.
        """
        with descriptor.lock:
            return self._ensure_compiled(descriptor)

    def execute(self, descriptor: PluginDescriptor, request_context: RequestContext) -> ExecutionResult:
        """Run a plugin against one request.

        Args:
            descriptor: the plugin.
            request_context: the request the script may inspect.

        Returns:
            The HTTP result produced by the script.

        Raises:
            PluginLoadError: if the script cannot be read.
            ScriptCompileError: if the script does not compile.
            ScriptRuntimeError: if the script raises.
        """
        with descriptor.lock:
            compiled = self._ensure_compiled(descriptor)
            bridge = ContextBridge(request_context, descriptor.env)
            try:
                values = compiled.runtime.invoke(compiled, {CONTEXT_GLOBAL: bridge})
            finally:
                bridge.detach()
        return interpret_return(values)
