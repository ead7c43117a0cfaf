# -*- coding: utf-8 -*-
"""Location: ./pushgateway/webhooks/bridge.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Push Gateway Contributors

Request context bridge.
Projects a ``RequestContext`` and a plugin's static env into the ``ctx``
object a webhook script receives. The surface is fixed:

    ctx:request()          -> request object
        req:token()        -> bearer token or nil
        req:body()         -> raw body
        req:header(name)   -> header value or nil (case-insensitive)
        req:url()          -> path plus query string
        req:query(name)    -> first value of a query parameter or nil
    ctx:env(name)          -> plugin env value or nil

A bridge is only valid during the invocation it was built for. Once
detached every accessor raises ``DetachedContextError``.

Examples:
    >>> from pushgateway.webhooks.models import RequestContext
    >>> bridge = ContextBridge(RequestContext.build("/hook?abc=123"), {"x": "123"})
    >>> bridge.request().query("abc"), bridge.env("x"), bridge.env("z")
    ('123', '123', None)
    >>> bridge.detach()
    >>> bridge.env("x")
    Traceback (most recent call last):
    ...
    pushgateway.webhooks.errors.DetachedContextError: context is not attached to a live request
"""

# Standard
import functools
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, TypeVar

# First-Party
from pushgateway.webhooks.errors import DetachedContextError
from pushgateway.webhooks.models import RequestContext

F = TypeVar("F", bound=Callable[..., Any])


def lua_method(func: F) -> F:
    """Accept both ``obj:method(...)`` and ``obj.method(...)`` calls from Lua.

    Lua's colon syntax passes the receiver as the first argument; it is
    dropped before the wrapped method runs.

    Args:
        func: the method to wrap.

    Returns:
        The wrapped method.
    """

    @functools.wraps(func)
    def wrapper(self, *args):  # type: ignore[no-untyped-def]
        if args and args[0] is self:
            args = args[1:]
        return func(self, *args)

    return wrapper  # type: ignore[return-value]


class ContextBridge:
    """The ``ctx`` global of a webhook script."""

    __lua_exports__ = frozenset({"request", "env"})

    def __init__(self, context: RequestContext, env: Mapping[str, Any]):
        """Bind the bridge to one request and one plugin env.

        Args:
            context: the live request context.
            env: the invoking plugin's env mapping.
        """
        self._context: Optional[RequestContext] = context
        self._env: Mapping[str, Any] = MappingProxyType(dict(env))

    @property
    def attached(self) -> bool:
        """Whether the bridge still refers to a live request.

        Returns:
            True until ``detach`` is called.
        """
        return self._context is not None

    def detach(self) -> None:
        """Drop the request context; later accessor calls fail."""
        self._context = None

    def live_context(self) -> RequestContext:
        """Return the bound request context.

        Returns:
            The request context.

        Raises:
            DetachedContextError: if the bridge has been detached.
        """
        if self._context is None:
            raise DetachedContextError("context is not attached to a live request")
        return self._context

    @lua_method
    def request(self) -> "RequestBridge":
        """Request accessor object.

        Returns:
            A request bridge sharing this bridge's lifetime.
        """
        self.live_context()
        return RequestBridge(self)

    @lua_method
    def env(self, name: Any = None) -> Any:
        """Look up a plugin env value.

        Args:
            name: the env key.

        Returns:
            The configured value or None.
        """
        self.live_context()
        if not isinstance(name, str):
            return None
        return self._env.get(name)


class RequestBridge:
    """The object returned by ``ctx:request()``."""

    __lua_exports__ = frozenset({"token", "body", "header", "url", "query"})

    def __init__(self, parent: ContextBridge):
        """Create a request accessor.

        Args:
            parent: the context bridge it belongs to.
        """
        self._parent = parent

    @lua_method
    def token(self) -> Optional[str]:
        """Bearer token of the request.

        Returns:
            The token or None.
        """
        return self._parent.live_context().bearer_token

    @lua_method
    def body(self) -> bytes:
        """Raw request body.

        Returns:
            The body bytes, empty when none was sent.
        """
        return self._parent.live_context().raw_body

    @lua_method
    def header(self, name: Any = None) -> Optional[str]:
        """Case-insensitive header lookup.

        Args:
            name: the header name.

        Returns:
            The header value, or None for absent or empty names.
        """
        context = self._parent.live_context()
        if not isinstance(name, str) or not name:
            return None
        return context.headers.get(name.lower())

    @lua_method
    def url(self) -> str:
        """Path plus query string as received.

        Returns:
            The request URL.
        """
        return self._parent.live_context().url

    @lua_method
    def query(self, name: Any = None) -> Optional[str]:
        """First value of a query parameter.

        Args:
            name: the parameter name.

        Returns:
            The value or None.
        """
        context = self._parent.live_context()
        if not isinstance(name, str):
            return None
        return context.query_params.get(name)
