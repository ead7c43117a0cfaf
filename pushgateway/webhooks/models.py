# -*- coding: utf-8 -*-
"""Location: ./pushgateway/webhooks/models.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Push Gateway Contributors

Pydantic models for webhook plugins.
This module implements the configuration records, the per-invocation
request context and the execution result of the webhook engine.
"""

# Standard
from typing import Any, Iterable, Optional, Union
from urllib.parse import parse_qsl

# Third-Party
from pydantic import BaseModel, ConfigDict, Field, field_validator, StrictBool, StrictFloat, StrictInt, StrictStr

DEFAULT_STATUS_CODE = 200
DEFAULT_CONTENT_TYPE = "text/plain; charset=utf-8"

EnvValue = Union[StrictBool, StrictInt, StrictFloat, StrictStr]


class WebhookConfig(BaseModel):
    """A single webhook plugin configuration record.

    Attributes:
        name: the plugin name, used as the ``/v1/webhook/{name}`` path segment.
        file: path to the Lua source. Empty or unreadable paths fail at invocation time.
        script: inline Lua source, used instead of ``file`` when set.
        env: static scalar values exposed to the script through ``ctx:env(name)``.

    Examples:
        >>> cfg = WebhookConfig(name="github", file="github.lua", env={"x": "123", "y": 456})
        >>> cfg.env["y"]
        456
        >>> WebhookConfig(name="empty").file
        ''
        >>> from pydantic import ValidationError
        >>> try:
        ...     WebhookConfig(name="bad", env={"x": [1]})
        ... except ValidationError:
        ...     print("rejected")
        rejected
    """

    name: str = Field(..., min_length=1)
    file: str = ""
    script: Optional[str] = None
    env: dict[str, EnvValue] = Field(default_factory=dict)

    @field_validator("file", mode="before")
    @classmethod
    def _none_file_is_empty(cls, value: Any) -> Any:
        """Treat a null ``file`` entry as an empty path.

        Args:
            value: raw file value.

        Returns:
            The value, or an empty string for None.
        """
        return "" if value is None else value

    @field_validator("env", mode="before")
    @classmethod
    def _none_env_is_empty(cls, value: Any) -> Any:
        """Treat a null ``env`` entry as an empty mapping.

        Args:
            value: raw env value.

        Returns:
            The value, or an empty dict for None.
        """
        return {} if value is None else value


class WebhooksConfig(BaseModel):
    """Top-level webhook configuration file.

    Records are kept raw so that each one can be validated on its own.

    Examples:
        >>> WebhooksConfig(webhooks=[{"name": "a"}, {"file": "no-name.lua"}]).webhooks[1]
        {'file': 'no-name.lua'}
    """

    webhooks: list[dict[str, Any]] = Field(default_factory=list)


class RequestContext(BaseModel):
    """Read-only projection of one inbound HTTP request.

    Attributes:
        bearer_token: token from an ``Authorization: Bearer`` header.
        raw_body: the request body as received.
        headers: lower-cased header names mapped to their first value.
        url: path plus query string as received.
        query_params: query parameter names mapped to their first value.
    """

    model_config = ConfigDict(frozen=True)

    bearer_token: Optional[str] = None
    raw_body: bytes = b""
    headers: dict[str, str] = Field(default_factory=dict)
    url: str = "/"
    query_params: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def build(cls, url: str, headers: Iterable[tuple[str, str]] = (), body: bytes = b"") -> "RequestContext":
        """Build a context from raw request parts.

        Args:
            url: the path plus query string.
            headers: header name/value pairs, duplicates allowed.
            body: the raw body.

        Returns:
            A new request context.

        Examples:
            >>> ctx = RequestContext.build("/v1/webhook/x?abc=123&abc=456", [("Authorization", "Bearer t0k"), ("X-A", "1"), ("x-a", "2")])
            >>> ctx.query_params["abc"], ctx.bearer_token, ctx.headers["x-a"]
            ('123', 't0k', '1')
        """
        header_map: dict[str, str] = {}
        for name, value in headers:
            header_map.setdefault(name.lower(), value)

        query_params: dict[str, str] = {}
        _, _, query = url.partition("?")
        for name, value in parse_qsl(query, keep_blank_values=True):
            query_params.setdefault(name, value)

        return cls(
            bearer_token=parse_bearer_token(header_map.get("authorization")),
            raw_body=body or b"",
            headers=header_map,
            url=url or "/",
            query_params=query_params,
        )


class ExecutionResult(BaseModel):
    """HTTP outcome produced by a webhook script.

    Examples:
        >>> ExecutionResult()
        ExecutionResult(status_code=200, content_type='text/plain; charset=utf-8', body='')
    """

    status_code: int = DEFAULT_STATUS_CODE
    content_type: str = DEFAULT_CONTENT_TYPE
    body: str | bytes = ""


def parse_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the credentials of a ``Bearer`` authorization header.

    Args:
        authorization: the raw header value.

    Returns:
        The token, or None when the header is absent, empty or uses another scheme.

    Examples:
        >>> parse_bearer_token("Bearer abc")
        'abc'
        >>> parse_bearer_token("bearer   abc ")
        'abc'
        >>> parse_bearer_token("Basic Zm9vOmJhcg==") is None
        True
        >>> parse_bearer_token("Bearer") is None
        True
        >>> parse_bearer_token(None) is None
        True
    """
    if not authorization:
        return None
    scheme, _, credentials = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return credentials.strip() or None
