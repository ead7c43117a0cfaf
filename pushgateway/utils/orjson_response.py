# -*- coding: utf-8 -*-
"""Location: ./pushgateway/utils/orjson_response.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Push Gateway Contributors

JSON response class using orjson.
Used for every JSON document the gateway writes itself (account endpoints,
health and webhook error bodies). Webhook script results are written
verbatim and never pass through here.
"""

# Standard
from typing import Any

# Third-Party
from fastapi.responses import JSONResponse
import orjson


class ORJSONResponse(JSONResponse):
    """JSON response rendered with orjson.

    Example:
        >>> response = ORJSONResponse(content={"res": 404, "msg": "webhook not found"}, status_code=404)
        >>> response.body
        b'{"res":404,"msg":"webhook not found"}'
        >>> response.media_type
        'application/json'
    """

    media_type = "application/json"

    def render(self, content: Any) -> bytes:
        """Render content to JSON bytes using orjson.

        Args:
            content: The content to serialize to JSON.

        Returns:
            JSON bytes ready for the HTTP response.

        Raises:
            orjson.JSONEncodeError: If content cannot be serialized to JSON.
        """
        return orjson.dumps(content, option=orjson.OPT_NON_STR_KEYS)


def error_response(status_code: int, message: str) -> ORJSONResponse:
    """Build the gateway's standard error document.

    Args:
        status_code: HTTP status.
        message: short, client-safe message.

    Returns:
        A response with body ``{"res": status_code, "msg": message}``.

    Examples:
        >>> error_response(400, "invalid params").body
        b'{"res":400,"msg":"invalid params"}'
    """
    return ORJSONResponse(status_code=status_code, content={"res": status_code, "msg": message})
