# -*- coding: utf-8 -*-
"""Location: ./pushgateway/routers/webhook.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Push Gateway Contributors

Webhook API Router.
Binds ``POST /v1/webhook/{name}`` to the webhook plugin registered under
``name`` and writes the plugin's result back as the HTTP response.
"""

# Third-Party
from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

# First-Party
from pushgateway.services.logging_service import LoggingService
from pushgateway.utils.orjson_response import error_response
from pushgateway.webhooks import RequestContext, WebhookExecutionError, WebhookManager, WebhookNotFoundError

logging_service = LoggingService()
logger = logging_service.get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["Webhooks"])

# Statuses that must not carry a body, besides 1xx
_BODYLESS_STATUSES = {204, 304}


def get_webhook_manager(request: Request) -> WebhookManager:
    """Webhook manager dependency.

    Args:
        request: the incoming request.

    Returns:
        WebhookManager: the application's webhook manager.
    """
    return request.app.state.webhook_manager


def request_url(request: Request) -> str:
    """Path plus query string of a request as received.

    Args:
        request: the incoming request.

    Returns:
        The raw path, followed by ``?query`` when a query string was sent.
    """
    raw_path = request.scope.get("raw_path")
    path = raw_path.decode("latin-1") if raw_path else request.url.path
    query = request.scope.get("query_string", b"").decode("latin-1")
    return f"{path}?{query}" if query else path


async def build_request_context(request: Request) -> RequestContext:
    """Project a live request into a webhook request context.

    The body is read exactly once here.

    Args:
        request: the incoming request.

    Returns:
        RequestContext: a context owned by a single invocation.
    """
    body = await request.body()
    return RequestContext.build(request_url(request), request.headers.items(), body)


@router.post("/webhook/{name}")
async def post_webhook(name: str, request: Request, manager: WebhookManager = Depends(get_webhook_manager)) -> Response:
    """Trigger a webhook plugin.

    Args:
        name: the plugin name.
        request: the incoming request, exposed read-only to the plugin.
        manager: the webhook manager.

    Returns:
        Response: the plugin's status, content type and body; 404 for an
        unknown plugin; 400 when the plugin fails to load or run.
    """
    try:
        descriptor = manager.resolve(name)
    except WebhookNotFoundError:
        logger.warning(f"Webhook not found: {name}")
        return error_response(404, "webhook not found")

    context = await build_request_context(request)
    try:
        result = await manager.invoke(descriptor, context)
    except WebhookExecutionError as e:
        logger.error(f"Webhook {name} failed: {e}")
        return error_response(400, "webhook execution failed")

    content = "" if result.status_code < 200 or result.status_code in _BODYLESS_STATUSES else result.body
    return Response(content=content, status_code=result.status_code, headers={"content-type": result.content_type})
