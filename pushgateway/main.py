# -*- coding: utf-8 -*-
"""Location: ./pushgateway/main.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Push Gateway Contributors

Push Gateway - main FastAPI application.

Wires the webhook manager and the account service into the application
state and mounts the routers:
- ``POST /v1/webhook/{name}``
- ``POST /v1/bind-user`` and ``POST /v1/unbind-user``
- ``GET /health``
"""

# Standard
import contextlib
from typing import AsyncIterator, Optional

# Third-Party
from fastapi import FastAPI, Request

# First-Party
from pushgateway import __version__
from pushgateway.config import Settings, settings
from pushgateway.routers.users import router as users_router
from pushgateway.routers.webhook import router as webhook_router
from pushgateway.services.account_service import AccountService, InMemoryAccountService
from pushgateway.services.logging_service import LoggingService
from pushgateway.utils.orjson_response import ORJSONResponse
from pushgateway.webhooks import WebhookManager

logging_service = LoggingService()
logger = logging_service.get_logger(__name__)


def build_webhook_manager(config: Settings) -> WebhookManager:
    """Create the webhook manager described by the settings.

    Args:
        config: application settings.

    Returns:
        WebhookManager: an uninitialized manager; empty when webhooks are disabled.
    """
    if not config.webhooks_enabled:
        logger.info("Webhooks disabled")
        return WebhookManager(max_workers=config.webhook_max_workers)
    return WebhookManager(config.webhook_config_file, webhook_root=config.webhook_root, max_workers=config.webhook_max_workers)


def create_app(
    webhook_manager: Optional[WebhookManager] = None,
    account_service: Optional[AccountService] = None,
    config: Optional[Settings] = None,
) -> FastAPI:
    """Build the gateway application.

    Args:
        webhook_manager: the webhook manager, built from settings when omitted.
        account_service: the account service, in-memory when omitted.
        config: application settings, the process settings when omitted.

    Returns:
        FastAPI: the application.
    """
    config = config or settings
    manager = webhook_manager or build_webhook_manager(config)
    manager.initialize()

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.webhook_manager.initialize()
        logger.info(f"{config.app_name} started with {app.state.webhook_manager.plugin_count} webhooks")
        try:
            yield
        finally:
            logger.info("Application shutting down...")
            app.state.webhook_manager.shutdown()

    app = FastAPI(title=config.app_name, version=__version__, default_response_class=ORJSONResponse, lifespan=lifespan)
    app.state.settings = config
    app.state.webhook_manager = manager
    app.state.account_service = account_service or InMemoryAccountService(
        time_cost=config.argon2id_time_cost,
        memory_cost=config.argon2id_memory_cost,
        parallelism=config.argon2id_parallelism,
    )

    app.include_router(webhook_router)
    app.include_router(users_router)

    @app.get("/health")
    async def healthcheck(request: Request) -> dict:
        """Liveness probe.

        Args:
            request: the incoming request.

        Returns:
            The gateway status and the number of registered webhooks.
        """
        return {"status": "healthy", "webhooks": request.app.state.webhook_manager.plugin_count}

    return app


logging_service.configure()
app = create_app()
