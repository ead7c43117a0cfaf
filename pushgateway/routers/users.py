# -*- coding: utf-8 -*-
"""Location: ./pushgateway/routers/users.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Push Gateway Contributors

Account API Router.
Binds and unbinds users and their devices. Every request body is signed by
the caller (Ed25519, hex encoded in a header) with the key it registers.
"""

# Standard
import base64

# Third-Party
from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from pydantic import ValidationError

# First-Party
from pushgateway.config import Settings
from pushgateway.schemas import BindUserRequest, BindUserResponse, UnbindUserRequest, UnbindUserResponse
from pushgateway.services.account_service import AccountError, AccountService
from pushgateway.services.logging_service import LoggingService
from pushgateway.utils.orjson_response import error_response, ORJSONResponse
from pushgateway.utils.validate_signature import validate_request_signature
from pushgateway.webhooks import RequestContext

logging_service = LoggingService()
logger = logging_service.get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["Users"])


def get_account_service(request: Request) -> AccountService:
    """Account service dependency.

    Args:
        request: the incoming request.

    Returns:
        AccountService: the application's account service.
    """
    return request.app.state.account_service


def get_app_settings(request: Request) -> Settings:
    """Settings dependency.

    Args:
        request: the incoming request.

    Returns:
        Settings: the settings the application was built with.
    """
    return request.app.state.settings


async def _signed_context(request: Request) -> RequestContext:
    """Read the body once and keep the headers that carry signatures.

    Args:
        request: the incoming request.

    Returns:
        RequestContext: the request projection.
    """
    body = await request.body()
    return RequestContext.build(request.url.path, request.headers.items(), body)


@router.post("/bind-user", response_model=BindUserResponse)
async def bind_user(
    request: Request,
    accounts: AccountService = Depends(get_account_service),
    settings: Settings = Depends(get_app_settings),
) -> Response:
    """Register a user, optionally binding a device to it.

    Args:
        request: the signed request.
        accounts: the account service.
        settings: application settings.

    Returns:
        Response: ``{"key": ...}`` with the sealed user secret, or an error body.
    """
    context = await _signed_context(request)
    try:
        params = BindUserRequest.model_validate_json(context.raw_body)
    except ValidationError:
        return error_response(400, "invalid params")

    if not validate_request_signature(context, params.user.key, settings.user_signature_header):
        return error_response(401, "invalid user sign")
    device = params.device
    if device is not None and not validate_request_signature(context, device.key, settings.device_signature_header):
        return error_response(401, "invalid device sign")

    serverless = device is None
    try:
        user = accounts.upsert_user(params.user.uid, params.user.key, serverless)
    except AccountError as e:
        logger.warning(f"Upsert user {params.user.uid!r} failed: {e}")
        return error_response(400, "invalid user id")

    if serverless:
        logger.info(f"Bind user: {user.uid}")
    else:
        try:
            accounts.bind_device(user.uid, device.uuid, device.key)
        except AccountError as e:
            logger.warning(f"Bind device {device.uuid!r} failed: {e}")
            return error_response(400, "bind user device failed")
        logger.info(f"Bind user: {user.uid} device: {device.uuid}")
        if device.push_token:
            try:
                accounts.update_push_token(user.uid, device.uuid, device.push_token, device.sandbox)
            except AccountError as e:
                logger.warning(f"Push token update for {device.uuid} failed: {e}")

    sealed = accounts.seal_secret(user)
    return ORJSONResponse(BindUserResponse(key=base64.b64encode(sealed).decode()).model_dump())


@router.post("/unbind-user", response_model=UnbindUserResponse)
async def unbind_user(
    request: Request,
    accounts: AccountService = Depends(get_account_service),
    settings: Settings = Depends(get_app_settings),
) -> Response:
    """Unbind a device from a user.

    Args:
        request: the signed request.
        accounts: the account service.
        settings: application settings.

    Returns:
        Response: ``{"uuid": ..., "uid": ...}``, or an error body.
    """
    context = await _signed_context(request)
    try:
        params = UnbindUserRequest.model_validate_json(context.raw_body)
    except ValidationError:
        return error_response(400, "unbind user device failed")

    try:
        user = accounts.get_user(params.user)
    except AccountError:
        user = None
    if user is not None and not user.is_serverless() and not validate_request_signature(context, user.key, settings.user_signature_header):
        return error_response(401, "invalid user sign")

    try:
        accounts.unbind_device(params.user, params.device)
    except AccountError as e:
        logger.info(f"Unbind {params.device!r} from {params.user!r} skipped: {e}")

    return ORJSONResponse(UnbindUserResponse(uuid=params.device, uid=params.user).model_dump())
