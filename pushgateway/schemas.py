# -*- coding: utf-8 -*-
"""Location: ./pushgateway/schemas.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Push Gateway Contributors

Push Gateway Schema Definitions.
Pydantic models for the account endpoints' request and response bodies.

Examples:
    >>> req = BindUserRequest.model_validate_json('{"nonce": 1, "user": {"uid": "u1", "key": "k"}, "device": {"uuid": "d1", "key": "dk", "push-token": "t"}}')
    >>> req.device.push_token, req.device.sandbox
    ('t', False)
    >>> UnbindUserRequest.model_validate({"device": "d1", "user": "u1"}).nonce
    0
"""

# Standard
from typing import Optional

# Third-Party
from pydantic import BaseModel, ConfigDict, Field


class UserParams(BaseModel):
    """User part of a bind request."""

    uid: str
    key: str


class DeviceParams(BaseModel):
    """Device part of a bind request."""

    model_config = ConfigDict(populate_by_name=True)

    uuid: str
    key: str
    push_token: str = Field(default="", alias="push-token")
    sandbox: bool = False


class BindUserRequest(BaseModel):
    """Body of ``POST /v1/bind-user``."""

    nonce: int = Field(default=0, ge=0)
    user: UserParams
    device: Optional[DeviceParams] = None


class BindUserResponse(BaseModel):
    """Body returned by ``POST /v1/bind-user``."""

    key: str


class UnbindUserRequest(BaseModel):
    """Body of ``POST /v1/unbind-user``."""

    nonce: int = Field(default=0, ge=0)
    device: str = ""
    user: str = ""


class UnbindUserResponse(BaseModel):
    """Body returned by ``POST /v1/unbind-user``."""

    uuid: str
    uid: str
