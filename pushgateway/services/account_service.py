# -*- coding: utf-8 -*-
"""Location: ./pushgateway/services/account_service.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Push Gateway Contributors

Account Service.

Users and their bound devices. ``AccountService`` is the boundary the HTTP
layer depends on; ``InMemoryAccountService`` is the process-local
implementation used by default and in tests.
"""

# Standard
from dataclasses import dataclass, field
import re
import secrets
import threading
from typing import Optional, Protocol

# First-Party
from pushgateway.services.encryption_service import EncryptionService
from pushgateway.services.logging_service import LoggingService

logging_service = LoggingService()
logger = logging_service.get_logger(__name__)

SECRET_KEY_LENGTH = 32
_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z0-9_\-\.]{1,128}$")


class AccountError(Exception):
    """Raised when an account operation cannot be applied."""


@dataclass
class Device:
    """A device bound to a user."""

    uuid: str
    key: str
    push_token: str = ""
    sandbox: bool = False


@dataclass
class User:
    """A registered user.

    Attributes:
        uid: user identifier.
        key: the user's registered public key.
        serverless: True while the user has no device bound.
        secret_key: per-user secret handed back (sealed) on bind.
        devices: bound devices by uuid.
    """

    uid: str
    key: str
    serverless: bool = True
    secret_key: bytes = field(default_factory=lambda: secrets.token_bytes(SECRET_KEY_LENGTH), repr=False)
    devices: dict[str, Device] = field(default_factory=dict)

    def is_serverless(self) -> bool:
        """Whether the user has no bound device.

        Returns:
            The serverless flag.
        """
        return self.serverless


class AccountService(Protocol):
    """Operations the gateway needs from the account subsystem."""

    def upsert_user(self, uid: str, key: str, serverless: bool) -> User:
        """Create or update a user."""

    def bind_device(self, uid: str, device_uuid: str, key: str) -> None:
        """Bind a device to a user."""

    def get_user(self, uid: str) -> User:
        """Return a user."""

    def unbind_device(self, uid: str, device_uuid: str) -> None:
        """Remove a device from a user."""

    def update_push_token(self, uid: str, device_uuid: str, token: str, sandbox: bool) -> None:
        """Store a device push token."""

    def seal_secret(self, user: User) -> bytes:
        """Seal the user's secret key for delivery to the client."""


def _check_identifier(kind: str, value: str) -> None:
    """Reject malformed identifiers.

    Args:
        kind: what is being checked, used in the error.
        value: the identifier.

    Raises:
        AccountError: if the identifier is empty or malformed.

    Examples:
        >>> _check_identifier("user id", "u-1")
        >>> _check_identifier("user id", "")
        Traceback (most recent call last):
        ...
        pushgateway.services.account_service.AccountError: invalid user id
    """
    if not value or not _IDENTIFIER_PATTERN.match(value):
        raise AccountError(f"invalid {kind}")


class InMemoryAccountService:
    """Process-local account store.

    Examples:
        >>> svc = InMemoryAccountService(time_cost=1, memory_cost=8)
        >>> user = svc.upsert_user("u1", "key", serverless=True)
        >>> user.is_serverless()
        True
        >>> svc.bind_device("u1", "d1", "dkey")
        >>> svc.get_user("u1").is_serverless()
        False
        >>> svc.unbind_device("u1", "d1")
        >>> svc.get_user("u1").devices
        {}
    """

    def __init__(self, time_cost: Optional[int] = None, memory_cost: Optional[int] = None, parallelism: Optional[int] = None):
        """Initialize an empty store.

        Args:
            time_cost: Argon2id time cost used when sealing secrets.
            memory_cost: Argon2id memory cost used when sealing secrets.
            parallelism: Argon2id parallelism used when sealing secrets.
        """
        self._users: dict[str, User] = {}
        self._lock = threading.Lock()
        self._kdf = {"time_cost": time_cost, "memory_cost": memory_cost, "parallelism": parallelism}

    def upsert_user(self, uid: str, key: str, serverless: bool) -> User:
        """Create a user or refresh its key.

        Args:
            uid: user identifier.
            key: the user's public key.
            serverless: whether the user binds without a device.

        Returns:
            The user.

        Raises:
            AccountError: on an invalid identifier or empty key.
        """
        _check_identifier("user id", uid)
        if not key:
            raise AccountError("invalid user key")
        with self._lock:
            user = self._users.get(uid)
            if user is None:
                user = User(uid=uid, key=key, serverless=serverless)
                self._users[uid] = user
                logger.info(f"Created user {uid}")
            else:
                user.key = key
                user.serverless = serverless and not user.devices
        return user

    def bind_device(self, uid: str, device_uuid: str, key: str) -> None:
        """Bind a device to a user.

        Args:
            uid: user identifier.
            device_uuid: device identifier.
            key: the device's public key.

        Raises:
            AccountError: if the user is unknown or the device id is invalid.
        """
        _check_identifier("device id", device_uuid)
        with self._lock:
            user = self._users.get(uid)
            if user is None:
                raise AccountError("unknown user")
            existing = user.devices.get(device_uuid)
            device = Device(uuid=device_uuid, key=key)
            if existing is not None:
                device.push_token, device.sandbox = existing.push_token, existing.sandbox
            user.devices[device_uuid] = device
            user.serverless = False

    def get_user(self, uid: str) -> User:
        """Return a user.

        Args:
            uid: user identifier.

        Returns:
            The user.

        Raises:
            AccountError: if the user is unknown.
        """
        user = self._users.get(uid)
        if user is None:
            raise AccountError("unknown user")
        return user

    def unbind_device(self, uid: str, device_uuid: str) -> None:
        """Remove a device from a user.

        Args:
            uid: user identifier.
            device_uuid: device identifier.

        Raises:
            AccountError: if the user or device is unknown.
        """
        with self._lock:
            user = self._users.get(uid)
            if user is None or user.devices.pop(device_uuid, None) is None:
                raise AccountError("unknown device")
        logger.info(f"Unbound device {device_uuid} from user {uid}")

    def update_push_token(self, uid: str, device_uuid: str, token: str, sandbox: bool) -> None:
        """Store the push token of a bound device.

        Args:
            uid: user identifier.
            device_uuid: device identifier.
            token: provider push token.
            sandbox: whether the token belongs to the provider's sandbox.

        Raises:
            AccountError: if the device is not bound to the user.
        """
        with self._lock:
            user = self._users.get(uid)
            device = user.devices.get(device_uuid) if user else None
            if device is None:
                raise AccountError("unknown device")
            device.push_token = token
            device.sandbox = sandbox

    def seal_secret(self, user: User) -> bytes:
        """Seal the user's secret key with a key derived from the user's public key.

        Args:
            user: the user.

        Returns:
            The sealed bundle bytes.
        """
        return EncryptionService(user.key, **self._kdf).seal(user.secret_key).encode()
