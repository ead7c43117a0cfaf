# -*- coding: utf-8 -*-
"""Location: ./pushgateway/services/encryption_service.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Push Gateway Contributors

Encryption Service.

Seals per-user secrets for delivery to clients. The sealing key is derived
with Argon2id from a passphrase (the user's registered key, or the gateway's
``auth_encryption_secret``) and a random salt; the secret itself is
encrypted with Fernet. The sealed form is a compact JSON bundle carrying the
KDF parameters so that clients can re-derive the key.
"""

# Standard
import base64
import binascii
import json
import logging
import os
from typing import Optional, Union

# Third-Party
from argon2.exceptions import HashingError
from argon2.low_level import hash_secret_raw, Type
from cryptography.fernet import Fernet, InvalidToken
from pydantic import SecretStr

# First-Party
from pushgateway.config import settings

logger = logging.getLogger(__name__)

SALT_LENGTH = 16


class EncryptionService:
    """Seals and opens secrets with an Argon2id-derived Fernet key.

    Examples:
        >>> enc = EncryptionService(SecretStr("client-key"), time_cost=1, memory_cost=8, parallelism=1)
        >>> bundle = enc.seal(b"s3cret")
        >>> enc.is_sealed(bundle)
        True
        >>> enc.open(bundle)
        b's3cret'
        >>> EncryptionService("other-key", time_cost=1, memory_cost=8).open(bundle) is None
        True
    """

    def __init__(
        self,
        passphrase: Union[SecretStr, str],
        time_cost: Optional[int] = None,
        memory_cost: Optional[int] = None,
        parallelism: Optional[int] = None,
        hash_len: int = 32,
    ):
        """Initialize the encryption handler.

        Args:
            passphrase: passphrase the sealing key is derived from.
            time_cost: Argon2id time cost parameter
            memory_cost: Argon2id memory cost parameter (in KiB)
            parallelism: Argon2id parallelism parameter
            hash_len: Length of the derived key
        """
        if isinstance(passphrase, SecretStr):
            self._passphrase = passphrase.get_secret_value().encode()
        else:
            self._passphrase = str(passphrase).encode()
        self.time_cost = time_cost or settings.argon2id_time_cost
        self.memory_cost = memory_cost or settings.argon2id_memory_cost
        self.parallelism = parallelism or settings.argon2id_parallelism
        self.hash_len = hash_len

    def derive_key(self, salt: bytes, time_cost: int, memory_cost: int, parallelism: int) -> bytes:
        """Derive a Fernet key from the passphrase using Argon2id.

        Args:
            salt: The salt to use in key derivation
            time_cost: Argon2id time cost parameter
            memory_cost: Argon2id memory cost parameter (in KiB)
            parallelism: Argon2id parallelism parameter

        Returns:
            The url-safe base64 derived key.
        """
        raw = hash_secret_raw(
            secret=self._passphrase,
            salt=salt,
            time_cost=time_cost,
            memory_cost=memory_cost,  # KiB
            parallelism=parallelism,
            hash_len=self.hash_len,
            type=Type.ID,
        )
        return base64.urlsafe_b64encode(raw)

    def seal(self, plaintext: bytes) -> str:
        """Encrypt a secret.

        Args:
            plaintext: The secret bytes.

        Returns:
            JSON bundle with the KDF parameters, salt and Fernet token.
        """
        salt = os.urandom(SALT_LENGTH)
        key = self.derive_key(salt, self.time_cost, self.memory_cost, self.parallelism)
        token = Fernet(key).encrypt(plaintext)
        return json.dumps(
            {
                "kdf": "argon2id",
                "t": self.time_cost,
                "m": self.memory_cost,
                "p": self.parallelism,
                "salt": base64.b64encode(salt).decode(),
                "token": token.decode(),
            },
            separators=(",", ":"),
        )

    def open(self, bundle_json: str) -> Optional[bytes]:
        """Decrypt a sealed secret.

        Args:
            bundle_json: a bundle produced by ``seal``.

        Returns:
            The secret bytes, or None if the bundle is malformed or the key is wrong.
        """
        try:
            bundle = json.loads(bundle_json)
            salt = base64.b64decode(bundle["salt"])
            key = self.derive_key(salt, time_cost=bundle["t"], memory_cost=bundle["m"], parallelism=bundle["p"])
            return Fernet(key).decrypt(bundle["token"].encode())
        except (HashingError, InvalidToken, json.JSONDecodeError, KeyError, TypeError, ValueError, binascii.Error) as e:
            logger.warning(f"Failed to open sealed secret: {type(e).__name__}")
            return None

    def is_sealed(self, text: str) -> bool:
        """Check if a string looks like a sealed bundle.

        Args:
            text: String to check

        Returns:
            True if the string is an Argon2id bundle.

        Examples:
            >>> EncryptionService("k").is_sealed("plain-text")
            False
        """
        if not text or not text.startswith("{"):
            return False
        try:
            obj = json.loads(text)
        except json.JSONDecodeError:
            return False
        return isinstance(obj, dict) and obj.get("kdf") == "argon2id"
