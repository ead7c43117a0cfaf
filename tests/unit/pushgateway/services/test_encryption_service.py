# -*- coding: utf-8 -*-
"""Location: ./tests/unit/pushgateway/services/test_encryption_service.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Push Gateway Contributors

Tests for the Argon2id/Fernet secret sealing service.
"""

# Standard
import json

# Third-Party
from pydantic import SecretStr
import pytest

# First-Party
from pushgateway.services.encryption_service import EncryptionService, SALT_LENGTH


@pytest.fixture
def service() -> EncryptionService:
    return EncryptionService(SecretStr("passphrase"), time_cost=1, memory_cost=8, parallelism=1)


def test_bundle_carries_kdf_parameters(service):
    bundle = json.loads(service.seal(b"secret"))
    assert (bundle["kdf"], bundle["t"], bundle["m"], bundle["p"]) == ("argon2id", 1, 8, 1)
    assert bundle["token"]


def test_each_seal_uses_a_new_salt(service):
    assert json.loads(service.seal(b"x"))["salt"] != json.loads(service.seal(b"x"))["salt"]


def test_open_uses_bundle_parameters(service):
    bundle = EncryptionService("passphrase", time_cost=2, memory_cost=16, parallelism=1).seal(b"secret")
    assert service.open(bundle) == b"secret"


@pytest.mark.parametrize("bundle", ["", "{}", "not json", '{"salt": "!!", "t": 1, "m": 8, "p": 1, "token": "x"}'])
def test_open_malformed_bundle(service, bundle):
    assert service.open(bundle) is None


def test_derive_key_is_deterministic(service):
    salt = b"\x00" * SALT_LENGTH
    assert service.derive_key(salt, 1, 8, 1) == service.derive_key(salt, 1, 8, 1)
    assert service.derive_key(salt, 1, 8, 1) != EncryptionService("other").derive_key(salt, 1, 8, 1)


def test_is_sealed(service):
    assert service.is_sealed(service.seal(b"x"))
    assert not service.is_sealed('{"kdf": "pbkdf2"}')
    assert not service.is_sealed("{broken")
