# -*- coding: utf-8 -*-
"""Location: ./pushgateway/utils/validate_signature.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Push Gateway Contributors

Utility to validate Ed25519 request signatures.
Account endpoints require the caller to sign the raw request body with the
private half of the key registered for the user (or device). The signature
travels hex encoded in a request header.
"""

# Future
from __future__ import annotations

# Standard
import base64
import binascii
import logging

# Third-Party
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519

# First-Party
from pushgateway.webhooks.models import RequestContext

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Key handling
# ---------------------------------------------------------------------------


def load_public_key(key: str) -> ed25519.Ed25519PublicKey:
    """Load an Ed25519 public key.

    Args:
        key: PEM text, or the base64 (standard or url-safe) raw 32 byte key.

    Returns:
        The public key.

    Raises:
        ValueError: if the key cannot be decoded or is not Ed25519.
    """
    key = key.strip()
    if key.startswith("-----BEGIN"):
        public_key = serialization.load_pem_public_key(key.encode())
        if not isinstance(public_key, ed25519.Ed25519PublicKey):
            raise ValueError("Expected an Ed25519 public key")
        return public_key

    padded = key + "=" * (-len(key) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded.replace("+", "-").replace("/", "_"))
    except (binascii.Error, ValueError) as e:
        raise ValueError("Public key is not valid base64") from e
    return ed25519.Ed25519PublicKey.from_public_bytes(raw)


def encode_public_key(public_key: ed25519.Ed25519PublicKey) -> str:
    """Encode a public key the way clients register it.

    Args:
        public_key: the key.

    Returns:
        The url-safe base64 raw key without padding.
    """
    raw = public_key.public_bytes(encoding=serialization.Encoding.Raw, format=serialization.PublicFormat.Raw)
    return base64.urlsafe_b64encode(raw).decode().rstrip("=")


# ---------------------------------------------------------------------------
# Sign / validate
# ---------------------------------------------------------------------------


def sign_data(data: bytes, private_key: ed25519.Ed25519PrivateKey) -> str:
    """Sign data the way a client signs a request body.

    Args:
        data: Message bytes to sign.
        private_key: the client's private key.

    Returns:
        str: Hex-encoded signature.
    """
    return private_key.sign(data).hex()


def validate_signature(data: bytes | str, signature: bytes | str | None, public_key: str) -> bool:
    """Validate an Ed25519 signature.

    Args:
        data: Original message bytes.
        signature: Signature bytes or hex string to verify.
        public_key: the registered public key (PEM or base64 raw).

    Returns:
        bool: True if signature is valid, False otherwise.

    Examples:
        >>> validate_signature(b"data", None, "AAAA")
        False
    """
    if not signature:
        return False

    if isinstance(data, str):
        data = data.encode()

    # Accept hex-encoded signatures
    if isinstance(signature, str):
        try:
            signature = bytes.fromhex(signature)
        except ValueError:
            logger.warning("Invalid hex signature format.")
            return False

    try:
        load_public_key(public_key).verify(signature, data)
        return True
    except InvalidSignature:
        logger.warning("Signature validation failed: signature mismatch")
        return False
    except (TypeError, ValueError) as e:
        logger.warning(f"Signature validation failed: {e}")
        return False


def validate_request_signature(context: RequestContext, public_key: str, header: str) -> bool:
    """Validate the signature a client attached to a request.

    Args:
        context: the request projection (body and headers).
        public_key: the registered public key of the signer.
        header: name of the header carrying the hex signature.

    Returns:
        bool: True if the header holds a valid signature of the raw body.
    """
    return validate_signature(context.raw_body, context.headers.get(header.lower()), public_key)
