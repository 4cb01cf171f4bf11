"""
Signing keys.

Octra accounts sign with Ed25519; the wallet file stores the 32-byte seed
as standard base64. EVM accounts sign with secp256k1 via eth-account and
store a hex private key.
"""

from __future__ import annotations

import binascii

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519
from eth_account import Account
from eth_account.signers.local import LocalAccount

from ..errors import WalletError
from ..utils import b64decode, b64encode


def load_ed25519_key(material: str) -> ed25519.Ed25519PrivateKey:
    """
    Load an Ed25519 signing key from base64 key material.

    Accepts a 32-byte seed or a 64-byte seed||public key blob.

    Raises:
        WalletError: If the material is not base64 or has the wrong length
    """
    try:
        raw = b64decode(material.strip())
    except (binascii.Error, ValueError) as exc:
        raise WalletError("Private key is not valid base64.") from exc

    if len(raw) == 64:
        raw = raw[:32]
    if len(raw) != 32:
        raise WalletError(f"Ed25519 private key must be 32 bytes, got {len(raw)}.")
    return ed25519.Ed25519PrivateKey.from_private_bytes(raw)


def generate_ed25519_key() -> tuple[str, ed25519.Ed25519PrivateKey]:
    """Return (base64 seed, key)."""
    key = ed25519.Ed25519PrivateKey.generate()
    seed = key.private_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PrivateFormat.Raw,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return b64encode(seed), key


def public_key_bytes(private_key: ed25519.Ed25519PrivateKey) -> bytes:
    return private_key.public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )


def public_key_b64(private_key: ed25519.Ed25519PrivateKey) -> str:
    return b64encode(public_key_bytes(private_key))


def sign_b64(message: bytes, private_key: ed25519.Ed25519PrivateKey) -> str:
    """Sign ``message`` and return the 64-byte signature as base64."""
    return b64encode(private_key.sign(message))


def load_eth_account(private_key: str) -> LocalAccount:
    """
    Get an eth-account LocalAccount from a hex private key.

    Raises:
        WalletError: If the key is not a valid secp256k1 private key
    """
    key = private_key.strip()
    if not key.startswith("0x"):
        key = "0x" + key
    try:
        return Account.from_key(key)
    except (ValueError, TypeError, binascii.Error) as exc:
        raise WalletError("Private key is not a valid hex secp256k1 key.") from exc
