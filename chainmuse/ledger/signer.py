"""Ed25519 signing identity for Sui transactions.

Accepted secret key encodings:

- 64 hex characters (optionally ``0x``-prefixed): the raw 32-byte seed.
- base64 of 32 bytes: the raw seed.
- base64 of 33 bytes: ``sui.keystore`` style, a scheme flag followed by the seed.

Bech32 ``suiprivkey1...`` strings are not decoded here; export the key in
one of the forms above (``sui keytool convert``).
"""

from __future__ import annotations

import base64
import binascii
import hashlib

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519

ED25519_FLAG = 0x00
# IntentScope::TransactionData, IntentVersion::V0, AppId::Sui
_TX_INTENT = bytes([0, 0, 0])


def _blake2b_256(data: bytes) -> bytes:
    return hashlib.blake2b(data, digest_size=32).digest()


def _decode_seed(secret: str) -> bytes:
    secret = secret.strip()
    if secret.startswith("suiprivkey"):
        raise ValueError(
            "Bech32 suiprivkey keys are not supported; "
            "convert with `sui keytool convert` and use the hex or base64 form."
        )

    hex_part = secret[2:] if secret.startswith("0x") else secret
    if len(hex_part) == 64:
        try:
            return bytes.fromhex(hex_part)
        except ValueError:
            pass

    try:
        raw = base64.b64decode(secret, validate=True)
    except binascii.Error as exc:
        raise ValueError("Secret key is neither hex nor base64") from exc

    if len(raw) == 33:
        if raw[0] != ED25519_FLAG:
            raise ValueError(f"Unsupported key scheme flag: {raw[0]:#04x}")
        return raw[1:]
    if len(raw) == 32:
        return raw
    raise ValueError(f"Secret key must decode to 32 or 33 bytes, got {len(raw)}")


class Ed25519Signer:
    """Read-only after construction; safe to share between requests."""

    def __init__(self, private_key: ed25519.Ed25519PrivateKey) -> None:
        self._key = private_key
        self.public_key_bytes = private_key.public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )
        self.address = "0x" + _blake2b_256(
            bytes([ED25519_FLAG]) + self.public_key_bytes
        ).hex()

    @classmethod
    def from_secret(cls, secret: str) -> Ed25519Signer:
        seed = _decode_seed(secret)
        return cls(ed25519.Ed25519PrivateKey.from_private_bytes(seed))

    @classmethod
    def generate(cls) -> Ed25519Signer:
        return cls(ed25519.Ed25519PrivateKey.generate())

    def sign_transaction(self, tx_bytes_b64: str) -> str:
        """Return the serialized signature for base64 transaction bytes.

        The digest is blake2b-256 over the transaction intent prefix plus the
        BCS transaction bytes; the serialized form is
        ``flag || signature || public_key``, base64-encoded.
        """
        tx_bytes = base64.b64decode(tx_bytes_b64)
        digest = _blake2b_256(_TX_INTENT + tx_bytes)
        signature = self._key.sign(digest)
        return base64.b64encode(
            bytes([ED25519_FLAG]) + signature + self.public_key_bytes
        ).decode("ascii")
