"""
Vault Crypto Core: Key derivation, authenticated encryption and vault keys.

Implements the primitives every other vault layer is built on:
- Key derivation: PBKDF2-HMAC-SHA256(master_password, salt) → 256-bit key
- Symmetric cipher: AES-256-GCM → base64([iv 12B][payload + GCM_tag 16B])
- Vault keys: random 256-bit keys, exported/imported as raw bytes

Security Note:
    Never log passwords, key material, plaintext or ciphertext values.
    IVs are random 96-bit per call; never reuse an IV under the same key.
"""
import os
import hmac
import base64
import binascii
import logging
from typing import Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..exceptions import AuthenticationFailure

logger = logging.getLogger("psvault.vault")

PBKDF2_ITERATIONS = 100_000
SALT_LENGTH = 16
IV_LENGTH = 12  # 96-bit nonce
TAG_LENGTH = 16
KEY_LENGTH = 32  # AES-256


class VaultKey:
    """A 256-bit AES-GCM key that protects one vault's secrets.

    The raw bytes are only reachable through :func:`export_key`. Instances
    refuse pickling and copying so they cannot leak into persisted state.
    """

    __slots__ = ("_raw",)

    def __init__(self, raw: bytes):
        if len(raw) != KEY_LENGTH:
            raise ValueError(
                f"Vault key must be exactly {KEY_LENGTH} bytes, got {len(raw)}"
            )
        object.__setattr__(self, "_raw", bytes(raw))

    def __setattr__(self, key, value):
        raise AttributeError("VaultKey is immutable")

    def __repr__(self) -> str:
        return "<VaultKey [redacted]>"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VaultKey):
            return NotImplemented
        return hmac.compare_digest(self._raw, other._raw)

    __hash__ = None

    def __reduce_ex__(self, protocol):
        raise TypeError("VaultKey cannot be serialized")

    def __copy__(self):
        raise TypeError("VaultKey cannot be copied")

    def __deepcopy__(self, memo):
        raise TypeError("VaultKey cannot be copied")


KeyLike = Union[VaultKey, bytes]


def _key_bytes(key: KeyLike) -> bytes:
    if isinstance(key, VaultKey):
        return key._raw
    if len(key) != KEY_LENGTH:
        raise ValueError(
            f"Encryption key must be exactly {KEY_LENGTH} bytes, got {len(key)}"
        )
    return key


# ---------------------------------------------------------------------------
# Base64 helpers
# ---------------------------------------------------------------------------

def b64encode(data: bytes) -> str:
    """Encode bytes as standard padded base64 text."""
    return base64.b64encode(data).decode("ascii")


def b64decode(data: str) -> bytes:
    """Strictly decode standard base64 text.

    Raises:
        ValueError: If ``data`` is not valid base64.
    """
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, TypeError) as err:
        raise ValueError(f"Invalid base64 data: {err}") from err


# ---------------------------------------------------------------------------
# Key derivation
# ---------------------------------------------------------------------------

def derive_key(
    password: str,
    salt: bytes | None = None,
    iterations: int = PBKDF2_ITERATIONS,
) -> tuple[bytes, bytes]:
    """Derive a 32-byte AES-256-GCM key from a master password.

    Args:
        password: Master password, used only for this derivation.
        salt: 16-byte salt. A new random salt is generated when omitted.
        iterations: PBKDF2 iteration count.

    Returns:
        Tuple of (derived_key, salt).

    Raises:
        ValueError: If a salt of the wrong length is supplied.
    """
    if salt is None:
        salt = os.urandom(SALT_LENGTH)
    elif len(salt) != SALT_LENGTH:
        raise ValueError(
            f"salt must be exactly {SALT_LENGTH} bytes, got {len(salt)}"
        )
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(password.encode("utf-8")), salt


# ---------------------------------------------------------------------------
# Symmetric cipher
# ---------------------------------------------------------------------------

def encrypt(data: Union[str, bytes], key: KeyLike) -> str:
    """Encrypt data with AES-256-GCM under a fresh random IV.

    Format: base64([iv 12B][encrypted_payload + GCM_tag 16B])

    Args:
        data: Plaintext; ``str`` values are UTF-8 encoded.
        key: VaultKey or raw 32-byte key.

    Returns:
        Base64 ciphertext string.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    cipher = AESGCM(_key_bytes(key))
    iv = os.urandom(IV_LENGTH)
    ct = cipher.encrypt(iv, data, None)
    return b64encode(iv + ct)


def decrypt_raw(blob: str, key: KeyLike) -> bytes:
    """Decrypt a base64 AES-256-GCM blob to bytes.

    Raises:
        AuthenticationFailure: If the blob cannot be decoded, is too short,
            or its authentication tag does not verify.
    """
    cipher = AESGCM(_key_bytes(key))
    try:
        combined = b64decode(blob)
    except ValueError as err:
        raise AuthenticationFailure("Ciphertext is not valid base64") from err
    _min = IV_LENGTH + TAG_LENGTH
    if len(combined) < _min:
        raise AuthenticationFailure(
            f"Ciphertext too short: {len(combined)} bytes (minimum {_min})"
        )
    iv = combined[:IV_LENGTH]
    ct = combined[IV_LENGTH:]
    try:
        return cipher.decrypt(iv, ct, None)
    except InvalidTag as err:
        raise AuthenticationFailure("Authentication tag mismatch") from err


def decrypt(blob: str, key: KeyLike) -> str:
    """Decrypt a base64 AES-256-GCM blob to text."""
    return decrypt_raw(blob, key).decode("utf-8")


# ---------------------------------------------------------------------------
# Vault keys
# ---------------------------------------------------------------------------

def generate_vault_key() -> VaultKey:
    """Generate a random 256-bit vault key."""
    return VaultKey(os.urandom(KEY_LENGTH))


def export_key(key: VaultKey) -> bytes:
    """Export a vault key to raw bytes."""
    return key._raw


def import_key(raw: bytes) -> VaultKey:
    """Import raw bytes as a vault key.

    Raises:
        ValueError: If ``raw`` is not exactly 32 bytes.
    """
    return VaultKey(raw)
