"""
Vault Configuration: Encryption scheme registry and validated settings.

Persisted records carry an integer version next to every ciphertext:
    vault.keyEncryptionVersion : how the vault key envelope was produced
    secret.encryptionVersion   : how the secret payload was encrypted

Only versions registered here are accepted; anything else is rejected rather
than guessed. Settings are read from environment variables:
    PSVAULT_KEY_ENCRYPTION_VERSION = <integer>
    PSVAULT_ENCRYPTION_VERSION = <integer>
    PSVAULT_PASSWORD_LENGTH = <integer>
"""
import os
import logging
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ..exceptions import UnsupportedVersion
from .crypto import PBKDF2_ITERATIONS, SALT_LENGTH, IV_LENGTH

logger = logging.getLogger("psvault.vault")


class KeyEncryptionScheme(BaseModel):
    """Parameters of a vault key envelope version."""

    kdf: str
    iterations: int
    salt_length: int
    cipher: str

    model_config = {"frozen": True}


class PayloadEncryptionScheme(BaseModel):
    """Parameters of a secret payload encryption version."""

    cipher: str
    iv_length: int

    model_config = {"frozen": True}


KEY_ENCRYPTION_SCHEMES: dict[int, KeyEncryptionScheme] = {
    1: KeyEncryptionScheme(
        kdf="pbkdf2-sha256",
        iterations=PBKDF2_ITERATIONS,
        salt_length=SALT_LENGTH,
        cipher="aes-256-gcm",
    ),
}

PAYLOAD_ENCRYPTION_SCHEMES: dict[int, PayloadEncryptionScheme] = {
    1: PayloadEncryptionScheme(cipher="aes-256-gcm", iv_length=IV_LENGTH),
}

# Envelopes written before the version field existed are version 1.
LEGACY_KEY_ENCRYPTION_VERSION = 1


def key_encryption_scheme(version: Optional[int]) -> KeyEncryptionScheme:
    """Return the envelope scheme for ``version``.

    Raises:
        UnsupportedVersion: If the version is not registered.
    """
    if version is None:
        version = LEGACY_KEY_ENCRYPTION_VERSION
    try:
        return KEY_ENCRYPTION_SCHEMES[version]
    except (KeyError, TypeError):
        raise UnsupportedVersion("keyEncryptionVersion", version) from None


def payload_encryption_scheme(version: int) -> PayloadEncryptionScheme:
    """Return the payload scheme for ``version``.

    Raises:
        UnsupportedVersion: If the version is not registered.
    """
    try:
        return PAYLOAD_ENCRYPTION_SCHEMES[version]
    except (KeyError, TypeError):
        raise UnsupportedVersion("encryptionVersion", version) from None


class VaultConfig(BaseModel):
    """Validated vault client configuration."""

    key_encryption_version: int = Field(default=1)
    encryption_version: int = Field(default=1)
    password_length: int = Field(default=16, ge=4, le=256)
    password_uppercase: bool = True
    password_lowercase: bool = True
    password_digits: bool = True
    password_symbols: bool = True

    @field_validator("key_encryption_version")
    @classmethod
    def validate_key_encryption_version(cls, v: int) -> int:
        """Validate the envelope version is registered."""
        if v not in KEY_ENCRYPTION_SCHEMES:
            raise ValueError(f"Unsupported key encryption version: {v}")
        return v

    @field_validator("encryption_version")
    @classmethod
    def validate_encryption_version(cls, v: int) -> int:
        """Validate the payload version is registered."""
        if v not in PAYLOAD_ENCRYPTION_SCHEMES:
            raise ValueError(f"Unsupported encryption version: {v}")
        return v

    @classmethod
    def from_env(cls) -> "VaultConfig":
        """Create VaultConfig by loading values from environment.

        Returns:
            Populated VaultConfig instance.
        """
        values = {}
        for field, env in (
            ("key_encryption_version", "PSVAULT_KEY_ENCRYPTION_VERSION"),
            ("encryption_version", "PSVAULT_ENCRYPTION_VERSION"),
            ("password_length", "PSVAULT_PASSWORD_LENGTH"),
        ):
            raw = os.environ.get(env)
            if raw is not None:
                values[field] = int(raw)
        config = cls(**values)
        logger.debug(
            "Vault config: key_encryption_version=%d encryption_version=%d",
            config.key_encryption_version, config.encryption_version,
        )
        return config
