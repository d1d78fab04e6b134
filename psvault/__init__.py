"""PSVault.

Client-side cryptographic core of the PSVault password manager.
"""
from .version import __version__
from .exceptions import (
    VaultError,
    MalformedEnvelope,
    MalformedPayload,
    AuthenticationFailure,
    DecryptionFailure,
    WrongPasswordOrCorruptEnvelope,
    VaultLockedError,
    UnsupportedVersion,
)
from .models import SecretType, SecretMetadata, VaultRecord, SecretRecord
from .data import PersistedVaultIndex
from .vault import VaultSession, VaultConfig, generate_password

__all__ = (
    "__version__",
    "VaultError",
    "MalformedEnvelope",
    "MalformedPayload",
    "AuthenticationFailure",
    "DecryptionFailure",
    "WrongPasswordOrCorruptEnvelope",
    "VaultLockedError",
    "UnsupportedVersion",
    "SecretType",
    "SecretMetadata",
    "VaultRecord",
    "SecretRecord",
    "PersistedVaultIndex",
    "VaultSession",
    "VaultConfig",
    "generate_password",
)
