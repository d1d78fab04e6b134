"""
PSVault Exceptions.

Structural errors (``MalformedEnvelope``, ``MalformedPayload``) are raised
before any cryptographic work is attempted. Authentication errors cover every
tag-verification failure; wrong key and tampered data are indistinguishable
and must be reported to users the same way.
"""


class VaultError(Exception):
    """Base class for all vault errors."""


class MalformedEnvelope(VaultError):
    """The vault key envelope cannot be parsed."""


class MalformedPayload(VaultError):
    """A decrypted secret payload is not a valid JSON object."""


class AuthenticationFailure(VaultError):
    """AEAD tag verification failed (wrong key, tampering or corruption)."""


# Secret decryption failures surface under this name.
DecryptionFailure = AuthenticationFailure


class WrongPasswordOrCorruptEnvelope(AuthenticationFailure):
    """The master password did not open the vault key envelope."""

    def __init__(self, message: str = "Wrong password"):
        super().__init__(message)


class VaultLockedError(VaultError):
    """An operation needed a vault key that is not unlocked in this session."""

    def __init__(self, vault_id: str):
        self.vault_id = vault_id
        super().__init__(f"Vault {vault_id} is locked")


class UnsupportedVersion(VaultError):
    """A record was written with an encryption version this client does not know."""

    def __init__(self, field: str, version):
        self.field = field
        self.version = version
        super().__init__(f"Unsupported {field}: {version!r}")
