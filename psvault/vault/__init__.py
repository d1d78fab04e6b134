"""Vault: Client-side envelope encryption and session unlock state.

Security Note (Threat Model):
    The master password is used only for key derivation and is never stored.
    Unlocked vault keys live in process memory for the session lifetime;
    a memory dump of the client process could expose them. This is an
    accepted limitation, mitigation requires secure enclave integration
    which is out of scope.
"""

from .crypto import VaultKey, derive_key, encrypt, decrypt, decrypt_raw, generate_vault_key
from .envelope import wrap_vault_key, unwrap_vault_key
from .codec import encrypt_payload, decrypt_payload, validate_payload
from .lock_state import LockState, SessionKeyCache, VaultLockState
from .session_vault import VaultSession
from .generator import CharsetFlags, generate, generate_password
from .config import VaultConfig

__all__ = [
    "VaultKey",
    "derive_key",
    "encrypt",
    "decrypt",
    "decrypt_raw",
    "generate_vault_key",
    "wrap_vault_key",
    "unwrap_vault_key",
    "encrypt_payload",
    "decrypt_payload",
    "validate_payload",
    "LockState",
    "SessionKeyCache",
    "VaultLockState",
    "VaultSession",
    "CharsetFlags",
    "generate",
    "generate_password",
    "VaultConfig",
]
