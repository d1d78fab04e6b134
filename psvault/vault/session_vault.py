"""
VaultSession: Unlock state and secret encryption bound to a user session.

Provides the public API of the vault client core:
- ``create_vault(...)``: generate and wrap a new vault key (vault starts unlocked)
- ``unlock(vault, master_password)``: unwrap the vault key into the session cache
- ``lock(vault_id)`` / ``vault_deleted(vault_id)`` / ``sign_out()``: drop keys
- ``encrypt_secret(...)`` / ``decrypt_secret(secret)``: seal and open payloads
- ``needs_unlock(vault)``: whether the caller must prompt for the password
- ``generate_password()``: random password using the configured defaults

Every step completes before the next starts: derive → decrypt → import →
publish to the cache, and only then may a secret be decrypted with the key.
Key derivation runs in a worker thread so the event loop is not blocked.

Security Note:
    Never log passwords, keys, plaintext or ciphertext values. Only log vault
    ids, secret ids, operations and versions. Decrypted payloads are returned
    to the caller and never cached here.
"""
import uuid
import asyncio
import logging
from typing import Any, Optional, Union

from ..exceptions import AuthenticationFailure, MalformedEnvelope
from ..models import SecretMetadata, SecretRecord, SecretType, VaultRecord
from .codec import Payload, decrypt_payload, encrypt_payload, validate_payload
from .config import VaultConfig, key_encryption_scheme, payload_encryption_scheme
from .crypto import generate_vault_key
from .envelope import wrap_vault_key
from .generator import CharsetFlags, generate
from .lock_state import LockState, SessionKeyCache, VaultLockState

logger = logging.getLogger("psvault.vault")


class VaultSession:
    """Session context owning the unlocked vault keys.

    One instance per signed-in session; pass it explicitly to whatever needs
    key access. Nothing in it is persisted.
    """

    def __init__(
        self,
        config: Optional[VaultConfig] = None,
        cache: Optional[SessionKeyCache] = None,
    ):
        self._config = config or VaultConfig()
        self._state = VaultLockState(cache or SessionKeyCache())

    def __repr__(self) -> str:
        return f"<VaultSession unlocked={self._state.cache.vault_ids()}>"

    async def __aenter__(self) -> "VaultSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.sign_out()

    @property
    def config(self) -> VaultConfig:
        return self._config

    # ------------------------------------------------------------------
    # Lock state
    # ------------------------------------------------------------------

    def state(self, vault_id: str) -> LockState:
        return self._state.state(vault_id)

    def is_unlocked(self, vault_id: str) -> bool:
        return self._state.is_unlocked(vault_id)

    def needs_unlock(self, vault: VaultRecord) -> bool:
        """True when the vault has a key envelope but no cached key."""
        return bool(vault.encrypted_key) and not self._state.is_unlocked(vault.id)

    async def create_vault(
        self,
        vault_id: str,
        name: str,
        master_password: str,
        description: Optional[str] = None,
    ) -> VaultRecord:
        """Generate a vault key, wrap it, and cache it for this session.

        Returns:
            VaultRecord carrying the envelope, ready to be persisted.
        """
        vault_key = generate_vault_key()
        envelope = await asyncio.to_thread(wrap_vault_key, vault_key, master_password)
        self._state.publish(vault_id, vault_key)
        logger.info(
            "Vault created: vault=%s key_encryption_version=%d",
            vault_id, self._config.key_encryption_version,
        )
        return VaultRecord(
            id=vault_id,
            name=name,
            description=description,
            encrypted_key=envelope,
            key_encryption_version=self._config.key_encryption_version,
        )

    async def unlock(self, vault: VaultRecord, master_password: str) -> None:
        """Unwrap the vault key with the master password and cache it.

        Raises:
            MalformedEnvelope: If the vault has no usable envelope.
            UnsupportedVersion: If the envelope version is unknown.
            WrongPasswordOrCorruptEnvelope: If the password is wrong.
        """
        if not vault.encrypted_key:
            raise MalformedEnvelope(f"Vault {vault.id} has no key envelope")
        key_encryption_scheme(vault.key_encryption_version)
        await asyncio.to_thread(
            self._state.unlock, vault.id, vault.encrypted_key, master_password,
        )

    def lock(self, vault_id: str) -> None:
        self._state.lock(vault_id)

    def vault_deleted(self, vault_id: str) -> None:
        self._state.forget(vault_id)

    def sign_out(self) -> None:
        self._state.lock_all()

    # ------------------------------------------------------------------
    # Secrets
    # ------------------------------------------------------------------

    async def encrypt_secret(
        self,
        vault_id: str,
        secret_type: Union[SecretType, str],
        payload: Payload,
        metadata: Union[SecretMetadata, dict[str, Any]],
        secret_id: Optional[str] = None,
    ) -> SecretRecord:
        """Encrypt a new secret payload under the vault key.

        Raises:
            VaultLockedError: If the vault is locked.
            MalformedPayload: If the payload does not match its type.
        """
        key = self._state.require_key(vault_id)
        data = validate_payload(secret_type, payload)
        secret_type = SecretType(secret_type)
        meta = SecretMetadata.model_validate(metadata)
        record = SecretRecord(
            id=secret_id or str(uuid.uuid4()),
            vault_id=vault_id,
            type=secret_type.value,
            encrypted_payload=encrypt_payload(data, key),
            encryption_version=self._config.encryption_version,
            metadata=meta.model_dump(exclude_none=True),
        )
        logger.debug(
            "Secret encrypted: vault=%s secret=%s type=%s",
            vault_id, record.id, record.type,
        )
        return record

    async def decrypt_secret(self, secret: SecretRecord) -> dict[str, Any]:
        """Decrypt a secret payload with the cached vault key.

        Raises:
            VaultLockedError: If the vault is locked.
            UnsupportedVersion: If the secret's encryption version is unknown.
            DecryptionFailure: If the ciphertext does not authenticate.
            MalformedPayload: If the plaintext is not a JSON object.
        """
        key = self._state.require_key(secret.vault_id)
        payload_encryption_scheme(secret.encryption_version)
        try:
            payload = decrypt_payload(secret.encrypted_payload, key)
        except AuthenticationFailure:
            logger.warning(
                "Secret decryption failed: vault=%s secret=%s",
                secret.vault_id, secret.id,
            )
            raise
        logger.debug(
            "Secret decrypted: vault=%s secret=%s", secret.vault_id, secret.id,
        )
        return payload

    async def reencrypt_secret(
        self,
        secret: SecretRecord,
        payload: Payload,
        metadata: Union[SecretMetadata, dict[str, Any], None] = None,
    ) -> SecretRecord:
        """Replace a secret's payload, keeping its id, vault and type."""
        return await self.encrypt_secret(
            secret.vault_id,
            secret.type,
            payload,
            metadata if metadata is not None else secret.metadata,
            secret_id=secret.id,
        )

    # ------------------------------------------------------------------
    # Passwords
    # ------------------------------------------------------------------

    def generate_password(
        self,
        length: Optional[int] = None,
        flags: Optional[CharsetFlags] = None,
    ) -> str:
        """Generate a password; unset arguments fall back to the config."""
        if length is None:
            length = self._config.password_length
        if flags is None:
            flags = CharsetFlags.from_config(self._config)
        return generate(length, flags)
