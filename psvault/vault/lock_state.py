"""
Vault Lock State: Session-scoped cache of unlocked vault keys.

Each vault is either LOCKED (no cached key) or UNLOCKED (key cached for this
session). A vault moves to UNLOCKED only after its envelope has been fully
unwrapped, and back to LOCKED on explicit lock, vault deletion or sign-out.

Security Note:
    The cache lives in process memory only. It refuses serialization and is
    constructed fresh for every session; never persist or transmit it.
"""
import logging
import threading
from enum import Enum
from typing import Optional

from ..exceptions import VaultLockedError
from .crypto import VaultKey
from .envelope import unwrap_vault_key

logger = logging.getLogger("psvault.vault")


class LockState(str, Enum):
    LOCKED = "locked"
    UNLOCKED = "unlocked"


class SessionKeyCache:
    """In-memory mapping of vault_id to VaultKey.

    Writes are single-slot assignments under a lock; when two unlocks race
    for the same vault the last one to complete wins.
    """

    def __init__(self) -> None:
        self._keys: dict[str, VaultKey] = {}
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"<SessionKeyCache unlocked={len(self)}>"

    def put(self, vault_id: str, key: VaultKey) -> None:
        if not isinstance(key, VaultKey):
            raise TypeError("SessionKeyCache only holds VaultKey instances")
        with self._lock:
            self._keys[vault_id] = key

    def get(self, vault_id: str) -> Optional[VaultKey]:
        with self._lock:
            return self._keys.get(vault_id)

    def discard(self, vault_id: str) -> bool:
        """Remove a vault key. Returns True if one was cached."""
        with self._lock:
            return self._keys.pop(vault_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._keys.clear()

    def vault_ids(self) -> list[str]:
        with self._lock:
            return list(self._keys)

    def __contains__(self, vault_id: object) -> bool:
        with self._lock:
            return vault_id in self._keys

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)

    # --- Serialization is refused ---

    def __getstate__(self):
        raise TypeError("SessionKeyCache cannot be serialized")

    def __reduce_ex__(self, protocol):
        raise TypeError("SessionKeyCache cannot be serialized")

    def __copy__(self):
        raise TypeError("SessionKeyCache cannot be copied")

    def __deepcopy__(self, memo):
        raise TypeError("SessionKeyCache cannot be copied")


class VaultLockState:
    """Lock/unlock state machine over a SessionKeyCache."""

    def __init__(self, cache: Optional[SessionKeyCache] = None):
        self._cache = cache if cache is not None else SessionKeyCache()

    @property
    def cache(self) -> SessionKeyCache:
        return self._cache

    def state(self, vault_id: str) -> LockState:
        if vault_id in self._cache:
            return LockState.UNLOCKED
        return LockState.LOCKED

    def is_unlocked(self, vault_id: str) -> bool:
        return self.state(vault_id) is LockState.UNLOCKED

    def get_key(self, vault_id: str) -> Optional[VaultKey]:
        """Return the cached key, or None if the vault is locked."""
        return self._cache.get(vault_id)

    def require_key(self, vault_id: str) -> VaultKey:
        """Return the cached key.

        Raises:
            VaultLockedError: If the vault is locked.
        """
        key = self._cache.get(vault_id)
        if key is None:
            raise VaultLockedError(vault_id)
        return key

    def unlock(self, vault_id: str, envelope: str, master_password: str) -> VaultKey:
        """Unwrap the vault key and publish it to the cache.

        The cache is written only after the unwrap has completed; a failed
        attempt leaves the cache untouched.

        Raises:
            MalformedEnvelope: If the envelope cannot be parsed.
            WrongPasswordOrCorruptEnvelope: If the password is wrong.
        """
        try:
            key = unwrap_vault_key(envelope, master_password)
        except Exception:
            logger.warning("Vault unlock failed: vault=%s", vault_id)
            raise
        self.publish(vault_id, key)
        logger.info("Vault unlocked: vault=%s", vault_id)
        return key

    def publish(self, vault_id: str, key: VaultKey) -> None:
        """Cache a vault key, moving the vault to UNLOCKED."""
        self._cache.put(vault_id, key)
        logger.debug("Vault key cached: vault=%s", vault_id)

    def lock(self, vault_id: str) -> None:
        if self._cache.discard(vault_id):
            logger.info("Vault locked: vault=%s", vault_id)

    def forget(self, vault_id: str) -> None:
        """Drop the key of a deleted vault."""
        self._cache.discard(vault_id)
        logger.debug("Vault forgotten: vault=%s", vault_id)

    def lock_all(self) -> None:
        count = len(self._cache)
        self._cache.clear()
        logger.info("All vaults locked (%d key(s) cleared)", count)
