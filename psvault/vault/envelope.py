"""
Vault Key Envelope: Wrapping a vault key under the master password.

Format: base64([salt 16B][iv 12B][encrypted_vault_key 32B + GCM_tag 16B])

The salt is fresh for every wrap, so wrapping the same key twice yields two
unrelated envelopes. Unwrapping re-derives the master key from the embedded
salt; a tag mismatch means the password is wrong or the envelope is damaged,
and the two cases are reported identically.
"""
import logging

from ..exceptions import (
    AuthenticationFailure,
    MalformedEnvelope,
    WrongPasswordOrCorruptEnvelope,
)
from .crypto import (
    SALT_LENGTH,
    IV_LENGTH,
    TAG_LENGTH,
    VaultKey,
    b64decode,
    b64encode,
    decrypt_raw,
    derive_key,
    encrypt,
    export_key,
    import_key,
)

logger = logging.getLogger("psvault.vault")

MIN_ENVELOPE_LENGTH = SALT_LENGTH + IV_LENGTH + TAG_LENGTH


def wrap_vault_key(vault_key: VaultKey, master_password: str) -> str:
    """Encrypt a vault key with a key derived from the master password.

    Args:
        vault_key: The vault key to protect.
        master_password: User's master password.

    Returns:
        Envelope string suitable for ``vault.encryptedKey``.
    """
    raw = export_key(vault_key)
    master_key, salt = derive_key(master_password)
    sealed = b64decode(encrypt(raw, master_key))
    return b64encode(salt + sealed)


def unwrap_vault_key(envelope: str, master_password: str) -> VaultKey:
    """Recover a vault key from its envelope.

    Args:
        envelope: Envelope produced by :func:`wrap_vault_key`.
        master_password: User's master password.

    Returns:
        The unwrapped VaultKey.

    Raises:
        MalformedEnvelope: If the envelope cannot be decoded, is too short,
            or does not contain a 256-bit key.
        WrongPasswordOrCorruptEnvelope: If the authentication tag fails.
    """
    try:
        combined = b64decode(envelope)
    except ValueError as err:
        raise MalformedEnvelope("Envelope is not valid base64") from err
    if len(combined) < MIN_ENVELOPE_LENGTH:
        raise MalformedEnvelope(
            f"Envelope too short: {len(combined)} bytes "
            f"(minimum {MIN_ENVELOPE_LENGTH})"
        )
    salt = combined[:SALT_LENGTH]
    sealed = combined[SALT_LENGTH:]
    master_key, _ = derive_key(master_password, salt)
    try:
        raw = decrypt_raw(b64encode(sealed), master_key)
    except AuthenticationFailure as err:
        raise WrongPasswordOrCorruptEnvelope() from err
    try:
        return import_key(raw)
    except ValueError as err:
        raise MalformedEnvelope("Envelope does not contain a 256-bit key") from err
