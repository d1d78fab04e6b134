"""
Secret Codec: Structured secret payloads encrypted under a vault key.

Payloads are JSON objects serialized canonically (sorted keys) with orjson
and sealed with the vault key. A payload that decrypts but is not a JSON
object points at version skew or corruption, which is reported apart from
authentication failures.
"""
import logging
from typing import Any, Union

import orjson
from pydantic import BaseModel, ValidationError

from ..exceptions import MalformedPayload
from ..models import PAYLOAD_SCHEMAS, SecretType
from .crypto import KeyLike, decrypt_raw, encrypt

logger = logging.getLogger("psvault.vault")

Payload = Union[dict[str, Any], BaseModel]


def serialize_payload(payload: Payload) -> bytes:
    """Serialize a payload object to canonical JSON bytes.

    Raises:
        MalformedPayload: If the payload is not a JSON object or contains
            values JSON cannot represent.
    """
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(by_alias=True, exclude_none=True)
    if not isinstance(payload, dict):
        raise MalformedPayload(
            f"Secret payload must be an object, got {type(payload).__name__}"
        )
    try:
        return orjson.dumps(payload, option=orjson.OPT_SORT_KEYS)
    except TypeError as err:
        raise MalformedPayload(f"Secret payload is not serializable: {err}") from err


def deserialize_payload(data: bytes) -> dict[str, Any]:
    """Parse decrypted bytes back into a payload object.

    Raises:
        MalformedPayload: If ``data`` is not a JSON object.
    """
    try:
        parsed = orjson.loads(data)
    except orjson.JSONDecodeError as err:
        raise MalformedPayload("Decrypted payload is not valid JSON") from err
    if not isinstance(parsed, dict):
        raise MalformedPayload("Decrypted payload is not a JSON object")
    return parsed


def validate_payload(secret_type: Union[SecretType, str], payload: Payload) -> dict[str, Any]:
    """Validate a payload against the schema of its secret type.

    Returns:
        The payload as a plain dict using the wire field names.

    Raises:
        MalformedPayload: If the type is unknown or the payload does not match.
    """
    try:
        schema = PAYLOAD_SCHEMAS[SecretType(secret_type)]
    except ValueError as err:
        raise MalformedPayload(f"Unknown secret type: {secret_type!r}") from err
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(by_alias=True, exclude_none=True)
    try:
        model = schema.model_validate(payload)
    except ValidationError as err:
        raise MalformedPayload(
            f"Invalid {SecretType(secret_type).value} payload: "
            f"{err.error_count()} error(s)"
        ) from err
    return model.model_dump(by_alias=True, exclude_none=True)


def encrypt_payload(payload: Payload, vault_key: KeyLike) -> str:
    """Serialize and encrypt a payload.

    Returns:
        Base64 ciphertext suitable for ``secret.encryptedPayload``.
    """
    return encrypt(serialize_payload(payload), vault_key)


def decrypt_payload(encrypted_payload: str, vault_key: KeyLike) -> dict[str, Any]:
    """Decrypt and parse a payload.

    Raises:
        DecryptionFailure: If the ciphertext does not authenticate.
        MalformedPayload: If the plaintext is not a JSON object.
    """
    return deserialize_payload(decrypt_raw(encrypted_payload, vault_key))
