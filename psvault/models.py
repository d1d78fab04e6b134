"""
PSVault Models.

Persisted records are ``datamodel`` models so they serialize through
jsonpickle alongside the rest of the vault index. Decrypted payloads are
validated with pydantic and never persisted.
"""
from enum import Enum
from typing import Any, Optional

from datamodel import BaseModel
from pydantic import BaseModel as PydanticModel, ConfigDict, Field


class SecretType(str, Enum):
    PASSWORD = "password"
    NOTE = "note"
    API_KEY = "api_key"
    CARD = "card"


class SecretMetadata(PydanticModel):
    """Plaintext metadata used for listing and search. Never secret material."""

    title: str = Field(min_length=1, max_length=200)
    domain: Optional[str] = Field(default=None, max_length=255)
    tags: list[str] = Field(default_factory=list)


# --- Decrypted payload schemas ---

class _Payload(PydanticModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class PasswordPayload(_Payload):
    username: Optional[str] = None
    password: Optional[str] = None


class NotePayload(_Payload):
    note: Optional[str] = None


class ApiKeyPayload(_Payload):
    api_key: Optional[str] = Field(default=None, alias="apiKey")


class CardPayload(_Payload):
    card_number: Optional[str] = Field(default=None, alias="cardNumber")
    card_holder: Optional[str] = Field(default=None, alias="cardHolder")
    expiry_date: Optional[str] = Field(default=None, alias="expiryDate")
    cvv: Optional[str] = None


PAYLOAD_SCHEMAS: dict[SecretType, type[_Payload]] = {
    SecretType.PASSWORD: PasswordPayload,
    SecretType.NOTE: NotePayload,
    SecretType.API_KEY: ApiKeyPayload,
    SecretType.CARD: CardPayload,
}


# --- Persisted records ---

class VaultRecord(BaseModel):
    """Non-sensitive vault metadata, including the opaque key envelope."""
    id: str
    name: str
    description: Optional[str] = None
    encrypted_key: Optional[str] = None
    key_encryption_version: Optional[int] = None

    def to_api(self) -> dict[str, Any]:
        data = {"id": self.id, "name": self.name}
        if self.description is not None:
            data["description"] = self.description
        if self.encrypted_key is not None:
            data["encryptedKey"] = self.encrypted_key
            data["keyEncryptionVersion"] = self.key_encryption_version
        return data

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "VaultRecord":
        return cls(
            id=data["id"],
            name=data["name"],
            description=data.get("description"),
            encrypted_key=data.get("encryptedKey"),
            key_encryption_version=data.get("keyEncryptionVersion"),
        )


class SecretRecord(BaseModel):
    """An encrypted secret as exchanged with the storage layer."""
    id: str
    vault_id: str
    type: str
    encrypted_payload: str
    encryption_version: int
    metadata: dict

    def to_api(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "vaultId": self.vault_id,
            "type": self.type,
            "encryptedPayload": self.encrypted_payload,
            "encryptionVersion": self.encryption_version,
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "SecretRecord":
        return cls(
            id=data["id"],
            vault_id=data["vaultId"],
            type=data["type"],
            encrypted_payload=data["encryptedPayload"],
            encryption_version=data["encryptionVersion"],
            metadata=dict(data.get("metadata") or {}),
        )
