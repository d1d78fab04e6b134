"""Tests for vault configuration, version registry and records."""
import pytest
from pydantic import ValidationError

from psvault.exceptions import UnsupportedVersion
from psvault.models import SecretRecord, VaultRecord
from psvault.vault.config import (
    KEY_ENCRYPTION_SCHEMES,
    VaultConfig,
    key_encryption_scheme,
    payload_encryption_scheme,
)


class TestVersionRegistry:
    """Tests for scheme lookup."""

    def test_key_version_one(self):
        scheme = key_encryption_scheme(1)
        assert scheme.kdf == "pbkdf2-sha256"
        assert scheme.iterations == 100_000
        assert scheme.salt_length == 16
        assert scheme.cipher == "aes-256-gcm"

    def test_missing_key_version_is_legacy(self):
        assert key_encryption_scheme(None) is KEY_ENCRYPTION_SCHEMES[1]

    def test_unknown_key_version(self):
        with pytest.raises(UnsupportedVersion) as exc:
            key_encryption_scheme(2)
        assert exc.value.field == "keyEncryptionVersion"
        assert exc.value.version == 2

    def test_payload_version_one(self):
        assert payload_encryption_scheme(1).iv_length == 12

    def test_unknown_payload_version(self):
        with pytest.raises(UnsupportedVersion):
            payload_encryption_scheme(0)


class TestVaultConfig:
    """Tests for VaultConfig."""

    def test_defaults(self):
        config = VaultConfig()
        assert config.key_encryption_version == 1
        assert config.encryption_version == 1
        assert config.password_length == 16

    def test_rejects_unknown_versions(self):
        with pytest.raises(ValidationError):
            VaultConfig(key_encryption_version=5)
        with pytest.raises(ValidationError):
            VaultConfig(encryption_version=5)

    def test_password_length_bounds(self):
        with pytest.raises(ValidationError):
            VaultConfig(password_length=2)

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("PSVAULT_PASSWORD_LENGTH", "24")
        monkeypatch.delenv("PSVAULT_KEY_ENCRYPTION_VERSION", raising=False)
        monkeypatch.delenv("PSVAULT_ENCRYPTION_VERSION", raising=False)
        config = VaultConfig.from_env()
        assert config.password_length == 24
        assert config.key_encryption_version == 1

    def test_from_env_unknown_version(self, monkeypatch):
        monkeypatch.setenv("PSVAULT_ENCRYPTION_VERSION", "7")
        with pytest.raises(ValidationError):
            VaultConfig.from_env()


class TestApiRecords:
    """Tests for the camelCase boundary format."""

    def test_vault_to_api(self):
        vault = VaultRecord(id="v1", name="Home", encrypted_key="ZW52", key_encryption_version=1)
        assert vault.to_api() == {
            "id": "v1",
            "name": "Home",
            "encryptedKey": "ZW52",
            "keyEncryptionVersion": 1,
        }

    def test_vault_without_envelope(self):
        vault = VaultRecord.from_api({"id": "v1", "name": "Home", "description": "d"})
        assert vault.encrypted_key is None
        assert vault.to_api() == {"id": "v1", "name": "Home", "description": "d"}

    def test_secret_roundtrip(self):
        data = {
            "id": "s1",
            "vaultId": "v1",
            "type": "card",
            "encryptedPayload": "Y3Q=",
            "encryptionVersion": 1,
            "metadata": {"title": "Visa"},
        }
        assert SecretRecord.from_api(data).to_api() == data
