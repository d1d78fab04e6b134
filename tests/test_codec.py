"""
Tests for the secret payload codec.

Tests cover:
- encrypt/decrypt of structured payloads
- canonical serialization
- malformed payload detection apart from decryption failures
- per-type payload validation
"""
import orjson
import pytest

from psvault.exceptions import DecryptionFailure, MalformedPayload
from psvault.models import ApiKeyPayload, CardPayload, SecretType
from psvault.vault.codec import (
    decrypt_payload,
    deserialize_payload,
    encrypt_payload,
    serialize_payload,
    validate_payload,
)
from psvault.vault.crypto import encrypt, generate_vault_key


@pytest.fixture
def vault_key():
    return generate_vault_key()


class TestPayloadCodec:
    """Tests for encrypt_payload()/decrypt_payload()."""

    def test_login_scenario(self, vault_key):
        """Test a login payload is recovered by structural equality."""
        payload = {"username": "a@b.com", "password": "p@ss"}
        blob = encrypt_payload(payload, vault_key)
        assert decrypt_payload(blob, vault_key) == payload

    def test_nested_payload(self, vault_key):
        """Test nested structures survive."""
        payload = {"note": "x", "extra": {"list": [1, 2, {"a": None}]}}
        assert decrypt_payload(encrypt_payload(payload, vault_key), vault_key) == payload

    def test_pydantic_payload(self, vault_key):
        """Test pydantic payloads are dumped with wire field names."""
        blob = encrypt_payload(ApiKeyPayload(apiKey="sk-123"), vault_key)
        assert decrypt_payload(blob, vault_key) == {"apiKey": "sk-123"}

    def test_wrong_key(self, vault_key):
        """Test a different vault key raises DecryptionFailure."""
        blob = encrypt_payload({"note": "hi"}, vault_key)
        with pytest.raises(DecryptionFailure):
            decrypt_payload(blob, generate_vault_key())

    def test_not_json(self, vault_key):
        """Test authentic but non-JSON plaintext is a MalformedPayload."""
        blob = encrypt(b"\xff not json", vault_key)
        with pytest.raises(MalformedPayload):
            decrypt_payload(blob, vault_key)

    def test_json_not_object(self, vault_key):
        """Test a JSON array plaintext is a MalformedPayload."""
        blob = encrypt(b"[1, 2, 3]", vault_key)
        with pytest.raises(MalformedPayload):
            decrypt_payload(blob, vault_key)

    def test_malformed_is_not_decryption_failure(self, vault_key):
        """Test the two failure classes stay distinct."""
        blob = encrypt(b"plain text", vault_key)
        with pytest.raises(MalformedPayload) as exc:
            decrypt_payload(blob, vault_key)
        assert not isinstance(exc.value, DecryptionFailure)


class TestSerialization:
    """Tests for canonical JSON serialization."""

    def test_sorted_keys(self):
        """Test key order does not change the serialized form."""
        assert serialize_payload({"b": 1, "a": 2}) == serialize_payload({"a": 2, "b": 1})
        assert serialize_payload({"b": 1, "a": 2}) == b'{"a":2,"b":1}'

    def test_rejects_non_object(self):
        """Test top-level lists are rejected."""
        with pytest.raises(MalformedPayload):
            serialize_payload(["a", "b"])

    def test_rejects_unserializable(self):
        """Test values JSON cannot express are rejected."""
        with pytest.raises(MalformedPayload):
            serialize_payload({"obj": object()})

    def test_deserialize(self):
        """Test parsing canonical bytes."""
        assert deserialize_payload(orjson.dumps({"a": 1})) == {"a": 1}


class TestValidatePayload:
    """Tests for validate_payload()."""

    def test_password_payload(self):
        """Test a password payload passes unchanged."""
        data = {"username": "u", "password": "p"}
        assert validate_payload(SecretType.PASSWORD, data) == data

    def test_type_by_string(self):
        """Test the secret type may be given as its string value."""
        assert validate_payload("note", {"note": "hello"}) == {"note": "hello"}

    def test_card_aliases(self):
        """Test card fields use the camelCase wire names."""
        data = {"cardNumber": "4111", "cardHolder": "A B", "expiryDate": "01/30", "cvv": "123"}
        assert validate_payload(SecretType.CARD, data) == data

    def test_card_model(self):
        """Test a CardPayload model validates."""
        card = CardPayload(card_number="4111", cvv="999")
        assert validate_payload("card", card) == {"cardNumber": "4111", "cvv": "999"}

    def test_unknown_fields_are_kept(self):
        """Test extra fields from newer clients are preserved."""
        data = {"apiKey": "k", "scopes": "read"}
        assert validate_payload(SecretType.API_KEY, data) == data

    def test_wrong_field_type(self):
        """Test invalid field types are MalformedPayload."""
        with pytest.raises(MalformedPayload):
            validate_payload(SecretType.NOTE, {"note": ["not", "a", "string"]})

    def test_unknown_secret_type(self):
        """Test an unknown type is MalformedPayload."""
        with pytest.raises(MalformedPayload):
            validate_payload("ssh_key", {"key": "x"})
