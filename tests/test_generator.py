"""Tests for the password generator."""
import string

import pytest

from psvault.vault import generator
from psvault.vault.generator import SYMBOLS, CharsetFlags, generate, generate_password


class TestGeneratePassword:
    """Tests for generate_password() and generate()."""

    def test_uppercase_only(self):
        """Test a 16-char uppercase-only password."""
        flags = CharsetFlags(uppercase=True, lowercase=False, digits=False, symbols=False)
        result = generate(16, flags)
        assert len(result) == 16
        assert set(result) <= set(string.ascii_uppercase)

    def test_default_length(self):
        """Test default length is 16."""
        assert len(generate_password()) == 16

    def test_digits_only(self):
        """Test digits-only passwords."""
        result = generate_password(64, uppercase=False, lowercase=False, symbols=False)
        assert result.isdigit()
        assert len(result) == 64

    def test_symbols_only(self):
        """Test symbols-only passwords."""
        result = generate_password(32, uppercase=False, lowercase=False, digits=False)
        assert set(result) <= set(SYMBOLS)

    def test_all_classes_charset(self):
        """Test the full charset concatenation."""
        chars = CharsetFlags().charset()
        assert chars == (
            string.ascii_uppercase + string.ascii_lowercase + string.digits + SYMBOLS
        )

    def test_no_classes(self):
        """Test an empty character set is a caller error."""
        with pytest.raises(ValueError):
            generate_password(16, False, False, False, False)

    def test_zero_length(self):
        """Test length must be positive."""
        with pytest.raises(ValueError):
            generate_password(0)

    def test_uses_secrets_source(self, monkeypatch):
        """Test bytes come from secrets.token_bytes and map by modulo."""
        calls = []

        def fake_token_bytes(n):
            calls.append(n)
            return bytes([0, 1, 25, 26, 255])

        monkeypatch.setattr(generator.secrets, "token_bytes", fake_token_bytes)
        flags = CharsetFlags(uppercase=True, lowercase=False, digits=False, symbols=False)
        assert generate(5, flags) == "ABZAV"
        assert calls == [5]

    def test_outputs_differ(self):
        """Test two passwords are not the same."""
        assert generate_password(32) != generate_password(32)
