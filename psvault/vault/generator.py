"""Random credential generation from a cryptographically secure source."""
import secrets
import string

from pydantic import BaseModel

from .config import VaultConfig

UPPERCASE = string.ascii_uppercase
LOWERCASE = string.ascii_lowercase
DIGITS = string.digits
SYMBOLS = "!@#$%^&*()_+-=[]{}|;:,.<>?"


class CharsetFlags(BaseModel):
    """Character classes enabled for a generated password."""

    uppercase: bool = True
    lowercase: bool = True
    digits: bool = True
    symbols: bool = True

    def charset(self) -> str:
        chars = ""
        if self.uppercase:
            chars += UPPERCASE
        if self.lowercase:
            chars += LOWERCASE
        if self.digits:
            chars += DIGITS
        if self.symbols:
            chars += SYMBOLS
        return chars

    @classmethod
    def from_config(cls, config: VaultConfig) -> "CharsetFlags":
        return cls(
            uppercase=config.password_uppercase,
            lowercase=config.password_lowercase,
            digits=config.password_digits,
            symbols=config.password_symbols,
        )


def generate(length: int, flags: CharsetFlags) -> str:
    """Generate a random password of ``length`` characters.

    Each character is picked by mapping one random byte into the active
    character set by modulo.

    Raises:
        ValueError: If ``length`` is below 1 or no character class is enabled.
    """
    if length < 1:
        raise ValueError("Password length must be at least 1")
    chars = flags.charset()
    if not chars:
        raise ValueError("At least one character class must be enabled")
    return "".join(chars[b % len(chars)] for b in secrets.token_bytes(length))


def generate_password(
    length: int = 16,
    uppercase: bool = True,
    lowercase: bool = True,
    digits: bool = True,
    symbols: bool = True,
) -> str:
    """Generate a random password; see :func:`generate`."""
    return generate(
        length,
        CharsetFlags(
            uppercase=uppercase,
            lowercase=lowercase,
            digits=digits,
            symbols=symbols,
        ),
    )
