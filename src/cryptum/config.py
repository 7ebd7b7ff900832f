"""Configuration for the Cryptum facade."""

from dataclasses import dataclass

from .crypto import OaepHash
from .types import (
    DEFAULT_KEY_SIZE,
    DEFAULT_MAX_PADDING,
    DEFAULT_MIN_PADDING,
    DEFAULT_PRIME_CERTAINTY,
    DEFAULT_PUBLIC_EXPONENT,
    MAX_PADDING_LENGTH,
    MIN_KEY_SIZE,
)


@dataclass
class CryptumConfig:
    """Key generation, OAEP and padding parameters."""

    key_size: int = DEFAULT_KEY_SIZE
    """RSA modulus size in bits."""

    public_exponent: int = DEFAULT_PUBLIC_EXPONENT
    """RSA public exponent."""

    prime_certainty: int = DEFAULT_PRIME_CERTAINTY
    """Primality confidence. Only checked to be positive; never passed to the
    generator, which chooses its own Miller-Rabin rounds."""

    oaep_hash: OaepHash = OaepHash.SHA1
    """Hash for RSA-OAEP and MGF1."""

    min_padding: int = DEFAULT_MIN_PADDING
    """Smallest padding length for generated formats."""

    max_padding: int = DEFAULT_MAX_PADDING
    """Largest padding length for generated formats."""

    @classmethod
    def legacy(cls) -> "CryptumConfig":
        """Creates configuration compatible with SHA-1 OAEP deployments."""
        return cls()

    @classmethod
    def modern(cls) -> "CryptumConfig":
        """Creates configuration using SHA-256 OAEP."""
        return cls(oaep_hash=OaepHash.SHA256)

    def validate(self) -> None:
        """Raises ValueError if any parameter is out of range."""
        if self.key_size < MIN_KEY_SIZE:
            raise ValueError(f"key_size must be at least {MIN_KEY_SIZE}, got {self.key_size}")
        if self.prime_certainty < 1:
            raise ValueError(f"prime_certainty must be positive, got {self.prime_certainty}")
        if not isinstance(self.oaep_hash, OaepHash):
            raise ValueError(f"oaep_hash must be an OaepHash, got {self.oaep_hash!r}")
        if not 0 <= self.min_padding <= self.max_padding <= MAX_PADDING_LENGTH:
            raise ValueError(
                f"Padding range must satisfy 0 <= min <= max <= {MAX_PADDING_LENGTH}, "
                f"got {self.min_padding}..{self.max_padding}"
            )
