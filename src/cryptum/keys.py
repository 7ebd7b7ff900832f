"""RSA key generation and key text handling for Cryptum."""

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Tuple

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import rsa

from .codec import decode_private, decode_public, encode_private, encode_public
from .types import (
    DEFAULT_KEY_SIZE,
    DEFAULT_PRIME_CERTAINTY,
    DEFAULT_PUBLIC_EXPONENT,
    MIN_KEY_SIZE,
    KeyDecodeError,
    KeyGenerationError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeyPair:
    """An RSA key pair."""
    public_key: rsa.RSAPublicKey
    private_key: rsa.RSAPrivateKey

    @property
    def modulus_bits(self) -> int:
        """Size of the modulus in bits."""
        return self.public_key.key_size


def generate_key_pair(
    modulus_bits: int = DEFAULT_KEY_SIZE,
    public_exponent: int = DEFAULT_PUBLIC_EXPONENT,
    prime_certainty: int = DEFAULT_PRIME_CERTAINTY,
) -> KeyPair:
    """
    Generate a fresh RSA key pair.

    Randomness comes from the OpenSSL CSPRNG behind the cryptography
    library, which is seeded from the operating system.

    Args:
        modulus_bits: Modulus size in bits (minimum 2048)
        public_exponent: Public exponent (65537 unless interoperability requires 3)
        prime_certainty: Checked to be positive, then unused; the backend
            picks its own Miller-Rabin round count

    Returns:
        KeyPair

    Raises:
        KeyGenerationError: If the parameters are rejected
    """
    if modulus_bits < MIN_KEY_SIZE:
        raise KeyGenerationError(
            f"Modulus too small: {modulus_bits} bits (minimum {MIN_KEY_SIZE})"
        )
    if prime_certainty < 1:
        raise KeyGenerationError(f"Prime certainty must be positive, got {prime_certainty}")

    logger.debug("Generating %d-bit RSA key pair (e=%d)", modulus_bits, public_exponent)
    try:
        private_key = rsa.generate_private_key(
            public_exponent=public_exponent,
            key_size=modulus_bits,
        )
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise KeyGenerationError(f"Key generation failed: {exc}") from exc

    return KeyPair(public_key=private_key.public_key(), private_key=private_key)


def encode_key_text(der: bytes) -> str:
    """Encode DER bytes as unpadded base64url text."""
    return base64.urlsafe_b64encode(der).rstrip(b"=").decode("ascii")


def decode_key_text(text: str) -> bytes:
    """
    Decode unpadded (or padded) base64url key text into DER bytes.

    Raises:
        KeyDecodeError: If text is not valid base64url
    """
    text = text.strip()
    if "+" in text or "/" in text:
        raise KeyDecodeError("Key text is not valid base64url")
    # Add padding back
    padding = 4 - len(text) % 4
    if padding != 4:
        text += "=" * padding
    try:
        return base64.b64decode(text.encode("ascii"), altchars=b"-_", validate=True)
    except (binascii.Error, UnicodeEncodeError, ValueError) as exc:
        raise KeyDecodeError("Key text is not valid base64url") from exc


def key_pair_to_text(pair: KeyPair) -> Tuple[str, str]:
    """
    Encode a key pair as text.

    Returns:
        Tuple of (public_key_text, private_key_text)
    """
    return (
        encode_key_text(encode_public(pair.public_key)),
        encode_key_text(encode_private(pair.private_key)),
    )


def public_key_from_text(text: str) -> rsa.RSAPublicKey:
    """Decode base64url public key text into an RSA public key."""
    return decode_public(decode_key_text(text))


def private_key_from_text(text: str) -> rsa.RSAPrivateKey:
    """Decode base64url private key text into an RSA private key."""
    return decode_private(decode_key_text(text))
