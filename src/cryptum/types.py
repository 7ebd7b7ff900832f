"""Type definitions for Cryptum."""

from enum import IntEnum


class ComponentKind(IntEnum):
    """Envelope component kinds.

    The integer values are the ordinals written into a serialized wire
    format descriptor and must never change:

        0  VERSION            reserved
        1  SESSION_KEY_BLOCK  RSA-OAEP wrapped session key
        2  NONCE              AES-GCM nonce
        3  CIPHERTEXT         encrypted payload (variable length)
        4  TAG                AES-GCM authentication tag
        5  PADDING            reserved
    """
    VERSION = 0
    SESSION_KEY_BLOCK = 1
    NONCE = 2
    CIPHERTEXT = 3
    TAG = 4
    PADDING = 5


# Kinds every layout must carry, each exactly once
REQUIRED_COMPONENTS = (
    ComponentKind.SESSION_KEY_BLOCK,
    ComponentKind.NONCE,
    ComponentKind.CIPHERTEXT,
    ComponentKind.TAG,
)

# Wire format constants
FORMAT_VERSION = 1
MIN_COMPONENT_COUNT = 4
MAX_PADDING_LENGTH = 255
DEFAULT_MIN_PADDING = 8
DEFAULT_MAX_PADDING = 32

# Cipher constants
SESSION_KEY_SIZE = 32
NONCE_SIZE = 12
TAG_SIZE = 16
DEFAULT_RSA_BLOCK_SIZE = 512  # 4096-bit modulus

# Key generation constants
DEFAULT_KEY_SIZE = 4096
MIN_KEY_SIZE = 2048
DEFAULT_PUBLIC_EXPONENT = 65537
DEFAULT_PRIME_CERTAINTY = 64


# Exception types
class CryptumError(Exception):
    """Base exception for Cryptum errors."""
    pass


class KeyGenerationError(CryptumError):
    """Key pair generation failed or was given unacceptable parameters."""
    pass


class KeyEncodeError(CryptumError):
    """Key could not be encoded."""
    pass


class KeyDecodeError(CryptumError):
    """Key structure is malformed, has a bad version or OID, or a missing/zero field."""
    pass


class FormatError(CryptumError):
    """Malformed wire format descriptor, or envelope does not match the layout."""
    pass


class EncryptionError(CryptumError):
    """Encryption failed."""
    pass


class DecryptionError(CryptumError):
    """Decryption failed."""
    pass


class AuthenticationError(CryptumError):
    """Envelope failed authentication."""
    pass
