"""
Cryptum - Hybrid envelope encryption with negotiable wire formats

RSA-OAEP protects a per-message session key, AES-256-GCM protects the
payload, and a shared WireFormat decides how the pieces are laid out.
"""

from .keys import (
    KeyPair,
    generate_key_pair,
    key_pair_to_text,
    encode_key_text,
    decode_key_text,
    public_key_from_text,
    private_key_from_text,
)
from .codec import encode_private, encode_public, decode_private, decode_public
from .wire_format import WireFormat, component_size
from .crypto import (
    OaepHash,
    encrypt_blob,
    decrypt_blob,
    constant_time_equals,
)
from .config import CryptumConfig
from .client import Cryptum
from .types import (
    ComponentKind,
    REQUIRED_COMPONENTS,
    FORMAT_VERSION,
    SESSION_KEY_SIZE,
    NONCE_SIZE,
    TAG_SIZE,
    CryptumError,
    KeyGenerationError,
    KeyEncodeError,
    KeyDecodeError,
    FormatError,
    EncryptionError,
    DecryptionError,
    AuthenticationError,
)

__version__ = "0.1.0"

__all__ = [
    # Keys
    "KeyPair",
    "generate_key_pair",
    "key_pair_to_text",
    "encode_key_text",
    "decode_key_text",
    "public_key_from_text",
    "private_key_from_text",
    # Codec
    "encode_private",
    "encode_public",
    "decode_private",
    "decode_public",
    # Wire format
    "WireFormat",
    "component_size",
    # Crypto
    "OaepHash",
    "encrypt_blob",
    "decrypt_blob",
    "constant_time_equals",
    # Client
    "CryptumConfig",
    "Cryptum",
    # Types
    "ComponentKind",
    "REQUIRED_COMPONENTS",
    "FORMAT_VERSION",
    "SESSION_KEY_SIZE",
    "NONCE_SIZE",
    "TAG_SIZE",
    # Errors
    "CryptumError",
    "KeyGenerationError",
    "KeyEncodeError",
    "KeyDecodeError",
    "FormatError",
    "EncryptionError",
    "DecryptionError",
    "AuthenticationError",
]
