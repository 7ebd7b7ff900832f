"""Hybrid RSA-OAEP + AES-256-GCM envelope encryption for Cryptum."""

import logging
import os
from enum import Enum
from typing import Tuple

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import constant_time, hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .keys import private_key_from_text, public_key_from_text
from .types import (
    NONCE_SIZE,
    SESSION_KEY_SIZE,
    TAG_SIZE,
    AuthenticationError,
    ComponentKind,
    DecryptionError,
    EncryptionError,
    KeyDecodeError,
)
from .wire_format import WireFormat

logger = logging.getLogger(__name__)


class OaepHash(Enum):
    """Hash used for RSA-OAEP and its MGF1 mask generation.

    SHA1 is the default for interoperability with existing deployments.
    New deployments should prefer SHA256 or stronger.
    """
    SHA1 = "sha1"
    SHA256 = "sha256"
    SHA384 = "sha384"
    SHA512 = "sha512"

    def algorithm(self) -> hashes.HashAlgorithm:
        """The cryptography hash algorithm instance."""
        return _HASH_ALGORITHMS[self]()


_HASH_ALGORITHMS = {
    OaepHash.SHA1: hashes.SHA1,
    OaepHash.SHA256: hashes.SHA256,
    OaepHash.SHA384: hashes.SHA384,
    OaepHash.SHA512: hashes.SHA512,
}


def _oaep(oaep_hash: OaepHash) -> padding.OAEP:
    return padding.OAEP(
        mgf=padding.MGF1(algorithm=oaep_hash.algorithm()),
        algorithm=oaep_hash.algorithm(),
        label=None,
    )


def _block_size(key) -> int:
    """Byte length of an RSA key's modulus."""
    return (key.key_size + 7) // 8


def constant_time_equals(a: bytes, b: bytes) -> bool:
    """
    Compare two byte strings in constant time.

    Buffers of different lengths compare unequal without any per-byte work.
    """
    if len(a) != len(b):
        return False
    return constant_time.bytes_eq(bytes(a), bytes(b))


def seal_payload(session_key: bytes, nonce: bytes, payload: bytes) -> Tuple[bytes, bytes]:
    """
    Encrypt a payload with AES-256-GCM and empty associated data.

    Returns:
        Tuple of (ciphertext, tag)
    """
    sealed = AESGCM(session_key).encrypt(nonce, payload, b"")
    return sealed[:-TAG_SIZE], sealed[-TAG_SIZE:]


def open_payload(session_key: bytes, nonce: bytes, ciphertext: bytes, tag: bytes) -> bytes:
    """
    Decrypt AES-256-GCM ciphertext and verify its tag.

    The candidate plaintext is recovered first, then the expected tag is
    recomputed over it and compared against the received tag.

    Raises:
        AuthenticationError: If the tag does not match
    """
    decryptor = Cipher(algorithms.AES(session_key), modes.GCM(nonce)).decryptor()
    candidate = decryptor.update(ciphertext)

    _, expected_tag = seal_payload(session_key, nonce, candidate)
    if not constant_time_equals(expected_tag, tag):
        raise AuthenticationError("Message authentication failed - data may be tampered")

    return candidate


def encrypt_blob(
    payload: bytes,
    public_key_text: str,
    wire_format: WireFormat,
    oaep_hash: OaepHash = OaepHash.SHA1,
) -> bytes:
    """
    Encrypt a payload for a recipient.

    Args:
        payload: Bytes to encrypt
        public_key_text: Recipient's base64url public key
        wire_format: Envelope layout
        oaep_hash: Hash for RSA-OAEP

    Returns:
        Envelope bytes

    Raises:
        KeyDecodeError: If the public key cannot be decoded
        EncryptionError: If the payload is not bytes-like or a primitive fails
    """
    if not isinstance(payload, (bytes, bytearray, memoryview)):
        raise EncryptionError(f"Payload must be bytes-like, got {type(payload).__name__}")

    public_key: rsa.RSAPublicKey = public_key_from_text(public_key_text)

    session_key = os.urandom(SESSION_KEY_SIZE)
    nonce = os.urandom(NONCE_SIZE)

    try:
        session_key_block = public_key.encrypt(session_key, _oaep(oaep_hash))
        ciphertext, tag = seal_payload(session_key, nonce, bytes(payload))
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise EncryptionError(f"Encryption failed: {exc}") from exc

    envelope = wire_format.pack(
        {
            ComponentKind.SESSION_KEY_BLOCK: session_key_block,
            ComponentKind.NONCE: nonce,
            ComponentKind.CIPHERTEXT: ciphertext,
            ComponentKind.TAG: tag,
        },
        rsa_block_size=_block_size(public_key),
    )
    logger.debug("Encrypted %d-byte payload into %d-byte envelope", len(ciphertext), len(envelope))
    return envelope


def decrypt_blob(
    envelope: bytes,
    private_key_text: str,
    wire_format: WireFormat,
    oaep_hash: OaepHash = OaepHash.SHA1,
) -> bytes:
    """
    Decrypt an envelope.

    Plaintext is only returned once the authentication tag has been
    verified.

    Args:
        envelope: Envelope bytes
        private_key_text: Recipient's base64url private key
        wire_format: Envelope layout used at encryption
        oaep_hash: Hash for RSA-OAEP, same as at encryption

    Returns:
        Decrypted payload

    Raises:
        KeyDecodeError: If the private key or the unwrapped session key is invalid
        FormatError: If the envelope does not fit the wire format
        AuthenticationError: If the envelope fails authentication
        DecryptionError: If a primitive fails
    """
    private_key: rsa.RSAPrivateKey = private_key_from_text(private_key_text)
    components = wire_format.unpack(envelope, rsa_block_size=_block_size(private_key))

    try:
        session_key = private_key.decrypt(
            components[ComponentKind.SESSION_KEY_BLOCK], _oaep(oaep_hash)
        )
    except ValueError as exc:
        logger.warning("Session key block failed OAEP decoding")
        raise AuthenticationError("Session key block was not encrypted for this key") from exc
    except UnsupportedAlgorithm as exc:
        raise DecryptionError(f"Decryption failed: {exc}") from exc

    if len(session_key) != SESSION_KEY_SIZE:
        raise KeyDecodeError(
            f"Invalid session key size: {len(session_key)} bytes (expected {SESSION_KEY_SIZE})"
        )

    try:
        plaintext = open_payload(
            session_key,
            components[ComponentKind.NONCE],
            components[ComponentKind.CIPHERTEXT],
            components[ComponentKind.TAG],
        )
    except AuthenticationError:
        logger.warning("Envelope failed tag verification")
        raise
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise DecryptionError(f"Decryption failed: {exc}") from exc

    return plaintext
