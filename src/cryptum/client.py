"""
Cryptum client.

The Cryptum class provides a high-level API for generating key pairs and
encrypting or decrypting payloads into envelopes framed by a wire format.
"""

import asyncio
import logging
import threading
from typing import Optional, Tuple

from .config import CryptumConfig
from .crypto import decrypt_blob, encrypt_blob
from .keys import generate_key_pair, key_pair_to_text
from .types import FormatError
from .wire_format import WireFormat

logger = logging.getLogger(__name__)


class Cryptum:
    """
    High-level facade for hybrid envelope encryption.

    A Cryptum instance owns an optional default WireFormat. It is created
    lazily on first encryption and can be replaced with
    set_default_format(). Callers sharing one instance across threads
    should pass an explicit format to each call.

    Example usage:
        ```python
        cryptum = Cryptum()
        public_key, private_key = cryptum.generate_key_pair()

        envelope = cryptum.encrypt(b"Hello", public_key)
        payload = cryptum.decrypt(envelope, private_key)

        # The peer needs the same format
        descriptor = cryptum.get_or_create_default_format().serialize()
        ```
    """

    def __init__(
        self,
        config: Optional[CryptumConfig] = None,
        default_format: Optional[WireFormat] = None,
    ) -> None:
        """
        Initialize the facade.

        Args:
            config: Key generation, OAEP and padding parameters (default: CryptumConfig())
            default_format: Initial default format (default: created on first use)
        """
        self.config = config or CryptumConfig()
        self.config.validate()
        self._default_format = default_format
        self._format_lock = threading.Lock()

    @property
    def default_format(self) -> Optional[WireFormat]:
        """The current default format, or None if none has been created or set."""
        return self._default_format

    def get_or_create_default_format(self) -> WireFormat:
        """Returns the default format, generating a random one on first call."""
        with self._format_lock:
            if self._default_format is None:
                self._default_format = WireFormat.generate_random(
                    min_padding=self.config.min_padding,
                    max_padding=self.config.max_padding,
                )
                logger.debug("Created default wire format")
            return self._default_format

    def set_default_format(self, wire_format: WireFormat) -> None:
        """Sets the format used when none is passed explicitly."""
        if not isinstance(wire_format, WireFormat):
            raise TypeError(f"Expected WireFormat, got {type(wire_format).__name__}")
        with self._format_lock:
            self._default_format = wire_format

    def generate_key_pair(self) -> Tuple[str, str]:
        """
        Generate a new RSA key pair.

        Returns:
            Tuple of (public_key_text, private_key_text), base64url without padding
        """
        pair = generate_key_pair(
            modulus_bits=self.config.key_size,
            public_exponent=self.config.public_exponent,
            prime_certainty=self.config.prime_certainty,
        )
        return key_pair_to_text(pair)

    def encrypt(
        self,
        payload: bytes,
        public_key_text: str,
        wire_format: Optional[WireFormat] = None,
    ) -> bytes:
        """
        Encrypt a payload for the holder of a public key.

        Args:
            payload: Bytes to encrypt
            public_key_text: Recipient's public key text
            wire_format: Envelope layout (default: the instance's default format)

        Returns:
            Envelope bytes
        """
        if wire_format is None:
            wire_format = self.get_or_create_default_format()
        return encrypt_blob(payload, public_key_text, wire_format, self.config.oaep_hash)

    def decrypt(
        self,
        envelope: bytes,
        private_key_text: str,
        wire_format: Optional[WireFormat] = None,
    ) -> bytes:
        """
        Decrypt an envelope.

        Args:
            envelope: Envelope bytes
            private_key_text: Recipient's private key text
            wire_format: Envelope layout (default: the instance's default format)

        Returns:
            Decrypted payload

        Raises:
            FormatError: If no format is given and no default exists
        """
        if wire_format is None:
            wire_format = self._default_format
        if wire_format is None:
            raise FormatError("No wire format specified or set")
        return decrypt_blob(envelope, private_key_text, wire_format, self.config.oaep_hash)

    # MARK: - Async

    async def generate_key_pair_async(self) -> Tuple[str, str]:
        """generate_key_pair() in a worker thread."""
        return await asyncio.to_thread(self.generate_key_pair)

    async def encrypt_async(
        self,
        payload: bytes,
        public_key_text: str,
        wire_format: Optional[WireFormat] = None,
    ) -> bytes:
        """encrypt() in a worker thread."""
        return await asyncio.to_thread(self.encrypt, payload, public_key_text, wire_format)

    async def decrypt_async(
        self,
        envelope: bytes,
        private_key_text: str,
        wire_format: Optional[WireFormat] = None,
    ) -> bytes:
        """decrypt() in a worker thread."""
        return await asyncio.to_thread(self.decrypt, envelope, private_key_text, wire_format)
