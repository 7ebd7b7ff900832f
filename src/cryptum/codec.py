"""
DER encoding and decoding of RSA keys.

Two structures are supported:

    Private key (PKCS#8 PrivateKeyInfo):
        SEQUENCE {
            INTEGER 0
            SEQUENCE { OID rsaEncryption, NULL }
            OCTET STRING {
                SEQUENCE { 0, n, e, d, p, q, d mod (p-1), d mod (q-1), q^-1 mod p }
            }
        }

    Public key (X.509 SubjectPublicKeyInfo):
        SEQUENCE {
            SEQUENCE { OID rsaEncryption, NULL }
            BIT STRING { SEQUENCE { n, e } }
        }

Encoding is delegated to the cryptography library. Decoding walks the DER
structure itself so the version fields, algorithm OID and every integer
component can be checked before a key object is built.
"""

from typing import List

from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
)

from .types import KeyDecodeError, KeyEncodeError


# 1.2.840.113549.1.1.1
RSA_ENCRYPTION_OID = bytes.fromhex("2a864886f70d010101")

_TAG_INTEGER = 0x02
_TAG_BIT_STRING = 0x03
_TAG_OCTET_STRING = 0x04
_TAG_NULL = 0x05
_TAG_OID = 0x06
_TAG_SEQUENCE = 0x30

_PRIVATE_FIELDS = ("n", "e", "d", "p", "q", "dmp1", "dmq1", "iqmp")


class _DerReader:
    """Sequential reader over the elements of one DER constructed value."""

    def __init__(self, data: bytes) -> None:
        self._data = data
        self._offset = 0

    def at_end(self) -> bool:
        return self._offset >= len(self._data)

    def read(self, expected_tag: int) -> bytes:
        """Read the next element, which must carry expected_tag, and return its contents."""
        data = self._data
        if self._offset + 2 > len(data):
            raise KeyDecodeError("Missing or truncated DER element")

        tag = data[self._offset]
        if tag != expected_tag:
            raise KeyDecodeError(
                f"Unexpected DER tag 0x{tag:02x} (expected 0x{expected_tag:02x})"
            )

        length = data[self._offset + 1]
        offset = self._offset + 2
        if length & 0x80:
            num_bytes = length & 0x7F
            if num_bytes == 0 or num_bytes > 4:
                raise KeyDecodeError("Unsupported DER length encoding")
            if offset + num_bytes > len(data):
                raise KeyDecodeError("Missing or truncated DER element")
            length = int.from_bytes(data[offset : offset + num_bytes], "big")
            offset += num_bytes

        end = offset + length
        if end > len(data):
            raise KeyDecodeError("Missing or truncated DER element")

        self._offset = end
        return data[offset:end]

    def read_integer(self) -> int:
        content = self.read(_TAG_INTEGER)
        if not content:
            raise KeyDecodeError("Empty DER integer")
        return int.from_bytes(content, "big", signed=True)

    def finish(self) -> None:
        if not self.at_end():
            raise KeyDecodeError("Trailing data after DER structure")


def _unwrap(data: bytes, tag: int) -> bytes:
    """Return the contents of data, which must be exactly one element with the given tag."""
    reader = _DerReader(data)
    content = reader.read(tag)
    reader.finish()
    return content


def _check_algorithm(content: bytes) -> None:
    reader = _DerReader(content)
    if reader.read(_TAG_OID) != RSA_ENCRYPTION_OID:
        raise KeyDecodeError("Algorithm identifier is not rsaEncryption")
    if not reader.at_end():
        if reader.read(_TAG_NULL):
            raise KeyDecodeError("rsaEncryption parameters must be NULL")
    reader.finish()


def _require_positive(names, values: List[int]) -> None:
    for name, value in zip(names, values):
        if value <= 0:
            raise KeyDecodeError(f"RSA key component {name} is zero or negative")


def encode_private(key: rsa.RSAPrivateKey) -> bytes:
    """
    Encode an RSA private key as a DER PKCS#8 PrivateKeyInfo.

    Args:
        key: RSA private key

    Returns:
        DER bytes

    Raises:
        KeyEncodeError: If key is not an RSA private key
    """
    if not isinstance(key, rsa.RSAPrivateKey):
        raise KeyEncodeError(f"Expected an RSA private key, got {type(key).__name__}")
    return key.private_bytes(Encoding.DER, PrivateFormat.PKCS8, NoEncryption())


def encode_public(key: rsa.RSAPublicKey) -> bytes:
    """
    Encode an RSA public key as a DER SubjectPublicKeyInfo.

    Args:
        key: RSA public key

    Returns:
        DER bytes

    Raises:
        KeyEncodeError: If key is not an RSA public key
    """
    if not isinstance(key, rsa.RSAPublicKey):
        raise KeyEncodeError(f"Expected an RSA public key, got {type(key).__name__}")
    return key.public_bytes(Encoding.DER, PublicFormat.SubjectPublicKeyInfo)


def decode_private(data: bytes) -> rsa.RSAPrivateKey:
    """
    Decode a DER PKCS#8 PrivateKeyInfo into an RSA private key.

    Args:
        data: DER bytes

    Returns:
        RSA private key

    Raises:
        KeyDecodeError: If the structure is malformed, a version is not 0,
            the algorithm is not rsaEncryption, or a component is missing,
            zero or inconsistent
    """
    outer = _DerReader(_unwrap(bytes(data), _TAG_SEQUENCE))
    if outer.read_integer() != 0:
        raise KeyDecodeError("Unsupported PKCS#8 version")
    _check_algorithm(outer.read(_TAG_SEQUENCE))
    private_key_der = outer.read(_TAG_OCTET_STRING)
    outer.finish()

    inner = _DerReader(_unwrap(private_key_der, _TAG_SEQUENCE))
    if inner.read_integer() != 0:
        raise KeyDecodeError("Unsupported RSA private key version")
    values = [inner.read_integer() for _ in _PRIVATE_FIELDS]
    inner.finish()
    _require_positive(_PRIVATE_FIELDS, values)

    n, e, d, p, q, dmp1, dmq1, iqmp = values
    try:
        numbers = rsa.RSAPrivateNumbers(
            p=p,
            q=q,
            d=d,
            dmp1=dmp1,
            dmq1=dmq1,
            iqmp=iqmp,
            public_numbers=rsa.RSAPublicNumbers(e=e, n=n),
        )
        return numbers.private_key()
    except ValueError as exc:
        raise KeyDecodeError(f"Inconsistent RSA private key: {exc}") from exc


def decode_public(data: bytes) -> rsa.RSAPublicKey:
    """
    Decode a DER SubjectPublicKeyInfo into an RSA public key.

    Args:
        data: DER bytes

    Returns:
        RSA public key

    Raises:
        KeyDecodeError: If the structure is malformed, the algorithm is not
            rsaEncryption, or the modulus or exponent is missing or zero
    """
    outer = _DerReader(_unwrap(bytes(data), _TAG_SEQUENCE))
    _check_algorithm(outer.read(_TAG_SEQUENCE))
    bit_string = outer.read(_TAG_BIT_STRING)
    outer.finish()

    # First content octet is the unused-bit count
    if not bit_string or bit_string[0] != 0:
        raise KeyDecodeError("Malformed public key BIT STRING")

    inner = _DerReader(_unwrap(bit_string[1:], _TAG_SEQUENCE))
    n = inner.read_integer()
    e = inner.read_integer()
    inner.finish()
    _require_positive(("n", "e"), [n, e])

    try:
        return rsa.RSAPublicNumbers(e=e, n=n).public_key()
    except ValueError as exc:
        raise KeyDecodeError(f"Invalid RSA public key: {exc}") from exc
