"""Tests for DER key encoding and decoding."""

import pytest
from cryptography.hazmat.primitives.asymmetric import ec

from cryptum.codec import (
    RSA_ENCRYPTION_OID,
    encode_private,
    encode_public,
    decode_private,
    decode_public,
)
from cryptum.types import KeyDecodeError, KeyEncodeError


def _tlv(tag: int, content: bytes) -> bytes:
    length = len(content)
    if length < 0x80:
        header = bytes([length])
    else:
        size = (length.bit_length() + 7) // 8
        header = bytes([0x80 | size]) + length.to_bytes(size, "big")
    return bytes([tag]) + header + content


def _int(value: int) -> bytes:
    return _tlv(0x02, value.to_bytes((value.bit_length() + 8) // 8, "big", signed=True))


def _seq(*parts: bytes) -> bytes:
    return _tlv(0x30, b"".join(parts))


def _algorithm(oid: bytes = RSA_ENCRYPTION_OID) -> bytes:
    return _seq(_tlv(0x06, oid), _tlv(0x05, b""))


def _private_fields(key):
    numbers = key.private_numbers()
    return [
        numbers.public_numbers.n,
        numbers.public_numbers.e,
        numbers.d,
        numbers.p,
        numbers.q,
        numbers.dmp1,
        numbers.dmq1,
        numbers.iqmp,
    ]


def _build_private(fields, version=0, inner_version=0, oid=RSA_ENCRYPTION_OID) -> bytes:
    inner = _seq(_int(inner_version), *(_int(v) for v in fields))
    return _seq(_int(version), _algorithm(oid), _tlv(0x04, inner))


def _build_public(n, e, oid=RSA_ENCRYPTION_OID) -> bytes:
    return _seq(_algorithm(oid), _tlv(0x03, b"\x00" + _seq(_int(n), _int(e))))


class TestEncoding:
    """Test DER encoding layout."""

    def test_private_structure(self, alice_keys) -> None:
        """Private keys encode as PKCS#8 with an inner RSAPrivateKey."""
        expected = _build_private(_private_fields(alice_keys.private_key))
        assert encode_private(alice_keys.private_key) == expected

    def test_public_structure(self, alice_keys) -> None:
        """Public keys encode as SubjectPublicKeyInfo with a BIT STRING."""
        numbers = alice_keys.public_key.public_numbers()
        expected = _build_public(numbers.n, numbers.e)
        assert encode_public(alice_keys.public_key) == expected

    def test_encode_rejects_other_key_types(self, alice_keys) -> None:
        """Only RSA keys can be encoded."""
        ec_key = ec.generate_private_key(ec.SECP256R1())
        with pytest.raises(KeyEncodeError):
            encode_private(ec_key)
        with pytest.raises(KeyEncodeError):
            encode_public(ec_key.public_key())
        with pytest.raises(KeyEncodeError):
            encode_public(alice_keys.private_key)


class TestDecoding:
    """Test DER decoding and validation."""

    def test_private_round_trip(self, key_pair_4096) -> None:
        """A 4096-bit private key survives encode/decode."""
        decoded = decode_private(encode_private(key_pair_4096.private_key))
        assert decoded.private_numbers() == key_pair_4096.private_key.private_numbers()

    def test_public_round_trip(self, key_pair_4096) -> None:
        """A 4096-bit public key survives encode/decode."""
        decoded = decode_public(encode_public(key_pair_4096.public_key))
        assert decoded.public_numbers() == key_pair_4096.public_key.public_numbers()

    def test_reject_outer_version(self, alice_keys) -> None:
        """PKCS#8 version must be 0."""
        data = _build_private(_private_fields(alice_keys.private_key), version=1)
        with pytest.raises(KeyDecodeError, match="PKCS#8 version"):
            decode_private(data)

    def test_reject_inner_version(self, alice_keys) -> None:
        """RSAPrivateKey version must be 0."""
        data = _build_private(_private_fields(alice_keys.private_key), inner_version=1)
        with pytest.raises(KeyDecodeError, match="private key version"):
            decode_private(data)

    def test_reject_wrong_oid(self, alice_keys) -> None:
        """Algorithm must be rsaEncryption."""
        # 1.2.840.10045.2.1 (id-ecPublicKey)
        ec_oid = bytes.fromhex("2a8648ce3d0201")
        numbers = alice_keys.public_key.public_numbers()

        with pytest.raises(KeyDecodeError, match="rsaEncryption"):
            decode_private(_build_private(_private_fields(alice_keys.private_key), oid=ec_oid))
        with pytest.raises(KeyDecodeError, match="rsaEncryption"):
            decode_public(_build_public(numbers.n, numbers.e, oid=ec_oid))

    @pytest.mark.parametrize("index", range(8))
    def test_reject_zero_private_component(self, alice_keys, index: int) -> None:
        """Every private key component must be non-zero."""
        fields = _private_fields(alice_keys.private_key)
        fields[index] = 0
        with pytest.raises(KeyDecodeError, match="zero"):
            decode_private(_build_private(fields))

    def test_reject_zero_public_component(self, alice_keys) -> None:
        """Modulus and exponent must be non-zero."""
        numbers = alice_keys.public_key.public_numbers()
        with pytest.raises(KeyDecodeError, match="zero"):
            decode_public(_build_public(0, numbers.e))
        with pytest.raises(KeyDecodeError, match="zero"):
            decode_public(_build_public(numbers.n, 0))

    def test_reject_missing_component(self, alice_keys) -> None:
        """A private key with a field missing is rejected."""
        fields = _private_fields(alice_keys.private_key)[:-1]
        with pytest.raises(KeyDecodeError, match="Missing"):
            decode_private(_build_private(fields))

    def test_reject_inconsistent_components(self, alice_keys, bob_keys) -> None:
        """Components from different keys do not form a valid key."""
        fields = _private_fields(alice_keys.private_key)
        fields[3] = _private_fields(bob_keys.private_key)[3]
        with pytest.raises(KeyDecodeError):
            decode_private(_build_private(fields))

    def test_reject_truncated(self, alice_keys) -> None:
        """Truncated DER is rejected."""
        data = encode_private(alice_keys.private_key)
        with pytest.raises(KeyDecodeError):
            decode_private(data[:-1])
        with pytest.raises(KeyDecodeError):
            decode_private(data[:10])
        with pytest.raises(KeyDecodeError):
            decode_private(b"")

    def test_reject_trailing_data(self, alice_keys) -> None:
        """Bytes after the structure are rejected."""
        with pytest.raises(KeyDecodeError, match="Trailing"):
            decode_private(encode_private(alice_keys.private_key) + b"\x00")
        with pytest.raises(KeyDecodeError, match="Trailing"):
            decode_public(encode_public(alice_keys.public_key) + b"\x00")

    def test_reject_wrong_structure(self, alice_keys) -> None:
        """Private and public structures are not interchangeable."""
        with pytest.raises(KeyDecodeError):
            decode_private(encode_public(alice_keys.public_key))
        with pytest.raises(KeyDecodeError):
            decode_public(encode_private(alice_keys.private_key))
