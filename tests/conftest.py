"""Shared fixtures for Cryptum tests.

RSA key generation is slow, so key pairs are generated once per session.
"""

import pytest

from cryptum.keys import generate_key_pair, key_pair_to_text


@pytest.fixture(scope="session")
def key_pair_4096():
    """A 4096-bit key pair."""
    return generate_key_pair(4096)


@pytest.fixture(scope="session")
def alice_keys():
    """Alice's 2048-bit key pair."""
    return generate_key_pair(2048)


@pytest.fixture(scope="session")
def bob_keys():
    """Bob's 2048-bit key pair."""
    return generate_key_pair(2048)


@pytest.fixture(scope="session")
def alice_text(alice_keys):
    """Alice's (public_key_text, private_key_text)."""
    return key_pair_to_text(alice_keys)


@pytest.fixture(scope="session")
def bob_text(bob_keys):
    """Bob's (public_key_text, private_key_text)."""
    return key_pair_to_text(bob_keys)


@pytest.fixture(scope="session")
def text_4096(key_pair_4096):
    """4096-bit (public_key_text, private_key_text)."""
    return key_pair_to_text(key_pair_4096)
