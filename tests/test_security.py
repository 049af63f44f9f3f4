"""
Security tests for BigVault.

Tests specifically for security-related scenarios:
- Tampered and malformed ciphertext
- Out-of-bounds key material
- Invalid peer values
"""

import pytest

from bigvault.encoding import hex_decode, hex_encode
from bigvault.rsa.block_cipher import rsa_encrypt, rsa_decrypt
from bigvault.key_exchange.diffie_hellman import DiffieHellmanParty
from bigvault.errors import BigVaultError, ParseError, PolicyViolation


N = 853973422267356706552023052321669237747381039
E = 65537
D = 785068659202984180128008702924326110446768321


class TestCiphertextTampering:
    """Malformed ciphertext is rejected with ParseError."""

    def test_empty_ciphertext(self):
        with pytest.raises(ParseError):
            rsa_decrypt("", D, N)

    def test_odd_length_hex(self):
        with pytest.raises(ParseError):
            rsa_decrypt("ABC", D, N)

    def test_non_hex_characters(self):
        with pytest.raises(ParseError):
            rsa_decrypt("XYZW", D, N)

    def test_digit_byte_out_of_range(self):
        """Bytes 0x0A-0xFE can never appear inside a block."""
        with pytest.raises(ParseError):
            rsa_decrypt(hex_encode(b"\x01\x0a\x02"), D, N)

    def test_empty_block(self):
        """Two delimiters in a row leave an empty block."""
        raw = hex_decode(rsa_encrypt(b"hello", E, N))
        with pytest.raises(ParseError):
            rsa_decrypt(hex_encode(raw + b"\xff\xff" + raw), D, N)

    def test_trailing_delimiter(self):
        raw = hex_decode(rsa_encrypt(b"hello", E, N))
        with pytest.raises(ParseError):
            rsa_decrypt(hex_encode(raw + b"\xff"), D, N)

    def test_modified_digit(self):
        """Changing one digit of a block breaks the padding or the block width."""
        raw = bytearray(hex_decode(rsa_encrypt(b"attack at dawn", E, N)))
        raw[0] = (raw[0] + 1) % 10
        with pytest.raises(ParseError):
            rsa_decrypt(hex_encode(bytes(raw)), D, N)

    def test_errors_share_base_class(self):
        """Callers can catch every failure through BigVaultError."""
        with pytest.raises(BigVaultError):
            rsa_decrypt("not hex", D, N)


class TestKeyMaterial:
    """Key material outside the supported bounds."""

    def test_policy_checked_before_parsing(self):
        """A short modulus is reported even if the ciphertext is garbage."""
        with pytest.raises(PolicyViolation):
            rsa_decrypt("garbage", D, 35)

    def test_negative_modulus(self):
        with pytest.raises(PolicyViolation):
            rsa_encrypt(b"x", E, -N)

    def test_non_numeric_key(self):
        with pytest.raises(ParseError):
            rsa_encrypt(b"x", "sixty-five thousand", N)


class TestDHPeerValues:
    """Peer values from the trivial subgroup are refused."""

    def test_small_subgroup_values(self):
        party = DiffieHellmanParty(1000003, 2)
        for peer in (1, 1000002):
            with pytest.raises(PolicyViolation):
                party.derive_key(peer)
