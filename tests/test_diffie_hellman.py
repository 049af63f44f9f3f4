"""
Unit tests for Diffie-Hellman key exchange.

Tests:
- Agreement with generated and supplied parameters
- Parameter validation
- Peer validation and key derivation
"""

import pytest
from bigvault.core_math.bigint import BigInt
from bigvault.core_math.number_theory import is_primitive_root, is_probably_prime
from bigvault.key_exchange.diffie_hellman import (
    DiffieHellmanParty, DiffieHellmanResult, generate_dh, primality_rounds
)
from bigvault.errors import ParseError, PolicyViolation


class TestGenerateDH:
    """Tests for the full two-party exchange."""

    def test_textbook_example(self):
        """p = 23, g = 5, a = 6, b = 15 agree on 2."""
        result = generate_dh(23, 5, 6, 15)
        assert result.public_a == 8
        assert result.public_b == 19
        assert result.shared_secret_a == 2
        assert result.shared_secret_b == 2
        assert result.agreed
        assert result.shared_secret == 2

    def test_generated_parameters(self):
        """Missing parameters are generated and still agree."""
        result = generate_dh()
        assert 5 <= result.prime.digit_length() <= 10
        assert is_probably_prime(result.prime)
        assert is_primitive_root(result.base, result.prime)
        assert 2 <= result.secret_a <= result.prime - 2
        assert result.agreed

    def test_generated_base_for_supplied_prime(self):
        result = generate_dh(prime=1000003)
        assert is_primitive_root(result.base, 1000003)
        assert result.agreed

    def test_large_secrets(self):
        """Secrets longer than the prime are allowed."""
        result = generate_dh("1000003", "2", "9" * 60, "12345678901234567890")
        assert result.agreed
        assert result.secret_a == BigInt.from_str("9" * 60)

    def test_public_values(self):
        """Public values are base^secret mod prime."""
        result = generate_dh(1000003, 2, 777, 888)
        assert result.public_a == pow(2, 777, 1000003)
        assert result.public_b == pow(2, 888, 1000003)
        assert result.shared_secret == pow(2, 777 * 888, 1000003)

    def test_disagreement_is_reported(self):
        """shared_secret refuses to pick a side when the parties differ."""
        one = BigInt.from_int(1)
        result = DiffieHellmanResult(*(BigInt.from_int(v) for v in (23, 5, 6, 15, 8, 19)), one, one + 1)
        assert not result.agreed
        with pytest.raises(RuntimeError):
            result.shared_secret


class TestDHValidation:
    """Supplied parameters are checked."""

    def test_composite_prime(self):
        with pytest.raises(PolicyViolation, match="not a prime"):
            generate_dh(prime=1000001)

    def test_prime_too_long(self):
        with pytest.raises(PolicyViolation):
            generate_dh(prime="1" + "0" * 100 + "7")

    def test_prime_too_small(self):
        with pytest.raises(PolicyViolation):
            generate_dh(prime=3)

    def test_base_not_primitive_root(self):
        """2 has order 11 modulo 23."""
        with pytest.raises(PolicyViolation, match="primitive root"):
            generate_dh(23, 2)

    @pytest.mark.parametrize("secret", [0, -5])
    def test_secret_must_be_positive(self, secret):
        with pytest.raises(PolicyViolation):
            generate_dh(23, 5, secret, 15)

    def test_non_numeric_parameter(self):
        with pytest.raises(ParseError):
            generate_dh(prime="twenty-three")

    def test_primality_rounds_shrink_with_length(self):
        assert [primality_rounds(n) for n in (10, 30, 60, 100)] == [20, 10, 3, 1]


class TestDiffieHellmanParty:
    """Tests for one side of the exchange."""

    def test_parties_agree(self):
        alice = DiffieHellmanParty(1000003, 2)
        bob = DiffieHellmanParty(1000003, 2)
        assert alice.derive_shared_secret(bob.public_value) == \
            bob.derive_shared_secret(alice.public_value)

    def test_random_secret_range(self):
        party = DiffieHellmanParty(23, 5)
        assert 2 <= party.secret <= 21

    @pytest.mark.parametrize("peer", [0, 1, 22, 23, 100])
    def test_peer_validation(self, peer):
        """Peer values outside (1, p-1) are rejected."""
        party = DiffieHellmanParty(23, 5, 6)
        with pytest.raises(PolicyViolation):
            party.derive_shared_secret(peer)

    def test_compute_skips_validation(self):
        """The raw computation accepts any peer value."""
        party = DiffieHellmanParty(23, 5, 6)
        assert party.compute_shared_secret(1) == 1

    def test_derive_key(self):
        """Both sides derive the same 32-byte key."""
        alice = DiffieHellmanParty(1000003, 2)
        bob = DiffieHellmanParty(1000003, 2)
        key_a = alice.derive_key(bob.public_value)
        key_b = bob.derive_key(alice.public_value)
        assert key_a == key_b
        assert len(key_a) == 32

    def test_derive_key_context(self):
        """Different info strings give different keys."""
        alice = DiffieHellmanParty(1000003, 2, 1234)
        bob = DiffieHellmanParty(1000003, 2, 4321)
        assert alice.derive_key(bob.public_value, info=b"one") != \
            alice.derive_key(bob.public_value, info=b"two")
