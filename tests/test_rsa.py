"""
Unit tests for the RSA block cipher.

Tests:
- Key generation
- Known-answer encryption
- Encryption/decryption round trips
- Padding edge cases
"""

import pytest
from cryptography.hazmat.primitives.asymmetric.rsa import rsa_recover_prime_factors

from bigvault.core_math.bigint import BigInt
from bigvault.core_math.number_theory import is_probably_prime
from bigvault.encoding import hex_decode, hex_encode
from bigvault.rsa.block_cipher import (
    RSAKey, RSAKeyPair, generate_rsa_keypair, rsa_encrypt, rsa_decrypt,
    DEFAULT_PUBLIC_EXPONENT
)
from bigvault.errors import ParseError, PolicyViolation


# 45-digit modulus from two 23-digit primes
P = 31415926535897932384673
Q = 27182818284590452353743
N = 853973422267356706552023052321669237747381039
E = 65537
D = 785068659202984180128008702924326110446768321

HELLO_CIPHERTEXT = (
    "020605030101040701000608040804040902000507010908"
    "030506070203090607020308040400060001000704"
)
ZEROS_CIPHERTEXT = (
    "00FF080909050206050103060005020507000009060308080005"
    "010601040404090005070809060804010807060401"
)


@pytest.fixture(scope="module")
def keypair():
    """One generated key pair shared by the module."""
    return generate_rsa_keypair()


class TestKeyGeneration:
    """Tests for generate_rsa_keypair."""

    def test_modulus_length(self, keypair):
        """Default key pairs have a 46-digit modulus."""
        assert keypair.modulus.digit_length() == 46

    def test_primes(self, keypair):
        """Both factors should be distinct primes multiplying to n."""
        assert keypair.prime_p != keypair.prime_q
        assert keypair.prime_p * keypair.prime_q == keypair.modulus
        assert is_probably_prime(keypair.prime_p)
        assert is_probably_prime(keypair.prime_q)

    def test_exponents_are_inverse(self, keypair):
        """e * d = 1 mod phi(n)."""
        phi = (keypair.prime_p - 1) * (keypair.prime_q - 1)
        assert (keypair.public_exponent * keypair.private_exponent) % phi == 1

    def test_default_public_exponent(self, keypair):
        """65537 is used unless it shares a factor with phi(n)."""
        assert keypair.public_exponent >= DEFAULT_PUBLIC_EXPONENT
        assert keypair.public_exponent.is_odd()

    def test_cryptography_recovers_same_primes(self, keypair):
        """An independent implementation should recover p and q from (n, e, d)."""
        recovered = rsa_recover_prime_factors(
            int(keypair.modulus), int(keypair.public_exponent), int(keypair.private_exponent)
        )
        assert set(recovered) == {int(keypair.prime_p), int(keypair.prime_q)}

    def test_custom_length(self):
        """Longer moduli can be requested."""
        assert generate_rsa_keypair(50).modulus.digit_length() == 50

    def test_short_modulus_rejected(self):
        """Key lengths under 40 digits are refused."""
        with pytest.raises(PolicyViolation):
            generate_rsa_keypair(39)

    def test_key_views(self, keypair):
        """public_key/private_key share the modulus."""
        assert keypair.public_key == RSAKey(keypair.modulus, keypair.public_exponent)
        assert keypair.private_key.exponent == keypair.private_exponent

    def test_generate_classmethod(self):
        """RSAKeyPair.generate should build a working key pair."""
        generated = RSAKeyPair.generate()
        assert generated.decrypt(generated.encrypt("ok")) == b"ok"


class TestEncryption:
    """Tests for rsa_encrypt/rsa_decrypt with a fixed key."""

    def test_fixed_key_is_consistent(self):
        """The reference key satisfies n = p*q and e*d = 1 mod phi(n)."""
        assert P * Q == N
        assert (E * D) % ((P - 1) * (Q - 1)) == 1

    def test_known_answer(self):
        """Encrypting 'hello' should give the reference ciphertext."""
        assert rsa_encrypt("hello", E, N) == HELLO_CIPHERTEXT

    def test_known_answer_decrypt(self):
        assert rsa_decrypt(HELLO_CIPHERTEXT, D, N) == b"hello"

    def test_sixteen_zero_bytes(self):
        """A zero block is written as one 0 digit and survives the round trip."""
        ciphertext = rsa_encrypt(bytes(16), E, N)
        assert ciphertext == ZEROS_CIPHERTEXT
        assert rsa_decrypt(ciphertext, D, N) == bytes(16)

    def test_delimiter_never_inside_block(self):
        """Every byte other than the delimiter is a decimal digit."""
        raw = hex_decode(rsa_encrypt(b"A" * 50, E, N))
        assert all(byte <= 9 or byte == 0xFF for byte in raw)
        assert raw.count(b"\xff") == 3

    def test_upper_case_hex(self):
        ciphertext = rsa_encrypt(b"case", E, N)
        assert ciphertext == ciphertext.upper()

    def test_lower_case_hex_accepted(self):
        """Decryption accepts lower-case hex as well."""
        assert rsa_decrypt(HELLO_CIPHERTEXT.lower(), D, N) == b"hello"

    def test_string_arguments(self):
        """Exponent and modulus may be given as decimal strings."""
        ciphertext = rsa_encrypt(b"strings", str(E), str(N))
        assert rsa_decrypt(ciphertext, str(D), str(N)) == b"strings"

    @pytest.mark.parametrize("plaintext", [
        b"",
        b"x",
        b"exactly 16 bytes",
        b"\x90" * 20,
        b"\xff\x00" * 9,
        "Unicode: éèê ☃".encode("utf-8"),
    ])
    def test_round_trip(self, plaintext):
        """Any byte string should decrypt to itself."""
        assert rsa_decrypt(rsa_encrypt(plaintext, E, N), D, N) == plaintext

    def test_generated_key_round_trip(self, keypair):
        """Round trip with a freshly generated key pair."""
        message = b"The quick brown fox jumps over the lazy dog"
        assert keypair.decrypt(keypair.encrypt(message)) == message

    def test_wrong_key_fails(self):
        """Decrypting with the public exponent should not yield the plaintext."""
        ciphertext = rsa_encrypt(b"secret message", E, N)
        with pytest.raises(ParseError):
            rsa_decrypt(ciphertext, E, N)


class TestCipherPolicy:
    """Modulus and exponent checks happen before any block work."""

    def test_short_modulus(self):
        """Moduli under 40 digits are refused for both directions."""
        with pytest.raises(PolicyViolation):
            rsa_encrypt(b"hi", 17, 3233)
        with pytest.raises(PolicyViolation):
            rsa_decrypt("00", 2753, 3233)

    def test_prime_modulus(self):
        """A prime modulus is refused."""
        prime = BigInt.from_int(10 ** 40 + 121)
        with pytest.raises(PolicyViolation, match="composite"):
            rsa_encrypt(b"hi", E, prime)

    def test_non_positive_exponent(self):
        with pytest.raises(PolicyViolation):
            rsa_encrypt(b"hi", 0, N)


class TestHexCodec:
    """Tests for the hex transport encoding."""

    def test_encode(self):
        assert hex_encode(b"\x00\xab\xff") == "00ABFF"

    def test_decode(self):
        assert hex_decode("00abFF") == b"\x00\xab\xff"

    @pytest.mark.parametrize("text", ["ABC", "ZZ", "0G", "éé"])
    def test_malformed(self, text):
        with pytest.raises(ParseError):
            hex_decode(text)
