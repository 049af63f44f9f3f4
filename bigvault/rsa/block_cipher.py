"""
RSA Block Cipher

Implements RSA over BigInt with a fixed block layout:
- Key generation (two random primes, EGCD-derived private exponent)
- Block encryption of arbitrary byte strings
- Block decryption back to the original bytes

Ciphertext Format (before hex encoding):
    [block digits | 0xFF | block digits | 0xFF | ... | block digits]

Each plaintext block is 16 bytes fused into one 128-bit unsigned value.
The encrypted value is written as its decimal digits, least-significant
first, one byte (0x00-0x09) per digit. 0xFF can never be a digit byte, so
block boundaries survive serialization.

Padding:
    PKCS#7 to a multiple of 16 bytes, always present (1-16 bytes), so every
    plaintext length decrypts exactly.

Note: Moduli shorter than 40 digits are refused. 2^128 has 39 digits, so
      only from 40 digits on is every block value guaranteed to be below n.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from cryptography.hazmat.primitives import padding

from ..config import (
    BLOCK_DELIMITER,
    BLOCK_SIZE,
    DEFAULT_RSA_DIGITS,
    KEYGEN_MILLER_RABIN_ROUNDS,
    MIN_CIPHER_MODULUS_DIGITS,
)
from ..core_math.bigint import BigInt, ONE
from ..core_math.number_theory import is_coprime, is_probably_prime, mod_inverse, random_prime
from ..encoding import hex_decode, hex_encode
from ..errors import ParseError, PolicyViolation


logger = logging.getLogger(__name__)

Number = Union[BigInt, int, str]

# Common choice is 65537 (2^16 + 1) - it's prime and keeps encryption fast
DEFAULT_PUBLIC_EXPONENT = BigInt.from_int(65537)
_DELIMITER = bytes([BLOCK_DELIMITER])


@dataclass(frozen=True)
class RSAKey:
    """One half of a key pair: (modulus, exponent)."""
    modulus: BigInt
    exponent: BigInt

    def __str__(self) -> str:
        return f"(n={self.modulus}, exponent={self.exponent})"


@dataclass(frozen=True)
class RSAKeyPair:
    """
    RSA key pair container with convenient methods.

    Example:
        >>> keypair = RSAKeyPair.generate()
        >>> ciphertext = keypair.encrypt(b"hello")
        >>> keypair.decrypt(ciphertext)
        b'hello'
    """
    modulus: BigInt
    public_exponent: BigInt
    private_exponent: BigInt
    prime_p: Optional[BigInt] = None
    prime_q: Optional[BigInt] = None

    @classmethod
    def generate(cls, target_digit_length: int = DEFAULT_RSA_DIGITS) -> 'RSAKeyPair':
        """Generate a new key pair with a modulus of the given digit length."""
        return generate_rsa_keypair(target_digit_length)

    @property
    def public_key(self) -> RSAKey:
        """Public key (n, e)."""
        return RSAKey(self.modulus, self.public_exponent)

    @property
    def private_key(self) -> RSAKey:
        """Private key (n, d)."""
        return RSAKey(self.modulus, self.private_exponent)

    def encrypt(self, plaintext: Union[bytes, str]) -> str:
        """Encrypt with the public key; returns hex text."""
        return rsa_encrypt(plaintext, self.public_exponent, self.modulus)

    def decrypt(self, ciphertext: str) -> bytes:
        """Decrypt hex text with the private key."""
        return rsa_decrypt(ciphertext, self.private_exponent, self.modulus)

    def __repr__(self) -> str:
        return f"RSAKeyPair(digits={self.modulus.digit_length()}, e={self.public_exponent})"


# ============================================================================
# Key Generation
# ============================================================================

def generate_rsa_keypair(target_digit_length: int = DEFAULT_RSA_DIGITS) -> RSAKeyPair:
    """
    Generate an RSA key pair.

    Generates two distinct random primes p and q whose product has exactly
    the requested number of decimal digits, computes n = p*q, and finds
    appropriate public and private exponents.

    Args:
        target_digit_length: Decimal digits of modulus n (default 46)

    Returns:
        RSAKeyPair including the primes

    Raises:
        PolicyViolation: If target_digit_length is below the cipher minimum
    """
    if target_digit_length < MIN_CIPHER_MODULUS_DIGITS:
        raise PolicyViolation(
            f"RSA modulus must have at least {MIN_CIPHER_MODULUS_DIGITS} digits, "
            f"requested {target_digit_length}"
        )

    p_digits = (target_digit_length + 1) // 2
    q_digits = target_digit_length // 2

    attempts = 0
    while True:
        attempts += 1
        p = random_prime(p_digits, KEYGEN_MILLER_RABIN_ROUNDS)
        q = random_prime(q_digits, KEYGEN_MILLER_RABIN_ROUNDS)
        if p == q:
            continue
        n = p * q
        if n.digit_length() == target_digit_length:
            break
    logger.debug("Found %d-digit modulus after %d prime pair(s)", target_digit_length, attempts)

    # Compute Euler's totient: phi(n) = (p-1)(q-1)
    phi_n = (p - ONE) * (q - ONE)

    # Ensure gcd(e, phi(n)) = 1
    e = DEFAULT_PUBLIC_EXPONENT
    while not is_coprime(e, phi_n):
        e = e + 2  # Try next odd number

    # Compute private exponent d = e^(-1) mod phi(n)
    d = mod_inverse(e, phi_n)

    return RSAKeyPair(modulus=n, public_exponent=e, private_exponent=d, prime_p=p, prime_q=q)


# ============================================================================
# Block Encryption / Decryption
# ============================================================================

def _validate_key(exponent: Number, modulus: Number) -> RSAKey:
    """Coerce key material and enforce the cipher's modulus policy."""
    exponent, modulus = BigInt.of(exponent), BigInt.of(modulus)
    if modulus.digit_length() < MIN_CIPHER_MODULUS_DIGITS or modulus.is_negative():
        raise PolicyViolation(
            f"RSA modulus must be a positive number of at least "
            f"{MIN_CIPHER_MODULUS_DIGITS} digits, got {modulus.digit_length()} digits"
        )
    if is_probably_prime(modulus, rounds=1):
        raise PolicyViolation("RSA modulus must be composite, received a prime")
    if not exponent.is_positive():
        raise PolicyViolation("RSA exponent must be a positive number")
    return RSAKey(modulus, exponent)


def rsa_encrypt(plaintext: Union[bytes, str], exponent: Number, modulus: Number) -> str:
    """
    Encrypt a byte string block by block.

    Args:
        plaintext: Bytes, or text (encoded as UTF-8)
        exponent: Public exponent e
        modulus: Modulus n (at least 40 digits)

    Returns:
        Upper-case hex encoding of the delimited block digits

    Raises:
        PolicyViolation: If the key is outside the supported bounds
    """
    key = _validate_key(exponent, modulus)
    data = plaintext.encode('utf-8') if isinstance(plaintext, str) else bytes(plaintext)

    padder = padding.PKCS7(BLOCK_SIZE * 8).padder()
    padded = padder.update(data) + padder.finalize()

    serialized = []
    for offset in range(0, len(padded), BLOCK_SIZE):
        block = BigInt.from_bytes(padded[offset:offset + BLOCK_SIZE])
        encrypted = block.modpow(key.exponent, key.modulus)
        # Zero has no digits; it is written as a single 0 digit.
        serialized.append(bytes(encrypted.digits) or b'\x00')

    logger.debug("Encrypted %d byte(s) into %d block(s)", len(data), len(serialized))
    return hex_encode(_DELIMITER.join(serialized))


def rsa_decrypt(ciphertext: str, exponent: Number, modulus: Number) -> bytes:
    """
    Decrypt hex text produced by rsa_encrypt.

    Args:
        ciphertext: Hex text
        exponent: Private exponent d
        modulus: Modulus n (at least 40 digits)

    Returns:
        The original plaintext bytes

    Raises:
        PolicyViolation: If the key is outside the supported bounds
        ParseError: If the hex, a block or the padding is malformed
    """
    key = _validate_key(exponent, modulus)
    raw = hex_decode(ciphertext)
    if not raw:
        raise ParseError("Ciphertext is empty")

    recovered = bytearray()
    for chunk in raw.split(_DELIMITER):
        if not chunk:
            raise ParseError("Ciphertext contains an empty block")
        block = BigInt.from_digits(chunk)
        decrypted = block.modpow(key.exponent, key.modulus)
        try:
            recovered += decrypted.to_bytes(BLOCK_SIZE)
        except OverflowError as exc:
            raise ParseError("Decrypted block exceeds 16 bytes - wrong key?") from exc

    unpadder = padding.PKCS7(BLOCK_SIZE * 8).unpadder()
    try:
        return unpadder.update(bytes(recovered)) + unpadder.finalize()
    except ValueError as exc:
        raise ParseError("Invalid block padding - wrong key or corrupted ciphertext") from exc
