"""
Diffie-Hellman Key Exchange

Classic finite-field Diffie-Hellman over a prime modulus:
- Missing parameters are generated (random prime of 5-10 digits, random
  primitive root, random secrets in [2, p-2])
- Supplied parameters are validated (prime, primitive root, positive
  secrets)
- Both sides' public values and computed secrets are reported together

Protocol:
    A = g^a mod p,  B = g^b mod p
    s_A = B^a mod p,  s_B = A^b mod p,  s_A == s_B

DiffieHellmanParty holds one side of the exchange and can turn the shared
secret into a symmetric key with HKDF.
"""

import logging
import secrets
from dataclasses import dataclass
from typing import Optional, Union

from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from ..config import DH_PRIME_DIGITS, MAX_DH_PRIME_DIGITS
from ..core_math.bigint import BigInt, ONE, TWO
from ..core_math.number_theory import (
    is_primitive_root,
    is_probably_prime,
    random_in_range,
    random_prime,
    random_primitive_root,
)
from ..errors import PolicyViolation


logger = logging.getLogger(__name__)

Number = Union[BigInt, int, str]

# Smallest prime for which [2, p-2] holds a secret
MIN_DH_PRIME = BigInt.from_int(5)
DERIVED_KEY_SIZE = 32


@dataclass(frozen=True)
class DiffieHellmanResult:
    """Both sides of one exchange."""
    prime: BigInt
    base: BigInt
    secret_a: BigInt
    secret_b: BigInt
    public_a: BigInt           # sent from A to B
    public_b: BigInt           # sent from B to A
    shared_secret_a: BigInt    # computed by A
    shared_secret_b: BigInt    # computed by B

    @property
    def agreed(self) -> bool:
        return self.shared_secret_a == self.shared_secret_b

    @property
    def shared_secret(self) -> BigInt:
        """
        The agreed secret.

        Raises:
            RuntimeError: If the two sides disagree
        """
        if not self.agreed:
            raise RuntimeError("Diffie-Hellman parties computed different secrets")
        return self.shared_secret_a


def primality_rounds(digit_length: int) -> int:
    """Miller-Rabin rounds for a supplied prime; fewer for longer values."""
    if digit_length < 25:
        return 20
    if digit_length < 50:
        return 10
    if digit_length < 75:
        return 3
    return 1


def _validate_prime(prime: BigInt) -> BigInt:
    length = prime.digit_length()
    if length > MAX_DH_PRIME_DIGITS:
        raise PolicyViolation(
            f"Shared prime has {length} digits; at most {MAX_DH_PRIME_DIGITS} are supported"
        )
    if prime < MIN_DH_PRIME:
        raise PolicyViolation(f"Shared prime must be at least {MIN_DH_PRIME}, got {prime}")
    if not is_probably_prime(prime, primality_rounds(length)):
        raise PolicyViolation(f"Shared prime {prime} is not a prime (Miller-Rabin)")
    return prime


def _validate_secret(secret: BigInt, label: str) -> BigInt:
    if not secret.is_positive():
        raise PolicyViolation(f"Secret {label} must be a positive number, got {secret}")
    return secret


def _random_secret(prime: BigInt) -> BigInt:
    return random_in_range(TWO, prime - TWO)


class DiffieHellmanParty:
    """
    One participant in a Diffie-Hellman exchange.

    Example:
        >>> alice = DiffieHellmanParty(prime, base)
        >>> bob = DiffieHellmanParty(prime, base)
        >>> alice.derive_shared_secret(bob.public_value) == \\
        ...     bob.derive_shared_secret(alice.public_value)
        True
    """

    def __init__(self, prime: Number, base: Number, secret: Optional[Number] = None):
        """
        Args:
            prime: Shared prime modulus p
            base: Shared base g
            secret: Private exponent, or random in [2, p-2] if None
        """
        self.prime = BigInt.of(prime)
        self.base = BigInt.of(base)
        if secret is None:
            self._secret = _random_secret(self.prime)
        else:
            self._secret = _validate_secret(BigInt.of(secret), "exponent")
        self._public_value = self.base.modpow(self._secret, self.prime)

    @property
    def secret(self) -> BigInt:
        return self._secret

    @property
    def public_value(self) -> BigInt:
        """g^secret mod p, safe to send to the peer."""
        return self._public_value

    def validate_peer_public(self, peer_public: BigInt) -> None:
        """
        Reject peer values in the trivial subgroup.

        Raises:
            PolicyViolation: Unless 1 < peer_public < p - 1
        """
        if not ONE < peer_public < self.prime - ONE:
            raise PolicyViolation(
                f"Peer public value {peer_public} is outside the valid range (1, {self.prime - ONE})"
            )

    def compute_shared_secret(self, peer_public: Number) -> BigInt:
        """peer_public^secret mod p, without peer validation."""
        return BigInt.of(peer_public).modpow(self._secret, self.prime)

    def derive_shared_secret(self, peer_public: Number) -> BigInt:
        """
        Derive the shared secret after validating the peer's public value.

        Args:
            peer_public: The other party's public value

        Returns:
            Shared secret in [0, p)
        """
        peer_public = BigInt.of(peer_public)
        self.validate_peer_public(peer_public)
        return self.compute_shared_secret(peer_public)

    def derive_key(self, peer_public: Number, info: bytes = b"bigvault-dh",
                   length: int = DERIVED_KEY_SIZE) -> bytes:
        """
        Derive a symmetric key from the shared secret using HKDF-SHA256.

        The secret is encoded big-endian in as many bytes as p needs.
        """
        shared = self.derive_shared_secret(peer_public)
        secret_len = (int(self.prime).bit_length() + 7) // 8
        hkdf = HKDF(
            algorithm=hashes.SHA256(),
            length=length,
            salt=None,
            info=info,
            backend=default_backend()
        )
        return hkdf.derive(shared.to_bytes(secret_len))


def generate_dh(prime: Optional[Number] = None, base: Optional[Number] = None,
                secret_a: Optional[Number] = None,
                secret_b: Optional[Number] = None) -> DiffieHellmanResult:
    """
    Run a full exchange between two parties, filling in missing parameters.

    Args:
        prime: Shared prime (random 5-10 digit prime if None)
        base: Shared base (random primitive root of prime if None)
        secret_a: A's private exponent (random if None)
        secret_b: B's private exponent (random if None)

    Returns:
        DiffieHellmanResult

    Raises:
        PolicyViolation: If a supplied parameter is invalid
        ParseError: If a supplied parameter is not a decimal number
    """
    if prime is None:
        low, high = DH_PRIME_DIGITS
        length = low + secrets.randbelow(high - low + 1)
        prime = random_prime(length)
        logger.debug("Generated %d-digit shared prime", length)
    else:
        prime = _validate_prime(BigInt.of(prime))

    if base is None:
        base = random_primitive_root(prime)
        logger.debug("Generated primitive root %s of %s", base, prime)
    else:
        base = BigInt.of(base)
        if not is_primitive_root(base, prime):
            raise PolicyViolation(f"Shared base {base} is not a primitive root of {prime}")

    party_a = DiffieHellmanParty(prime, base, secret_a)
    party_b = DiffieHellmanParty(prime, base, secret_b)

    result = DiffieHellmanResult(
        prime=prime,
        base=base,
        secret_a=party_a.secret,
        secret_b=party_b.secret,
        public_a=party_a.public_value,
        public_b=party_b.public_value,
        shared_secret_a=party_a.compute_shared_secret(party_b.public_value),
        shared_secret_b=party_b.compute_shared_secret(party_a.public_value),
    )
    logger.info("Diffie-Hellman exchange over %s-digit prime: agreed=%s",
                prime.digit_length(), result.agreed)
    return result
