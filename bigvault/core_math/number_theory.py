"""
Number Theory Operations

Implements the number theory needed by RSA and Diffie-Hellman on top of
BigInt:
- GCD (Euclidean algorithm) and the Extended Euclidean Algorithm
- Modular inverse
- Integer square root (Newton's method)
- Trial-division and Miller-Rabin primality testing
- Random digit strings, ranges, primes, coprimes and primitive roots
- Prime factorization and range-bounded trial division

All randomness comes from the `secrets` module.
"""

import secrets
import threading
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from ..config import DEFAULT_MILLER_RABIN_ROUNDS, SMALL_PRIME_LIMIT
from ..errors import PolicyViolation
from .bigint import BigInt, ONE, TWO, ZERO


Number = Union[BigInt, int, str]


def _sieve(limit: int) -> Tuple[int, ...]:
    """Primes below limit (sieve of Eratosthenes)."""
    flags = [True] * limit
    flags[0:2] = [False, False]
    for i in range(2, int(limit ** 0.5) + 1):
        if flags[i]:
            flags[i * i::i] = [False] * len(flags[i * i::i])
    return tuple(i for i, is_p in enumerate(flags) if is_p)


SMALL_PRIMES = tuple(BigInt.from_int(p) for p in _sieve(SMALL_PRIME_LIMIT))
# Every composite below this bound has a factor in SMALL_PRIMES.
_TRIAL_DIVISION_CEILING = BigInt.from_int(SMALL_PRIME_LIMIT * SMALL_PRIME_LIMIT)


@dataclass(frozen=True)
class EGCDResult:
    """Bezout identity: a*x + b*y == gcd."""
    gcd: BigInt
    x: BigInt
    y: BigInt


@dataclass(frozen=True)
class FactorPair:
    """Two factors with p * q == n and p <= q."""
    p: BigInt
    q: BigInt


# ============================================================================
# GCD and Modular Inverse
# ============================================================================

def gcd(a: Number, b: Number) -> BigInt:
    """
    Compute the greatest common divisor using Euclidean algorithm.

    Args:
        a: First integer
        b: Second integer

    Returns:
        Non-negative GCD of a and b
    """
    a, b = abs(BigInt.of(a)), abs(BigInt.of(b))
    while b:
        a, b = b, a % b
    return a


def egcd(a: Number, b: Number) -> EGCDResult:
    """
    Extended Euclidean Algorithm (iterative).

    Finds integers x, y such that: a*x + b*y = gcd(a, b)

    Args:
        a: First integer
        b: Second integer

    Returns:
        EGCDResult(gcd, x, y) with a non-negative gcd
    """
    old_r, r = BigInt.of(a), BigInt.of(b)
    old_s, s = ONE, ZERO
    old_t, t = ZERO, ONE

    while r:
        q = old_r // r
        old_r, r = r, old_r - q * r
        old_s, s = s, old_s - q * s
        old_t, t = t, old_t - q * t

    if old_r.is_negative():
        old_r, old_s, old_t = -old_r, -old_s, -old_t
    return EGCDResult(old_r, old_s, old_t)


def mod_inverse(a: Number, m: Number) -> BigInt:
    """
    Compute modular multiplicative inverse using Extended Euclidean Algorithm.

    Finds x such that (a * x) mod m = 1

    Args:
        a: The number to find inverse of
        m: The modulus (must be positive)

    Returns:
        Modular inverse of a mod m, in [0, m)

    Raises:
        ValueError: If inverse doesn't exist (gcd(a, m) != 1)
    """
    a, m = BigInt.of(a), BigInt.of(m)
    if not m.is_positive():
        raise ValueError("Modulus must be positive")
    result = egcd(a % m, m)
    if result.gcd != ONE:
        raise ValueError(f"Modular inverse doesn't exist (gcd({a}, {m}) = {result.gcd})")
    return result.x % m


def is_coprime(a: Number, b: Number) -> bool:
    """True when gcd(a, b) == 1."""
    return gcd(a, b) == ONE


def isqrt(n: Number) -> BigInt:
    """
    Integer square root: the largest r with r*r <= n.

    Newton's iteration started above the root, so the sequence decreases
    monotonically until it settles.

    Raises:
        ValueError: If n is negative
    """
    n = BigInt.of(n)
    if n.is_negative():
        raise ValueError("Square root of a negative number")
    if n < TWO:
        return n

    # 10^ceil(len/2) is always >= sqrt(n)
    half = (n.digit_length() + 1) // 2
    x = BigInt.from_digits([0] * half + [1])
    while True:
        y = (x + n // x) // TWO
        if y >= x:
            return x
        x = y


# ============================================================================
# Primality Testing
# ============================================================================

def is_prime(n: Number) -> bool:
    """
    Deterministic primality test by trial division (6k +/- 1 wheel).

    Only practical for small magnitudes.
    """
    n = BigInt.of(n)
    if n < TWO:
        return False
    if n <= 3:
        return True
    if (n % 2).is_zero() or (n % 3).is_zero():
        return False

    factor = BigInt.from_int(5)
    bound = isqrt(n)
    while factor <= bound:
        if (n % factor).is_zero() or (n % (factor + TWO)).is_zero():
            return False
        factor = factor + 6
    return True


def is_probably_prime(n: Number, rounds: int = DEFAULT_MILLER_RABIN_ROUNDS) -> bool:
    """
    Miller-Rabin primality test, preceded by trial division.

    Values below SMALL_PRIME_LIMIT^2 are decided exactly by dividing by the
    small primes. Larger values run `rounds` witnesses; the probability of a
    composite surviving is at most (1/4)^rounds.

    Algorithm:
    1. Write n-1 as 2^s * d with d odd
    2. For each random witness a in [2, n-2]:
       - Compute x = a^d mod n
       - If x = 1 or x = n-1, continue
       - Square x up to s-1 times, looking for n-1
       - If never found, n is composite

    Args:
        n: Number to test for primality
        rounds: Number of Miller-Rabin witnesses

    Returns:
        True if n is probably prime, False if definitely composite
    """
    n = BigInt.of(n)
    if n < TWO:
        return False

    for p in SMALL_PRIMES:
        if (n % p).is_zero():
            return n == p
    if n < _TRIAL_DIVISION_CEILING:
        return True

    n_minus_one = n - ONE
    d, s = n_minus_one, 0
    while d.is_even():
        d = d // TWO
        s += 1

    for _ in range(rounds):
        a = random_in_range(TWO, n - TWO)
        x = a.modpow(d, n)
        if x == ONE or x == n_minus_one:
            continue
        for _ in range(s - 1):
            x = (x * x) % n
            if x == n_minus_one:
                break
        else:
            return False
    return True


# ============================================================================
# Random Generation
# ============================================================================

def random_bigint(length: int) -> BigInt:
    """
    Random positive BigInt with exactly `length` decimal digits.

    Raises:
        ValueError: If length < 1
    """
    if length < 1:
        raise ValueError("Length must be at least 1 digit")
    digits = [secrets.randbelow(10) for _ in range(length - 1)]
    digits.append(secrets.randbelow(9) + 1)
    return BigInt.from_digits(digits)


def random_in_range(low: Number, high: Number) -> BigInt:
    """
    Uniformly random BigInt in the inclusive range [low, high].

    Uses rejection sampling over random digit strings as long as the span.

    Raises:
        ValueError: If low > high
    """
    low, high = BigInt.of(low), BigInt.of(high)
    if low > high:
        raise ValueError(f"Empty range [{low}, {high}]")
    span = high - low + ONE
    length = span.digit_length()
    while True:
        offset = BigInt.from_digits([secrets.randbelow(10) for _ in range(length)])
        if offset < span:
            return low + offset


def random_prime(length: int, rounds: int = DEFAULT_MILLER_RABIN_ROUNDS) -> BigInt:
    """
    Generate a random prime with exactly `length` decimal digits.

    Candidates are random odd numbers (never ending in 5) that are retested
    until one passes the primality test.

    Args:
        length: Number of decimal digits
        rounds: Miller-Rabin rounds per candidate

    Returns:
        A probable prime of the requested length

    Raises:
        ValueError: If length < 1
    """
    if length < 1:
        raise ValueError("Length must be at least 1 digit")
    if length == 1:
        return BigInt.from_int(secrets.choice((2, 3, 5, 7)))

    while True:
        digits = [secrets.choice((1, 3, 7, 9))]
        digits.extend(secrets.randbelow(10) for _ in range(length - 2))
        digits.append(secrets.randbelow(9) + 1)
        candidate = BigInt.from_digits(digits)
        if is_probably_prime(candidate, rounds):
            return candidate


def random_coprime(modulus: Number) -> BigInt:
    """
    Random value in [2, modulus-1] that is coprime with modulus.

    Raises:
        ValueError: If modulus < 3
    """
    modulus = BigInt.of(modulus)
    if modulus < 3:
        raise ValueError("Modulus must be at least 3")
    while True:
        candidate = random_in_range(TWO, modulus - ONE)
        if is_coprime(candidate, modulus):
            return candidate


# ============================================================================
# Factorization
# ============================================================================

def prime_factors(n: Number) -> List[BigInt]:
    """
    Prime factorization by trial division up to the square root.

    Args:
        n: Positive integer

    Returns:
        Ascending list of prime factors with multiplicity ([] for n < 2)
    """
    n = BigInt.of(n)
    factors: List[BigInt] = []
    if n < TWO:
        return factors

    while n.is_even():
        factors.append(TWO)
        n = n // TWO

    candidate = BigInt.from_int(3)
    bound = isqrt(n)
    while candidate <= bound:
        quotient, remainder = divmod(n, candidate)
        if remainder.is_zero():
            factors.append(candidate)
            n = quotient
            bound = isqrt(n)
        else:
            candidate = candidate + TWO

    if n > ONE:
        factors.append(n)
    return factors


def factor_in_range(n: Number, start: Number, stop: Number,
                    stop_event: Optional[threading.Event] = None) -> Optional[FactorPair]:
    """
    Search [start, stop] for a divisor of n by trial division.

    Only odd candidates are tried (2 is checked when it lies in range) and
    only up to sqrt(n), since the smaller factor of a pair never exceeds it.
    The stop event is checked before every trial division.

    Args:
        n: Number to factor
        start: First candidate
        stop: Last candidate (inclusive)
        stop_event: Optional cooperative cancellation signal

    Returns:
        FactorPair for the first divisor found, or None when the range holds
        no divisor or the search was cancelled
    """
    n, start, stop = BigInt.of(n), BigInt.of(start), BigInt.of(stop)
    if start <= TWO <= stop and n > TWO and n.is_even():
        return FactorPair(TWO, n // TWO)

    candidate = start if start > 3 else BigInt.from_int(3)
    if candidate.is_even():
        candidate = candidate + ONE
    bound = min(stop, isqrt(n))

    while candidate <= bound:
        if stop_event is not None and stop_event.is_set():
            return None
        quotient, remainder = divmod(n, candidate)
        if remainder.is_zero():
            return FactorPair(candidate, quotient)
        candidate = candidate + TWO
    return None


# ============================================================================
# Primitive Roots
# ============================================================================

def _distinct_prime_factors(n: BigInt) -> List[BigInt]:
    distinct: List[BigInt] = []
    for factor in prime_factors(n):
        if not distinct or distinct[-1] != factor:
            distinct.append(factor)
    return distinct


def _generates_group(candidate: BigInt, prime: BigInt, order_factors: List[BigInt]) -> bool:
    order = prime - ONE
    for q in order_factors:
        if candidate.modpow(order // q, prime) == ONE:
            return False
    return True


def _require_prime(prime: BigInt) -> None:
    if not is_probably_prime(prime):
        raise PolicyViolation(f"{prime} is not a prime; primitive roots need a prime modulus")


def is_primitive_root(candidate: Number, prime: Number) -> bool:
    """
    Check whether candidate generates the multiplicative group mod prime.

    candidate is a primitive root when candidate^((p-1)/q) mod p != 1 for
    every distinct prime q dividing p-1.

    Raises:
        PolicyViolation: If prime is not prime
    """
    candidate, prime = BigInt.of(candidate), BigInt.of(prime)
    _require_prime(prime)
    if (candidate % prime).is_zero():
        return False
    return _generates_group(candidate % prime, prime, _distinct_prime_factors(prime - ONE))


def random_primitive_root(prime: Number) -> BigInt:
    """
    Random primitive root of a prime.

    Raises:
        PolicyViolation: If prime is not prime
    """
    prime = BigInt.of(prime)
    _require_prime(prime)
    if prime == TWO:
        return ONE

    order_factors = _distinct_prime_factors(prime - ONE)
    while True:
        candidate = random_in_range(TWO, prime - ONE)
        if _generates_group(candidate, prime, order_factors):
            return candidate
