"""
RSA Private Key Bruteforce

Recovers the private exponent of a small RSA public key by factoring its
modulus with parallel trial division:

1. The candidate range [10^(k-1), 10^k - 1], k = ceil(digits(n) / 2), is
   split into one contiguous sub-range per worker.
2. Every worker scans the odd candidates of its sub-range and checks a
   shared stop event before each trial division.
3. The first worker to find a divisor verifies that both factors are prime,
   derives d = e^(-1) mod phi(n) and posts the result; the dispatcher then
   sets the stop event and tears the pool down.

Only moduli of up to 10 decimal digits are accepted.
"""

import logging
import queue
import threading
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from ..config import (
    DEFAULT_THREAD_COUNT,
    MAX_BRUTEFORCE_MODULUS_DIGITS,
    MAX_THREAD_COUNT,
    MIN_THREAD_COUNT,
)
from ..core_math.bigint import BigInt, ONE, TWO
from ..core_math.number_theory import (
    FactorPair,
    factor_in_range,
    is_probably_prime,
    mod_inverse,
)
from ..errors import NotFactorable, PolicyViolation
from .threadpool import ThreadPool


logger = logging.getLogger(__name__)

Number = Union[BigInt, int, str]

# Smallest odd candidate worth trying; 2 is handled by the even fast path
_FIRST_ODD_CANDIDATE = BigInt.from_int(3)


@dataclass(frozen=True)
class BruteforceResult:
    """Recovered key material; prime_p <= prime_q."""
    prime_p: BigInt
    prime_q: BigInt
    modulus: BigInt
    public_exponent: BigInt
    private_exponent: BigInt


@dataclass(frozen=True)
class _Outcome:
    """What a worker posts back: a result, an error, or neither (exhausted)."""
    result: Optional[BruteforceResult] = None
    error: Optional[Exception] = None


def partition_range(start: Number, stop: Number, parts: int) -> List[Tuple[BigInt, BigInt]]:
    """
    Split the inclusive range [start, stop] into `parts` contiguous pieces.

    Widths differ by at most one; the first pieces take the remainder. When
    there are more parts than values, the trailing pieces are empty
    (low > high).

    Raises:
        ValueError: If parts < 1
    """
    if parts < 1:
        raise ValueError("Range must be split into at least one part")
    start, stop = BigInt.of(start), BigInt.of(stop)
    span = stop - start + ONE
    if span.is_negative():
        span = BigInt()
    width, remainder = divmod(span, parts)

    ranges = []
    low = start
    for index in range(parts):
        size = width + 1 if remainder > index else width
        high = low + size - ONE
        ranges.append((low, high))
        low = high + ONE
    return ranges


def search_range(modulus: Number) -> Tuple[BigInt, BigInt]:
    """Candidate range for the smaller factor of a modulus."""
    modulus = BigInt.of(modulus)
    half = (modulus.digit_length() + 1) // 2
    low = BigInt.from_int(10) ** (half - 1)
    high = BigInt.from_int(10) ** half - ONE
    return max(low, _FIRST_ODD_CANDIDATE), high


def _recover_key(pair: FactorPair, public_exponent: BigInt, modulus: BigInt) -> BruteforceResult:
    """Turn a divisor pair into key material, or explain why it cannot be."""
    p, q = pair.p, pair.q
    if p == q or not is_probably_prime(p) or not is_probably_prime(q):
        raise NotFactorable(
            f"{modulus} = {p} * {q} is not a product of two distinct primes"
        )

    phi_n = (p - ONE) * (q - ONE)
    try:
        d = mod_inverse(public_exponent, phi_n)
    except ValueError as exc:
        raise PolicyViolation(
            f"Public exponent {public_exponent} is not coprime with phi(n) = {phi_n}"
        ) from exc
    return BruteforceResult(p, q, modulus, public_exponent, d)


def _validate(public_exponent: BigInt, modulus: BigInt, thread_count: int) -> None:
    if modulus.digit_length() > MAX_BRUTEFORCE_MODULUS_DIGITS:
        raise PolicyViolation(
            f"Bruteforce supports moduli of at most {MAX_BRUTEFORCE_MODULUS_DIGITS} "
            f"digits, got {modulus.digit_length()}"
        )
    if modulus < 4:
        raise PolicyViolation(f"Modulus {modulus} is too small to factor")
    if not MIN_THREAD_COUNT <= thread_count <= MAX_THREAD_COUNT:
        raise PolicyViolation(
            f"Thread count must be between {MIN_THREAD_COUNT} and {MAX_THREAD_COUNT}, "
            f"got {thread_count}"
        )
    if not public_exponent.is_positive():
        raise PolicyViolation("Public exponent must be positive")
    if is_probably_prime(modulus):
        raise PolicyViolation(f"Modulus {modulus} is prime and cannot be factored")


def bruteforce_rsa_private_key(public_exponent: Number, modulus: Number,
                               thread_count: int = DEFAULT_THREAD_COUNT) -> BruteforceResult:
    """
    Recover the private exponent of (n, e) by factoring n.

    Args:
        public_exponent: e
        modulus: n, at most 10 decimal digits
        thread_count: Worker threads to search with (1-64)

    Returns:
        BruteforceResult with both primes and the private exponent

    Raises:
        PolicyViolation: If n, e or thread_count are out of bounds
        NotFactorable: If no factorization into two primes was found
    """
    public_exponent, modulus = BigInt.of(public_exponent), BigInt.of(modulus)
    _validate(public_exponent, modulus, thread_count)

    if modulus.is_even():
        cofactor = modulus // TWO
        if is_probably_prime(cofactor):
            logger.info("Modulus %s is even; using factor pair (2, %s)", modulus, cofactor)
            return _recover_key(FactorPair(TWO, cofactor), public_exponent, modulus)

    low, high = search_range(modulus)
    ranges = partition_range(low, high, thread_count)
    logger.info("Searching [%s, %s] for a factor of %s with %d thread(s)",
                low, high, modulus, thread_count)

    stop_event = threading.Event()
    outcomes: queue.Queue = queue.Queue()

    def make_job(start: BigInt, stop: BigInt):
        def job():
            try:
                pair = factor_in_range(modulus, start, stop, stop_event)
                if pair is None:
                    outcomes.put(_Outcome())
                else:
                    logger.debug("Found divisor %s in [%s, %s]", pair.p, start, stop)
                    outcomes.put(_Outcome(result=_recover_key(pair, public_exponent, modulus)))
            except Exception as exc:
                outcomes.put(_Outcome(error=exc))
        return job

    winner: Optional[_Outcome] = None
    with ThreadPool(thread_count) as pool:
        for start, stop in ranges:
            pool.execute(make_job(start, stop))

        for _ in ranges:
            outcome = outcomes.get()
            if outcome.result is not None or outcome.error is not None:
                winner = outcome
                stop_event.set()
                break

    if winner is None:
        raise NotFactorable(f"No factor of {modulus} found in [{low}, {high}]")
    if winner.error is not None:
        raise winner.error

    logger.info("Recovered private exponent of %s", modulus)
    return winner.result
