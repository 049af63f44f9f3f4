"""
Arbitrary-Precision Integer Implementation

Implements a signed integer of unbounded magnitude stored as decimal
digits:
- Schoolbook addition, subtraction and multiplication in base 10
- Long division with native-width quotient estimation
- Euclidean modulus (the remainder is never negative)
- Square-and-multiply exponentiation and modular exponentiation

Representation:
    digits: tuple of decimal digits, least-significant digit first
    sign:   Sign.POSITIVE, Sign.NEGATIVE or Sign.ZERO

Invariants:
- No most-significant zero digits
- Zero is the empty digit tuple with Sign.ZERO (there is no negative zero)
- Values are immutable; every operator returns a new BigInt

Note: Arithmetic never converts operands to Python's int. Native integers
      are only used for single digits and for the leading-digit window of
      the quotient estimation.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence, Tuple, Union

from ..errors import DivisionByZero, ParseError


# ============================================================================
# Constants
# ============================================================================

RADIX = 10
NATIVE_DIGITS = 18          # decimal digits that fit into a signed 64-bit word
MAX_CORRECTIONS = 3         # corrective steps allowed per quotient digit
_DECIMAL_CHARS = frozenset('0123456789')


class Sign(Enum):
    """Sign tag of a BigInt. Values order the signs."""
    NEGATIVE = -1
    ZERO = 0
    POSITIVE = 1


# ============================================================================
# Magnitude Helpers (little-endian digit lists)
# ============================================================================

def _trim(digits: List[int]) -> List[int]:
    """Drop most-significant zero digits in place."""
    while digits and digits[-1] == 0:
        digits.pop()
    return digits


def _native_value(digits: Sequence[int]) -> int:
    """Read a (short) little-endian digit sequence into a native int."""
    value = 0
    for digit in reversed(digits):
        value = value * RADIX + digit
    return value


def _native_to_digits(value: int) -> List[int]:
    """Split a non-negative native int into little-endian digits."""
    digits = []
    while value:
        value, digit = divmod(value, RADIX)
        digits.append(digit)
    return digits


def _compare_magnitude(a: Sequence[int], b: Sequence[int]) -> int:
    """Three-way comparison of two trimmed magnitudes."""
    if len(a) != len(b):
        return 1 if len(a) > len(b) else -1
    for x, y in zip(reversed(a), reversed(b)):
        if x != y:
            return 1 if x > y else -1
    return 0


def _add_magnitude(a: Sequence[int], b: Sequence[int]) -> List[int]:
    if len(a) < len(b):
        a, b = b, a
    result = []
    carry = 0
    for i in range(len(a)):
        total = a[i] + (b[i] if i < len(b) else 0) + carry
        if total >= RADIX:
            result.append(total - RADIX)
            carry = 1
        else:
            result.append(total)
            carry = 0
    if carry:
        result.append(carry)
    return result


def _sub_magnitude(a: Sequence[int], b: Sequence[int]) -> List[int]:
    """Subtract magnitudes; requires |a| >= |b|."""
    result = []
    borrow = 0
    for i in range(len(a)):
        diff = a[i] - (b[i] if i < len(b) else 0) - borrow
        if diff < 0:
            diff += RADIX
            borrow = 1
        else:
            borrow = 0
        result.append(diff)
    return _trim(result)


def _mul_magnitude(a: Sequence[int], b: Sequence[int]) -> List[int]:
    """
    Schoolbook multiplication.

    Partial products are accumulated per column first and carried in a
    single final pass.
    """
    if not a or not b:
        return []
    columns = [0] * (len(a) + len(b))
    for i, digit_a in enumerate(a):
        if digit_a == 0:
            continue
        for j, digit_b in enumerate(b):
            columns[i + j] += digit_a * digit_b
    carry = 0
    for k in range(len(columns)):
        carry, columns[k] = divmod(columns[k] + carry, RADIX)
    return _trim(columns)


def _mul_small(a: Sequence[int], factor: int) -> List[int]:
    """Multiply a magnitude by a non-negative native int."""
    if factor == 0 or not a:
        return []
    result = []
    carry = 0
    for digit in a:
        carry, digit = divmod(digit * factor + carry, RADIX)
        result.append(digit)
    while carry:
        carry, digit = divmod(carry, RADIX)
        result.append(digit)
    return result


def _short_divmod(a: Sequence[int], divisor: int) -> Tuple[List[int], int]:
    """Divide a magnitude by a native divisor, one native division per digit."""
    quotient = [0] * len(a)
    remainder = 0
    for i in range(len(a) - 1, -1, -1):
        remainder = remainder * RADIX + a[i]
        quotient[i], remainder = divmod(remainder, divisor)
    return _trim(quotient), remainder


def _compare_window(remainder: List[int], start: int, length: int,
                    other: Sequence[int]) -> int:
    """Compare remainder[start:start + length] with a trimmed magnitude."""
    for i in range(length - 1, -1, -1):
        x = remainder[start + i]
        y = other[i] if i < len(other) else 0
        if x != y:
            return 1 if x > y else -1
    return 0


def _subtract_window(remainder: List[int], start: int, length: int,
                     other: Sequence[int]) -> None:
    """In-place remainder[start:start + length] -= other."""
    borrow = 0
    for i in range(length):
        diff = remainder[start + i] - (other[i] if i < len(other) else 0) - borrow
        if diff < 0:
            diff += RADIX
            borrow = 1
        else:
            borrow = 0
        remainder[start + i] = diff


def _long_divmod(a: Sequence[int], b: Sequence[int]) -> Tuple[List[int], List[int]]:
    """
    Long division with quotient estimation.

    For every quotient digit the leading digits of the current remainder
    window and of the divisor are read into native ints. One native division
    gives an estimate that is never too small; it is lowered by one per
    corrective step while the trial product exceeds the window.

    Args:
        a: Dividend magnitude (len(a) >= len(b))
        b: Divisor magnitude, longer than NATIVE_DIGITS

    Returns:
        Tuple (quotient, remainder) of magnitudes

    Raises:
        ArithmeticError: If an estimate needs more than MAX_CORRECTIONS steps
    """
    n = len(b)
    top = min(n, NATIVE_DIGITS)
    divisor_head = _native_value(b[n - top:])

    # One spare zero digit on top keeps every window n + 1 digits wide.
    remainder = list(a) + [0]
    quotient = [0] * (len(a) - n + 1)

    for j in range(len(a) - n, -1, -1):
        window_head = _native_value(remainder[j + n - top:j + n + 1])
        estimate = min(window_head // divisor_head, RADIX - 1)
        if estimate == 0:
            continue

        product = _mul_small(b, estimate)
        corrections = 0
        while _compare_window(remainder, j, n + 1, product) < 0:
            corrections += 1
            if corrections > MAX_CORRECTIONS:
                raise ArithmeticError("Quotient estimation did not converge")
            estimate -= 1
            product = _sub_magnitude(product, b)

        _subtract_window(remainder, j, n + 1, product)
        quotient[j] = estimate

    return _trim(quotient), _trim(remainder)


def _divmod_magnitude(a: Sequence[int], b: Sequence[int]) -> Tuple[List[int], List[int]]:
    """Truncating division of magnitudes; b must be non-empty."""
    if _compare_magnitude(a, b) < 0:
        return [], list(a)
    if len(b) <= NATIVE_DIGITS:
        # The divisor fits a native word, so every estimate is exact.
        quotient, remainder = _short_divmod(a, _native_value(b))
        return quotient, _native_to_digits(remainder)
    return _long_divmod(a, b)


def _binary_digits(a: Sequence[int]) -> List[int]:
    """Bits of a magnitude, least-significant first."""
    bits = []
    current = list(a)
    while current:
        current, bit = _short_divmod(current, 2)
        bits.append(bit)
    return bits


# ============================================================================
# BigInt
# ============================================================================

@dataclass(frozen=True)
class BigInt:
    """
    Immutable arbitrary-precision signed integer.

    frozen=True ensures a value cannot change after construction, so the
    same BigInt can be shared between threads without locking.

    Example:
        >>> a = BigInt.from_str("123456789012345678901234567890")
        >>> b = BigInt.from_int(-42)
        >>> str(a * b)
        '-5185185138518518513851851851380'
        >>> str(b % 5)
        '3'
    """
    digits: Tuple[int, ...] = ()
    sign: Sign = Sign.ZERO

    def __post_init__(self):
        if not isinstance(self.digits, tuple) or not isinstance(self.sign, Sign):
            raise TypeError("BigInt takes a digit tuple and a Sign; use BigInt.of() for values")
        if self.digits and self.digits[-1] == 0:
            raise ValueError("BigInt digits must not end with a zero digit")
        if (not self.digits) != (self.sign is Sign.ZERO):
            raise ValueError("BigInt sign does not match its magnitude")

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def _from_magnitude(cls, magnitude: List[int], negative: bool = False) -> 'BigInt':
        _trim(magnitude)
        if not magnitude:
            return cls()
        return cls(tuple(magnitude), Sign.NEGATIVE if negative else Sign.POSITIVE)

    @classmethod
    def from_int(cls, value: int) -> 'BigInt':
        """Create a BigInt from a native integer."""
        if not isinstance(value, int):
            raise TypeError(f"Expected int, got {type(value).__name__}")
        return cls._from_magnitude(_native_to_digits(abs(value)), value < 0)

    @classmethod
    def from_str(cls, text: str) -> 'BigInt':
        """
        Parse a decimal string.

        Accepts an optional leading '+' or '-' and surrounding whitespace.

        Args:
            text: Decimal representation

        Returns:
            Parsed BigInt

        Raises:
            ParseError: If the text is not a decimal integer
        """
        if not isinstance(text, str):
            raise ParseError(f"Expected a decimal string, got {type(text).__name__}")
        body = text.strip()
        negative = False
        if body[:1] in ('+', '-'):
            negative = body[0] == '-'
            body = body[1:]
        if not body or not _DECIMAL_CHARS.issuperset(body):
            raise ParseError(f"Invalid decimal number: {text!r}")
        return cls._from_magnitude([ord(char) - 48 for char in reversed(body)], negative)

    @classmethod
    def from_digits(cls, digits: Sequence[int], negative: bool = False) -> 'BigInt':
        """
        Create a BigInt from little-endian decimal digits.

        Most-significant zero digits are dropped.

        Raises:
            ParseError: If any element is not a digit 0-9
        """
        magnitude = list(digits)
        for digit in magnitude:
            if not isinstance(digit, int) or not 0 <= digit < RADIX:
                raise ParseError(f"Invalid decimal digit: {digit!r}")
        return cls._from_magnitude(magnitude, negative)

    @classmethod
    def from_bytes(cls, data: bytes) -> 'BigInt':
        """Interpret bytes as a big-endian unsigned integer."""
        return cls.from_int(int.from_bytes(data, byteorder='big'))

    @classmethod
    def of(cls, value: Union['BigInt', int, str]) -> 'BigInt':
        """Coerce a BigInt, native int or decimal string to a BigInt."""
        if isinstance(value, BigInt):
            return value
        if isinstance(value, int):
            return cls.from_int(value)
        if isinstance(value, str):
            return cls.from_str(value)
        raise TypeError(f"Cannot convert {type(value).__name__} to BigInt")

    # ------------------------------------------------------------------
    # Inspection and conversion
    # ------------------------------------------------------------------

    def digit_length(self) -> int:
        """Number of decimal digits (0 for zero)."""
        return len(self.digits)

    def is_zero(self) -> bool:
        return self.sign is Sign.ZERO

    def is_negative(self) -> bool:
        return self.sign is Sign.NEGATIVE

    def is_positive(self) -> bool:
        return self.sign is Sign.POSITIVE

    def is_even(self) -> bool:
        return not self.digits or self.digits[0] % 2 == 0

    def is_odd(self) -> bool:
        return not self.is_even()

    def to_bytes(self, length: int) -> bytes:
        """
        Big-endian unsigned encoding of exactly `length` bytes.

        Raises:
            ValueError: If the value is negative
            OverflowError: If the value does not fit in `length` bytes
        """
        if self.is_negative():
            raise ValueError("Cannot encode a negative BigInt as unsigned bytes")
        return int(self).to_bytes(length, byteorder='big')

    def __int__(self) -> int:
        value = _native_value(self.digits)
        return -value if self.is_negative() else value

    def __bool__(self) -> bool:
        return not self.is_zero()

    def __str__(self) -> str:
        if self.is_zero():
            return "0"
        body = ''.join(chr(48 + digit) for digit in reversed(self.digits))
        return '-' + body if self.is_negative() else body

    def __repr__(self) -> str:
        return f"BigInt('{self}')"

    def __hash__(self) -> int:
        # Equal to hash(int(self)) so BigInt and int keys coincide.
        return hash(int(self))

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def _compare(self, other: 'BigInt') -> int:
        if self.sign is not other.sign:
            return 1 if self.sign.value > other.sign.value else -1
        result = _compare_magnitude(self.digits, other.digits)
        return -result if self.is_negative() else result

    def __eq__(self, other) -> bool:
        other = _coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return self.sign is other.sign and self.digits == other.digits

    def __lt__(self, other) -> bool:
        other = _coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return self._compare(other) < 0

    def __le__(self, other) -> bool:
        other = _coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return self._compare(other) <= 0

    def __gt__(self, other) -> bool:
        other = _coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return self._compare(other) > 0

    def __ge__(self, other) -> bool:
        other = _coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return self._compare(other) >= 0

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def __neg__(self) -> 'BigInt':
        if self.is_zero():
            return self
        flipped = Sign.POSITIVE if self.is_negative() else Sign.NEGATIVE
        return BigInt(self.digits, flipped)

    def __pos__(self) -> 'BigInt':
        return self

    def __abs__(self) -> 'BigInt':
        return -self if self.is_negative() else self

    def __add__(self, other) -> 'BigInt':
        other = _coerce(other)
        if other is NotImplemented:
            return NotImplemented
        if self.is_zero():
            return other
        if other.is_zero():
            return self
        if self.sign is other.sign:
            return BigInt._from_magnitude(
                _add_magnitude(self.digits, other.digits), self.is_negative()
            )
        # Opposite signs: the larger magnitude decides the sign.
        order = _compare_magnitude(self.digits, other.digits)
        if order == 0:
            return ZERO
        if order > 0:
            return BigInt._from_magnitude(
                _sub_magnitude(self.digits, other.digits), self.is_negative()
            )
        return BigInt._from_magnitude(
            _sub_magnitude(other.digits, self.digits), other.is_negative()
        )

    __radd__ = __add__

    def __sub__(self, other) -> 'BigInt':
        other = _coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return self + (-other)

    def __rsub__(self, other) -> 'BigInt':
        other = _coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return other + (-self)

    def __mul__(self, other) -> 'BigInt':
        other = _coerce(other)
        if other is NotImplemented:
            return NotImplemented
        if self.is_zero() or other.is_zero():
            return ZERO
        return BigInt._from_magnitude(
            _mul_magnitude(self.digits, other.digits),
            self.is_negative() != other.is_negative(),
        )

    __rmul__ = __mul__

    def __divmod__(self, other) -> Tuple['BigInt', 'BigInt']:
        """
        Euclidean division.

        The remainder is always in [0, |other|) and
        quotient * other + remainder == self.

        Raises:
            DivisionByZero: If other is zero
        """
        other = _coerce(other)
        if other is NotImplemented:
            return NotImplemented
        if other.is_zero():
            raise DivisionByZero("Division by zero")

        quotient, remainder = _divmod_magnitude(self.digits, other.digits)
        if self.is_negative() and remainder:
            # Step one further away from zero so the remainder turns positive.
            quotient = _add_magnitude(quotient, [1])
            remainder = _sub_magnitude(other.digits, remainder)
        quotient_negative = self.is_negative() != other.is_negative()
        return (BigInt._from_magnitude(quotient, quotient_negative),
                BigInt._from_magnitude(remainder))

    def __rdivmod__(self, other) -> Tuple['BigInt', 'BigInt']:
        other = _coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return divmod(other, self)

    def __floordiv__(self, other) -> 'BigInt':
        result = self.__divmod__(other)
        if result is NotImplemented:
            return NotImplemented
        return result[0]

    def __rfloordiv__(self, other) -> 'BigInt':
        other = _coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return other // self

    def __mod__(self, other) -> 'BigInt':
        result = self.__divmod__(other)
        if result is NotImplemented:
            return NotImplemented
        return result[1]

    def __rmod__(self, other) -> 'BigInt':
        other = _coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return other % self

    def div_trunc(self, other: Union['BigInt', int]) -> 'BigInt':
        """
        Truncating division (rounds toward zero).

        The quotient's sign is the exclusive-or of the operand signs.

        Raises:
            DivisionByZero: If other is zero
        """
        other = BigInt.of(other)
        if other.is_zero():
            raise DivisionByZero("Division by zero")
        quotient, _ = _divmod_magnitude(self.digits, other.digits)
        return BigInt._from_magnitude(quotient, self.is_negative() != other.is_negative())

    def __pow__(self, exponent, modulus=None) -> 'BigInt':
        if modulus is not None:
            return self.modpow(exponent, modulus)
        exponent = _coerce(exponent)
        if exponent is NotImplemented:
            return NotImplemented
        if exponent.is_negative():
            raise ValueError("Exponent must be non-negative")

        # Square-and-multiply (right-to-left binary method)
        bits = _binary_digits(exponent.digits)
        result = ONE
        base = self
        for index, bit in enumerate(bits):
            if bit:
                result = result * base
            if index + 1 < len(bits):
                base = base * base
        return result

    def modpow(self, exponent: Union['BigInt', int, str],
               modulus: Union['BigInt', int, str]) -> 'BigInt':
        """
        Modular exponentiation using square-and-multiply.

        Computes (self^exponent) mod modulus, reducing after every
        multiplication and squaring so intermediate values stay below
        modulus^2.

        Time complexity: O(log exponent) multiplications

        Args:
            exponent: The exponent (must be non-negative)
            modulus: The modulus (must be non-zero)

        Returns:
            Result in [0, |modulus|)

        Raises:
            ValueError: If exponent < 0
            DivisionByZero: If modulus == 0
        """
        exponent = BigInt.of(exponent)
        modulus = BigInt.of(modulus)
        if modulus.is_zero():
            raise DivisionByZero("Modulus must be non-zero")
        if exponent.is_negative():
            raise ValueError("Exponent must be non-negative")
        if modulus.digits == (1,):
            return ZERO

        base = self % modulus
        result = ONE
        bits = _binary_digits(exponent.digits)
        for index, bit in enumerate(bits):
            if bit:
                result = (result * base) % modulus
            if index + 1 < len(bits):
                base = (base * base) % modulus
        return result


def _coerce(value):
    if isinstance(value, BigInt):
        return value
    if isinstance(value, int):
        return BigInt.from_int(value)
    return NotImplemented


ZERO = BigInt()
ONE = BigInt.from_int(1)
TWO = BigInt.from_int(2)


# ============================================================================
# Public Construction Helpers
# ============================================================================

def bigint_from_decimal(text: str) -> BigInt:
    """
    Parse decimal text into a BigInt.

    Raises:
        ParseError: If the text is malformed
    """
    return BigInt.from_str(text)


def bigint_from_native(value: int) -> BigInt:
    """Convert a native integer into a BigInt."""
    return BigInt.from_int(value)
