"""
Error Taxonomy

Every failure raised by the core belongs to one of four kinds:
- ParseError: malformed numeric or hexadecimal input
- DivisionByZero: illegal arithmetic
- PolicyViolation: a modulus, thread count, digit length or parameter
  outside the supported bounds
- NotFactorable: the bruteforce search exhausted its range

The core never prints; the command line front end turns these into
user-visible messages.
"""


class BigVaultError(Exception):
    """Base class for all errors raised by bigvault."""


class ParseError(BigVaultError, ValueError):
    """Raised when numeric or hexadecimal text cannot be parsed."""


class DivisionByZero(BigVaultError, ZeroDivisionError):
    """Raised on division or modulus by zero."""


class PolicyViolation(BigVaultError, ValueError):
    """Raised when an input lies outside the supported bounds."""


class NotFactorable(BigVaultError):
    """Raised when the bruteforce search finds no factor pair in range."""
