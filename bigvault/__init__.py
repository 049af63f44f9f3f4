# BigVault
"""
Decimal big integer arithmetic and the public-key primitives built on it:
- BigInt engine and number theory
- RSA block cipher
- Diffie-Hellman key exchange
- Multithreaded RSA bruteforce

Run with: bigvault --help
"""

from .core_math.bigint import BigInt, Sign, bigint_from_decimal, bigint_from_native
from .errors import BigVaultError, DivisionByZero, NotFactorable, ParseError, PolicyViolation
from .key_exchange.diffie_hellman import DiffieHellmanParty, DiffieHellmanResult, generate_dh
from .rsa.block_cipher import RSAKey, RSAKeyPair, generate_rsa_keypair, rsa_decrypt, rsa_encrypt
from .rsa.bruteforce import BruteforceResult, bruteforce_rsa_private_key

__version__ = "0.1.0"

__all__ = [
    'BigInt',
    'Sign',
    'bigint_from_decimal',
    'bigint_from_native',
    'BigVaultError',
    'DivisionByZero',
    'NotFactorable',
    'ParseError',
    'PolicyViolation',
    'DiffieHellmanParty',
    'DiffieHellmanResult',
    'generate_dh',
    'RSAKey',
    'RSAKeyPair',
    'generate_rsa_keypair',
    'rsa_encrypt',
    'rsa_decrypt',
    'BruteforceResult',
    'bruteforce_rsa_private_key',
]
