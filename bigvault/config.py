"""
Configuration

Bounds and defaults shared by the cipher, the key exchange and the
bruteforce engine. Values that belong together are grouped in the
*_CONFIG dictionaries; the command line front end reads its defaults
from here as well.
"""

# RSA block cipher
# - block_size: plaintext bytes fused into one 128-bit block value
# - block_delimiter: byte separating serialized blocks, never a digit byte
# - min_modulus_digits: a 16-byte block must always be smaller than n
# - default_key_digits: target length of generated moduli
RSA_CONFIG = {
    'block_size': 16,
    'block_delimiter': 0xFF,
    'min_modulus_digits': 40,
    'default_key_digits': 46,
}

BLOCK_SIZE = RSA_CONFIG['block_size']
BLOCK_DELIMITER = RSA_CONFIG['block_delimiter']
MIN_CIPHER_MODULUS_DIGITS = RSA_CONFIG['min_modulus_digits']
DEFAULT_RSA_DIGITS = RSA_CONFIG['default_key_digits']


# Bruteforce engine
# - max_modulus_digits: trial division past this is infeasible
# - threads: default and inclusive bounds of the worker pool size
BRUTEFORCE_CONFIG = {
    'max_modulus_digits': 10,
    'default_threads': 8,
    'min_threads': 1,
    'max_threads': 64,
}

MAX_BRUTEFORCE_MODULUS_DIGITS = BRUTEFORCE_CONFIG['max_modulus_digits']
DEFAULT_THREAD_COUNT = BRUTEFORCE_CONFIG['default_threads']
MIN_THREAD_COUNT = BRUTEFORCE_CONFIG['min_threads']
MAX_THREAD_COUNT = BRUTEFORCE_CONFIG['max_threads']


# Diffie-Hellman
DH_CONFIG = {
    'prime_digits': (5, 10),     # inclusive range for generated primes
    'max_prime_digits': 100,     # supplied primes longer than this are refused
}

DH_PRIME_DIGITS = DH_CONFIG['prime_digits']
MAX_DH_PRIME_DIGITS = DH_CONFIG['max_prime_digits']


# Primality testing
DEFAULT_MILLER_RABIN_ROUNDS = 20
KEYGEN_MILLER_RABIN_ROUNDS = 10
SMALL_PRIME_LIMIT = 1000         # below this, trial division decides alone


# Output
DEFAULT_OUTPUT_FILE = "calculation_result.txt"
