# RSA Module
"""
RSA over BigInt:
- Key generation and 16-byte block encryption
- Fixed-size worker pool
- Parallel bruteforce of small moduli
"""
