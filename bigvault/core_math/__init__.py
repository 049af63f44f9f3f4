# Core Math Module
"""
Arbitrary-precision decimal integers and number theory:
- BigInt (schoolbook arithmetic, long division, modular exponentiation)
- GCD, EGCD, modular inverse
- Primality testing, random primes, primitive roots
- Trial-division factoring
"""
