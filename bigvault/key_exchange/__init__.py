# Key Exchange Module
"""
Finite-field Diffie-Hellman key exchange.
"""

from .diffie_hellman import DiffieHellmanParty, DiffieHellmanResult, generate_dh

__all__ = [
    'DiffieHellmanParty',
    'DiffieHellmanResult',
    'generate_dh',
]
