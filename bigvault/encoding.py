"""
Hexadecimal transport encoding for ciphertext bytes.
"""

import binascii

from .errors import ParseError


def hex_encode(data: bytes) -> str:
    """Encode bytes as upper-case hexadecimal text."""
    return data.hex().upper()


def hex_decode(text: str) -> bytes:
    """
    Decode hexadecimal text (upper or lower case).

    Raises:
        ParseError: On odd length or characters outside 0-9, a-f, A-F
    """
    if len(text) % 2 != 0:
        raise ParseError("Hex text must contain an even number of characters")
    try:
        return binascii.unhexlify(text)
    except (binascii.Error, ValueError) as exc:
        raise ParseError(f"Invalid hex text: {exc}") from exc
