"""
BigVault - Command Line Entry Point

Usage:
    bigvault rsa generate [--digits 46]
    bigvault rsa encrypt --exponent E --modulus N MESSAGE
    bigvault rsa decrypt --exponent D --modulus N CIPHERTEXT
    bigvault rsa bruteforce --exponent E --modulus N [--threads 8]
    bigvault dh [--prime P] [--base G] [--secret-a A] [--secret-b B]

Every command accepts --output console|file|both and --output-file.
"""

import argparse
import logging
import sys
import textwrap
from pathlib import Path
from typing import List, Optional

from .config import DEFAULT_OUTPUT_FILE, DEFAULT_RSA_DIGITS, DEFAULT_THREAD_COUNT
from .errors import BigVaultError
from .key_exchange.diffie_hellman import generate_dh
from .rsa.block_cipher import generate_rsa_keypair, rsa_decrypt, rsa_encrypt
from .rsa.bruteforce import bruteforce_rsa_private_key


logger = logging.getLogger(__name__)

OUTPUT_MODES = ("console", "file", "both")


# ============================================================================
# Reports
# ============================================================================

def _rsa_generate(args) -> List[str]:
    keypair = generate_rsa_keypair(args.digits)
    return [
        "The result of the RSA key pair generation:",
        f"Key modulus n: {keypair.modulus}",
        f"Public key exponent e: {keypair.public_exponent}",
        f"Private key exponent d: {keypair.private_exponent}",
    ]


def _rsa_encrypt(args) -> List[str]:
    ciphertext = rsa_encrypt(args.message, args.exponent, args.modulus)
    return [
        "The result of the RSA encryption:",
        f"Ciphertext: {ciphertext}",
    ]


def _rsa_decrypt(args) -> List[str]:
    plaintext = rsa_decrypt(args.ciphertext, args.exponent, args.modulus)
    try:
        line = f"Plaintext: {plaintext.decode('utf-8')}"
    except UnicodeDecodeError:
        line = f"Plaintext (hex): {plaintext.hex().upper()}"
    return ["The result of the RSA decryption:", line]


def _rsa_bruteforce(args) -> List[str]:
    result = bruteforce_rsa_private_key(args.exponent, args.modulus, args.threads)
    return [
        "The result of the RSA bruteforce calculations:",
        f"Prime p: {result.prime_p}",
        f"Prime q: {result.prime_q}",
        f"Key modulus n: {result.modulus}",
        f"Public key exponent e: {result.public_exponent}",
        f"Private key exponent d: {result.private_exponent}",
    ]


def _diffie_hellman(args) -> List[str]:
    result = generate_dh(args.prime, args.base, args.secret_a, args.secret_b)
    return [
        "The result of the Diffie-Hellman calculations:",
        f"Shared prime: {result.prime}",
        f"Shared base: {result.base}",
        f"Secret A: {result.secret_a}",
        f"Secret B: {result.secret_b}",
        f"Package from A to B: {result.public_a}",
        f"Package from B to A: {result.public_b}",
        f"Result A: {result.shared_secret_a}",
        f"Result B: {result.shared_secret_b}",
        f"Was the operation successful?: {result.agreed}",
    ]


def emit(report: List[str], mode: str, output_file: Path) -> None:
    """Write the report to stdout, to output_file, or both."""
    text = "\n".join(report) + "\n"
    if mode in ("console", "both"):
        sys.stdout.write(text)
    if mode in ("file", "both"):
        output_file.write_text(text, encoding="utf-8")
        print(f"Saved the result of the calculations into \"{output_file}\"")


# ============================================================================
# Argument Parsing
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--output",
        choices=OUTPUT_MODES,
        default="console",
        help="Where to write the result (default: console).",
    )
    common.add_argument(
        "--output-file",
        type=Path,
        default=Path(DEFAULT_OUTPUT_FILE),
        help=f"File used by --output file/both (default: {DEFAULT_OUTPUT_FILE}).",
    )
    common.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log progress to stderr.",
    )

    key = argparse.ArgumentParser(add_help=False)
    key.add_argument("--exponent", "-e", required=True, help="Key exponent (decimal).")
    key.add_argument("--modulus", "-n", required=True, help="Key modulus (decimal).")

    ap = argparse.ArgumentParser(
        prog="bigvault",
        description="BigVault - RSA and Diffie-Hellman on decimal big integers.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""
        Examples:
          bigvault rsa generate
          bigvault rsa encrypt -e 65537 -n <modulus> "hello"
          bigvault rsa bruteforce -e 5 -n 35 --threads 4
          bigvault dh --prime 23 --base 5
        """),
    )
    commands = ap.add_subparsers(dest="command", required=True)

    rsa = commands.add_parser("rsa", help="RSA key generation, encryption and bruteforce.")
    rsa_commands = rsa.add_subparsers(dest="rsa_command", required=True)

    generate = rsa_commands.add_parser("generate", parents=[common], help="Generate a key pair.")
    generate.add_argument(
        "--digits",
        type=int,
        default=DEFAULT_RSA_DIGITS,
        help=f"Decimal digits of the modulus (default: {DEFAULT_RSA_DIGITS}).",
    )
    generate.set_defaults(handler=_rsa_generate)

    encrypt = rsa_commands.add_parser("encrypt", parents=[common, key], help="Encrypt text.")
    encrypt.add_argument("message", help="Plaintext to encrypt.")
    encrypt.set_defaults(handler=_rsa_encrypt)

    decrypt = rsa_commands.add_parser("decrypt", parents=[common, key], help="Decrypt hex text.")
    decrypt.add_argument("ciphertext", help="Hex ciphertext produced by encrypt.")
    decrypt.set_defaults(handler=_rsa_decrypt)

    bruteforce = rsa_commands.add_parser(
        "bruteforce", parents=[common, key], help="Recover d by factoring a small modulus."
    )
    bruteforce.add_argument(
        "--threads",
        type=int,
        default=DEFAULT_THREAD_COUNT,
        help=f"Worker threads (default: {DEFAULT_THREAD_COUNT}).",
    )
    bruteforce.set_defaults(handler=_rsa_bruteforce)

    dh = commands.add_parser("dh", parents=[common], help="Diffie-Hellman key exchange.")
    dh.add_argument("--prime", help="Shared prime (random 5-10 digits if omitted).")
    dh.add_argument("--base", help="Shared base, a primitive root of the prime.")
    dh.add_argument("--secret-a", help="Secret of party A.")
    dh.add_argument("--secret-b", help="Secret of party B.")
    dh.set_defaults(handler=_diffie_hellman)

    return ap


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, run the command and emit its report."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        report = args.handler(args)
        emit(report, args.output, args.output_file)
    except (BigVaultError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
