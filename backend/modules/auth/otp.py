"""
One-time code generation and fingerprinting.

Codes are six decimal digits from the OS CSPRNG. Only a SHA-256
fingerprint of a code is ever stored; it is unsalted so a submitted code
can be checked by fingerprinting it again and comparing.
"""

import hashlib
import hmac
import secrets

CODE_DIGITS = 6
_CODE_SPACE = 10**CODE_DIGITS


def generate_code() -> str:
    """Uniform code in 000000-999999, zero-padded."""
    return f"{secrets.randbelow(_CODE_SPACE):0{CODE_DIGITS}d}"


def fingerprint(code: str) -> str:
    return hashlib.sha256(str(code).encode("utf-8")).hexdigest()


def matches(code: str, stored_fingerprint: str) -> bool:
    """Constant-time comparison of a submitted code against a stored fingerprint."""
    if not stored_fingerprint:
        return False
    return hmac.compare_digest(fingerprint(code), stored_fingerprint)
