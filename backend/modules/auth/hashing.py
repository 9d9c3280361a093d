"""
Password hashing.

A salted, deliberately slow one-way hash via passlib. Every call to hash()
draws a fresh salt, so two hashes of the same password differ.
"""

from passlib.context import CryptContext


class PasswordHasher:
    """Thin wrapper around a passlib CryptContext."""

    def __init__(self, schemes: tuple[str, ...] = ("pbkdf2_sha256",)):
        self._context = CryptContext(schemes=list(schemes), deprecated="auto")

    def hash(self, plaintext: str) -> str:
        return self._context.hash(plaintext)

    def verify(self, plaintext: str, digest: str) -> bool:
        """
        Check a password against a stored digest.

        Returns False (never raises) on a mismatch, an empty digest, or a
        digest no configured scheme recognises.
        """
        if not plaintext or not digest:
            return False
        try:
            return self._context.verify(plaintext, digest)
        except (ValueError, TypeError):
            return False
