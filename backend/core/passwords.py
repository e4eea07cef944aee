# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Password hashing – salted PBKDF2-HMAC-SHA256.

The salt is kept in its own column next to the digest (``password_salt``),
so the derivation is done with passlib's raw PBKDF2 primitive rather than
the ``$pbkdf2-sha256$`` hash format, which embeds the salt in the string.

Iteration count and output length come from configuration and are never
taken from a request.
"""

import base64
import binascii
import secrets

from passlib.crypto.digest import pbkdf2_hmac
from passlib.utils import consteq

from core.errors import InvalidInput


class PasswordHasher:
    """Derive and verify password digests.  Immutable once built."""

    def __init__(self, iterations: int = 600_000, key_length: int = 32, salt_size: int = 16):
        self.iterations = iterations
        self.key_length = key_length
        self.salt_size = salt_size
        # Throw-away salt/digest for logins against unknown emails; derived
        # once here so that path costs exactly one derivation per request.
        self._decoy_salt = self.generate_salt()
        self._decoy_digest = self.hash(secrets.token_urlsafe(16), self._decoy_salt)

    @classmethod
    def from_settings(cls, settings) -> "PasswordHasher":
        return cls(
            iterations=settings.pbkdf2_iterations,
            key_length=settings.pbkdf2_key_length,
            salt_size=settings.salt_size,
        )

    # -- raw bytes API ---------------------------------------------------------

    def generate_salt(self) -> bytes:
        """Fresh random salt from the OS CSPRNG."""
        return secrets.token_bytes(self.salt_size)

    def hash(self, plaintext: str, salt: bytes) -> bytes:
        """
        Derive the digest for *plaintext* under *salt*.

        Raises ``InvalidInput`` for a missing plaintext or a salt whose
        length differs from the configured size.
        """
        if not plaintext or not isinstance(plaintext, str):
            raise InvalidInput("Password is required")
        if not isinstance(salt, bytes) or len(salt) != self.salt_size:
            raise InvalidInput(f"Salt must be exactly {self.salt_size} bytes")
        return pbkdf2_hmac(
            "sha256",
            plaintext.encode("utf-8"),
            salt,
            self.iterations,
            self.key_length,
        )

    def verify(self, plaintext: str, salt: bytes, digest: bytes) -> bool:
        """Constant-time comparison of a fresh derivation against *digest*."""
        return consteq(self.hash(plaintext, salt), digest)

    def verify_decoy(self, plaintext: str) -> bool:
        """
        Same cost as :meth:`verify` against a real row, always False.
        Used when no identity matches, so timing does not reveal that.
        """
        self.verify(plaintext, self._decoy_salt, self._decoy_digest)
        return False

    # -- storage (base64 text) API --------------------------------------------

    def hash_new(self, plaintext: str) -> tuple[str, str]:
        """
        Hash a password under a brand-new salt.

        Returns
        -------
        password_hash : str   base64( PBKDF2 digest )
        password_salt : str   base64( random salt )
        """
        salt = self.generate_salt()
        digest = self.hash(plaintext, salt)
        return (
            base64.b64encode(digest).decode("ascii"),
            base64.b64encode(salt).decode("ascii"),
        )

    def verify_stored(self, plaintext: str, stored_hash: str, stored_salt: str) -> bool:
        """
        Verify against the base64 columns of an Identity row.

        A row whose salt or hash cannot be decoded never verifies.
        """
        try:
            salt = base64.b64decode(stored_salt, validate=True)
            digest = base64.b64decode(stored_hash, validate=True)
        except (binascii.Error, ValueError, TypeError):
            return False
        if len(salt) != self.salt_size:
            return False
        return self.verify(plaintext, salt, digest)
