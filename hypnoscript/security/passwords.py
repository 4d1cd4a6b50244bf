"""bcrypt-based password hashing."""

from __future__ import annotations

import base64
import hashlib

import bcrypt

DEFAULT_ROUNDS = 12


class PasswordHasher:
    """Hash and verify account passwords with a fixed bcrypt cost factor."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        """Store the bcrypt cost factor applied to every new digest."""
        self._rounds = rounds

    @staticmethod
    def _prehash(plaintext: str) -> bytes:
        """Reduce the password to 44 ASCII bytes so bcrypt's 72-byte window covers all of it."""
        digest = hashlib.sha256(plaintext.encode("utf-8")).digest()
        return base64.b64encode(digest)

    def hash(self, plaintext: str) -> str:
        """Return a salted bcrypt digest for ``plaintext``.

        Length policy belongs to the caller, so the empty string is accepted.
        """
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(self._prehash(plaintext), salt).decode("ascii")

    def verify(self, plaintext: str, digest: str) -> bool:
        """Return ``True`` when ``plaintext`` matches ``digest``; malformed digests never match."""
        try:
            return bcrypt.checkpw(self._prehash(plaintext), digest.encode("ascii"))
        except (ValueError, UnicodeEncodeError):
            return False
