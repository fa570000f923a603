"""Password hashing and verification using bcrypt."""

from functools import cached_property

import bcrypt

from groov.models.auth import MAX_PASSWORD_BYTES

DEFAULT_ROUNDS = 10


class PasswordService:
    """One-way salted password hashing with a fixed work factor."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """Hash a password using bcrypt.

        Args:
            password: Plain-text password to hash

        Returns:
            Bcrypt hash string

        Raises:
            ValueError: If the password exceeds bcrypt's 72 byte input limit
        """
        encoded = password.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(encoded, salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Verify a password against a bcrypt hash.

        The comparison is constant-time inside bcrypt. A malformed hash or an
        oversized password never matches.

        Args:
            password: Plain-text password to check
            password_hash: Bcrypt hash to verify against

        Returns:
            True if the password matches, False otherwise
        """
        try:
            return bcrypt.checkpw(
                password.encode("utf-8"),
                password_hash.encode("utf-8"),
            )
        except ValueError:
            return False

    @cached_property
    def _dummy_hash(self) -> str:
        return self.hash("groov-dummy-password")

    def verify_dummy(self, password: str) -> bool:
        """Spend one verification on a throwaway hash. Always False."""
        self.verify(password, self._dummy_hash)
        return False
