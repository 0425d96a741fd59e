"""Password hashing with Argon2id."""

from argon2 import PasswordHasher as Argon2Hasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError


class PasswordHasher:
    """Hashes and verifies user passwords; plaintext is never stored."""

    def __init__(self) -> None:
        self._hasher = Argon2Hasher()

    def hash(self, password: str) -> str:
        """Hash a plaintext password.

        Args:
            password: The plaintext password.

        Returns:
            str: An encoded Argon2id hash.
        """
        return self._hasher.hash(password)

    def verify(self, hashed_password: str, password: str) -> bool:
        """Check a plaintext password against a stored hash.

        Args:
            hashed_password: Hash produced by ``hash``.
            password: The plaintext candidate.

        Returns:
            bool: True when the password matches.
        """
        try:
            return self._hasher.verify(hashed_password, password)
        except (VerifyMismatchError, InvalidHashError, VerificationError):
            return False
