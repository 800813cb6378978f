"""Password hashing and verification"""

import logfire

from passlib.context import CryptContext
from starlette.concurrency import run_in_threadpool

from utils.errors import InternalError, ValidationError


DEFAULT_SALT_ROUNDS = 10


class PasswordHasher:
    """Salted bcrypt hashing with a configurable cost factor.

    Args:
        rounds (int, optional): bcrypt cost factor. Defaults to 10.
    """

    def __init__(self, rounds: int = DEFAULT_SALT_ROUNDS):
        self.rounds = rounds
        self.context = CryptContext(
            schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds
        )
        self._dummy_hash: str | None = None

    async def hash(self, plaintext: str) -> str:
        """Hash a plain text password.

        Args:
            plaintext (str): The password to hash.

        Raises:
            ValidationError: When the password is empty.
            InternalError: When the hashing backend fails.

        Returns:
            str: The bcrypt hash.
        """
        if not plaintext:
            raise ValidationError("Password is required for hashing")

        try:
            return await run_in_threadpool(self.context.hash, plaintext)
        except Exception as e:
            logfire.error(f"Password hashing failed: {e}")
            raise InternalError("Password hashing failed")

    async def compare(self, plaintext: str | None, hashed: str | None) -> bool:
        """Check a plain text password against a stored hash.

        Fails closed: any error (including a malformed hash) is reported as a mismatch.

        Args:
            plaintext (str | None): The submitted password.
            hashed (str | None): The stored hash.

        Returns:
            bool: True if the password matches the hash, False otherwise.
        """
        if not plaintext or not hashed:
            return False

        try:
            return bool(await run_in_threadpool(self.context.verify, plaintext, hashed))
        except Exception as e:
            logfire.warning(f"Password comparison failed: {e}")
            return False

    async def compare_dummy(self, plaintext: str | None) -> bool:
        """Spend one comparison against a fixed hash.

        Used when no user matched a login so that unknown accounts and wrong
        passwords take the same time to reject.

        Args:
            plaintext (str | None): The submitted password.

        Returns:
            bool: Always False.
        """
        if self._dummy_hash is None:
            self._dummy_hash = await run_in_threadpool(
                self.context.hash, "dummy_password_for_timing_attack_prevention"
            )

        await self.compare(plaintext or "", self._dummy_hash)
        return False
