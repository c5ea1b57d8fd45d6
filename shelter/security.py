from __future__ import annotations

from passlib.context import CryptContext

# bcrypt's own default work factor
DEFAULT_ROUNDS = 12


class PasswordHasher:
    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        self._pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, password: str) -> str:
        return self._pwd_context.hash(password)

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """Raises ValueError when the stored hash is malformed."""
        return self._pwd_context.verify(plain_password, hashed_password)
