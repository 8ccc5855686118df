"""Password Hashing (bcrypt via passlib)"""
from passlib.context import CryptContext

from ..config.settings import Settings


class PasswordHasher:
    """Salted bcrypt hashing; plaintext never leaves this class"""

    def __init__(self, settings: Settings):
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=settings.bcrypt_rounds,
        )

    def hash(self, password: str) -> str:
        """Turn a plaintext password into a salted hash"""
        return self._context.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        """Compare a plaintext password with a stored hash"""
        try:
            return self._context.verify(password, password_hash)
        except (ValueError, TypeError):
            # Unrecognised or corrupt hash
            return False
