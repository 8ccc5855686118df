"""Session Token Signing and Validation (HS256)"""
import jwt
from datetime import timedelta
from typing import Any, Dict

from ..config.settings import Settings
from ..domain.errors import InvalidTokenError
from .time import utc_now
from .logger import get_logger

logger = get_logger(__name__)


class TokenCodec:
    """Issue and validate signed session tokens carrying {userId, role}"""

    def __init__(self, settings: Settings):
        self._secret = settings.jwt_secret
        self._algorithm = settings.jwt_algorithm
        self._lifetime = timedelta(hours=settings.access_token_expire_hours)

    def issue(self, user_id: str, role: str) -> str:
        """
        Sign a token for the given identity

        The embedded role is informational only; callers re-read the
        live role from the store on every request.
        """
        now = utc_now()
        claims = {
            "sub": user_id,
            "role": role,
            "iat": now,
            "exp": now + self._lifetime,
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def validate(self, token: str) -> Dict[str, Any]:
        """
        Validate signature and expiry

        Args:
            token: Bearer token (with or without 'Bearer ' prefix)

        Returns:
            Decoded claims

        Raises:
            InvalidTokenError: If token is missing, malformed, tampered or expired
        """
        if not token:
            raise InvalidTokenError("Authentication token required")

        if token.startswith("Bearer "):
            token = token[7:]

        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            logger.warning("Token expired")
            raise InvalidTokenError("Token has expired", error_code="TOKEN_EXPIRED")
        except jwt.PyJWTError as e:
            logger.warning(f"JWT validation error: {e}")
            raise InvalidTokenError("Invalid token")

        return claims
