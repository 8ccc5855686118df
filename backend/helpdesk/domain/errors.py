"""Domain Errors - Centralized Exception Hierarchy"""
from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base domain error - all errors extend this"""

    error_code: str = "DOMAIN_ERROR"
    http_status: int = 400

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if error_code:
            self.error_code = error_code

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to API response dict"""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details
            }
        }


# Authentication Errors
class AuthenticationError(DomainError):
    """No identity could be established for the caller"""
    error_code = "UNAUTHENTICATED"
    http_status = 401


class InvalidCredentialsError(AuthenticationError):
    """Unknown email or wrong password (deliberately indistinguishable)"""
    error_code = "INVALID_CREDENTIALS"


class AccountExpiredError(AuthenticationError):
    """Super admin account is past its expiry date"""
    error_code = "ACCOUNT_EXPIRED"


class InvalidTokenError(AuthenticationError):
    """Session token missing, malformed, badly signed or expired"""
    error_code = "INVALID_TOKEN"


# Authorization Errors
class ForbiddenError(DomainError):
    """Authenticated, but the role does not allow the action"""
    error_code = "FORBIDDEN"
    http_status = 403


# Validation Errors
class ValidationError(DomainError):
    """Input validation failed"""
    error_code = "VALIDATION_ERROR"
    http_status = 400


class DuplicateIdentityError(DomainError):
    """Username or email already registered"""
    error_code = "DUPLICATE_IDENTITY"
    http_status = 400


# Not Found Errors
class NotFoundError(DomainError):
    """Resource not found (or not owned by the caller)"""
    error_code = "NOT_FOUND"
    http_status = 404


class UserNotFoundError(NotFoundError):
    """User not found"""
    error_code = "USER_NOT_FOUND"


class TicketNotFoundError(NotFoundError):
    """Ticket not found"""
    error_code = "TICKET_NOT_FOUND"


# Unexpected failures
class InternalFailureError(DomainError):
    """Store failure or other unexpected condition"""
    error_code = "INTERNAL_FAILURE"
    http_status = 500
