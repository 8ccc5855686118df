"""Credential Service - Registration, login, lazy expiry and token verification"""
from typing import Any, Dict, Optional

from ..domain.models import User, LoginHistory, ActorContext
from ..domain.enums import Role, AuditAction
from ..domain.errors import (
    AccountExpiredError, DuplicateIdentityError, ForbiddenError, InvalidCredentialsError,
    InvalidTokenError, ValidationError
)
from ..repositories.user_repo import UserRepository
from ..repositories.login_history_repo import LoginHistoryRepository
from ..engine.audit_writer import AuditWriter
from ..utils.jwt import TokenCodec
from ..utils.passwords import PasswordHasher
from ..utils.idgen import generate_user_id, generate_login_id
from ..utils.time import utc_now, is_past
from ..utils.logger import get_logger

logger = get_logger(__name__)


class CredentialService:
    """Authenticate callers and resolve them to their live role"""

    def __init__(
        self,
        user_repo: UserRepository,
        login_repo: LoginHistoryRepository,
        audit_writer: AuditWriter,
        tokens: TokenCodec,
        hasher: PasswordHasher
    ):
        self.user_repo = user_repo
        self.login_repo = login_repo
        self.audit = audit_writer
        self.tokens = tokens
        self.hasher = hasher

    # =========================================================================
    # Registration
    # =========================================================================

    def register(
        self,
        username: str,
        email: str,
        password: str,
        role: Optional[Any] = None,
        location: Optional[str] = None
    ) -> User:
        """
        Self-service registration

        Only USER accounts can be registered publicly; privileged roles
        are created through the role hierarchy.

        Raises:
            DuplicateIdentityError: username or email already taken
        """
        if role is not None and role != Role.USER.value:
            raise ForbiddenError("Public registration can only create USER accounts")

        user = self.create_identity(username, email, password, Role.USER, location=location)

        self.audit.record(
            AuditAction.USER_REGISTERED,
            user.user_id,
            f"User {user.username} registered with role {user.role}"
        )
        return user

    def create_identity(
        self,
        username: str,
        email: str,
        password: str,
        role: Role,
        location: Optional[str] = None,
        business_type: Optional[str] = None
    ) -> User:
        """Insert a user with a hashed password. Shared by every creation path."""
        if not username or not username.strip():
            raise ValidationError("Username is required", details={"field": "username"})
        if not email or "@" not in email:
            raise ValidationError("A valid email is required", details={"field": "email"})
        if not password:
            raise ValidationError("Password is required", details={"field": "password"})

        username = username.strip()
        email = email.strip().lower()

        # The unique indexes are authoritative; this check only gives a
        # clean error without waiting for the insert to fail.
        if self.user_repo.find_by_username_or_email(username, email):
            raise DuplicateIdentityError("User already exists")

        now = utc_now()
        user = User(
            user_id=generate_user_id(),
            username=username,
            email=email,
            password_hash=self.hasher.hash(password),
            role=role,
            location=location,
            business_type=business_type,
            created_at=now,
            updated_at=now
        )
        return self.user_repo.create_user(user)

    # =========================================================================
    # Login
    # =========================================================================

    def login(
        self,
        email: str,
        password: str,
        ip_address: Optional[str] = None,
        device_info: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Authenticate with email and password

        Returns:
            {"token": str, "user": User}

        Raises:
            InvalidCredentialsError: unknown email or wrong password
            AccountExpiredError: super admin past its expiry date, or already EXPIRED
        """
        user = self.user_repo.get_user_by_email((email or "").strip().lower())
        if not user or not self.hasher.verify(password or "", user.password_hash):
            logger.warning("Failed login attempt")
            raise InvalidCredentialsError("Invalid credentials")

        user = self.check_and_apply_expiry(user)

        token = self.tokens.issue(user.user_id, user.role)

        self.login_repo.record(LoginHistory(
            login_id=generate_login_id(),
            user_id=user.user_id,
            ip_address=ip_address,
            device_info=device_info,
            created_at=utc_now()
        ))
        self.audit.record(
            AuditAction.USER_LOGGED_IN,
            user.user_id,
            f"User {user.username} logged in"
        )

        logger.info(
            f"User logged in: {user.username}",
            extra={"user_id": user.user_id, "role": user.role}
        )
        return {"token": token, "user": user}

    def check_and_apply_expiry(self, user: User) -> User:
        """
        Lazy expiry gate, evaluated at login

        A SUPER_ADMIN whose account expiry date is in the past is
        downgraded to EXPIRED before the error is raised, so the role
        change persists even though the login fails.

        Raises:
            AccountExpiredError: the user is, or has just become, EXPIRED
        """
        role = Role(user.role)
        if role == Role.EXPIRED:
            raise AccountExpiredError("Account has expired", details={"user_id": user.user_id})

        if role != Role.SUPER_ADMIN:
            return user

        account = self.user_repo.get_account(user.user_id)
        if account and is_past(account.expiry_date):
            self.user_repo.set_role(user.user_id, Role.EXPIRED)
            logger.warning(
                f"Super admin account expired: {user.username}",
                extra={"user_id": user.user_id}
            )
            self.audit.record(
                AuditAction.ACCOUNT_EXPIRED,
                user.user_id,
                f"Super Admin {user.username} expired on {account.expiry_date.isoformat()}"
            )
            raise AccountExpiredError("Account has expired", details={"user_id": user.user_id})

        return user

    # =========================================================================
    # Verification
    # =========================================================================

    def verify(self, token: str) -> ActorContext:
        """
        Validate a session token and resolve the caller

        The role inside the token is ignored; the live role is re-read
        from the store so a downgrade applies on the very next request.
        """
        claims = self.tokens.validate(token)
        user = self.user_repo.get_user(claims["sub"])
        if not user:
            raise InvalidTokenError("User no longer exists")

        return ActorContext(user_id=user.user_id, username=user.username, role=user.role)
