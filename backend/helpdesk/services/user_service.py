"""User Service - Account management along the role hierarchy"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from ..config.settings import Settings
from ..domain.models import User, Account, AuditLog, LoginHistory, ActorContext
from ..domain.enums import Role, BusinessType, AuditAction
from ..domain.errors import ForbiddenError, UserNotFoundError, ValidationError
from ..repositories.user_repo import UserRepository
from ..repositories.audit_repo import AuditRepository
from ..repositories.login_history_repo import LoginHistoryRepository
from ..engine.audit_writer import AuditWriter
from ..engine.authorization import AuthorizationPolicy
from ..engine.ticket_lifecycle import parse_enum
from .credential_service import CredentialService
from ..utils.idgen import generate_account_id
from ..utils.time import utc_now, add_days, to_naive_utc
from ..utils.logger import get_logger

logger = get_logger(__name__)

CREATED_ACTIONS = {
    Role.SUPER_ADMIN: AuditAction.SUPER_ADMIN_CREATED,
    Role.ADMIN: AuditAction.ADMIN_CREATED,
    Role.IT_PERSON: AuditAction.USER_CREATED,
    Role.USER: AuditAction.USER_CREATED,
}

SUPER_ADMIN_ROLES = (Role.SUPER_ADMIN, Role.EXPIRED)


class UserService:
    """Service for creating, reading and managing user accounts"""

    def __init__(
        self,
        settings: Settings,
        user_repo: UserRepository,
        audit_repo: AuditRepository,
        login_repo: LoginHistoryRepository,
        credentials: CredentialService,
        audit_writer: AuditWriter,
        policy: Optional[AuthorizationPolicy] = None
    ):
        self.settings = settings
        self.user_repo = user_repo
        self.audit_repo = audit_repo
        self.login_repo = login_repo
        self.credentials = credentials
        self.audit = audit_writer
        self.policy = policy or AuthorizationPolicy()

    # =========================================================================
    # Creation
    # =========================================================================

    def create_user(
        self,
        actor: ActorContext,
        username: str,
        email: str,
        password: str,
        role: Any,
        location: Optional[str] = None,
        business_type: Optional[Any] = None
    ) -> User:
        """
        Create an account for a role the actor is allowed to create

        SUPER_ADMIN accounts need a business type and get an Account
        record expiring super_admin_account_days from now.
        """
        target_role = parse_enum(Role, role, "role")
        self.policy.require_create(actor.role, target_role)

        if target_role == Role.SUPER_ADMIN:
            if not business_type:
                raise ValidationError("Valid business type is required", details={"field": "business_type"})
            business_type = parse_enum(BusinessType, business_type, "business_type")
        elif business_type:
            business_type = parse_enum(BusinessType, business_type, "business_type")

        user = self.credentials.create_identity(
            username, email, password, target_role,
            location=location,
            business_type=business_type
        )

        if target_role == Role.SUPER_ADMIN:
            self._create_account(user.user_id)

        self.audit.record(
            CREATED_ACTIONS[target_role],
            actor.user_id,
            f"{Role(actor.role).value} created {target_role.value}: {user.username}"
        )
        return user

    def _create_account(self, user_id: str, expiry_date: Optional[datetime] = None) -> Account:
        now = utc_now()
        return self.user_repo.create_account(Account(
            account_id=generate_account_id(),
            user_id=user_id,
            expiry_date=expiry_date or add_days(now, self.settings.super_admin_account_days),
            created_at=now,
            updated_at=now
        ))

    def ensure_system_owner(self, username: str, email: str, password: str) -> Optional[User]:
        """Create the initial SYSTEM_OWNER if none exists yet"""
        if self.user_repo.any_with_role(Role.SYSTEM_OWNER):
            logger.info("System owner already exists, skipping bootstrap")
            return None

        user = self.credentials.create_identity(username, email, password, Role.SYSTEM_OWNER)
        self.audit.record(
            AuditAction.USER_CREATED,
            user.user_id,
            f"Initial system owner {user.username} created"
        )
        logger.info(f"Created system owner: {user.username}", extra={"user_id": user.user_id})
        return user

    # =========================================================================
    # Deletion
    # =========================================================================

    def delete_user(
        self,
        actor: ActorContext,
        user_id: str,
        allowed_roles: Optional[Sequence[Role]] = None,
        action: AuditAction = AuditAction.USER_DELETED
    ) -> User:
        """
        Delete a user the actor outranks

        allowed_roles narrows which target roles count as found; any other
        target is reported as not found. A super admin's Account is removed
        before the user.
        """
        user = self.user_repo.get_user(user_id)
        if not user or (allowed_roles is not None and Role(user.role) not in allowed_roles):
            raise UserNotFoundError("User not found", details={"user_id": user_id})

        if Role(user.role) in SUPER_ADMIN_ROLES:
            # EXPIRED only exists for former super admins
            self.policy.require_manage(actor.role, Role.SUPER_ADMIN)
            self.user_repo.delete_account(user.user_id)
        else:
            self.policy.require_manage(actor.role, user.role)

        self.user_repo.delete_user(user.user_id)

        self.audit.record(
            action,
            actor.user_id,
            f"{Role(actor.role).value} deleted {user.role}: {user.username}"
        )
        return user

    # =========================================================================
    # Super admin accounts
    # =========================================================================

    def update_super_admin_expiry(
        self,
        actor: ActorContext,
        user_id: str,
        expiry_date: datetime
    ) -> Account:
        """
        Move a super admin's expiry date

        Renewing an EXPIRED super admin to a future date restores SUPER_ADMIN.
        """
        user = self.user_repo.get_user(user_id)
        if not user or Role(user.role) not in SUPER_ADMIN_ROLES:
            raise UserNotFoundError("Super Admin not found", details={"user_id": user_id})
        self.policy.require_manage(actor.role, Role.SUPER_ADMIN)

        expiry_date = to_naive_utc(expiry_date)
        account = self.user_repo.update_account_expiry(user.user_id, expiry_date)
        if account is None:
            account = self._create_account(user.user_id, expiry_date)

        if Role(user.role) == Role.EXPIRED and expiry_date > utc_now():
            self.user_repo.set_role(user.user_id, Role.SUPER_ADMIN)
            logger.info(f"Super admin restored: {user.username}", extra={"user_id": user.user_id})

        self.audit.record(
            AuditAction.SUPER_ADMIN_EXPIRY_UPDATED,
            actor.user_id,
            f"{Role(actor.role).value} updated Super Admin {user.username} expiry to {expiry_date.isoformat()}"
        )
        return account

    # =========================================================================
    # Reads and updates
    # =========================================================================

    def _require_self_or_staff(self, actor: ActorContext, user_id: str) -> None:
        if actor.user_id == user_id:
            return
        if Role(actor.role) not in (Role.ADMIN, Role.SUPER_ADMIN):
            raise ForbiddenError("Access denied", details={"user_id": user_id})

    def get_user(self, actor: ActorContext, user_id: str) -> User:
        """Self, ADMIN or SUPER_ADMIN may read a user"""
        self._require_self_or_staff(actor, user_id)
        return self.user_repo.get_user_or_raise(user_id)

    def update_user(
        self,
        actor: ActorContext,
        user_id: str,
        email: Optional[str] = None,
        password: Optional[str] = None
    ) -> User:
        """Update email and/or password"""
        self._require_self_or_staff(actor, user_id)
        target = self.user_repo.get_user_or_raise(user_id)
        if actor.user_id != user_id:
            self.policy.require_manage(actor.role, target.role)

        updates: Dict[str, Any] = {}
        if email:
            if "@" not in email:
                raise ValidationError("A valid email is required", details={"field": "email"})
            updates["email"] = email.strip().lower()
        if password:
            updates["password_hash"] = self.credentials.hasher.hash(password)
        if not updates:
            raise ValidationError("Nothing to update")

        user = self.user_repo.update_user(user_id, updates)
        self.audit.record(
            AuditAction.USER_UPDATED,
            actor.user_id,
            f"Updated {', '.join(k for k in updates if k != 'updated_at')} of {user.username}"
        )
        return user

    def change_role(self, actor: ActorContext, user_id: str, new_role: Any) -> User:
        """
        Change a user's role

        The actor must outrank both the current and the requested role.
        """
        target_role = parse_enum(Role, new_role, "role")
        if target_role == Role.EXPIRED:
            raise ValidationError("EXPIRED is assigned by account expiry only", details={"field": "role"})

        user = self.user_repo.get_user_or_raise(user_id)
        self.policy.require_manage(actor.role, user.role)
        self.policy.require_manage(actor.role, target_role)

        old_role = user.role
        user = self.user_repo.set_role(user_id, target_role)

        self.audit.record(
            AuditAction.USER_ROLE_CHANGED,
            actor.user_id,
            f"Role of {user.username} changed from {old_role} to {target_role.value}"
        )
        return user

    def set_business_type(self, actor: ActorContext, user_id: str, business_type: Any) -> User:
        bt = parse_enum(BusinessType, business_type, "business_type")
        self.user_repo.get_user_or_raise(user_id)
        user = self.user_repo.update_user(user_id, {"business_type": bt.value})

        self.audit.record(
            AuditAction.USER_BUSINESS_TYPE_CHANGED,
            actor.user_id,
            f"Business type of {user.username} set to {bt.value}"
        )
        return user

    # =========================================================================
    # Listings
    # =========================================================================

    def list_users(self, roles: Optional[Sequence[Any]] = None) -> List[User]:
        if roles is not None:
            roles = [parse_enum(Role, r, "role") for r in roles]
        return self.user_repo.list_users(roles=roles)

    def list_by_business_type(self, business_type: Any) -> List[User]:
        bt = parse_enum(BusinessType, business_type, "business_type")
        return self.user_repo.list_users(business_type=bt)

    def list_managed(self, actor: ActorContext) -> Dict[str, List[User]]:
        """Users grouped by role, limited to what the actor may see"""
        groups = {
            Role.ADMIN: "admins",
            Role.IT_PERSON: "it_persons",
            Role.USER: "users",
        }
        visible = self.policy.visible_roles(actor.role)
        return {
            key: self.user_repo.list_users(roles=[role])
            for role, key in groups.items()
            if role in visible
        }

    def get_audit_logs(self, user_id: str, limit: int = 100) -> List[AuditLog]:
        self.user_repo.get_user_or_raise(user_id)
        return self.audit_repo.get_entries(user_id=user_id, limit=limit)

    def get_login_history(self, user_id: str, limit: int = 50) -> List[LoginHistory]:
        self.user_repo.get_user_or_raise(user_id)
        return self.login_repo.list_for_user(user_id, limit=limit)
