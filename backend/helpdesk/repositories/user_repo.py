"""User Repository - Identity store for users and super admin accounts"""
from typing import Any, Dict, List, Optional, Sequence
from pymongo import DESCENDING
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from ..domain.models import User, Account
from ..domain.enums import Role, BusinessType
from ..domain.errors import DuplicateIdentityError, UserNotFoundError
from ..utils.logger import get_logger
from ..utils.time import utc_now

logger = get_logger(__name__)


class UserRepository:
    """Repository for users and their 1:1 super admin accounts"""

    def __init__(self, db: Database):
        self._users: Collection = db["users"]
        self._accounts: Collection = db["accounts"]

    @staticmethod
    def _to_user(doc: Optional[Dict[str, Any]]) -> Optional[User]:
        if not doc:
            return None
        doc.pop("_id", None)
        return User.model_validate(doc)

    # =========================================================================
    # Users
    # =========================================================================

    def create_user(self, user: User) -> User:
        """
        Insert a new user

        Raises:
            DuplicateIdentityError: If the unique username/email index rejects it
        """
        # Don't use mode="json" - it converts datetime to strings, breaking sorting
        doc = user.model_dump()
        doc["_id"] = user.user_id
        try:
            self._users.insert_one(doc)
        except DuplicateKeyError:
            raise DuplicateIdentityError("User already exists")

        logger.info(
            f"Created user: {user.username}",
            extra={"user_id": user.user_id, "role": user.role}
        )
        return user

    def get_user(self, user_id: str) -> Optional[User]:
        """Get user by ID"""
        return self._to_user(self._users.find_one({"user_id": user_id}))

    def get_user_or_raise(self, user_id: str) -> User:
        """Get user by ID or raise error"""
        user = self.get_user(user_id)
        if not user:
            raise UserNotFoundError("User not found", details={"user_id": user_id})
        return user

    def get_user_by_email(self, email: str) -> Optional[User]:
        """Get user by email"""
        return self._to_user(self._users.find_one({"email": email}))

    def find_by_username_or_email(self, username: str, email: str) -> Optional[User]:
        """Get any user colliding on username OR email"""
        return self._to_user(
            self._users.find_one({"$or": [{"username": username}, {"email": email}]})
        )

    def update_user(self, user_id: str, updates: Dict[str, Any]) -> User:
        """Apply a partial update and return the new state"""
        updates["updated_at"] = utc_now()
        try:
            result = self._users.find_one_and_update(
                {"user_id": user_id},
                {"$set": updates},
                return_document=True
            )
        except DuplicateKeyError:
            raise DuplicateIdentityError("User already exists")

        if result is None:
            raise UserNotFoundError("User not found", details={"user_id": user_id})

        logger.info(f"Updated user: {user_id}", extra={"user_id": user_id})
        return self._to_user(result)

    def set_role(self, user_id: str, role: Role) -> User:
        """Change a user's live role"""
        return self.update_user(user_id, {"role": Role(role).value})

    def delete_user(self, user_id: str) -> bool:
        """Hard delete a user"""
        result = self._users.delete_one({"user_id": user_id})
        if result.deleted_count:
            logger.info(f"Deleted user: {user_id}", extra={"user_id": user_id})
        return result.deleted_count > 0

    def list_users(
        self,
        roles: Optional[Sequence[Role]] = None,
        business_type: Optional[BusinessType] = None,
        newest_first: bool = False,
        limit: int = 0
    ) -> List[User]:
        """List users, optionally restricted to a set of roles or a business type"""
        query: Dict[str, Any] = {}
        if roles is not None:
            query["role"] = {"$in": [Role(r).value for r in roles]}
        if business_type is not None:
            query["business_type"] = BusinessType(business_type).value

        cursor = self._users.find(query)
        if newest_first:
            cursor = cursor.sort("created_at", DESCENDING)
        if limit:
            cursor = cursor.limit(limit)

        return [self._to_user(doc) for doc in cursor]

    def count_users(self, roles: Optional[Sequence[Role]] = None) -> int:
        """Count users, optionally restricted to a set of roles"""
        query: Dict[str, Any] = {}
        if roles is not None:
            query["role"] = {"$in": [Role(r).value for r in roles]}
        return self._users.count_documents(query)

    def any_with_role(self, role: Role) -> bool:
        """Check whether at least one user holds the role"""
        return self._users.find_one({"role": Role(role).value}) is not None

    # =========================================================================
    # Accounts (super admin expiry)
    # =========================================================================

    def create_account(self, account: Account) -> Account:
        """Insert the account record for a super admin"""
        doc = account.model_dump()
        doc["_id"] = account.account_id
        self._accounts.insert_one(doc)
        logger.info(
            f"Created account for user: {account.user_id}",
            extra={"user_id": account.user_id}
        )
        return account

    def get_account(self, user_id: str) -> Optional[Account]:
        """Get the account for a user"""
        doc = self._accounts.find_one({"user_id": user_id})
        if doc:
            doc.pop("_id", None)
            return Account.model_validate(doc)
        return None

    def update_account_expiry(self, user_id: str, expiry_date) -> Optional[Account]:
        """Move an account's expiry date"""
        result = self._accounts.find_one_and_update(
            {"user_id": user_id},
            {"$set": {"expiry_date": expiry_date, "updated_at": utc_now()}},
            return_document=True
        )
        if result is None:
            return None
        result.pop("_id", None)
        return Account.model_validate(result)

    def delete_account(self, user_id: str) -> bool:
        """Delete the account for a user"""
        result = self._accounts.delete_one({"user_id": user_id})
        return result.deleted_count > 0
