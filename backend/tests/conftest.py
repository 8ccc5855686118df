"""
Pytest Configuration and Fixtures

Every test gets a fresh in-memory MongoDB (mongomock) and its own
service graph. The API fixtures build the app around the same database.
"""

from typing import Callable, Dict, Optional

import mongomock
import pytest
from fastapi.testclient import TestClient

from helpdesk.config.settings import Settings
from helpdesk.domain.enums import Role, BusinessType
from helpdesk.domain.models import ActorContext, User
from helpdesk.main import create_app
from helpdesk.repositories.mongo_client import create_indexes
from helpdesk.services.container import ServiceContainer

PASSWORD = "password123"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        jwt_secret="test-secret-key-for-the-helpdesk-suite",
        bcrypt_rounds=4,  # fastest bcrypt cost
        logs_path=str(tmp_path / "logs"),
        log_level="WARNING",
        retention_schedule_enabled=False,
    )


@pytest.fixture
def db():
    database = mongomock.MongoClient()["helpdesk_test"]
    create_indexes(database)
    return database


@pytest.fixture
def services(settings, db) -> ServiceContainer:
    return ServiceContainer(settings, db)


@pytest.fixture
def app(settings, db):
    return create_app(settings, db)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def api_services(app) -> ServiceContainer:
    """The service graph the running app uses"""
    return app.state.services


# =============================================================================
# User helpers
# =============================================================================

@pytest.fixture
def make_user(db, settings) -> Callable[..., User]:
    """Insert a user of any role directly, bypassing the creation hierarchy"""
    services = ServiceContainer(settings, db)

    def _make(role: Role = Role.USER, username: Optional[str] = None, **kwargs) -> User:
        username = username or f"{Role(role).value.lower()}_{services.user_repo.count_users() + 1}"
        business_type = kwargs.pop("business_type", None)
        if Role(role) == Role.SUPER_ADMIN and business_type is None:
            business_type = BusinessType.SMALL
        user = services.credentials.create_identity(
            username,
            kwargs.pop("email", f"{username}@example.com"),
            kwargs.pop("password", PASSWORD),
            Role(role),
            business_type=business_type,
            **kwargs
        )
        if Role(role) == Role.SUPER_ADMIN:
            services.users._create_account(user.user_id)
        return user

    return _make


@pytest.fixture
def actor_for() -> Callable[[User], ActorContext]:
    def _actor(user: User) -> ActorContext:
        return ActorContext(user_id=user.user_id, username=user.username, role=user.role)
    return _actor


@pytest.fixture
def auth_headers(db, settings) -> Callable[[User], Dict[str, str]]:
    """Bearer header for a user, signed with the test secret"""
    services = ServiceContainer(settings, db)

    def _headers(user: User) -> Dict[str, str]:
        token = services.credentials.tokens.issue(user.user_id, user.role)
        return {"Authorization": f"Bearer {token}"}

    return _headers
