"""MongoDB Client - Connection and Index Management"""
from typing import Any, Dict
from pymongo import MongoClient, ASCENDING, DESCENDING
from pymongo.database import Database
from pymongo.errors import ConnectionFailure

from ..config.settings import Settings
from ..utils.logger import get_logger

logger = get_logger(__name__)


def create_client(settings: Settings) -> MongoClient:
    """Create a MongoDB client and verify connectivity"""
    logger.info(f"Connecting to MongoDB: {settings.mongo_uri}")
    client = MongoClient(
        settings.mongo_uri,
        serverSelectionTimeoutMS=5000,
        connectTimeoutMS=5000,
        socketTimeoutMS=30000,
    )
    try:
        client.admin.command("ping")
        logger.info("MongoDB connection successful")
    except ConnectionFailure as e:
        logger.error(f"MongoDB connection failed: {e}")
        raise
    return client


def get_database(client: MongoClient, settings: Settings) -> Database:
    """Get the application database"""
    logger.info(f"Using database: {settings.mongo_db}")
    return client[settings.mongo_db]


def create_indexes(db: Database) -> None:
    """
    Create all required indexes

    Uniqueness of username, email and the one-account-per-super-admin rule
    is enforced here by the store, not by application locking.
    """
    logger.info("Creating MongoDB indexes...")

    users = db["users"]
    users.create_index("user_id", unique=True)
    users.create_index("username", unique=True)
    users.create_index("email", unique=True)
    users.create_index("role")
    users.create_index("created_at")

    accounts = db["accounts"]
    accounts.create_index("account_id", unique=True)
    accounts.create_index("user_id", unique=True)

    tickets = db["tickets"]
    tickets.create_index("ticket_id", unique=True)
    tickets.create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])
    tickets.create_index("assigned_to")
    tickets.create_index("status")
    tickets.create_index("created_at")

    ticket_notes = db["ticket_notes"]
    ticket_notes.create_index("note_id", unique=True)
    ticket_notes.create_index([("ticket_id", ASCENDING), ("created_at", ASCENDING)])

    audit_logs = db["audit_logs"]
    audit_logs.create_index("audit_id", unique=True)
    audit_logs.create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])
    audit_logs.create_index("created_at")

    login_history = db["login_history"]
    login_history.create_index("login_id", unique=True)
    login_history.create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])
    login_history.create_index("created_at")

    dashboard_stats = db["dashboard_stats"]
    dashboard_stats.create_index("stats_id", unique=True)
    dashboard_stats.create_index([("user_id", ASCENDING), ("date", ASCENDING)])

    archived_data = db["archived_data"]
    archived_data.create_index("archive_id", unique=True)
    archived_data.create_index([("table_name", ASCENDING), ("archived_at", DESCENDING)])

    logger.info("MongoDB indexes created successfully")


def health_check(db: Database) -> Dict[str, Any]:
    """Check MongoDB health"""
    try:
        db.command("ping")
        return {
            "status": "healthy",
            "database": db.name,
            "connection": "ok"
        }
    except Exception as e:
        logger.error(f"MongoDB health check failed: {e}")
        return {
            "status": "unhealthy",
            "database": db.name,
            "error": str(e)
        }
