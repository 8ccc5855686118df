"""ID Generation Utilities"""
import uuid
from datetime import datetime, timezone
from typing import Optional


def generate_id(prefix: Optional[str] = None) -> str:
    """
    Generate a unique ID with optional prefix

    Args:
        prefix: Optional prefix for the ID (e.g., 'TKT', 'USR')

    Returns:
        Unique ID string

    Examples:
        >>> generate_id('TKT')
        'TKT-a1b2c3d4e5f6'
        >>> generate_id()
        'a1b2c3d4e5f6'
    """
    # Generate short unique ID from UUID4
    unique_part = uuid.uuid4().hex[:12]

    if prefix:
        return f"{prefix}-{unique_part}"
    return unique_part


def generate_user_id() -> str:
    """Generate user ID"""
    return generate_id("USR")


def generate_account_id() -> str:
    """Generate account ID"""
    return generate_id("ACC")


def generate_ticket_id() -> str:
    """Generate ticket ID"""
    return generate_id("TKT")


def generate_note_id() -> str:
    """Generate ticket note ID"""
    return generate_id("NOTE")


def generate_audit_id() -> str:
    """Generate audit log ID"""
    return generate_id("AUD")


def generate_login_id() -> str:
    """Generate login history ID"""
    return generate_id("LOG")


def generate_stats_id() -> str:
    """Generate dashboard snapshot ID"""
    return generate_id("STAT")


def generate_archive_id() -> str:
    """Generate archived data ID"""
    return generate_id("ARC")


def generate_correlation_id() -> str:
    """
    Generate a correlation ID for request tracing

    Returns:
        Correlation ID string with timestamp prefix
    """
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    unique_part = uuid.uuid4().hex[:8]
    return f"COR-{timestamp}-{unique_part}"
