"""Time Utilities - UTC timestamps and formatting"""
from datetime import datetime, timezone, timedelta
from typing import Optional
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def utc_now() -> datetime:
    """
    Get current UTC datetime as a naive value

    MongoDB hands datetimes back without tzinfo, so everything stored or
    compared in the domain is naive UTC.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(dt: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values are assumed UTC"""
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def format_iso(dt: datetime) -> str:
    """
    Format datetime to ISO 8601 string

    Args:
        dt: Datetime object

    Returns:
        ISO formatted string with Z suffix for UTC
    """
    if dt.tzinfo is None:
        # Assume UTC if no timezone
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat().replace("+00:00", "Z")


def parse_iso(iso_string: str) -> datetime:
    """
    Parse ISO 8601 string to naive UTC datetime

    Args:
        iso_string: ISO formatted datetime string

    Returns:
        Naive datetime in UTC
    """
    return to_naive_utc(date_parser.isoparse(iso_string))


def add_days(dt: datetime, days: int) -> datetime:
    """Add days to datetime"""
    return dt + timedelta(days=days)


def months_ago(months: int, now: Optional[datetime] = None) -> datetime:
    """Calendar-aware 'N months before now' (same day of month, clamped)"""
    return (now or utc_now()) - relativedelta(months=months)


def is_past(dt: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """
    Check if datetime has passed

    Args:
        dt: Datetime or None
        now: Reference time, defaults to current UTC

    Returns:
        True if dt is strictly before now, False otherwise
    """
    if dt is None:
        return False
    return to_naive_utc(dt) < (now or utc_now())
