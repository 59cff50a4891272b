"""
Utility helper functions
"""
from datetime import date, datetime
import uuid


def generate_id(prefix: str) -> str:
    """Prefixed random id, e.g. ``case_3f2b...``"""
    return f"{prefix}_{uuid.uuid4().hex}"


def local_day(value: datetime) -> date:
    """Calendar day of ``value`` in local time; naive values are taken as local"""
    if value.tzinfo is not None:
        value = value.astimezone()
    return value.date()


def to_naive_local(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)
