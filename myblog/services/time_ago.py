"""
Relative timestamps ("5 minutes ago").
"""
from datetime import datetime, timezone
from typing import Optional


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (as SQLite returns them) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _ago(amount: int, unit: str) -> str:
    return f"{amount} {unit}{'' if amount == 1 else 's'} ago"


def time_ago(when: datetime, now: Optional[datetime] = None) -> str:
    now = as_utc(now or datetime.now(timezone.utc))
    seconds = int((now - as_utc(when)).total_seconds())

    if seconds < 60:
        return "just now"
    minutes = seconds // 60
    if minutes < 60:
        return _ago(minutes, "minute")
    hours = minutes // 60
    if hours < 24:
        return _ago(hours, "hour")
    days = hours // 24
    if days < 7:
        return _ago(days, "day")
    weeks = days // 7
    if weeks < 5:
        return _ago(weeks, "week")
    months = days // 30
    if months < 12:
        return _ago(months, "month")
    return _ago(max(days // 365, 1), "year")
