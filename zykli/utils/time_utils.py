"""Calendar helpers for quota windows.

Every timestamp in the system is naive UTC, so "today" and "this month" are
UTC calendar boundaries.
"""
import datetime


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


def day_bounds(moment: datetime.datetime):
    """Return the half-open ``[start, end)`` UTC day containing ``moment``."""
    start = datetime.datetime(moment.year, moment.month, moment.day)
    return start, start + datetime.timedelta(days=1)


def month_bounds(moment: datetime.datetime):
    """Return the half-open ``[start, end)`` UTC month containing ``moment``."""
    start = datetime.datetime(moment.year, moment.month, 1)
    if moment.month == 12:
        end = datetime.datetime(moment.year + 1, 1, 1)
    else:
        end = datetime.datetime(moment.year, moment.month + 1, 1)
    return start, end
