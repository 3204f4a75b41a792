"""
Usage ledger: one append-only row per accepted shorten request.

Counts are computed from the rows on every call; there are no stored
counters to drift. Day and month boundaries are UTC (see time_utils).
"""
from ..extensions import db
from ..models.usage_event import UsageEvent
from ..utils.time_utils import day_bounds, month_bounds


def record_usage(user_id: int, link, timestamp) -> UsageEvent:
    """Append the event for ``link`` to the current unit of work (no commit)."""
    event = UsageEvent(
        user_id=user_id,
        url_id=link.id,
        short_code=link.short_code,
        original_url=link.original_url,
        created_at=timestamp,
    )
    db.session.add(event)
    db.session.flush()
    return event


def _count_between(user_id: int, start, end) -> int:
    return UsageEvent.query.filter(
        UsageEvent.user_id == user_id,
        UsageEvent.created_at >= start,
        UsageEvent.created_at < end,
    ).count()


def count_today(user_id: int, as_of) -> int:
    start, end = day_bounds(as_of)
    return _count_between(user_id, start, end)


def count_this_month(user_id: int, as_of) -> int:
    start, end = month_bounds(as_of)
    return _count_between(user_id, start, end)
