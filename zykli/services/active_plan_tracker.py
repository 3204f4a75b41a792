"""
Active-plan tracker.

Each user owns at most one ``active_plans`` row. The row is the user's plan
slot: registration inserts it, upgrades overwrite it in place and nothing
deletes it. Expiry is a timestamp comparison, the row stays.

    NONE     no row
    ACTIVE   expiration_date >  now
    EXPIRED  expiration_date <= now

None of these functions commit; callers own the transaction.
"""
import datetime
import enum
from dataclasses import dataclass

from sqlalchemy import update

from ..exceptions import AlreadyExists
from ..extensions import db
from ..models.active_plan import ActivePlan
from ..utils.time_utils import utcnow
from .plan_catalog import FREE_PLAN_ID


class PlanState(enum.Enum):
    NONE = "none"
    ACTIVE = "active"
    EXPIRED = "expired"


@dataclass(frozen=True)
class PlanWindow:
    plan_id: int
    activation: datetime.datetime
    expiration: datetime.datetime
    days_active: int

    def is_active(self, now: datetime.datetime) -> bool:
        # expiration is exclusive
        return now < self.expiration


def _window_of(row: ActivePlan) -> PlanWindow:
    return PlanWindow(
        plan_id=row.plan_id,
        activation=row.activation_date,
        expiration=row.expiration_date,
        days_active=row.days_active,
    )


def _lock_sqlite(user_id: int):
    # SQLite ignores FOR UPDATE; a write takes the database write lock and
    # holds it until the transaction ends.
    db.session.execute(
        update(ActivePlan)
        .where(ActivePlan.user_id == user_id)
        .values(updated_at=ActivePlan.updated_at)
        .execution_options(synchronize_session=False)
    )


def _load_row(user_id: int, for_update: bool = False) -> ActivePlan | None:
    query = ActivePlan.query.filter_by(user_id=user_id)
    if for_update:
        if db.engine.dialect.name == "sqlite":
            _lock_sqlite(user_id)
        query = query.with_for_update()
    return query.first()


def current_window(user_id: int, for_update: bool = False) -> PlanWindow | None:
    """Snapshot of the user's plan window, or None when the user has no slot.

    ``for_update`` takes the row lock that serializes quota checks and plan
    changes for this user until the surrounding transaction ends.
    """
    row = _load_row(user_id, for_update=for_update)
    return _window_of(row) if row else None


def plan_state(window: PlanWindow | None, now: datetime.datetime) -> PlanState:
    if window is None:
        return PlanState.NONE
    return PlanState.ACTIVE if window.is_active(now) else PlanState.EXPIRED


def activate_default(user_id: int, plan_id: int = FREE_PLAN_ID, days: int = 30, now=None) -> ActivePlan:
    """Give a freshly registered user their first plan slot."""
    now = now or utcnow()
    if _load_row(user_id):
        raise AlreadyExists(f"User {user_id} already has an active plan record")

    row = ActivePlan(
        user_id=user_id,
        plan_id=plan_id,
        activation_date=now,
        days_active=days,
        expiration_date=now + datetime.timedelta(days=days),
        updated_at=now,
    )
    db.session.add(row)
    db.session.flush()
    return row


def _overwrite(row: ActivePlan, plan_id: int, days: int, now: datetime.datetime) -> ActivePlan:
    row.plan_id = plan_id
    row.activation_date = now
    row.days_active = days
    row.expiration_date = now + datetime.timedelta(days=days)
    row.updated_at = now
    return row


def upgrade(user_id: int, plan_id: int, days: int, now=None) -> tuple[ActivePlan, PlanState]:
    """Replace the user's plan window with ``[now, now + days)``.

    Remaining days of a still-active plan are discarded, not carried over.
    Returns the row and the state it was in before the change.
    """
    now = now or utcnow()
    row = _load_row(user_id, for_update=True)
    previous = plan_state(_window_of(row) if row else None, now)

    if row is not None:
        _overwrite(row, plan_id, days, now)
        db.session.flush()
        return row, previous

    # A concurrent insert for the same user fails on uq_active_plan_user
    # and surfaces as a conflict; the retried request takes the update path.
    row = ActivePlan(user_id=user_id)
    _overwrite(row, plan_id, days, now)
    db.session.add(row)
    db.session.flush()
    return row, previous
