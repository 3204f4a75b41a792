import math

from flask import current_app

from ..exceptions import ConsistencyError, Forbidden, ValidationError
from ..extensions import db
from ..utils.time_utils import utcnow
from . import active_plan_tracker, plan_catalog, usage_ledger
from .active_plan_tracker import PlanState

SECONDS_PER_DAY = 24 * 60 * 60


def parse_days(value) -> int:
    max_days = current_app.config.get("MAX_PLAN_DAYS", 3650)
    if isinstance(value, bool):
        raise ValidationError("days must be a whole number")
    try:
        days = int(value)
    except (TypeError, ValueError):
        raise ValidationError("days must be a whole number")
    if days != value and str(days) != str(value).strip():
        raise ValidationError("days must be a whole number")
    if days < 1 or days > max_days:
        raise ValidationError(f"days must be between 1 and {max_days}")
    return days


def parse_plan_id(value) -> int:
    if isinstance(value, bool):
        raise ValidationError("planId is required")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("planId is required")


def upgrade_plan(user_id: int, plan_id, days, now=None):
    """Payment-free upgrade. Disabled unless ALLOW_DIRECT_UPGRADE is set."""
    if not current_app.config.get("ALLOW_DIRECT_UPGRADE"):
        raise Forbidden("Direct plan upgrades are disabled. Please complete a payment.")

    plan = plan_catalog.get_plan(parse_plan_id(plan_id))
    days = parse_days(days)
    try:
        row, previous = active_plan_tracker.upgrade(user_id, plan.id, days, now=now)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(f"User {user_id} moved to plan {plan.name} for {days} days (was {previous.value})")
    return plan, row


def describe_membership(user_id: int, now=None) -> dict | None:
    """Current window plus remaining quota; None when there is no usable plan."""
    now = now or utcnow()
    window = active_plan_tracker.current_window(user_id)
    if active_plan_tracker.plan_state(window, now) is not PlanState.ACTIVE:
        return None

    plan = plan_catalog.find_plan(window.plan_id)
    if plan is None:
        raise ConsistencyError(f"Active plan of user {user_id} references unknown plan {window.plan_id}")
    count_today = usage_ledger.count_today(user_id, now)
    count_month = usage_ledger.count_this_month(user_id, now)

    remaining_seconds = (window.expiration - now).total_seconds()
    return {
        "planId": plan.id,
        "planName": plan.name,
        "urlLimit": plan.url_limit,
        "dailyUrlLimit": plan.daily_url_limit,
        "urlsRemainingToday": max(plan.daily_url_limit - count_today, 0),
        "urlsRemainingMonth": max(plan.url_limit - count_month, 0),
        "activationDate": window.activation.isoformat(),
        "expirationDate": window.expiration.isoformat(),
        "daysRemaining": math.floor(remaining_seconds / SECONDS_PER_DAY),
    }
