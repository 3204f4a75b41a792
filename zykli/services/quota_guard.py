"""Decides whether a user may mint one more short code right now."""
import enum
from dataclasses import dataclass

from flask import current_app

from ..exceptions import ConsistencyError
from . import active_plan_tracker, plan_catalog, usage_ledger


class DenyReason(enum.Enum):
    NO_ACTIVE_PLAN = "NoActivePlan"
    DAILY_LIMIT_REACHED = "DailyLimitReached"
    MONTHLY_LIMIT_REACHED = "MonthlyLimitReached"


DENY_MESSAGES = {
    DenyReason.NO_ACTIVE_PLAN: "You don't have an active plan. Please upgrade your plan.",
    DenyReason.DAILY_LIMIT_REACHED: "Daily URL limit reached. Try again tomorrow.",
    DenyReason.MONTHLY_LIMIT_REACHED: "Monthly URL limit reached. Upgrade your plan to shorten more URLs.",
}


@dataclass(frozen=True)
class Admission:
    admitted: bool
    reason: DenyReason | None = None
    plan: object = None
    count_today: int = 0
    count_month: int = 0

    @property
    def message(self) -> str | None:
        return DENY_MESSAGES[self.reason] if self.reason else None


def admit_shorten_request(user_id: int, now, lock: bool = False) -> Admission:
    """Admit or deny one shorten request. Performs no writes.

    With ``lock=True`` the user's plan row stays locked until the caller's
    transaction ends, so the check and the caller's writes form one unit.
    """
    window = active_plan_tracker.current_window(user_id, for_update=lock)
    state = active_plan_tracker.plan_state(window, now)
    if state is not active_plan_tracker.PlanState.ACTIVE:
        current_app.logger.warning(f"Shorten denied for user {user_id}: plan state {state.value}")
        return Admission(False, DenyReason.NO_ACTIVE_PLAN)

    plan = plan_catalog.find_plan(window.plan_id)
    if plan is None:
        raise ConsistencyError(f"Active plan of user {user_id} references unknown plan {window.plan_id}")

    today = usage_ledger.count_today(user_id, now)
    month = usage_ledger.count_this_month(user_id, now)

    # daily is reported first when both limits are hit
    if today >= plan.daily_url_limit:
        return Admission(False, DenyReason.DAILY_LIMIT_REACHED, plan, today, month)
    if month >= plan.url_limit:
        return Admission(False, DenyReason.MONTHLY_LIMIT_REACHED, plan, today, month)

    return Admission(True, None, plan, today, month)
