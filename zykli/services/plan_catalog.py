from sqlalchemy.exc import IntegrityError

from ..exceptions import NotFound
from ..extensions import db
from ..models.plan import MembershipPlan

FREE_PLAN_ID = 1

DEFAULT_PLANS = [
    {"id": FREE_PLAN_ID, "name": "Free", "price": 0.0, "url_limit": 50, "daily_url_limit": 5},
    {"id": 2, "name": "Basic", "price": 199.0, "url_limit": 500, "daily_url_limit": 50},
    {"id": 3, "name": "Pro", "price": 499.0, "url_limit": 5000, "daily_url_limit": 500},
]


def find_plan(plan_id) -> MembershipPlan | None:
    return db.session.get(MembershipPlan, plan_id)


def get_plan(plan_id) -> MembershipPlan:
    plan = find_plan(plan_id)
    if not plan:
        raise NotFound("Plan not found")
    return plan


def list_plans() -> list[MembershipPlan]:
    return MembershipPlan.query.order_by(MembershipPlan.id.asc()).all()


def ensure_default_plans(logger=None) -> int:
    """Seed the catalog when the table is empty. Returns the number of plans added."""
    if list_plans():
        return 0

    for plan in DEFAULT_PLANS:
        db.session.add(MembershipPlan(**plan))
    try:
        db.session.commit()
    except IntegrityError:
        # another worker seeded the table first
        db.session.rollback()
        if logger:
            logger.info("Membership plans already seeded by another process.")
        return 0

    if logger:
        logger.info(f"Seeded {len(DEFAULT_PLANS)} membership plans.")
    return len(DEFAULT_PLANS)
