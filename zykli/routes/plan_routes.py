from flask import Blueprint, request

from ..routes.auth_routes import token_required
from ..services import plan_catalog, plan_service
from ..utils.response import api_response

plan_bp = Blueprint("plan", __name__)


@plan_bp.route("/plans", methods=["GET"])
def list_plans():
    return api_response(True, "Plans fetched", [p.to_dict() for p in plan_catalog.list_plans()])


@plan_bp.route("/membership-plan", methods=["GET"])
@token_required
def membership_plan(current_user):
    membership = plan_service.describe_membership(current_user.id)
    if membership is None:
        return api_response(
            False,
            "Your plan has expired or there is no active plan. Please upgrade your plan.",
            {"reason": "NoActivePlan"},
            403,
        )
    return api_response(True, "Membership plan fetched", membership)


@plan_bp.route("/upgrade-plan", methods=["POST"])
@token_required
def upgrade_plan(current_user):
    data = request.get_json(silent=True) or {}
    days = data.get("days", data.get("daysActive"))
    plan, row = plan_service.upgrade_plan(current_user.id, data.get("planId"), days)

    return api_response(True, f"Plan upgraded to {plan.name}", {
        "plan": plan.to_dict(),
        "activationDate": row.activation_date.isoformat(),
        "expirationDate": row.expiration_date.isoformat(),
    })
