import json

from flask import Blueprint, current_app, request

from ..exceptions import AuthError, ValidationError
from ..routes.auth_routes import token_required
from ..services import payment_service
from ..services.payment_gateway import verify_webhook_signature
from ..utils.response import api_response

payment_bp = Blueprint("payment", __name__)


@payment_bp.route("/create-order", methods=["POST"])
@token_required
def create_order(current_user):
    data = request.get_json(silent=True) or {}
    order = payment_service.create_order(current_user.id, data.get("amount"))
    return api_response(True, "Order created", order)


@payment_bp.route("/verify-payment", methods=["POST"])
@token_required
def verify_payment(current_user):
    data = request.get_json(silent=True) or {}
    result = payment_service.verify_and_activate(
        current_user.id,
        data.get("orderId"),
        data.get("planId"),
        data.get("days", data.get("daysActive")),
        proof={"paymentId": data.get("paymentId"), "signature": data.get("signature")},
    )
    return api_response(True, result.message, {
        "payment": result.payment.to_dict(),
        "plan": result.plan.to_dict(),
    })


@payment_bp.route("/payment-webhook", methods=["POST"])
def payment_webhook():
    """Gateway push; no user authentication. Acknowledged with 200 once stored."""
    raw_body = request.get_data(as_text=True)
    signature = request.headers.get("X-Razorpay-Signature")

    webhook_secret = current_app.config.get("RAZORPAY_WEBHOOK_SECRET")
    if webhook_secret and not verify_webhook_signature(raw_body, signature, webhook_secret):
        current_app.logger.warning("Rejected webhook with invalid signature")
        raise AuthError("Invalid signature")

    try:
        event_data = json.loads(raw_body)
    except ValueError:
        raise ValidationError("Invalid JSON")

    processed, message = payment_service.apply_webhook_event(
        event_data,
        raw_body,
        signature=signature,
        event_id_header=request.headers.get("X-Razorpay-Event-Id"),
    )
    return api_response(processed, message, None)
