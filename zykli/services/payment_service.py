import json
import secrets
from dataclasses import dataclass

from flask import current_app

from ..exceptions import NotFound, PaymentAlreadyVerified, PaymentNotVerified, ValidationError
from ..extensions import db, get_payment_gateway
from ..models.payment import Payment, PaymentStatus
from ..models.plan import MembershipPlan
from ..models.webhook_events import PaymentWebhookEvent
from ..utils.time_utils import utcnow
from . import active_plan_tracker, plan_catalog
from .active_plan_tracker import PlanState
from .plan_service import parse_days, parse_plan_id

MAX_ORDER_AMOUNT = 10_000_000

PAID_EVENTS = {"order.paid", "payment.captured"}
FAILED_EVENTS = {"payment.failed"}
PAID_STATUSES = {"paid", "captured", "success"}
FAILED_STATUSES = {"failed"}


@dataclass
class VerificationResult:
    payment: Payment
    plan: MembershipPlan
    renewed: bool

    @property
    def message(self) -> str:
        if self.renewed:
            return "Payment verified and plan renewed successfully"
        return "Payment verified and plan upgraded successfully"


def parse_amount(value) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValidationError("amount must be a positive number")
    try:
        amount = float(value)
    except ValueError:
        raise ValidationError("amount must be a positive number")
    if not (0 < amount <= MAX_ORDER_AMOUNT):
        raise ValidationError("amount must be a positive number")
    return round(amount, 2)


def create_order(user_id: int, amount, gateway=None, now=None) -> dict:
    """Open a gateway order and record it as a pending payment.

    The gateway's order object is returned to the caller unmodified.
    """
    amount = parse_amount(amount)
    gateway = gateway or get_payment_gateway()
    now = now or utcnow()

    receipt = f"rcpt_{user_id}_{secrets.token_hex(6)}"
    order = gateway.create_order(amount, receipt)

    payment = Payment(
        order_id=order["id"],
        user_id=user_id,
        amount=amount,
        currency=order.get("currency", current_app.config.get("PAYMENT_CURRENCY", "INR")),
        payment_status=PaymentStatus.PENDING,
        created_at=now,
        updated_at=now,
    )
    try:
        db.session.add(payment)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(f"Created order {payment.order_id} for user {user_id} ({amount})")
    return order


def _owned_payment(user_id: int, order_id: str, for_update: bool = False) -> Payment:
    query = Payment.query.filter_by(order_id=order_id)
    if for_update:
        query = query.with_for_update()
    payment = query.first()
    if not payment or payment.user_id != user_id:
        raise NotFound("Payment order not found")
    return payment


def verify_and_activate(user_id: int, order_id, plan_id, days, proof: dict | None = None,
                        gateway=None, now=None) -> VerificationResult:
    """Confirm a payment with the gateway, then move the user onto the paid plan.

    A second call for an order that is already ``success`` is rejected with
    PaymentAlreadyVerified, so the plan window is never extended twice.
    """
    if not order_id or not isinstance(order_id, str):
        raise ValidationError("orderId is required")
    plan = plan_catalog.get_plan(parse_plan_id(plan_id))
    days = parse_days(days)
    proof = proof or {}
    gateway = gateway or get_payment_gateway()

    payment = _owned_payment(user_id, order_id)
    if payment.payment_status == PaymentStatus.SUCCESS:
        raise PaymentAlreadyVerified("Payment already verified")
    # release the read before the gateway round trip
    db.session.rollback()

    if not gateway.is_paid(order_id, proof):
        current_app.logger.warning(f"Payment verification failed for order {order_id} (user {user_id})")
        raise PaymentNotVerified("Payment verification failed", gateway.denial_reason)

    now = now or utcnow()
    try:
        payment = _owned_payment(user_id, order_id, for_update=True)
        if payment.payment_status == PaymentStatus.SUCCESS:
            raise PaymentAlreadyVerified("Payment already verified")

        _, previous = active_plan_tracker.upgrade(user_id, plan.id, days, now=now)

        payment.payment_status = PaymentStatus.SUCCESS
        payment.payment_id = proof.get("paymentId") or payment.payment_id
        payment.plan_id = plan.id
        payment.updated_at = now
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(
        f"Order {order_id} verified; user {user_id} on plan {plan.name} for {days} days (was {previous.value})"
    )
    return VerificationResult(payment=payment, plan=plan, renewed=previous is PlanState.EXPIRED)


def _as_dict(value) -> dict:
    return value if isinstance(value, dict) else {}


def _extract_event(event_data: dict, event_id_header: str | None):
    """Return (event_id, event_type, order_id, outcome) from a flat or Razorpay body."""
    if "orderId" in event_data:
        order_id = event_data.get("orderId")
        if order_id is not None and not isinstance(order_id, str):
            raise ValidationError("orderId must be a string")
        status = str(event_data.get("status") or "").lower()
        event_type = f"status.{status or 'unknown'}"
        outcome = "paid" if status in PAID_STATUSES else "failed" if status in FAILED_STATUSES else None
    else:
        event_type = str(event_data.get("event") or "unknown")
        payload = _as_dict(event_data.get("payload"))
        payment_entity = _as_dict(_as_dict(payload.get("payment")).get("entity"))
        order_entity = _as_dict(_as_dict(payload.get("order")).get("entity"))
        order_id = payment_entity.get("order_id") or order_entity.get("id")
        if not isinstance(order_id, str):
            order_id = None
        outcome = "paid" if event_type in PAID_EVENTS else "failed" if event_type in FAILED_EVENTS else None

    event_id = event_id_header or event_data.get("eventId") or event_data.get("id")
    if not event_id:
        event_id = f"{order_id}:{event_type}"
    return str(event_id), event_type, order_id, outcome


def apply_webhook_event(event_data: dict, raw_body: str, signature: str | None = None,
                        event_id_header: str | None = None, now=None) -> tuple[bool, str]:
    """Record a gateway push and update the matching payment's status.

    Only payment state changes here; plan activation happens in
    verify_and_activate. ``success`` is never overwritten.
    """
    if not isinstance(event_data, dict):
        raise ValidationError("Invalid webhook payload")

    now = now or utcnow()
    event_id, event_type, order_id, outcome = _extract_event(event_data, event_id_header)

    if PaymentWebhookEvent.query.filter_by(event_id=event_id).first():
        current_app.logger.info(f"Webhook event {event_id} already recorded, skipping")
        return True, "Duplicate event ignored"

    event = PaymentWebhookEvent(
        event_id=event_id,
        event_type=event_type,
        payload=raw_body or json.dumps(event_data),
        signature=signature,
        order_id=order_id,
        created_at=now,
    )
    db.session.add(event)

    try:
        processed, message = _apply_outcome(order_id, outcome, now)
        event.processed = processed
        event.processed_at = now if processed else None
        event.error_message = None if processed else message
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    log = current_app.logger.info if processed else current_app.logger.warning
    log(f"Webhook {event_type} for order {order_id}: {message}")
    return processed, message


def _apply_outcome(order_id, outcome, now) -> tuple[bool, str]:
    if not order_id:
        return False, "No order id in payload"
    if outcome is None:
        return False, "Unhandled event"

    payment = Payment.query.filter_by(order_id=order_id).with_for_update().first()
    if not payment:
        return False, "Unknown order"

    current = payment.payment_status
    if outcome == "paid" and current in (PaymentStatus.PENDING, PaymentStatus.FAILED):
        payment.payment_status = PaymentStatus.PAID
    elif outcome == "failed" and current == PaymentStatus.PENDING:
        payment.payment_status = PaymentStatus.FAILED
    else:
        return True, f"Payment already {current}"

    payment.updated_at = now
    return True, f"Payment marked {payment.payment_status}"
