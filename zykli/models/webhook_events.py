import uuid
from ..extensions import db
from ..utils.time_utils import utcnow


class PaymentWebhookEvent(db.Model):
    __tablename__ = 'payment_webhook_events'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = db.Column(db.String(255), unique=True, nullable=False, index=True)  # gateway event id for idempotency
    event_type = db.Column(db.String(100), nullable=False)  # e.g. order.paid, payment.failed
    payload = db.Column(db.Text, nullable=False)  # raw JSON body
    signature = db.Column(db.String(512), nullable=True)
    order_id = db.Column(db.String(255), nullable=True, index=True)
    processed = db.Column(db.Boolean, default=False, nullable=False)
    error_message = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    processed_at = db.Column(db.DateTime, nullable=True)

    def __repr__(self):
        return f"<PaymentWebhookEvent {self.event_id} - {self.event_type}>"
