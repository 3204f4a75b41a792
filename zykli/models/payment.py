from ..utils.time_utils import utcnow
from ..extensions import db


class PaymentStatus:
    PENDING = 'pending'
    PAID = 'paid'        # gateway reported capture; plan not activated yet
    SUCCESS = 'success'  # verified and plan activated
    FAILED = 'failed'


class Payment(db.Model):
    __tablename__ = 'payments'

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.String(255), unique=True, nullable=False)
    payment_id = db.Column(db.String(255), nullable=True)  # gateway payment id, known after checkout
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    amount = db.Column(db.Float, nullable=False)
    currency = db.Column(db.String(10), default='INR', nullable=False)
    payment_status = db.Column(db.String(20), default=PaymentStatus.PENDING, nullable=False)
    plan_id = db.Column(db.Integer, db.ForeignKey('membership_plans.plan_id'), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f"<Payment {self.order_id} {self.payment_status}>"

    def to_dict(self):
        return {
            'orderId': self.order_id,
            'paymentId': self.payment_id,
            'amount': self.amount,
            'currency': self.currency,
            'status': self.payment_status,
            'planId': self.plan_id,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }
