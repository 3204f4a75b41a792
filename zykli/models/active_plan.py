from ..utils.time_utils import utcnow
from ..extensions import db


class ActivePlan(db.Model):
    """The single current plan slot of a user; overwritten, never deleted."""

    __tablename__ = 'active_plans'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    plan_id = db.Column(db.Integer, db.ForeignKey('membership_plans.plan_id'), nullable=False)
    activation_date = db.Column(db.DateTime, nullable=False)
    days_active = db.Column(db.Integer, nullable=False)
    expiration_date = db.Column(db.DateTime, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        db.UniqueConstraint('user_id', name='uq_active_plan_user'),
    )

    plan = db.relationship("MembershipPlan")

    def __repr__(self):
        return f"<ActivePlan user={self.user_id} plan={self.plan_id} until={self.expiration_date}>"
