from ..extensions import db


class MembershipPlan(db.Model):
    __tablename__ = 'membership_plans'

    id = db.Column("plan_id", db.Integer, primary_key=True, autoincrement=False)
    name = db.Column(db.String(50), nullable=False, unique=True)  # Free, Basic, Pro
    price = db.Column(db.Float, default=0.0)  # display only, in PAYMENT_CURRENCY

    # Limits
    url_limit = db.Column(db.Integer, nullable=False, default=0)  # per calendar month
    daily_url_limit = db.Column(db.Integer, nullable=False, default=0)  # per calendar day

    __table_args__ = (
        db.CheckConstraint('url_limit >= 0', name='ck_plan_url_limit'),
        db.CheckConstraint('daily_url_limit >= 0', name='ck_plan_daily_url_limit'),
    )

    def __repr__(self):
        return f"<MembershipPlan {self.name}>"

    def to_dict(self):
        return {
            'planId': self.id,
            'name': self.name,
            'price': self.price,
            'urlLimit': self.url_limit,
            'dailyUrlLimit': self.daily_url_limit,
        }
