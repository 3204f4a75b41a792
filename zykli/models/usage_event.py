from ..utils.time_utils import utcnow
from ..extensions import db


class UsageEvent(db.Model):
    """Append-only record of one accepted shorten request."""

    __tablename__ = "usage_events"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    url_id = db.Column(db.Integer, db.ForeignKey('urls.id'), nullable=False, unique=True)
    short_code = db.Column(db.String(32), nullable=False)
    original_url = db.Column(db.String(2048), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        db.Index('ix_usage_events_user_created', 'user_id', 'created_at'),
    )
