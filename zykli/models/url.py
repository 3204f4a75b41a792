from ..utils.time_utils import utcnow
from ..extensions import db


class Urls(db.Model):
    __tablename__ = "urls"

    id = db.Column(db.Integer, primary_key=True)
    original_url = db.Column(db.String(2048), nullable=False)
    short_code = db.Column(db.String(32), unique=True, nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    user = db.relationship("User", backref=db.backref("urls", lazy=True))

    def to_dict(self, base_url=None):
        data = {
            "shortCode": self.short_code,
            "originalUrl": self.original_url,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
        if base_url:
            data["shortUrl"] = f"{base_url}/{self.short_code}"
        return data
