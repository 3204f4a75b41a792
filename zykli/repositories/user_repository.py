from typing import Optional
from ..extensions import db
from ..models.api_key import ApiKey
from ..models.user import User


def get_user(user_id) -> Optional[User]:
    return db.session.get(User, user_id)


def get_user_by_email(email: str) -> Optional[User]:
    return User.query.filter_by(email=email).first()


def get_user_by_username(username: str) -> Optional[User]:
    return User.query.filter_by(username=username).first()


def get_user_by_api_key(api_key: str) -> Optional[User]:
    key = ApiKey.query.filter_by(api_key=api_key).first()
    return db.session.get(User, key.user_id) if key else None
