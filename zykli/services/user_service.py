import re
import secrets

from flask import current_app

from ..exceptions import AuthError, UniquenessConflict, ValidationError
from ..extensions import db
from ..models.api_key import ApiKey
from ..models.user import User
from ..repositories.user_repository import get_user_by_api_key, get_user_by_email, get_user_by_username
from ..utils.passwords import hash_password, verify_password
from ..utils.time_utils import utcnow
from . import active_plan_tracker

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6


def _require_text(data: dict, key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Username, email, and password are required")
    return value.strip()


def register_user(data: dict, now=None) -> User:
    """Create the user and their default plan slot in one transaction."""
    username = _require_text(data, "username")
    email = _require_text(data, "email").lower()
    password = data.get("password")
    if not isinstance(password, str) or not password:
        raise ValidationError("Username, email, and password are required")

    if not EMAIL_RE.match(email):
        raise ValidationError("A valid email address is required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    if get_user_by_username(username):
        raise UniquenessConflict("Username already exists", "UsernameTaken")
    if get_user_by_email(email):
        raise UniquenessConflict("Email already exists", "EmailTaken")

    now = now or utcnow()
    try:
        user = User(username=username, email=email, password=hash_password(password), created_at=now)
        db.session.add(user)
        db.session.flush()
        active_plan_tracker.activate_default(
            user.id,
            plan_id=current_app.config.get("DEFAULT_PLAN_ID", 1),
            days=current_app.config.get("DEFAULT_PLAN_DAYS", 30),
            now=now,
        )
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(f"Registered user {user.id} with default plan")
    return user


def authenticate(email, password) -> User:
    if not email or not password:
        raise ValidationError("Email and password are required")

    user = get_user_by_email(str(email).strip().lower())
    if not user or not verify_password(user.password, password):
        raise AuthError("Invalid credentials")
    return user


def issue_api_key(user_id: int) -> ApiKey:
    key = ApiKey(api_key=secrets.token_hex(32), user_id=user_id)
    try:
        db.session.add(key)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return key


def user_for_api_key(api_key) -> User:
    user = get_user_by_api_key(api_key) if api_key else None
    if not user:
        raise AuthError("Invalid API key")
    return user
