import datetime
import jwt
from flask import current_app

from .time_utils import utcnow


def encode_token(user_id: int, hours: int | None = None) -> str:
    hours = hours or current_app.config.get("JWT_EXPIRES_HOURS", 1)
    payload = {
        "user_id": user_id,
        "exp": utcnow() + datetime.timedelta(hours=hours),
    }
    token = jwt.encode(payload, current_app.config["SECRET_KEY"], algorithm="HS256")
    return token


def decode_token(token: str) -> dict:
    payload = jwt.decode(token, current_app.config["SECRET_KEY"], algorithms=["HS256"])
    return payload
