from functools import wraps

import jwt
from flask import Blueprint, request

from ..exceptions import AuthError
from ..repositories.user_repository import get_user
from ..schemas.user_schema import serialize_user
from ..services import user_service
from ..utils.jwt_helper import encode_token, decode_token
from ..utils.response import api_response


auth_bp = Blueprint("auth", __name__)


def _bearer_token() -> str | None:
    auth_header = request.headers.get('Authorization')
    if not auth_header:
        return None
    if " " in auth_header:
        return auth_header.split(" ", 1)[1].strip()
    return auth_header.strip()


def token_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        api_key = request.headers.get('X-API-Key')
        if api_key:
            current_user = user_service.user_for_api_key(api_key)
            return f(current_user, *args, **kwargs)

        token = _bearer_token()
        if not token:
            raise AuthError("Token is required")

        try:
            payload = decode_token(token)
        except jwt.ExpiredSignatureError:
            raise AuthError("Token has expired")
        except jwt.InvalidTokenError:
            raise AuthError("Invalid token")

        current_user = get_user(payload.get('user_id'))
        if not current_user:
            raise AuthError("User not found")

        return f(current_user, *args, **kwargs)

    return decorated


@auth_bp.route('/register', methods=['POST'])
def register():
    data = request.get_json(silent=True) or {}
    user_service.register_user(data)
    return api_response(True, "User registered and plan activated successfully", None, 201)


@auth_bp.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    user = user_service.authenticate(data.get('email'), data.get('password'))
    return api_response(True, "Login successful", {"token": encode_token(user.id)})


@auth_bp.route('/generate-api-key', methods=['POST'])
@token_required
def generate_api_key(current_user):
    key = user_service.issue_api_key(current_user.id)
    return api_response(True, "API key generated", {"apiKey": key.api_key})


@auth_bp.route('/token', methods=['POST'])
def get_token():
    data = request.get_json(silent=True) or {}
    user = user_service.user_for_api_key(data.get("apiKey"))
    return api_response(True, "Token issued", {"token": encode_token(user.id)})


@auth_bp.route('/me')
@token_required
def me(current_user):
    return api_response(True, "Profile fetched", serialize_user(current_user))
