from flask import Blueprint, current_app, redirect, request

from ..routes.auth_routes import token_required
from ..services import url_service
from ..utils.response import api_response

url_bp = Blueprint("url", __name__)


@url_bp.route('/shorten-url', methods=['POST'])
@token_required
def shorten(current_user):
    data = request.get_json(silent=True) or {}
    link = url_service.shorten_url(current_user.id, data.get("url"))

    base_url = current_app.config.get("BASE_URL")
    return api_response(True, "Short URL created successfully.", {
        "shortCode": link.short_code,
        "shortUrl": f"{base_url}/{link.short_code}",
        "originalUrl": link.original_url,
        "createdAt": link.created_at.isoformat(),
    }, 201)


@url_bp.route('/redirect/<short_code>', methods=['GET'])
def resolve(short_code):
    original_url = url_service.resolve_short_code(short_code)
    return api_response(True, "URL found", {"originalUrl": original_url})


@url_bp.route('/urls', methods=['GET'])
@token_required
def list_urls(current_user):
    base_url = current_app.config.get("BASE_URL")
    links = url_service.list_user_urls(current_user.id)
    return api_response(True, "URLs fetched", [link.to_dict(base_url) for link in links])


# Registered without the /api prefix: browsers follow this one.
redirect_bp = Blueprint("redirect", __name__)


@redirect_bp.route('/<short_code>')
def redirection(short_code):
    return redirect(url_service.resolve_short_code(short_code), code=302)
