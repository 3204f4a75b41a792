from sqlalchemy.exc import IntegrityError, OperationalError

from ..exceptions import ServiceError
from ..extensions import db
from .response import api_response


def register_error_handlers(app):
    @app.errorhandler(ServiceError)
    def service_error(e):
        db.session.rollback()
        if e.status_code >= 500:
            app.logger.error(f"{e.reason}: {e.message}")
        return api_response(False, e.message, {"reason": e.reason}, e.status_code)

    @app.errorhandler(OperationalError)
    def storage_unavailable(e):
        db.session.rollback()
        app.logger.error(f"Storage error: {e}")
        return api_response(False, "Service temporarily unavailable. Please retry.",
                            {"reason": "InfrastructureError"}, 503)

    @app.errorhandler(IntegrityError)
    def integrity_conflict(e):
        db.session.rollback()
        app.logger.warning(f"Integrity conflict: {e.orig}")
        return api_response(False, "Conflicting update. Please retry.", {"reason": "Conflict"}, 409)

    @app.errorhandler(400)
    def bad_request(e):
        return api_response(False, "Bad Request", None, 400)

    @app.errorhandler(401)
    def unauthorized(e):
        return api_response(False, "Unauthorized", None, 401)

    @app.errorhandler(404)
    def not_found(e):
        return api_response(False, "Not Found", None, 404)

    @app.errorhandler(405)
    def method_not_allowed(e):
        return api_response(False, "Method Not Allowed", None, 405)

    @app.errorhandler(500)
    def server_error(e):
        db.session.rollback()
        return api_response(False, "Server Error", None, 500)
