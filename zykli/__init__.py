# zykli/__init__.py

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from zykli.config import Config
from zykli.extensions import db, cors, init_redis
from zykli.utils.error_handler import register_error_handlers
from zykli.routes.auth_routes import auth_bp
from zykli.routes.core_routes import core_bp
from zykli.routes.url_routes import url_bp, redirect_bp
from zykli.routes.plan_routes import plan_bp
from zykli.routes.payment_routes import payment_bp
from zykli.services.payment_gateway import build_gateway
from zykli.services.plan_catalog import ensure_default_plans


def create_app(config_class=Config) -> Flask:
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config_class)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Initialize extensions
    cors.init_app(app)
    db.init_app(app)
    init_redis(app)
    app.extensions["payment_gateway"] = build_gateway(app.config)

    # Fix proxy headers
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1)

    register_error_handlers(app)

    # Register blueprints
    app.register_blueprint(core_bp)
    app.register_blueprint(auth_bp, url_prefix="/api")
    app.register_blueprint(url_bp, url_prefix="/api")
    app.register_blueprint(plan_bp, url_prefix="/api")
    app.register_blueprint(payment_bp, url_prefix="/api")
    app.register_blueprint(redirect_bp)

    # Create tables if not exists and seed the plan catalog
    with app.app_context():
        from zykli.models.user import User  # noqa: F401
        from zykli.models.plan import MembershipPlan  # noqa: F401
        from zykli.models.active_plan import ActivePlan  # noqa: F401
        from zykli.models.url import Urls  # noqa: F401
        from zykli.models.usage_event import UsageEvent  # noqa: F401
        from zykli.models.payment import Payment  # noqa: F401
        from zykli.models.webhook_events import PaymentWebhookEvent  # noqa: F401
        from zykli.models.api_key import ApiKey  # noqa: F401
        db.create_all()
        ensure_default_plans(app.logger)

    return app
