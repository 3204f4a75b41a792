# zykli/extensions.py

from flask import current_app
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
import redis

db = SQLAlchemy()
cors = CORS()


def init_redis(app):
    """Attach a Redis client for the redirect cache, or None when unavailable."""
    url = app.config.get("REDIS_URL")
    app.extensions["redis"] = None

    if not url:
        app.logger.info("No REDIS_URL configured; redirect cache disabled.")
        return

    try:
        client = redis.Redis.from_url(url, decode_responses=True)
        client.ping()
        app.extensions["redis"] = client
        app.logger.info("Redis initialized successfully.")
    except redis.RedisError as exc:
        app.logger.warning(f"Redis initialization failed: {exc}")


def get_redis():
    return current_app.extensions.get("redis")


def get_payment_gateway():
    return current_app.extensions["payment_gateway"]
