import os
from dotenv import load_dotenv

load_dotenv()


def _require_env(key: str) -> str:
    value = os.getenv(key)
    if not value:
        raise RuntimeError(f"Missing required environment variable: {key}")
    return value


def _env_bool(key: str, default: bool = False) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = _require_env("SECRET_KEY")
    SQLALCHEMY_DATABASE_URI = _require_env("DATABASE_URL")
    BASE_URL = _require_env("BASE_URL")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    REDIS_URL = os.getenv("REDIS_URL")
    REDIS_TTL = int(os.getenv("REDIS_TTL", 3600))

    JWT_EXPIRES_HOURS = int(os.getenv("JWT_EXPIRES_HOURS", 1))

    # Plan lifecycle
    DEFAULT_PLAN_ID = int(os.getenv("DEFAULT_PLAN_ID", 1))
    DEFAULT_PLAN_DAYS = int(os.getenv("DEFAULT_PLAN_DAYS", 30))
    MAX_PLAN_DAYS = int(os.getenv("MAX_PLAN_DAYS", 3650))
    ALLOW_DIRECT_UPGRADE = _env_bool("ALLOW_DIRECT_UPGRADE", False)

    # Short codes: 62**7 possible codes
    SHORT_CODE_LENGTH = int(os.getenv("SHORT_CODE_LENGTH", 7))
    SHORT_CODE_MAX_ATTEMPTS = int(os.getenv("SHORT_CODE_MAX_ATTEMPTS", 5))

    # Payment gateway: "razorpay_signature" or "razorpay_order"
    PAYMENT_GATEWAY = os.getenv("PAYMENT_GATEWAY", "razorpay_signature")
    RAZORPAY_KEY_ID = os.getenv("RAZORPAY_KEY_ID")
    RAZORPAY_KEY_SECRET = os.getenv("RAZORPAY_KEY_SECRET")
    RAZORPAY_WEBHOOK_SECRET = os.getenv("RAZORPAY_WEBHOOK_SECRET")
    RAZORPAY_API_BASE = os.getenv("RAZORPAY_API_BASE", "https://api.razorpay.com/v1")
    PAYMENT_CURRENCY = os.getenv("PAYMENT_CURRENCY", "INR")
    PAYMENT_GATEWAY_TIMEOUT = float(os.getenv("PAYMENT_GATEWAY_TIMEOUT", 10))
