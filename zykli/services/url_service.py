import json
import secrets
import string

import redis
from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..exceptions import InfrastructureError, NotFound, QuotaDenied
from ..extensions import db, get_redis
from ..models.url import Urls
from ..utils.security import normalize_url
from ..utils.time_utils import utcnow
from . import quota_guard, usage_ledger

SHORT_CODE_ALPHABET = string.ascii_letters + string.digits


def generate_short_code(length: int = 7) -> str:
    return ''.join(secrets.choice(SHORT_CODE_ALPHABET) for _ in range(length))


def _allocate_short_code() -> str:
    length = current_app.config.get("SHORT_CODE_LENGTH", 7)
    attempts = current_app.config.get("SHORT_CODE_MAX_ATTEMPTS", 5)

    for _ in range(attempts):
        code = generate_short_code(length)
        if not Urls.query.filter_by(short_code=code).first():
            return code
        current_app.logger.warning(f"Short code collision on {code}; regenerating")

    raise InfrastructureError("Could not allocate a unique short code. Please retry.")


def _shorten_once(user_id: int, url: str, now) -> Urls:
    # Earlier reads in this request (token lookup) must not pin the snapshot
    # the quota counts are read from; the unit starts its own transaction.
    db.session.rollback()
    admission = quota_guard.admit_shorten_request(user_id, now, lock=True)
    if not admission.admitted:
        db.session.rollback()
        raise QuotaDenied(admission.message, admission.reason.value)

    link = Urls(
        original_url=url,
        short_code=_allocate_short_code(),
        user_id=user_id,
        created_at=now,
    )
    db.session.add(link)
    db.session.flush()
    usage_ledger.record_usage(user_id, link, now)
    db.session.commit()
    return link


def shorten_url(user_id: int, raw_url, now=None) -> Urls:
    """Quota check, registry insert and ledger append as one transaction.

    A unique-constraint failure at insert (a short code taken by a concurrent
    request) rolls the whole unit back and runs it again, quota check included.
    """
    url = normalize_url(raw_url)
    now = now or utcnow()
    attempts = current_app.config.get("SHORT_CODE_MAX_ATTEMPTS", 5)

    for attempt in range(1, attempts + 1):
        try:
            link = _shorten_once(user_id, url, now)
        except IntegrityError as exc:
            db.session.rollback()
            current_app.logger.warning(f"Shorten attempt {attempt} for user {user_id} conflicted: {exc.orig}")
            continue
        except Exception:
            db.session.rollback()
            raise

        current_app.logger.info(f"User {user_id} created short code {link.short_code}")
        _cache_link(link.short_code, link.original_url)
        return link

    raise InfrastructureError("Could not allocate a unique short code. Please retry.")


def _cache_key(short_code: str) -> str:
    return f"short:{short_code}"


def _cache_link(short_code: str, original_url: str):
    client = get_redis()
    if not client:
        return
    try:
        ttl = int(current_app.config.get("REDIS_TTL", 3600))
        client.setex(_cache_key(short_code), ttl, json.dumps({"long": original_url}))
    except redis.RedisError as e:
        current_app.logger.warning(f"Redis SET failed for {short_code}: {e}")


def _cached_link(short_code: str) -> str | None:
    client = get_redis()
    if not client:
        return None
    try:
        cached = client.get(_cache_key(short_code))
    except redis.RedisError as e:
        current_app.logger.warning(f"Redis GET failed for {short_code}: {e}")
        return None
    if not cached:
        return None
    try:
        return json.loads(cached).get("long")
    except (ValueError, AttributeError):
        return None


def resolve_short_code(short_code: str) -> str:
    """Public lookup, no ownership check."""
    cached = _cached_link(short_code)
    if cached:
        return cached

    link = Urls.query.filter_by(short_code=short_code).first()
    if not link:
        raise NotFound("URL not found")

    _cache_link(link.short_code, link.original_url)
    return link.original_url


def list_user_urls(user_id: int) -> list[Urls]:
    return Urls.query.filter_by(user_id=user_id).order_by(Urls.created_at.desc(), Urls.id.desc()).all()
