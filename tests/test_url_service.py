import datetime
import itertools

import pytest

from zykli.exceptions import InfrastructureError, NotFound, ValidationError
from zykli.extensions import db
from zykli.models.url import Urls
from zykli.models.usage_event import UsageEvent
from zykli.models.user import User
from zykli.services import quota_guard, url_service

from .conftest import T0


def test_shorten_then_resolve_round_trip(make_user):
    user = make_user()
    link = url_service.shorten_url(user.id, "https://example.com/a?b=1#c", now=T0)

    assert len(link.short_code) == 7
    assert url_service.resolve_short_code(link.short_code) == "https://example.com/a?b=1#c"

    event = UsageEvent.query.filter_by(url_id=link.id).one()
    assert event.user_id == user.id
    assert event.short_code == link.short_code
    assert event.created_at == T0


def test_scheme_defaults_to_https(make_user):
    user = make_user()
    link = url_service.shorten_url(user.id, "example.com/path", now=T0)
    assert link.original_url == "https://example.com/path"


@pytest.mark.parametrize("bad_url", [None, "", "   ", "ftp://example.com/file", "https://", 42])
def test_invalid_urls_are_rejected(make_user, bad_url):
    user = make_user()
    with pytest.raises(ValidationError):
        url_service.shorten_url(user.id, bad_url, now=T0)
    assert UsageEvent.query.count() == 0


def test_blocked_domain_is_rejected(make_user):
    user = make_user()
    with pytest.raises(ValidationError):
        url_service.shorten_url(user.id, "https://login.malicious-site.com/", now=T0)


def test_unknown_short_code_is_not_found(app):
    with pytest.raises(NotFound):
        url_service.resolve_short_code("missing")


def test_taken_code_is_regenerated(make_user, monkeypatch):
    user = make_user()
    first = url_service.shorten_url(user.id, "https://example.com/1", now=T0)

    codes = iter([first.short_code, "Fresh01"])
    monkeypatch.setattr(url_service, "generate_short_code", lambda length=7: next(codes))

    second = url_service.shorten_url(user.id, "https://example.com/2", now=T0)
    assert second.short_code == "Fresh01"


def test_code_space_exhaustion_fails_without_writes(make_user, monkeypatch):
    user = make_user()
    first = url_service.shorten_url(user.id, "https://example.com/1", now=T0)
    monkeypatch.setattr(url_service, "generate_short_code", lambda length=7: first.short_code)

    with pytest.raises(InfrastructureError):
        url_service.shorten_url(user.id, "https://example.com/2", now=T0)

    assert Urls.query.count() == 1
    assert UsageEvent.query.count() == 1


def test_insert_conflict_retries_whole_unit(make_user, monkeypatch):
    user = make_user()
    first = url_service.shorten_url(user.id, "https://example.com/1", now=T0)

    codes = itertools.chain([first.short_code], itertools.repeat("Retry01"))
    monkeypatch.setattr(url_service, "_allocate_short_code", lambda: next(codes))

    second = url_service.shorten_url(user.id, "https://example.com/2", now=T0)
    assert second.short_code == "Retry01"
    assert Urls.query.count() == 2
    assert UsageEvent.query.count() == 2


def test_list_user_urls_only_returns_own_links(make_user):
    alice = make_user()
    bob = make_user()
    url_service.shorten_url(alice.id, "https://example.com/a1", now=T0)
    url_service.shorten_url(alice.id, "https://example.com/a2", now=T0 + datetime.timedelta(minutes=1))
    url_service.shorten_url(bob.id, "https://example.com/b1", now=T0)

    links = url_service.list_user_urls(alice.id)
    assert [link.original_url for link in links] == ["https://example.com/a2", "https://example.com/a1"]


def test_quota_check_starts_a_fresh_transaction(make_user, monkeypatch):
    user = make_user()
    assert User.query.filter_by(id=user.id).first() is not None
    assert db.session.in_transaction()

    seen = []
    admit = quota_guard.admit_shorten_request

    def spy(user_id, now, lock=False):
        seen.append((db.session.in_transaction(), lock))
        return admit(user_id, now, lock=lock)

    monkeypatch.setattr(quota_guard, "admit_shorten_request", spy)
    url_service.shorten_url(user.id, "https://example.com/fresh", now=T0)

    assert seen == [(False, True)]
