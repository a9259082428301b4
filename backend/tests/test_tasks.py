"""Background housekeeping tasks."""
import asyncio
from datetime import timedelta

from eventinsight.models import Session, VerificationToken
from eventinsight.utils.serialization import utc_now
from eventinsight.workers.config import WorkerSettings, parse_redis_url
from eventinsight.workers.tasks import cleanup_expired_auth

from conftest import make_session


def test_cleanup_removes_only_expired_rows(db, user):
    expired = make_session(db, user, expires_in=timedelta(minutes=-5))
    live = make_session(db, user)
    db.add(VerificationToken(identifier="oauth:github", token="old", expires=utc_now() - timedelta(minutes=1)))
    db.add(VerificationToken(identifier="oauth:github", token="new", expires=utc_now() + timedelta(minutes=10)))
    db.commit()

    result = asyncio.run(cleanup_expired_auth({}))

    assert result == {"success": True, "sessions_deleted": 1, "verification_tokens_deleted": 1}
    db.expire_all()
    assert [s.session_token for s in db.query(Session).all()] == [live]
    assert db.get(Session, expired) is None
    assert [t.token for t in db.query(VerificationToken).all()] == ["new"]


def test_cleanup_with_nothing_expired(db, user):
    make_session(db, user)
    result = asyncio.run(cleanup_expired_auth({}))
    assert result["sessions_deleted"] == 0


def test_parse_redis_url():
    parsed = parse_redis_url("redis://:secret@cache.internal:6380/2")
    assert (parsed.host, parsed.port, parsed.password, parsed.database) == ("cache.internal", 6380, "secret", 2)

    defaults = parse_redis_url("redis://localhost")
    assert (defaults.port, defaults.database) == (6379, 0)


def test_cleanup_is_scheduled():
    assert cleanup_expired_auth in WorkerSettings.functions
    assert len(WorkerSettings.cron_jobs) == 1
