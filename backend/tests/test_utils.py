from datetime import datetime, timedelta, timezone

import pytest
from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError

from eventinsight.api.projects import generate_slug
from eventinsight.utils.db import parse_uuid
from eventinsight.utils.exceptions import handle_database_error
from eventinsight.utils.hashing import api_key_display_prefix, generate_api_key, hash_api_key
from eventinsight.utils.serialization import as_utc, serialize_datetime
from eventinsight.utils.url import client_ip, safe_callback_url

BASE_URL = "http://testserver"


@pytest.mark.parametrize("callback_url, expected", [
    (None, "/"),
    ("", "/"),
    ("/dashboard", "/dashboard"),
    ("%2Fprojects%2Fmy-site", "/projects/my-site"),
    ("http://testserver/projects?tab=keys", "http://testserver/projects?tab=keys"),
    ("//evil.example.com/phish", "/"),
    ("https://evil.example.com/", "/"),
    ("https://testserver/", "/"),
    ("javascript:alert(1)", "/"),
])
def test_safe_callback_url(callback_url, expected):
    assert safe_callback_url(callback_url, BASE_URL) == expected


def test_client_ip_prefers_first_forwarded_hop():
    assert client_ip("203.0.113.5, 10.0.0.1", "127.0.0.1") == "203.0.113.5"
    assert client_ip(None, "127.0.0.1") == "127.0.0.1"
    assert client_ip(" , ", "127.0.0.1") == "127.0.0.1"


def test_api_key_hashing():
    raw_key = generate_api_key()
    assert hash_api_key(raw_key) == hash_api_key(raw_key)
    assert hash_api_key(raw_key + "x") != hash_api_key(raw_key)
    assert raw_key not in hash_api_key(raw_key)
    assert api_key_display_prefix(raw_key) == raw_key[:12]


@pytest.mark.parametrize("name, slug", [
    ("My Site", "my-site"),
    ("  Hello__World  ", "hello-world"),
    ("Café & Bar", "caf-bar"),
    ("!!!", "project"),
])
def test_generate_slug(name, slug):
    assert generate_slug(name) == slug


def test_parse_uuid_rejects_garbage():
    with pytest.raises(HTTPException) as exc_info:
        parse_uuid("nope", "project ID")
    assert exc_info.value.status_code == 400
    assert exc_info.value.detail == "Invalid project ID format"


def test_integrity_error_maps_to_conflict():
    error = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))
    assert handle_database_error(error, "create_project").status_code == 409
    assert handle_database_error(RuntimeError("boom"), "create_project").status_code == 500


def test_as_utc():
    naive = datetime(2024, 1, 1, 12, 0)
    assert as_utc(naive) == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    plus_two = datetime(2024, 1, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
    assert as_utc(plus_two).hour == 12
    assert serialize_datetime(plus_two) == "2024-01-01T12:00:00+00:00"
    assert as_utc(None) is None
