import os

# Configure the app before anything imports eventinsight.config
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["API_KEY_SALT"] = "test-salt"
os.environ["AUTH_GITHUB_ID"] = "test-github-id"
os.environ["AUTH_GITHUB_SECRET"] = "test-github-secret"
os.environ["AUTH_URL"] = "http://testserver"

import uuid
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session as DBSession

from eventinsight.auth import SESSION_COOKIE_NAME
from eventinsight.database import Base, SessionLocal, engine
from eventinsight.main import app
from eventinsight.models import APIKey, Environment, Project, Session, User
from eventinsight.utils.hashing import api_key_display_prefix, generate_api_key, generate_session_token, hash_api_key
from eventinsight.utils.serialization import utc_now


@pytest.fixture
def db() -> DBSession:
    """Fresh schema per test."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db) -> TestClient:
    return TestClient(app)


def make_user(db: DBSession, email: str, name: str = "Test User") -> User:
    user = User(email=email, name=name, image="https://example.com/avatar.png")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_session(db: DBSession, user: User, expires_in: timedelta = timedelta(days=30)) -> str:
    token = generate_session_token()
    db.add(Session(session_token=token, user_id=user.id, expires=utc_now() + expires_in))
    db.commit()
    return token


@pytest.fixture
def user(db) -> User:
    return make_user(db, "owner@example.com", "Owner")


@pytest.fixture
def other_user(db) -> User:
    return make_user(db, "someone@example.com", "Someone Else")


@pytest.fixture
def auth_client(client, db, user) -> TestClient:
    """Client signed in as ``user``."""
    client.cookies.set(SESSION_COOKIE_NAME, make_session(db, user))
    return client


@pytest.fixture
def project(db, user) -> Project:
    project = Project(id=uuid.uuid4(), user_id=user.id, name="My Site", slug="my-site")
    db.add(project)
    db.commit()
    db.refresh(project)
    return project


@pytest.fixture
def environment(db, project) -> Environment:
    environment = Environment(id=uuid.uuid4(), project_id=project.id, name="prod")
    db.add(environment)
    db.commit()
    db.refresh(environment)
    return environment


@pytest.fixture
def raw_api_key(db, environment) -> str:
    """Raw key for ``environment``; only its hash is stored."""
    raw_key = generate_api_key()
    db.add(APIKey(
        id=uuid.uuid4(),
        environment_id=environment.id,
        name="Website",
        key_hash=hash_api_key(raw_key),
        key_prefix=api_key_display_prefix(raw_key),
    ))
    db.commit()
    return raw_key
