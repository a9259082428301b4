"""Uniqueness and cascade rules of the schema."""
import uuid
from datetime import timedelta

import pytest
from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError

from eventinsight.models import Account, APIKey, Environment, Event, Project, Session, User, VerificationToken
from eventinsight.utils.serialization import utc_now

from conftest import make_session


def add_project(db, user, slug="site", name="Site"):
    project = Project(id=uuid.uuid4(), user_id=user.id, name=name, slug=slug)
    db.add(project)
    db.commit()
    return project


def add_environment(db, project, name="prod"):
    environment = Environment(id=uuid.uuid4(), project_id=project.id, name=name)
    db.add(environment)
    db.commit()
    return environment


def add_api_key(db, environment, key_hash="hash-1"):
    key = APIKey(id=uuid.uuid4(), environment_id=environment.id, name="key", key_hash=key_hash, key_prefix="ei_abc")
    db.add(key)
    db.commit()
    return key


def add_event(db, environment, name="click"):
    event = Event(id=uuid.uuid4(), environment_id=environment.id, event_name=name, payload={"button": "buy"})
    db.add(event)
    db.commit()
    return event


def add_account(db, user, provider_account_id="1"):
    account = Account(user_id=user.id, type="oauth", provider="github", provider_account_id=provider_account_id)
    db.add(account)
    db.commit()
    return account


class TestUniqueness:
    def test_duplicate_email_fails(self, db, user):
        db.add(User(email=user.email))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()

    def test_duplicate_provider_account_fails(self, db, user, other_user):
        other_user_id = other_user.id
        add_account(db, user, "4242")
        # Drop the identity map so the clash reaches the database
        db.expunge_all()
        db.add(Account(user_id=other_user_id, type="oauth", provider="github", provider_account_id="4242"))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()

    def test_same_provider_account_id_on_another_provider_succeeds(self, db, user):
        add_account(db, user, "4242")
        db.add(Account(user_id=user.id, type="oauth", provider="google", provider_account_id="4242"))
        db.commit()
        assert db.query(Account).count() == 2

    def test_duplicate_slug_for_same_user_fails(self, db, user):
        add_project(db, user, slug="shop")
        db.add(Project(id=uuid.uuid4(), user_id=user.id, name="Shop 2", slug="shop"))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()

    def test_same_slug_for_different_users_succeeds(self, db, user, other_user):
        add_project(db, user, slug="shop")
        add_project(db, other_user, slug="shop")
        assert db.query(Project).filter(Project.slug == "shop").count() == 2

    def test_duplicate_environment_name_in_project_fails(self, db, user):
        project_p = add_project(db, user, slug="p")
        project_q = add_project(db, user, slug="q")

        add_environment(db, project_p, "prod")
        db.add(Environment(id=uuid.uuid4(), project_id=project_p.id, name="prod"))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()

        add_environment(db, project_q, "prod")
        assert db.query(Environment).filter(Environment.name == "prod").count() == 2

    def test_duplicate_key_hash_fails_across_environments(self, db, user):
        project = add_project(db, user)
        add_api_key(db, add_environment(db, project, "prod"), key_hash="same")
        staging = add_environment(db, project, "staging")
        db.add(APIKey(id=uuid.uuid4(), environment_id=staging.id, name="k", key_hash="same", key_prefix="ei_x"))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()

    def test_duplicate_verification_token_fails(self, db):
        expires = utc_now() + timedelta(minutes=10)
        db.add(VerificationToken(identifier="oauth:github", token="abc", expires=expires))
        db.commit()
        db.expunge_all()
        db.add(VerificationToken(identifier="oauth:github", token="abc", expires=expires))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()


class TestCascades:
    def test_deleting_user_removes_projects_accounts_and_sessions(self, db, user, other_user):
        project = add_project(db, user)
        add_environment(db, project)
        add_account(db, user)
        make_session(db, user)
        kept_session = make_session(db, other_user)

        db.delete(user)
        db.commit()
        db.expire_all()

        assert db.query(Project).count() == 0
        assert db.query(Environment).count() == 0
        assert db.query(Account).count() == 0
        assert [s.session_token for s in db.query(Session).all()] == [kept_session]

    def test_deleting_project_removes_environments(self, db, user):
        project = add_project(db, user)
        add_environment(db, project, "prod")
        add_environment(db, project, "staging")
        other = add_project(db, user, slug="other")
        add_environment(db, other, "prod")

        db.delete(project)
        db.commit()
        db.expire_all()

        assert [e.project_id for e in db.query(Environment).all()] == [other.id]

    def test_deleting_environment_removes_api_keys_and_events(self, db, user):
        project = add_project(db, user)
        prod = add_environment(db, project, "prod")
        staging = add_environment(db, project, "staging")
        add_api_key(db, prod, "h1")
        add_event(db, prod)
        add_api_key(db, staging, "h2")
        add_event(db, staging)

        db.delete(prod)
        db.commit()
        db.expire_all()

        assert [k.environment_id for k in db.query(APIKey).all()] == [staging.id]
        assert [e.environment_id for e in db.query(Event).all()] == [staging.id]

    def test_database_level_cascade_without_orm(self, db, user):
        """Cascades hold for plain SQL deletes, not just ORM ones."""
        project = add_project(db, user)
        environment = add_environment(db, project)
        add_api_key(db, environment)
        add_event(db, environment)
        make_session(db, user)
        user_id = user.id

        db.execute(delete(User).where(User.id == user_id))
        db.commit()
        db.expire_all()

        for model in (Project, Environment, APIKey, Event, Session):
            assert db.query(model).count() == 0

    def test_event_payload_round_trips_json(self, db, user):
        environment = add_environment(db, add_project(db, user))
        event = Event(
            id=uuid.uuid4(),
            environment_id=environment.id,
            event_name="purchase",
            payload={"items": [{"sku": "A1", "qty": 2}], "total": 19.9},
        )
        db.add(event)
        db.commit()
        db.expire_all()

        stored = db.query(Event).one()
        assert stored.payload["items"][0]["sku"] == "A1"
        assert stored.timestamp is not None
