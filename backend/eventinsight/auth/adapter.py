"""Persistence adapter binding the auth flow to the users/accounts/sessions tables."""
from datetime import datetime
from typing import Callable, Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session as DBSession

from eventinsight.models import User, Account, Session, VerificationToken
from eventinsight.auth.providers import OAuthTokens


class SQLAlchemyAdapter:
    """
    Reads and writes auth rows through a SQLAlchemy session factory.

    Every method opens its own short-lived session and commits before
    returning, so the adapter can be used from middleware as well as from
    request handlers. Returned instances are detached with their columns
    loaded; relationships must not be lazily loaded from them.
    """

    def __init__(self, session_factory: Callable[[], DBSession]):
        self.session_factory = session_factory

    # Users

    def create_user(
        self,
        email: str,
        name: Optional[str] = None,
        image: Optional[str] = None,
        email_verified: Optional[datetime] = None,
        account: Optional[Account] = None,
    ) -> User:
        """
        Insert a user, together with the account it signed in with.

        Both rows are written in one transaction: when the account insert
        fails (e.g. the same provider account was linked concurrently) no
        user row is left behind.

        Raises:
            IntegrityError: If the email or provider account already exists
        """
        with self.session_factory() as db:
            user = User(email=email, name=name, image=image, email_verified=email_verified)
            if account is not None:
                user.accounts.append(account)
            db.add(user)
            db.commit()
            db.refresh(user)
            return user

    def get_user_by_email(self, email: str) -> Optional[User]:
        with self.session_factory() as db:
            return db.query(User).filter(User.email == email).first()

    def get_user_by_account(self, provider: str, provider_account_id: str) -> Optional[User]:
        with self.session_factory() as db:
            return (
                db.query(User)
                .join(Account, Account.user_id == User.id)
                .filter(
                    Account.provider == provider,
                    Account.provider_account_id == provider_account_id,
                )
                .first()
            )

    # Accounts

    @staticmethod
    def new_account(
        provider: str,
        provider_account_id: str,
        tokens: OAuthTokens,
        account_type: str = "oauth",
    ) -> Account:
        """Unsaved account row for ``create_user``."""
        return Account(
            type=account_type,
            provider=provider,
            provider_account_id=provider_account_id,
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            expires_at=tokens.expires_at,
            token_type=tokens.token_type,
            scope=tokens.scope,
            id_token=tokens.id_token,
        )

    # Sessions

    def create_session(self, session_token: str, user_id: UUID, expires: datetime) -> Session:
        with self.session_factory() as db:
            session = Session(session_token=session_token, user_id=user_id, expires=expires)
            db.add(session)
            db.commit()
            db.refresh(session)
            return session

    def get_session_and_user(self, session_token: str) -> Optional[Tuple[Session, User]]:
        with self.session_factory() as db:
            row = (
                db.query(Session, User)
                .join(User, Session.user_id == User.id)
                .filter(Session.session_token == session_token)
                .first()
            )
            return (row[0], row[1]) if row else None

    def update_session(self, session_token: str, expires: datetime) -> Optional[Session]:
        with self.session_factory() as db:
            session = db.get(Session, session_token)
            if not session:
                return None
            session.expires = expires
            db.commit()
            db.refresh(session)
            return session

    def delete_session(self, session_token: str) -> None:
        with self.session_factory() as db:
            db.query(Session).filter(Session.session_token == session_token).delete()
            db.commit()

    # Verification tokens

    def create_verification_token(self, identifier: str, token: str, expires: datetime) -> VerificationToken:
        with self.session_factory() as db:
            verification_token = VerificationToken(identifier=identifier, token=token, expires=expires)
            db.add(verification_token)
            db.commit()
            db.refresh(verification_token)
            return verification_token

    def use_verification_token(self, identifier: str, token: str) -> Optional[VerificationToken]:
        """Return and delete a token; a token can only be used once."""
        with self.session_factory() as db:
            verification_token = db.get(VerificationToken, (identifier, token))
            if not verification_token:
                return None
            used = VerificationToken(
                identifier=verification_token.identifier,
                token=verification_token.token,
                expires=verification_token.expires,
            )
            db.delete(verification_token)
            db.commit()
            return used
