"""Authentication: GitHub OAuth sign-in with database-backed sessions."""
from datetime import timedelta

from eventinsight.config import settings
from eventinsight.database import SessionLocal
from eventinsight.models import User
from eventinsight.auth.adapter import SQLAlchemyAdapter
from eventinsight.auth.core import Auth, AuthPages, AuthSession, SESSION_COOKIE_NAME
from eventinsight.auth.providers import GitHubProvider

LOGIN_PATH = "/login"


def session_callback(session: AuthSession, user: User) -> AuthSession:
    """Expose the user's stable id so queries can be keyed by it."""
    session.user.id = str(user.id)
    return session


auth = Auth(
    adapter=SQLAlchemyAdapter(SessionLocal),
    providers=[
        GitHubProvider(
            client_id=settings.auth_github_id,
            client_secret=settings.auth_github_secret,
        ),
    ],
    base_url=settings.auth_url,
    callbacks={"session": session_callback},
    pages=AuthPages(sign_in=LOGIN_PATH),
    session_max_age=timedelta(days=settings.session_max_age_days),
    session_update_age=timedelta(hours=settings.session_update_age_hours),
    secure_cookies=settings.session_cookie_secure,
)

handlers = auth.handlers
sign_in = auth.sign_in
sign_out = auth.sign_out

__all__ = [
    "auth",
    "handlers",
    "sign_in",
    "sign_out",
    "session_callback",
    "AuthSession",
    "LOGIN_PATH",
    "SESSION_COOKIE_NAME",
]
