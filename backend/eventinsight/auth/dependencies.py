"""FastAPI dependencies for session-authenticated routes."""
from uuid import UUID
from fastapi import Depends, Request

from eventinsight.auth import auth, AuthSession
from eventinsight.utils.exceptions import authentication_error


async def require_session(request: Request) -> AuthSession:
    """
    Session of the signed-in user.

    Reuses the session the route gate already loaded for this request.

    Raises:
        HTTPException: 401 if there is no valid session
    """
    session = getattr(request.state, "auth", None)
    if session is None:
        session = await auth(request)
    if session is None or not session.user.id:
        raise authentication_error()
    return session


def get_current_user_id(session: AuthSession = Depends(require_session)) -> UUID:
    """ID of the signed-in user."""
    return UUID(session.user.id)
