"""Route gate: every request outside the exclusion list needs a session."""
import re
from typing import Iterable, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from eventinsight.auth.core import Auth
from eventinsight.utils.logger import logger

# Paths that pass through without a session:
# - the ingestion endpoint, so client sites can post events with only an API key
# - the auth handlers themselves (OAuth callback, sign-out, ...)
# - static and image assets, and the favicon
# - the sign-in page, to avoid a redirect loop
EXCLUDED_PREFIXES = (
    "api/ingest",
    "api/auth",
    "static",
    "_next/static",
    "_next/image",
    "favicon.ico",
    "login",
)


def build_matcher(excluded: Iterable[str]) -> re.Pattern:
    """
    Compile a pattern matching every path that does NOT start with an excluded prefix.

    A prefix only matches whole path segments: ``login`` excludes ``/login``
    and ``/login/...`` but not ``/login-history``.
    """
    alternatives = "|".join(re.escape(prefix) for prefix in excluded)
    return re.compile(rf"^/(?!(?:{alternatives})(?:/|$)).*")


MATCHER = build_matcher(EXCLUDED_PREFIXES)


def is_gated(path: str, matcher: re.Pattern = MATCHER) -> bool:
    """Whether a request path requires a session."""
    return matcher.match(path) is not None


class AuthGateMiddleware(BaseHTTPMiddleware):
    """
    Checks the session for every gated request.

    Signed-in requests get ``request.state.auth``. Signed-out API calls get a
    401; everything else is redirected to the sign-in page.
    """

    def __init__(self, app, auth: Auth, matcher: Optional[re.Pattern] = None):
        super().__init__(app)
        self.auth = auth
        self.matcher = matcher or MATCHER

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if not is_gated(path, self.matcher):
            return await call_next(request)

        session = await self.auth(request)
        if session is None:
            logger.debug(f"Unauthenticated request to {path}")
            if path.startswith("/api/"):
                return JSONResponse(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    content={"detail": "Not authenticated"},
                )
            return self.auth.sign_in_redirect(request)

        request.state.auth = session
        return await call_next(request)
