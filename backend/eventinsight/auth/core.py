"""Sign-in flow, session cookies and the current-session accessor.

``Auth`` composes OAuth providers with a persistence adapter and exposes:

- ``handlers``: router serving ``/api/auth/*`` (sign-in, callback, sign-out,
  session, providers)
- ``sign_in`` / ``sign_out``: redirect responses that start or end a session
- ``await auth(request)``: the session for the request's cookie, or None

Sessions are rows in the ``sessions`` table; the cookie only carries the
opaque session token.
"""
import hmac
import urllib.parse
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Dict, List, Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, RedirectResponse, Response
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError

from eventinsight.auth.adapter import SQLAlchemyAdapter
from eventinsight.auth.providers import OAuthError, OAuthProfile, OAuthProvider, OAuthTokens
from eventinsight.models import User
from eventinsight.utils.exceptions import not_found_error
from eventinsight.utils.hashing import generate_oauth_state, generate_session_token
from eventinsight.utils.logger import logger
from eventinsight.utils.serialization import as_utc, serialize_datetime, utc_now
from eventinsight.utils.url import safe_callback_url

SESSION_COOKIE_NAME = "eventinsight.session-token"
STATE_COOKIE_NAME = "eventinsight.state"
CALLBACK_COOKIE_NAME = "eventinsight.callback-url"
STATE_MAX_AGE = timedelta(minutes=10)


class SessionUser(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    image: Optional[str] = None


class AuthSession(BaseModel):
    """Session object handed to application code and ``/api/auth/session``."""
    user: SessionUser
    expires: str


SessionCallback = Callable[..., AuthSession]


@dataclass
class AuthPages:
    """Pages the auth flow redirects to."""
    sign_in: str = "/api/auth/signin"
    error: Optional[str] = None


class Auth:
    """Authentication configuration for the application."""

    def __init__(
        self,
        adapter: SQLAlchemyAdapter,
        providers: List[OAuthProvider],
        base_url: str,
        callbacks: Optional[Dict[str, SessionCallback]] = None,
        pages: Optional[AuthPages] = None,
        session_max_age: timedelta = timedelta(days=30),
        session_update_age: timedelta = timedelta(hours=24),
        secure_cookies: bool = False,
        base_path: str = "/api/auth",
    ):
        self.adapter = adapter
        self.providers = {provider.id: provider for provider in providers}
        self.base_url = base_url.rstrip("/")
        self.callbacks = callbacks or {}
        self.pages = pages or AuthPages()
        self.session_max_age = session_max_age
        self.session_update_age = session_update_age
        self.secure_cookies = secure_cookies
        self.base_path = base_path
        self.handlers = self._build_router()

    async def __call__(self, request: Request) -> Optional[AuthSession]:
        """Current session for the request, or None when signed out."""
        session_token = request.cookies.get(SESSION_COOKIE_NAME)
        if not session_token:
            return None
        return self.get_session(session_token)

    def get_session(self, session_token: str) -> Optional[AuthSession]:
        """
        Load a session by token.

        Expired sessions are deleted. Sessions last touched more than
        ``session_update_age`` ago get their expiry pushed out to a full
        ``session_max_age`` from now.
        """
        result = self.adapter.get_session_and_user(session_token)
        if not result:
            return None

        session, user = result
        now = utc_now()
        expires = as_utc(session.expires)

        if expires <= now:
            logger.debug(f"Session for user {user.id} expired at {expires.isoformat()}")
            self.adapter.delete_session(session_token)
            return None

        if expires - self.session_max_age + self.session_update_age <= now:
            expires = now + self.session_max_age
            self.adapter.update_session(session_token, expires)

        auth_session = AuthSession(
            user=SessionUser(name=user.name, email=user.email, image=user.image),
            expires=serialize_datetime(expires),
        )

        session_callback = self.callbacks.get("session")
        if session_callback:
            auth_session = session_callback(session=auth_session, user=user)

        return auth_session

    # Sign-in / sign-out

    def get_provider(self, provider_id: str) -> OAuthProvider:
        provider = self.providers.get(provider_id)
        if not provider:
            raise not_found_error("Provider", provider_id)
        return provider

    def redirect_uri(self, provider: OAuthProvider) -> str:
        return f"{self.base_url}{self.base_path}/callback/{provider.id}"

    def sign_in(self, provider_id: str, callback_url: Optional[str] = None) -> RedirectResponse:
        """
        Start the OAuth flow for a provider.

        The ``state`` value is stored both as a single-use verification token
        and in a cookie; the callback requires both to match.
        """
        provider = self.get_provider(provider_id)
        if not provider.client_id or not provider.client_secret:
            logger.error(f"{provider.name} sign-in requested but client credentials are not set")
            return self.error_redirect("Configuration")

        state = generate_oauth_state()
        self.adapter.create_verification_token(
            identifier=f"oauth:{provider.id}",
            token=state,
            expires=utc_now() + STATE_MAX_AGE,
        )

        response = RedirectResponse(
            provider.get_authorization_url(self.redirect_uri(provider), state),
            status_code=302,
        )
        max_age = int(STATE_MAX_AGE.total_seconds())
        self._set_cookie(response, STATE_COOKIE_NAME, state, max_age)
        self._set_cookie(
            response,
            CALLBACK_COOKIE_NAME,
            safe_callback_url(callback_url, self.base_url),
            max_age,
        )
        return response

    async def handle_callback(self, provider_id: str, request: Request) -> RedirectResponse:
        """Finish the OAuth flow: verify state, resolve the user, open a session."""
        provider = self.get_provider(provider_id)
        params = request.query_params

        try:
            if params.get("error"):
                raise OAuthError("OAuthCallbackError", f"{provider.name} returned {params['error']}")

            code = params.get("code")
            state = params.get("state")
            if not code or not state:
                raise OAuthError("OAuthCallbackError", "Missing code or state")

            if not hmac.compare_digest(state.encode(), request.cookies.get(STATE_COOKIE_NAME, "").encode()):
                raise OAuthError("OAuthCallbackError", "State cookie mismatch")

            stored_state = self.adapter.use_verification_token(f"oauth:{provider.id}", state)
            if not stored_state or as_utc(stored_state.expires) <= utc_now():
                raise OAuthError("OAuthCallbackError", "State expired or already used")

            tokens = await provider.exchange_code(code, self.redirect_uri(provider))
            profile = await provider.get_profile(tokens)
            user = self._resolve_user(provider, profile, tokens)
        except OAuthError as e:
            logger.warning(f"{provider.name} sign-in failed ({e.code}): {e}")
            response = self.error_redirect(e.code)
            self._clear_flow_cookies(response)
            return response

        session_token = generate_session_token()
        expires = utc_now() + self.session_max_age
        self.adapter.create_session(session_token, user.id, expires)
        logger.info(f"User {user.id} signed in with {provider.name}")

        callback_url = safe_callback_url(request.cookies.get(CALLBACK_COOKIE_NAME), self.base_url)
        response = RedirectResponse(callback_url, status_code=302)
        self._set_cookie(
            response,
            SESSION_COOKIE_NAME,
            session_token,
            int(self.session_max_age.total_seconds()),
        )
        self._clear_flow_cookies(response)
        return response

    def _resolve_user(self, provider: OAuthProvider, profile: OAuthProfile, tokens: OAuthTokens) -> User:
        """
        Find the user linked to the provider account, creating one on first sign-in.

        An existing user with the same email but no link to this provider
        account is refused; accounts are never linked by email alone.
        """
        user = self.adapter.get_user_by_account(provider.id, profile.provider_account_id)
        if user:
            return user

        if not profile.email:
            raise OAuthError("OAuthCallbackError", f"{provider.name} did not return an email address")

        if self.adapter.get_user_by_email(profile.email):
            raise OAuthError("OAuthAccountNotLinked", "Email already belongs to another account")

        account = self.adapter.new_account(
            provider=provider.id,
            provider_account_id=profile.provider_account_id,
            tokens=tokens,
            account_type=provider.type,
        )
        try:
            user = self.adapter.create_user(
                email=profile.email, name=profile.name, image=profile.image, account=account
            )
        except IntegrityError as e:
            # Another sign-in created the same user or account first
            raise OAuthError("OAuthCallbackError", "User or account already exists") from e
        logger.info(f"Created user {user.id} from {provider.name} account {profile.provider_account_id}")
        return user

    def sign_out(self, request: Request, redirect_to: Optional[str] = None) -> RedirectResponse:
        """Delete the request's session and clear the cookie."""
        session_token = request.cookies.get(SESSION_COOKIE_NAME)
        if session_token:
            self.adapter.delete_session(session_token)
            logger.info("Session signed out")

        response = RedirectResponse(redirect_to or self.pages.sign_in, status_code=303)
        response.delete_cookie(SESSION_COOKIE_NAME, path="/")
        return response

    def sign_in_redirect(self, request: Request) -> RedirectResponse:
        """Send an unauthenticated visitor to the sign-in page, remembering where they were."""
        query = urllib.parse.urlencode({"callbackUrl": str(request.url)})
        return RedirectResponse(f"{self.pages.sign_in}?{query}", status_code=307)

    def error_redirect(self, error: str) -> RedirectResponse:
        page = self.pages.error or self.pages.sign_in
        return RedirectResponse(f"{page}?{urllib.parse.urlencode({'error': error})}", status_code=302)

    # Cookies

    def _set_cookie(self, response: Response, name: str, value: str, max_age: int) -> None:
        response.set_cookie(
            name,
            value,
            max_age=max_age,
            path="/",
            httponly=True,
            samesite="lax",
            secure=self.secure_cookies,
        )

    def _clear_flow_cookies(self, response: Response) -> None:
        response.delete_cookie(STATE_COOKIE_NAME, path="/")
        response.delete_cookie(CALLBACK_COOKIE_NAME, path="/")

    # Routes

    def _build_router(self) -> APIRouter:
        router = APIRouter(prefix=self.base_path, tags=["auth"])

        @router.get("/signin/{provider_id}")
        async def signin(provider_id: str, callbackUrl: Optional[str] = None) -> RedirectResponse:
            return self.sign_in(provider_id, callbackUrl)

        @router.get("/callback/{provider_id}")
        async def callback(provider_id: str, request: Request) -> RedirectResponse:
            return await self.handle_callback(provider_id, request)

        @router.post("/signout")
        async def signout(request: Request) -> RedirectResponse:
            return self.sign_out(request)

        @router.get("/session")
        async def session(request: Request) -> JSONResponse:
            auth_session = await self(request)
            return JSONResponse(auth_session.model_dump() if auth_session else None)

        @router.get("/providers")
        async def providers() -> dict:
            return {
                provider.id: {
                    "id": provider.id,
                    "name": provider.name,
                    "type": provider.type,
                    "signinUrl": f"{self.base_url}{self.base_path}/signin/{provider.id}",
                    "callbackUrl": self.redirect_uri(provider),
                }
                for provider in self.providers.values()
            }

        return router
