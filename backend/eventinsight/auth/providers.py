"""OAuth identity providers.

Each provider knows how to send a user to its consent screen, trade the
returned authorization code for tokens, and read the user's profile. The
GitHub provider is the only one configured today; other backends subclass
``OAuthProvider``.
"""
import time
import urllib.parse
from dataclasses import dataclass
from typing import Optional, Dict, Any, List

import httpx

from eventinsight.utils.logger import logger


class OAuthError(Exception):
    """Raised when a provider round-trip fails.

    ``code`` is the error identifier shown on the sign-in page
    (e.g. ``OAuthCallbackError``, ``OAuthAccountNotLinked``).
    """

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code


@dataclass
class OAuthTokens:
    """Token response from a provider's token endpoint."""
    access_token: str
    token_type: Optional[str] = None
    scope: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None
    id_token: Optional[str] = None


@dataclass
class OAuthProfile:
    """Normalized user profile returned by a provider."""
    provider_account_id: str
    email: Optional[str]
    name: Optional[str] = None
    image: Optional[str] = None


class OAuthProvider:
    """Authorization-code flow shared by OAuth 2 providers."""

    id: str = ""
    name: str = ""
    type: str = "oauth"
    authorization_endpoint: str = ""
    token_endpoint: str = ""
    scope: str = ""

    def __init__(self, client_id: str, client_secret: str, timeout: float = 10.0):
        self.client_id = client_id
        self.client_secret = client_secret
        self.timeout = timeout

    def client(self) -> httpx.AsyncClient:
        """HTTP client used for token and profile requests."""
        return httpx.AsyncClient(timeout=self.timeout, headers={"Accept": "application/json"})

    def get_authorization_url(self, redirect_uri: str, state: str) -> str:
        """URL of the provider's consent screen."""
        params = {
            "client_id": self.client_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "scope": self.scope,
            "state": state,
        }
        return f"{self.authorization_endpoint}?{urllib.parse.urlencode(params)}"

    async def exchange_code(self, code: str, redirect_uri: str) -> OAuthTokens:
        """
        Exchange an authorization code for tokens.

        Raises:
            OAuthError: If the request fails or the provider reports an error
        """
        data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
            "redirect_uri": redirect_uri,
            "grant_type": "authorization_code",
        }
        try:
            async with self.client() as client:
                response = await client.post(self.token_endpoint, data=data)
                response.raise_for_status()
                body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"{self.name} token exchange failed: {e}")
            raise OAuthError("OAuthCallbackError", f"{self.name} token exchange failed") from e

        # Some providers (GitHub) answer 200 with an error body
        if "error" in body or not body.get("access_token"):
            raise OAuthError(
                "OAuthCallbackError",
                body.get("error_description") or body.get("error") or "No access token returned",
            )

        return self.parse_tokens(body)

    def parse_tokens(self, body: Dict[str, Any]) -> OAuthTokens:
        expires_at = None
        if body.get("expires_in"):
            expires_at = int(time.time()) + int(body["expires_in"])
        return OAuthTokens(
            access_token=body["access_token"],
            token_type=(body.get("token_type") or "").lower() or None,
            scope=body.get("scope"),
            refresh_token=body.get("refresh_token"),
            expires_at=expires_at,
            id_token=body.get("id_token"),
        )

    async def get_profile(self, tokens: OAuthTokens) -> OAuthProfile:
        raise NotImplementedError


class GitHubProvider(OAuthProvider):
    """GitHub OAuth app."""

    id = "github"
    name = "GitHub"
    authorization_endpoint = "https://github.com/login/oauth/authorize"
    token_endpoint = "https://github.com/login/oauth/access_token"
    userinfo_endpoint = "https://api.github.com/user"
    emails_endpoint = "https://api.github.com/user/emails"
    scope = "read:user user:email"

    async def get_profile(self, tokens: OAuthTokens) -> OAuthProfile:
        """
        Fetch the GitHub user.

        Users with a private email get their primary verified address from
        ``/user/emails`` instead.
        """
        headers = {"Authorization": f"Bearer {tokens.access_token}"}
        try:
            async with self.client() as client:
                response = await client.get(self.userinfo_endpoint, headers=headers)
                response.raise_for_status()
                profile = response.json()

                email = profile.get("email")
                if not email:
                    response = await client.get(self.emails_endpoint, headers=headers)
                    if response.is_success:
                        email = self.primary_email(response.json())
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"GitHub profile request failed: {e}")
            raise OAuthError("OAuthCallbackError", "Could not load GitHub profile") from e

        return OAuthProfile(
            provider_account_id=str(profile["id"]),
            email=email,
            name=profile.get("name") or profile.get("login"),
            image=profile.get("avatar_url"),
        )

    @staticmethod
    def primary_email(emails: List[Dict[str, Any]]) -> Optional[str]:
        """Primary verified address, else any verified one."""
        verified = [e for e in emails if e.get("verified")]
        for entry in verified:
            if entry.get("primary"):
                return entry.get("email")
        return verified[0].get("email") if verified else None
