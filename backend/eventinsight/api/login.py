"""Sign-in page."""
import html
import urllib.parse
from typing import Optional
from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from eventinsight.auth import auth, LOGIN_PATH

router = APIRouter(tags=["login"])

ERROR_MESSAGES = {
    "OAuthAccountNotLinked": "This email is already linked to another sign-in method.",
    "OAuthCallbackError": "Sign-in was interrupted or expired. Please try again.",
    "Configuration": "Sign-in is not configured correctly.",
}
DEFAULT_ERROR = "Unable to sign in."


def render_login_page(callback_url: Optional[str], error: Optional[str]) -> str:
    """Minimal page with one button per configured provider."""
    buttons = []
    for provider in auth.providers.values():
        href = f"{auth.base_path}/signin/{provider.id}"
        if callback_url:
            href += "?" + urllib.parse.urlencode({"callbackUrl": callback_url})
        buttons.append(
            f'<a class="provider" href="{html.escape(href)}">Sign in with {html.escape(provider.name)}</a>'
        )

    message = ""
    if error:
        message = f'<p class="error">{html.escape(ERROR_MESSAGES.get(error, DEFAULT_ERROR))}</p>'

    return (
        "<!doctype html><html><head><meta charset=\"utf-8\"><title>Sign in</title></head>"
        f"<body><main><h1>Sign in</h1>{message}{''.join(buttons)}</main></body></html>"
    )


@router.get(LOGIN_PATH, response_class=HTMLResponse)
async def login_page(callbackUrl: Optional[str] = None, error: Optional[str] = None) -> HTMLResponse:
    return HTMLResponse(render_login_page(callbackUrl, error))
