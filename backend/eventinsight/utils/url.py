"""URL utility functions."""
import urllib.parse
from typing import Optional


def safe_callback_url(callback_url: Optional[str], base_url: str, default: str = "/") -> str:
    """
    Restrict a post-login redirect target to the application's own origin.

    Relative paths are kept as-is; absolute URLs are only accepted when they
    share scheme and host with ``base_url``. Anything else falls back to
    ``default`` so the sign-in flow cannot be used as an open redirect.

    Args:
        callback_url: Requested redirect target (may be URL-encoded)
        base_url: Public base URL of the application
        default: Fallback target

    Returns:
        A redirect target on the application's origin
    """
    if not callback_url:
        return default

    callback_url = urllib.parse.unquote(callback_url)

    if callback_url.startswith("/") and not callback_url.startswith("//"):
        return callback_url

    parsed = urllib.parse.urlparse(callback_url)
    base = urllib.parse.urlparse(base_url)
    if parsed.scheme == base.scheme and parsed.netloc == base.netloc:
        return callback_url

    return default


def client_ip(forwarded_for: Optional[str], fallback: Optional[str]) -> Optional[str]:
    """Client IP from X-Forwarded-For (first hop) or the socket peer."""
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop
    return fallback
