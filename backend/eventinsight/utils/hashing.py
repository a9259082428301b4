"""Hashing utilities for API keys and auth tokens."""
import hashlib
import secrets
from eventinsight.config import settings

API_KEY_PREFIX = "ei_"
DISPLAY_PREFIX_LENGTH = 12


def hash_api_key(api_key: str) -> str:
    """
    Hash an API key using SHA-256 with salt.

    The hash is deterministic so a presented key can be looked up through the
    unique index on ``api_keys.key_hash``.

    Args:
        api_key: The API key to hash

    Returns:
        Hex digest of the hashed key
    """
    salted_key = f"{api_key}{settings.api_key_salt}"
    return hashlib.sha256(salted_key.encode()).hexdigest()


def generate_api_key() -> str:
    """
    Generate a new API key.

    Returns:
        A new API key string (format: ei_xxxxxxxxxxxx)
    """
    random_part = secrets.token_urlsafe(32)
    return f"{API_KEY_PREFIX}{random_part}"


def api_key_display_prefix(api_key: str) -> str:
    """First characters of a raw key, safe to show in the dashboard."""
    return api_key[:DISPLAY_PREFIX_LENGTH]


def generate_session_token() -> str:
    """Opaque token for the session cookie."""
    return secrets.token_urlsafe(32)


def generate_oauth_state() -> str:
    """Random OAuth ``state`` value for CSRF protection."""
    return secrets.token_urlsafe(24)
