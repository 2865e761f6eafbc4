"""
Hosted identity provider (GoTrue-style REST API)
"""

import logging
from typing import Optional
from urllib.parse import urlencode

import requests

from daily_tasks.core.config import settings

logger = logging.getLogger(__name__)


class IdentityError(Exception):
    pass


def _headers(access_token: Optional[str] = None) -> dict:
    headers = {"apikey": settings.BACKEND_PUBLIC_KEY}
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    return headers


def authorize_url(redirect_to: Optional[str] = None, provider: str = "google") -> str:
    """URL to start the delegated OAuth flow, asking for calendar access."""
    query = urlencode({
        "provider": provider,
        "scopes": settings.CALENDAR_SCOPE,
        "redirect_to": redirect_to or settings.AUTH_REDIRECT_URL,
    })
    return f"{settings.BACKEND_URL}/auth/v1/authorize?{query}"


def sign_out(access_token: str) -> None:
    try:
        response = requests.post(
            f"{settings.BACKEND_URL}/auth/v1/logout",
            headers=_headers(access_token),
            timeout=settings.AUTH_TIMEOUT,
        )
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error(f"Sign out failed: {e}")
        raise IdentityError(str(e)) from e
