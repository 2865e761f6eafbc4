"""Thin HTTP client for the task tracker API.

`http` is anything with a requests-style `request(method, url, **kwargs)`:
a `requests.Session` in real use, FastAPI's `TestClient` in tests.
"""

import logging
from typing import Optional

import requests

from daily_tasks.client.session import CloudSession, SessionHolder
from daily_tasks.schemas.user import CloudUser

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AuthError(ApiError):
    pass


class ApiClient:
    def __init__(self, holder: SessionHolder, http=None, base_url: str = ""):
        self.holder = holder
        self.http = http if http is not None else requests.Session()
        self.base_url = base_url.rstrip("/")

    def request(self, method: str, path: str, token: Optional[str] = None, headers: Optional[dict] = None, **kwargs):
        headers = dict(headers or {})
        if token is None and self.holder.current:
            token = self.holder.current.access_token
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = self.http.request(method, f"{self.base_url}{path}", headers=headers, **kwargs)
        except requests.RequestException as e:
            logger.error(f"[{method} {path}] {e}")
            raise ApiError(f"{method} {path} failed: {e}") from e

        if response.status_code >= 400:
            try:
                detail = response.json().get("detail")
            except ValueError:
                detail = response.text
            logger.error(f"[{method} {path}] {response.status_code} {detail}")
            error_cls = AuthError if response.status_code in (401, 503) and path.startswith("/auth") else ApiError
            raise error_cls(f"{method} {path} failed: {response.status_code} {detail}", response.status_code)
        return response

    def sign_in(self, access_token: str, provider_token: Optional[str] = None) -> CloudUser:
        """Resolve the user behind an OAuth redirect and publish the session."""
        response = self.request("GET", "/auth/session", token=access_token)
        user = CloudUser(**response.json())
        self.holder.set(CloudSession(access_token=access_token, user=user, provider_token=provider_token))
        return user

    def sign_out(self) -> None:
        if self.holder.current is None:
            return
        try:
            self.request("POST", "/auth/logout")
        except ApiError as e:
            # la session locale est fermée quoi qu'il arrive
            logger.warning(f"Provider sign out failed: {e}")
        self.holder.clear()

    def login_url(self, redirect_to: Optional[str] = None) -> str:
        params = {"redirect_to": redirect_to} if redirect_to else None
        return self.request("GET", "/auth/login-url", params=params).json()["url"]
