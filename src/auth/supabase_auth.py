"""
Supabase Auth client.

Provides the access token that the assessment service expects as a bearer
credential, plus the sign-in / sign-up calls used by the front end. Results
are returned as ``AuthResult`` values rather than raised, so callers can
show the message directly.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Protocol

import httpx

from config.settings import SupabaseSettings, get_supabase_settings

logger = logging.getLogger(__name__)

# Refresh this many seconds before the token actually expires
EXPIRY_MARGIN_SECONDS = 30

_EMAIL_EXISTS_CODES = {"email_exists", "user_already_exists"}


class SessionProvider(Protocol):
    """Anything that can hand out the current user's access token."""

    async def get_access_token(self) -> Optional[str]:
        ...


class StaticTokenProvider:
    """Session provider for a token received from an upstream caller."""

    def __init__(self, access_token: Optional[str]):
        self._access_token = access_token or None

    async def get_access_token(self) -> Optional[str]:
        return self._access_token


@dataclass
class AuthResult:
    """Outcome of a sign-in or sign-up call."""
    success: bool
    error: Optional[str] = None
    code: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"success": self.success}
        if self.error:
            data["error"] = self.error
        if self.code:
            data["code"] = self.code
        return data


@dataclass
class AuthSession:
    access_token: str
    refresh_token: Optional[str]
    expires_at: float
    user_id: Optional[str] = None
    email: Optional[str] = None

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at - EXPIRY_MARGIN_SECONDS


class SupabaseAuthClient:
    """
    Minimal Supabase Auth (GoTrue) client.

    Keeps a single in-memory session. ``get_access_token`` refreshes an
    expired session once and returns None if no valid session remains.
    """

    def __init__(
        self,
        settings: Optional[SupabaseSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._settings = settings or get_supabase_settings()
        self._client = client
        self._clock = clock
        self._session: Optional[AuthSession] = None

    @property
    def session(self) -> Optional[AuthSession]:
        return self._session

    def _headers(self) -> Dict[str, str]:
        return {
            "apikey": self._settings.anon_key,
            "Content-Type": "application/json",
        }

    async def _post(self, path: str, payload: Dict[str, Any]) -> httpx.Response:
        url = f"{self._settings.auth_url}{path}"
        if self._client is not None:
            return await self._client.post(url, json=payload, headers=self._headers())
        async with httpx.AsyncClient(timeout=self._settings.request_timeout) as client:
            return await client.post(url, json=payload, headers=self._headers())

    @staticmethod
    def _json_body(response: httpx.Response) -> Optional[Dict[str, Any]]:
        """The response's JSON object, or None for anything else (HTML, text, lists)."""
        try:
            body = response.json()
        except ValueError:
            return None
        return body if isinstance(body, dict) else None

    @classmethod
    def _error_from(cls, response: httpx.Response, default: str) -> AuthResult:
        body = cls._json_body(response) or {}

        code = body.get("error_code") or body.get("code") or body.get("error")
        if not isinstance(code, str):
            code = None
        message = (
            body.get("msg")
            or body.get("error_description")
            or body.get("message")
            or default
        )
        if code in _EMAIL_EXISTS_CODES:
            code = "email_exists"
        return AuthResult(False, error=str(message), code=code)

    def _store_session(self, body: Dict[str, Any]) -> bool:
        token = body.get("access_token")
        if not token:
            return False
        expires_in = body.get("expires_in") or 3600
        user = body.get("user")
        if not isinstance(user, dict):
            user = {}
        self._session = AuthSession(
            access_token=token,
            refresh_token=body.get("refresh_token"),
            expires_at=self._clock() + float(expires_in),
            user_id=user.get("id"),
            email=user.get("email"),
        )
        return True

    async def sign_in(self, email: str, password: str) -> AuthResult:
        """Sign in with email and password."""
        try:
            response = await self._post(
                "/token?grant_type=password",
                {"email": email, "password": password},
            )
        except httpx.RequestError as exc:
            logger.error("Sign in request failed: %s", exc)
            return AuthResult(False, error="Network error. Please check your connection and try again.")

        if response.status_code >= 400:
            result = self._error_from(response, "Sign in failed")
            logger.info("Sign in rejected (%s)", response.status_code)
            return result

        body = self._json_body(response)
        if body is None or not self._store_session(body):
            logger.warning("Sign in returned no usable session (%s)", response.status_code)
            return AuthResult(False, error="Sign in failed")
        logger.info("Signed in user %s", self._session.user_id)
        return AuthResult(True)

    async def sign_up(self, email: str, password: str, name: str) -> AuthResult:
        """Create an account. Signs the user in when a session is returned."""
        try:
            response = await self._post(
                "/signup",
                {"email": email, "password": password, "data": {"name": name}},
            )
        except httpx.RequestError as exc:
            logger.error("Sign up request failed: %s", exc)
            return AuthResult(False, error="Network error. Please check your connection and try again.")

        if response.status_code >= 400:
            return self._error_from(response, "Sign up failed")

        body = self._json_body(response)
        if body is None:
            logger.warning("Sign up returned an unreadable body (%s)", response.status_code)
            return AuthResult(False, error="Sign up failed")
        # Projects that require email confirmation return the user without a session
        self._store_session(body)
        return AuthResult(True)

    async def refresh(self) -> bool:
        if self._session is None or not self._session.refresh_token:
            return False
        try:
            response = await self._post(
                "/token?grant_type=refresh_token",
                {"refresh_token": self._session.refresh_token},
            )
        except httpx.RequestError as exc:
            logger.warning("Session refresh failed: %s", exc)
            return False

        body = self._json_body(response) if response.status_code < 400 else None
        if body is None or not self._store_session(body):
            logger.info("Session refresh rejected (%s)", response.status_code)
            self._session = None
            return False
        return True

    async def get_access_token(self) -> Optional[str]:
        if self._session is None:
            return None
        if self._session.is_expired(self._clock()) and not await self.refresh():
            self._session = None
            return None
        return self._session.access_token

    def sign_out(self) -> None:
        self._session = None
