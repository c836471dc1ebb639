"""Tests for the Supabase Auth client."""

import json

import httpx
import pytest

from auth.supabase_auth import (
    EXPIRY_MARGIN_SECONDS,
    AuthResult,
    StaticTokenProvider,
    SupabaseAuthClient,
)


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


def _session_body(token="access-1", refresh="refresh-1", expires_in=3600):
    return {
        "access_token": token,
        "refresh_token": refresh,
        "expires_in": expires_in,
        "user": {"id": "user-1", "email": "priya@example.com"},
    }


def _client(handler, supabase_settings, clock=None):
    calls = []

    def recording(request):
        calls.append(request)
        return handler(request)

    http = httpx.AsyncClient(transport=httpx.MockTransport(recording))
    return SupabaseAuthClient(supabase_settings, client=http, clock=clock or FakeClock()), calls


class TestStaticTokenProvider:

    @pytest.mark.asyncio
    async def test_returns_token(self):
        assert await StaticTokenProvider("abc").get_access_token() == "abc"

    @pytest.mark.asyncio
    async def test_empty_token_is_none(self):
        assert await StaticTokenProvider("").get_access_token() is None


class TestSignIn:

    @pytest.mark.asyncio
    async def test_sign_in_stores_session(self, supabase_settings):
        auth, calls = _client(lambda r: httpx.Response(200, json=_session_body()), supabase_settings)

        result = await auth.sign_in("priya@example.com", "secret")

        assert result == AuthResult(True)
        assert auth.session.user_id == "user-1"
        assert await auth.get_access_token() == "access-1"

        request = calls[0]
        assert str(request.url) == "https://testproject.supabase.co/auth/v1/token?grant_type=password"
        assert request.headers["apikey"] == "test-anon-key"
        assert json.loads(request.content) == {"email": "priya@example.com", "password": "secret"}

    @pytest.mark.asyncio
    async def test_invalid_credentials(self, supabase_settings):
        auth, _ = _client(
            lambda r: httpx.Response(400, json={"error": "invalid_grant", "error_description": "Invalid login credentials"}),
            supabase_settings,
        )

        result = await auth.sign_in("priya@example.com", "wrong")

        assert not result.success
        assert result.error == "Invalid login credentials"
        assert auth.session is None

    @pytest.mark.asyncio
    async def test_network_error(self, supabase_settings):
        def handler(request):
            raise httpx.ConnectError("offline", request=request)

        auth, _ = _client(handler, supabase_settings)
        result = await auth.sign_in("priya@example.com", "secret")

        assert not result.success
        assert "Network error" in result.error

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [
        httpx.Response(200, text="ok"),
        httpx.Response(200, json=["access-1"]),
    ])
    async def test_unreadable_success_body(self, supabase_settings, response):
        auth, _ = _client(lambda r: response, supabase_settings)

        result = await auth.sign_in("priya@example.com", "secret")

        assert result == AuthResult(False, error="Sign in failed")
        assert auth.session is None


class TestSignUp:

    @pytest.mark.asyncio
    async def test_sign_up_sends_name(self, supabase_settings):
        auth, calls = _client(lambda r: httpx.Response(200, json=_session_body()), supabase_settings)

        result = await auth.sign_up("priya@example.com", "secret", "Priya")

        assert result.success
        assert json.loads(calls[0].content)["data"] == {"name": "Priya"}
        assert auth.session is not None

    @pytest.mark.asyncio
    async def test_email_confirmation_leaves_no_session(self, supabase_settings):
        auth, _ = _client(lambda r: httpx.Response(200, json={"id": "user-1"}), supabase_settings)

        result = await auth.sign_up("priya@example.com", "secret", "Priya")

        assert result.success
        assert auth.session is None

    @pytest.mark.asyncio
    async def test_unreadable_success_body(self, supabase_settings):
        auth, _ = _client(
            lambda r: httpx.Response(200, text="<html>Bad gateway</html>", headers={"Content-Type": "text/html"}),
            supabase_settings,
        )

        result = await auth.sign_up("priya@example.com", "secret", "Priya")

        assert result == AuthResult(False, error="Sign up failed")
        assert auth.session is None

    @pytest.mark.asyncio
    async def test_existing_email_code(self, supabase_settings):
        auth, _ = _client(
            lambda r: httpx.Response(422, json={"error_code": "user_already_exists", "msg": "User already registered"}),
            supabase_settings,
        )

        result = await auth.sign_up("priya@example.com", "secret", "Priya")

        assert result.to_dict() == {
            "success": False,
            "error": "User already registered",
            "code": "email_exists",
        }


class TestTokenRefresh:

    @pytest.mark.asyncio
    async def test_expired_session_is_refreshed(self, supabase_settings):
        clock = FakeClock()
        responses = [_session_body("access-1"), _session_body("access-2", refresh="refresh-2")]
        auth, calls = _client(lambda r: httpx.Response(200, json=responses.pop(0)), supabase_settings, clock)

        await auth.sign_in("priya@example.com", "secret")
        clock.now += 3600 - EXPIRY_MARGIN_SECONDS

        assert await auth.get_access_token() == "access-2"
        assert "grant_type=refresh_token" in str(calls[1].url)
        assert json.loads(calls[1].content) == {"refresh_token": "refresh-1"}

    @pytest.mark.asyncio
    async def test_failed_refresh_clears_session(self, supabase_settings):
        clock = FakeClock()
        responses = [
            httpx.Response(200, json=_session_body()),
            httpx.Response(401, json={"msg": "Invalid Refresh Token"}),
        ]
        auth, _ = _client(lambda r: responses.pop(0), supabase_settings, clock)

        await auth.sign_in("priya@example.com", "secret")
        clock.now += 7200

        assert await auth.get_access_token() is None
        assert auth.session is None

    @pytest.mark.asyncio
    async def test_html_refresh_response_clears_session(self, supabase_settings):
        clock = FakeClock()
        responses = [
            httpx.Response(200, json=_session_body()),
            httpx.Response(200, text="<html>Maintenance</html>", headers={"Content-Type": "text/html"}),
        ]
        auth, calls = _client(lambda r: responses.pop(0), supabase_settings, clock)

        await auth.sign_in("priya@example.com", "secret")
        clock.now += 7200

        assert await auth.get_access_token() is None
        assert auth.session is None
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_no_session(self, supabase_settings):
        auth, calls = _client(lambda r: httpx.Response(500), supabase_settings)

        assert await auth.get_access_token() is None
        assert calls == []

    @pytest.mark.asyncio
    async def test_sign_out(self, supabase_settings):
        auth, _ = _client(lambda r: httpx.Response(200, json=_session_body()), supabase_settings)
        await auth.sign_in("priya@example.com", "secret")

        auth.sign_out()

        assert await auth.get_access_token() is None
