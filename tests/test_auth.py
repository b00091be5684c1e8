"""
Tests for Supabase token authentication
"""

from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest
from supabase import AuthApiError, AuthRetryableError

from unigo.auth import AuthContext, CurrentUser, get_auth_context, verify_supabase_token
from unigo.errors import AuthRequiredError, AuthUnavailableError


def _db_with_user(user=None, error=None):
    db = Mock()
    if error is not None:
        db.client.auth.get_user = AsyncMock(side_effect=error)
    else:
        db.client.auth.get_user = AsyncMock(return_value=Mock(user=user))
    return db


class TestAuthContext:

    def test_anonymous(self):
        auth = AuthContext.anonymous()
        assert not auth.is_authenticated
        with pytest.raises(AuthRequiredError) as exc:
            auth.require_user()
        assert exc.value.status_code == 401
        assert exc.value.to_dict()["redirect_to"] == "/auth/login"

    def test_signed_in(self):
        user = CurrentUser(id="user-123")
        assert AuthContext(user).require_user() is user


class TestVerifySupabaseToken:

    @pytest.mark.asyncio
    async def test_valid_token(self):
        supabase_user = Mock(id="user-123", email="student@campus.edu", role="authenticated")
        with patch("unigo.auth.supabase.get_database", return_value=_db_with_user(supabase_user)):
            user = await verify_supabase_token("token")

        assert user == CurrentUser(id="user-123", email="student@campus.edu", role="authenticated")

    @pytest.mark.asyncio
    async def test_rejected_token(self):
        error = AuthApiError("invalid JWT: token is expired", 403, "bad_jwt")
        with patch("unigo.auth.supabase.get_database", return_value=_db_with_user(error=error)):
            assert await verify_supabase_token("token") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        AuthRetryableError("Service Unavailable", 503),
        httpx.ConnectError("down"),
    ])
    async def test_outage_is_not_a_sign_in_prompt(self, error):
        with patch("unigo.auth.supabase.get_database", return_value=_db_with_user(error=error)):
            with pytest.raises(AuthUnavailableError) as exc:
                await verify_supabase_token("token")

        assert exc.value.status_code == 503
        assert not isinstance(exc.value, AuthRequiredError)

    @pytest.mark.asyncio
    async def test_no_user_in_response(self):
        with patch("unigo.auth.supabase.get_database", return_value=_db_with_user(None)):
            assert await verify_supabase_token("token") is None


class TestGetAuthContext:

    @pytest.mark.asyncio
    async def test_no_header_is_anonymous(self):
        auth = await get_auth_context(None)
        assert not auth.is_authenticated

    @pytest.mark.asyncio
    async def test_malformed_header(self):
        with pytest.raises(AuthRequiredError):
            await get_auth_context("Token abc")

    @pytest.mark.asyncio
    async def test_invalid_token(self):
        with patch("unigo.auth.supabase.verify_supabase_token", AsyncMock(return_value=None)):
            with pytest.raises(AuthRequiredError):
                await get_auth_context("Bearer abc")

    @pytest.mark.asyncio
    async def test_valid_token(self):
        user = CurrentUser(id="user-123")
        with patch("unigo.auth.supabase.verify_supabase_token", AsyncMock(return_value=user)) as verify:
            auth = await get_auth_context("Bearer abc")

        verify.assert_awaited_once_with("abc")
        assert auth.user is user
