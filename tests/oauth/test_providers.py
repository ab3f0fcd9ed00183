"""Tests for the OAuth provider adapters - uses responses library for HTTP mocking."""

from urllib.parse import parse_qs, urlparse

import pytest
import responses

from oauth.base import OAuthProviderError
from oauth.google import GOOGLE_TOKEN_URL, GOOGLE_USERINFO_URL, GoogleOAuthProvider
from oauth.kakao import KAKAO_PROFILE_URL, KakaoOAuthProvider
from oauth.naver import NAVER_PROFILE_URL, NaverOAuthProvider


def adapter(cls):
    return cls(client_id="cid", client_secret="csecret", redirect_uri="https://app.test/callback")


class TestInit:

    @pytest.mark.parametrize("missing", ["client_id", "client_secret", "redirect_uri"])
    def test_missing_credential_raises(self, missing):
        kwargs = {"client_id": "cid", "client_secret": "s", "redirect_uri": "https://app.test/cb"}
        kwargs[missing] = ""
        with pytest.raises(ValueError, match=missing):
            GoogleOAuthProvider(**kwargs)


class TestLoginUrl:

    def test_google_login_url(self):
        url = adapter(GoogleOAuthProvider).get_login_url(state="xyz")

        params = parse_qs(urlparse(url).query)
        assert url.startswith("https://accounts.google.com/")
        assert params["client_id"] == ["cid"]
        assert params["redirect_uri"] == ["https://app.test/callback"]
        assert params["response_type"] == ["code"]
        assert params["state"] == ["xyz"]
        assert "email" in params["scope"][0]

    def test_naver_has_no_scope(self):
        params = parse_qs(urlparse(adapter(NaverOAuthProvider).get_login_url()).query)
        assert "scope" not in params
        assert "state" not in params


class TestExchangeCode:

    @responses.activate
    def test_returns_access_token(self):
        responses.add(responses.POST, GOOGLE_TOKEN_URL, json={"access_token": "at"}, status=200)

        assert adapter(GoogleOAuthProvider).exchange_code_for_token("code-1") == "at"
        assert "code=code-1" in responses.calls[0].request.body

    @responses.activate
    def test_missing_access_token_raises(self):
        responses.add(responses.POST, GOOGLE_TOKEN_URL, json={"error": "invalid_grant"}, status=200)

        with pytest.raises(OAuthProviderError):
            adapter(GoogleOAuthProvider).exchange_code_for_token("code-1")

    @responses.activate
    def test_http_error_raises(self):
        responses.add(responses.POST, GOOGLE_TOKEN_URL, json={"error": "invalid_grant"}, status=400)

        with pytest.raises(OAuthProviderError):
            adapter(GoogleOAuthProvider).exchange_code_for_token("bad")


class TestUserInfo:

    @responses.activate
    def test_google(self):
        responses.add(
            responses.GET, GOOGLE_USERINFO_URL,
            json={"sub": "g-1", "email": "a@x.com", "email_verified": True}, status=200,
        )

        info = adapter(GoogleOAuthProvider).get_user_info("at")

        assert (info.provider_id, info.email, info.email_verified) == ("g-1", "a@x.com", True)
        assert responses.calls[0].request.headers["Authorization"] == "Bearer at"

    @responses.activate
    def test_naver(self):
        responses.add(
            responses.GET, NAVER_PROFILE_URL,
            json={"resultcode": "00", "response": {"id": "n-1", "email": "a@x.com"}}, status=200,
        )

        info = adapter(NaverOAuthProvider).get_user_info("at")

        assert info.provider_id == "n-1"
        assert info.email_verified is True

    @responses.activate
    def test_naver_error_code(self):
        responses.add(
            responses.GET, NAVER_PROFILE_URL,
            json={"resultcode": "024", "message": "Authentication failed"}, status=200,
        )
        with pytest.raises(OAuthProviderError):
            adapter(NaverOAuthProvider).get_user_info("at")

    @responses.activate
    def test_kakao_numeric_id(self):
        responses.add(
            responses.GET, KAKAO_PROFILE_URL,
            json={"id": 12345, "kakao_account": {
                "email": "a@x.com", "is_email_valid": True, "is_email_verified": True,
            }},
            status=200,
        )

        info = adapter(KakaoOAuthProvider).get_user_info("at")

        assert info.provider_id == "12345"
        assert info.email_verified is True

    @responses.activate
    def test_kakao_unverified_email(self):
        responses.add(
            responses.GET, KAKAO_PROFILE_URL,
            json={"id": 1, "kakao_account": {
                "email": "a@x.com", "is_email_valid": True, "is_email_verified": False,
            }},
            status=200,
        )
        assert adapter(KakaoOAuthProvider).get_user_info("at").email_verified is False

    @responses.activate
    def test_missing_subject_raises(self):
        responses.add(responses.GET, GOOGLE_USERINFO_URL, json={"email": "a@x.com"}, status=200)
        with pytest.raises(OAuthProviderError):
            adapter(GoogleOAuthProvider).get_user_info("at")

    @responses.activate
    def test_expired_token_raises(self):
        responses.add(responses.GET, GOOGLE_USERINFO_URL, json={"error": "invalid_token"}, status=401)
        with pytest.raises(OAuthProviderError):
            adapter(GoogleOAuthProvider).get_user_info("expired")
