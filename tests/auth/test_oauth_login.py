"""Tests for OAuthLoginFlow - get-or-create-verified-user resolution."""

from unittest.mock import Mock
from uuid import uuid4

import pytest

from auth.code_manager import CodeManager
from auth.exceptions import (
    InternalFailureError,
    InvalidInputError,
    NotFoundError,
    UnauthorizedError,
)
from auth.oauth_login import OAuthLoginFlow
from auth.security_logger import SecurityEvent, SecurityLogger
from auth.types import AuthAccount, OAuthSignupResult, OAuthUserInfo, Provider
from clients.identity_client import IdentityClient
from clients.signup_client import SignupClient
from clients.token_client import TokenClient
from oauth.base import OAuthProviderError
from oauth.google import GoogleOAuthProvider
from oauth.registry import ProviderRegistry


def google_account(user_id, verified=True):
    return AuthAccount(
        id=uuid4(),
        user_id=user_id,
        provider=Provider.GOOGLE,
        provider_id="g-123",
        email="a@x.com",
        is_verified=verified,
    )


@pytest.fixture
def google():
    """Google adapter with network calls stubbed out."""
    adapter = Mock(spec=GoogleOAuthProvider)
    adapter.provider = Provider.GOOGLE
    adapter.exchange_code_for_token.return_value = "google-access-token"
    adapter.get_user_info.return_value = OAuthUserInfo(
        provider_id="g-123", email="a@x.com", email_verified=True
    )
    adapter.get_login_url.return_value = "https://accounts.google.com/o/oauth2/v2/auth?x=1"
    return adapter


@pytest.fixture
def registry(google):
    return ProviderRegistry({Provider.GOOGLE: google})


@pytest.fixture
def identity(test_user_id):
    mock = Mock(spec=IdentityClient)
    mock.get_oauth_account.return_value = google_account(test_user_id)
    return mock


@pytest.fixture
def signup_client():
    return Mock(spec=SignupClient)


@pytest.fixture
def token_client():
    mock = Mock(spec=TokenClient)
    mock.generate_access_token.return_value = "access-token"
    mock.generate_refresh_token.return_value = "refresh-token"
    return mock


@pytest.fixture
def security_logger():
    return Mock(spec=SecurityLogger)


@pytest.fixture
def flow(identity, token_client, valkey, signup_client, registry, security_logger):
    codes = CodeManager(valkey, "login_code:", ttl_seconds=300)
    return OAuthLoginFlow(identity, token_client, codes, signup_client, registry, security_logger)


class TestTokenAcquisition:
    """Access token vs authorization code."""

    def test_access_token_used_directly(self, flow, google):
        flow.get_or_create_verified_user("google", access_token="given-token")

        google.exchange_code_for_token.assert_not_called()
        google.get_user_info.assert_called_once_with("given-token")

    def test_code_exchanged_for_token(self, flow, google):
        flow.get_or_create_verified_user(Provider.GOOGLE, code="auth-code")

        google.exchange_code_for_token.assert_called_once_with("auth-code")
        google.get_user_info.assert_called_once_with("google-access-token")

    def test_neither_token_nor_code_invalid_input(self, flow):
        with pytest.raises(InvalidInputError):
            flow.get_or_create_verified_user("google")

    def test_exchange_failure_unauthorized(self, flow, google):
        google.exchange_code_for_token.side_effect = OAuthProviderError("bad code")

        with pytest.raises(UnauthorizedError):
            flow.get_or_create_verified_user("google", code="bad")

    def test_user_info_failure_unauthorized(self, flow, google):
        google.get_user_info.side_effect = OAuthProviderError("token revoked")

        with pytest.raises(UnauthorizedError):
            flow.get_or_create_verified_user("google", access_token="revoked")


class TestProviderResolution:

    def test_unsupported_provider_invalid_input(self, flow):
        with pytest.raises(InvalidInputError):
            flow.get_or_create_verified_user("github", access_token="t")

    def test_unconfigured_provider_invalid_input(self, flow):
        with pytest.raises(InvalidInputError):
            flow.get_or_create_verified_user("kakao", access_token="t")

    def test_local_is_not_oauth(self, flow):
        with pytest.raises(InvalidInputError):
            flow.get_or_create_verified_user("local", access_token="t")

    def test_login_url_from_adapter(self, flow, google):
        url = flow.get_login_url("google", state="xyz")

        assert url.startswith("https://accounts.google.com")
        google.get_login_url.assert_called_once_with("xyz")


class TestExistingAccount:
    """Account already linked to (provider, provider_id)."""

    def test_returns_existing_user(self, flow, identity, test_user_id):
        user_id = flow.get_or_create_verified_user("google", access_token="t")

        assert user_id == test_user_id
        identity.get_oauth_account.assert_called_once_with(Provider.GOOGLE, "g-123")

    def test_repeat_logins_never_provision(self, flow, signup_client, test_user_id):
        """Same provider id twice: same user, no signup call."""
        first = flow.get_or_create_verified_user("google", access_token="t")
        second = flow.get_or_create_verified_user("google", access_token="t")

        assert first == second == test_user_id
        signup_client.oauth_signup.assert_not_called()

    def test_unverified_account_unauthorized(self, flow, identity, test_user_id):
        identity.get_oauth_account.return_value = google_account(test_user_id, verified=False)

        with pytest.raises(UnauthorizedError):
            flow.get_or_create_verified_user("google", access_token="t")


class TestNotFoundProvisioning:
    """Only a genuine not-found falls through to the signup API."""

    def test_not_found_provisions_via_signup(self, flow, identity, signup_client):
        new_user_id = uuid4()
        identity.get_oauth_account.side_effect = NotFoundError("no account")
        signup_client.oauth_signup.return_value = OAuthSignupResult(
            user_id=new_user_id, provider_id="g-123", email="a@x.com", is_verified=True
        )

        user_id = flow.get_or_create_verified_user("google", access_token="t")

        assert user_id == new_user_id
        signup_client.oauth_signup.assert_called_once_with(Provider.GOOGLE, "t")

    def test_provisioning_uses_exchanged_token(self, flow, identity, signup_client):
        identity.get_oauth_account.side_effect = NotFoundError("no account")
        signup_client.oauth_signup.return_value = OAuthSignupResult(user_id=uuid4(), is_verified=True)

        flow.get_or_create_verified_user("google", code="auth-code")

        signup_client.oauth_signup.assert_called_once_with(Provider.GOOGLE, "google-access-token")

    def test_provisioning_audited(self, flow, identity, signup_client, security_logger):
        identity.get_oauth_account.side_effect = NotFoundError("no account")
        signup_client.oauth_signup.return_value = OAuthSignupResult(user_id=uuid4(), is_verified=True)

        flow.get_or_create_verified_user("google", access_token="t")

        events = [c.args[0] for c in security_logger.log.call_args_list]
        assert SecurityEvent.OAUTH_ACCOUNT_PROVISIONED in events

    def test_other_lookup_error_propagates_without_signup(self, flow, identity, signup_client):
        """A flaky identity service must never lead to a duplicate account."""
        identity.get_oauth_account.side_effect = InternalFailureError("identity down")

        with pytest.raises(InternalFailureError):
            flow.get_or_create_verified_user("google", access_token="t")
        signup_client.oauth_signup.assert_not_called()

    def test_signup_failure_propagates(self, flow, identity, signup_client):
        identity.get_oauth_account.side_effect = NotFoundError("no account")
        signup_client.oauth_signup.side_effect = InternalFailureError("signup down")

        with pytest.raises(InternalFailureError):
            flow.get_or_create_verified_user("google", access_token="t")

    def test_provisioned_but_unverified_unauthorized(self, flow, identity, signup_client):
        identity.get_oauth_account.side_effect = NotFoundError("no account")
        signup_client.oauth_signup.return_value = OAuthSignupResult(user_id=uuid4(), is_verified=False)

        with pytest.raises(UnauthorizedError):
            flow.get_or_create_verified_user("google", access_token="t")


class TestCodeAndTokenPaths:
    """Same two login paths as local login."""

    def test_code_then_tokens(self, flow, test_user_id):
        issued = flow.issue_login_code("google", access_token="t")
        assert issued.user_id == test_user_id

        tokens = flow.verify_login_code(test_user_id, issued.code)

        assert tokens.access_token == "access-token"
        assert tokens.refresh_token == "refresh-token"

    def test_code_single_use(self, flow, test_user_id):
        issued = flow.issue_login_code("google", access_token="t")
        flow.verify_login_code(test_user_id, issued.code)

        with pytest.raises(UnauthorizedError):
            flow.verify_login_code(test_user_id, issued.code)

    def test_direct_login(self, flow, token_client, test_user_id):
        tokens = flow.login("google", access_token="t")

        assert tokens.access_token == "access-token"
        token_client.generate_refresh_token.assert_called_once_with(test_user_id)

    def test_unverified_never_gets_code(self, flow, identity, valkey, test_user_id):
        identity.get_oauth_account.return_value = google_account(test_user_id, verified=False)

        with pytest.raises(UnauthorizedError):
            flow.issue_login_code("google", access_token="t")
        assert valkey.keys() == []
