"""OAuth login with get-or-create-verified-user resolution.

Resolution order:
1. Trade the authorization code for an access token if no token was given.
2. Fetch the provider's user info.
3. Existing account for (provider, provider_id) -> use it.
   Identity service answers NotFound -> provision through the signup API.
   Any other lookup failure propagates; it never falls through to signup,
   which would risk a duplicate account.
4. Unverified users are refused, same as local login.
"""

import logging
from uuid import UUID

from auth.code_manager import CodeManager
from auth.exceptions import InvalidInputError, NotFoundError, UnauthorizedError
from auth.local_login import issue_tokens, redeem_login_code
from auth.security_logger import SecurityEvent, SecurityLogger
from auth.types import LoginCodeResult, Provider, TokenPair
from clients.identity_client import IdentityClient
from clients.signup_client import SignupClient
from clients.token_client import TokenClient
from oauth.base import OAuthProvider, OAuthProviderError
from oauth.registry import ProviderRegistry

logger = logging.getLogger(__name__)


class OAuthLoginFlow:
    """Login through an external OAuth provider."""

    def __init__(
        self,
        identity: IdentityClient,
        token_client: TokenClient,
        code_manager: CodeManager,
        signup_client: SignupClient,
        registry: ProviderRegistry,
        security_logger: SecurityLogger,
    ):
        self._identity = identity
        self._token_client = token_client
        self._code_manager = code_manager
        self._signup_client = signup_client
        self._registry = registry
        self._security_logger = security_logger

    def get_login_url(self, provider: Provider | str, state: str | None = None) -> str:
        return self._registry.get(provider).get_login_url(state)

    def _get_access_token(self, adapter: OAuthProvider, access_token: str | None, code: str | None) -> str:
        if access_token:
            return access_token
        if not code:
            raise InvalidInputError("Either access token or authorization code must be provided")
        try:
            return adapter.exchange_code_for_token(code)
        except OAuthProviderError as e:
            raise UnauthorizedError(f"Failed to exchange authorization code: {e}") from e

    def get_or_create_verified_user(
        self,
        provider: Provider | str,
        access_token: str | None = None,
        code: str | None = None,
    ) -> UUID:
        """
        Resolve the local user behind an OAuth identity, provisioning it if new.

        Raises:
            InvalidInputError: Unsupported provider, or neither token nor code.
            UnauthorizedError: Provider rejected the code/token, or the
                resolved account is not verified.
            AccountsError: Any non-NotFound lookup failure or signup failure,
                unchanged.
        """
        adapter = self._registry.get(provider)
        resolved = adapter.provider
        oauth_token = self._get_access_token(adapter, access_token, code)

        try:
            user_info = adapter.get_user_info(oauth_token)
        except OAuthProviderError as e:
            raise UnauthorizedError(f"Failed to fetch user info: {e}") from e

        try:
            account = self._identity.get_oauth_account(resolved, user_info.provider_id)
        except NotFoundError:
            account = None

        if account is not None:
            user_id, verified = account.user_id, account.is_verified
        else:
            signup = self._signup_client.oauth_signup(resolved, oauth_token)
            user_id, verified = signup.user_id, signup.is_verified
            self._security_logger.log(
                SecurityEvent.OAUTH_ACCOUNT_PROVISIONED,
                email=signup.email,
                user_id=user_id,
                details={"provider": resolved.value},
            )

        if not verified:
            self._security_logger.log(
                SecurityEvent.LOGIN_FAILED,
                user_id=user_id,
                details={"reason": "not_verified", "provider": resolved.value},
            )
            raise UnauthorizedError("User is not verified")

        return user_id

    def issue_login_code(
        self,
        provider: Provider | str,
        access_token: str | None = None,
        code: str | None = None,
    ) -> LoginCodeResult:
        user_id = self.get_or_create_verified_user(provider, access_token, code)
        login_code = self._code_manager.issue_code(user_id)

        self._security_logger.log(
            SecurityEvent.LOGIN_CODE_ISSUED,
            user_id=user_id,
            details={"provider": ProviderRegistry.resolve(provider).value},
        )
        return LoginCodeResult(code=login_code, user_id=user_id)

    def verify_login_code(self, user_id: UUID, code: str) -> TokenPair:
        try:
            redeem_login_code(self._code_manager, user_id, code)
        except UnauthorizedError:
            self._security_logger.log(SecurityEvent.LOGIN_CODE_REJECTED, user_id=user_id)
            raise

        tokens = issue_tokens(self._token_client, user_id)
        self._security_logger.log(
            SecurityEvent.LOGIN_SUCCEEDED,
            user_id=user_id,
            details={"method": "oauth_code"},
        )
        return tokens

    def login(
        self,
        provider: Provider | str,
        access_token: str | None = None,
        code: str | None = None,
    ) -> TokenPair:
        user_id = self.get_or_create_verified_user(provider, access_token, code)
        tokens = issue_tokens(self._token_client, user_id)

        self._security_logger.log(
            SecurityEvent.LOGIN_SUCCEEDED,
            user_id=user_id,
            details={"method": "oauth", "provider": ProviderRegistry.resolve(provider).value},
        )
        return tokens
