"""Local (email + password) login.

Two paths share one gate (password matches AND account is verified):
- two-step: issue_login_code() then verify_login_code() -> tokens
- single-step: login() -> tokens

Every rejection is the same UnauthorizedError to the caller; only the log
and audit trail say whether the password was wrong or the email unverified.
"""

import logging
from uuid import UUID

from auth.code_manager import CodeManager
from auth.exceptions import NotFoundError, UnauthorizedError
from auth.security_logger import SecurityEvent, SecurityLogger
from auth.types import LoginCodeResult, TokenPair
from clients.identity_client import IdentityClient
from clients.token_client import TokenClient

logger = logging.getLogger(__name__)


def issue_tokens(token_client: TokenClient, user_id: UUID) -> TokenPair:
    """Mint an access/refresh pair for an authenticated user."""
    return TokenPair(
        access_token=token_client.generate_access_token(user_id),
        refresh_token=token_client.generate_refresh_token(user_id),
    )


def redeem_login_code(code_manager: CodeManager, user_id: UUID, code: str) -> None:
    """
    Consume a login code or fail.

    Raises:
        UnauthorizedError: If the code is unknown, expired, used, or bound
            to someone else.
    """
    if not code_manager.validate_code(user_id, code):
        raise UnauthorizedError("Login code is invalid or expired")


class LocalLoginFlow:
    """Password login with verified-email gate and optional login code step."""

    def __init__(
        self,
        identity: IdentityClient,
        token_client: TokenClient,
        code_manager: CodeManager,
        security_logger: SecurityLogger,
    ):
        self._identity = identity
        self._token_client = token_client
        self._code_manager = code_manager
        self._security_logger = security_logger

    def _check_user_verified(self, email: str, password: str) -> UUID:
        """
        Resolve the user behind email/password and require a verified email.

        Raises:
            UnauthorizedError: Unknown email, wrong password, or unverified.
        """
        try:
            check = self._identity.compare_password(email, password)
        except NotFoundError:
            check = None

        if check is None or not check.verified or check.user_id is None:
            self._security_logger.log(
                SecurityEvent.LOGIN_FAILED,
                email=email,
                details={"reason": "invalid_credentials"},
            )
            raise UnauthorizedError("Invalid email or password")

        account = self._identity.get_local_account(check.user_id)
        if not account.is_verified:
            self._security_logger.log(
                SecurityEvent.LOGIN_FAILED,
                email=email,
                user_id=check.user_id,
                details={"reason": "not_verified"},
            )
            raise UnauthorizedError("User is not verified")

        return check.user_id

    def issue_login_code(self, email: str, password: str) -> LoginCodeResult:
        """Check credentials and hand out a single-use login code."""
        user_id = self._check_user_verified(email, password)
        code = self._code_manager.issue_code(user_id)

        self._security_logger.log(SecurityEvent.LOGIN_CODE_ISSUED, email=email, user_id=user_id)
        return LoginCodeResult(code=code, user_id=user_id)

    def verify_login_code(self, user_id: UUID, code: str) -> TokenPair:
        """Redeem a login code and mint tokens."""
        try:
            redeem_login_code(self._code_manager, user_id, code)
        except UnauthorizedError:
            self._security_logger.log(SecurityEvent.LOGIN_CODE_REJECTED, user_id=user_id)
            raise

        tokens = issue_tokens(self._token_client, user_id)
        self._security_logger.log(
            SecurityEvent.LOGIN_SUCCEEDED,
            user_id=user_id,
            details={"method": "local_code"},
        )
        return tokens

    def login(self, email: str, password: str) -> TokenPair:
        """Single-step login: same gate, tokens straight away."""
        user_id = self._check_user_verified(email, password)
        tokens = issue_tokens(self._token_client, user_id)

        self._security_logger.log(
            SecurityEvent.LOGIN_SUCCEEDED,
            email=email,
            user_id=user_id,
            details={"method": "local"},
        )
        return tokens
