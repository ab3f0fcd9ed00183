"""
Email verification workflow.

Sending:
1. Rate limit: at most ``max_sent_emails`` per user in a trailing window.
2. Issue an email code (single-use, long TTL) bound to the user.
3. Mint a signed token carrying (user_id, email, code).
4. Publish a mail event with the verification link.
5. Record the send.

Nothing is rolled back once the mail event is out. If the record can't be
written the mail has still gone, so the failure is logged and the send
reported as successful.

Verifying needs both halves: the token proves the link was received, the
code makes the link single-use even if the token is replayed before it
expires.
"""

import logging
from datetime import timedelta
from urllib.parse import quote
from uuid import UUID

from auth.code_manager import CodeManager
from auth.config import AuthConfig
from auth.exceptions import (
    AccountsError,
    InternalFailureError,
    InvalidInputError,
    InvalidTokenError,
    RateLimitedError,
    UnauthorizedError,
)
from auth.security_logger import SecurityEvent, SecurityLogger
from clients.identity_client import IdentityClient
from clients.token_client import TokenClient
from core.event_emitter import EventEmitter
from core.sent_emails import SentEmailRepository
from utils.timezone import now_utc

logger = logging.getLogger(__name__)


class VerificationService:
    """Rate-limited verification mail and token redemption."""

    def __init__(
        self,
        config: AuthConfig,
        code_manager: CodeManager,
        token_client: TokenClient,
        identity: IdentityClient,
        sent_emails: SentEmailRepository,
        emitter: EventEmitter,
        security_logger: SecurityLogger,
    ):
        self.config = config
        self.code_manager = code_manager
        self.token_client = token_client
        self.identity = identity
        self.sent_emails = sent_emails
        self.emitter = emitter
        self.security_logger = security_logger

    @property
    def window(self) -> timedelta:
        return timedelta(hours=self.config.sent_email_window_hours)

    def _sent_in_window(self, user_id: UUID) -> int:
        return self.sent_emails.count_since(user_id, now_utc() - self.window)

    def can_send(self, user_id: UUID) -> bool:
        return self._sent_in_window(user_id) < self.config.max_sent_emails

    def remaining_sends(self, user_id: UUID) -> int:
        """How many more verification emails the user may get in the current window."""
        return max(0, self.config.max_sent_emails - self._sent_in_window(user_id))

    def build_link(self, token: str) -> str:
        return f"{self.config.email_verification_link}?token={quote(token, safe='')}"

    def send_verification_email(self, user_id: UUID, email: str) -> None:
        """
        Send a verification link to email.

        Raises:
            InvalidInputError: If email is empty.
            RateLimitedError: If the user hit the limit for this window.
            InternalFailureError: If the code, token or mail event fails.
        """
        if not email:
            raise InvalidInputError("Email is required")

        if not self.can_send(user_id):
            logger.warning(f"Verification email rate limit hit for user {user_id}")
            try:
                self.security_logger.log(
                    SecurityEvent.VERIFICATION_EMAIL_RATE_LIMITED,
                    email=email,
                    user_id=user_id,
                )
            except InternalFailureError as e:
                logger.error(f"Could not record rate limit hit for user {user_id}: {e}")
            raise RateLimitedError(
                f"Verification email limit reached for user {user_id}",
                retry_after_seconds=int(self.window.total_seconds()),
            )

        code = self.code_manager.issue_code(user_id)
        token = self.token_client.generate_email_verification_token(user_id, email, code)
        self.emitter.email_verification_requested(email, self.build_link(token))

        # Mail is out; from here on failures are logged, not raised
        try:
            self.sent_emails.create(user_id, email)
            self.security_logger.log(SecurityEvent.VERIFICATION_EMAIL_SENT, email=email, user_id=user_id)
        except AccountsError:
            logger.exception(f"Verification email dispatched for user {user_id} but not recorded")

        logger.info(f"Verification email dispatched for user {user_id}")

    def resend_verification_email(self, user_id: UUID, email: str) -> None:
        """Same as send_verification_email, same limit."""
        self.send_verification_email(user_id, email)

    def verify_email_token(self, token: str) -> UUID:
        """
        Redeem a verification token and mark the user's email verified.

        Returns:
            The verified user's id.

        Raises:
            InvalidTokenError: Token invalid or expired, or its code is
                unknown, expired, used, or bound to another user.
        """
        if not token:
            raise InvalidTokenError("Empty verification token")

        claims = self.token_client.verify_email_verification_token(token)
        if not claims.valid or claims.user_id is None or not claims.code:
            self.security_logger.log(
                SecurityEvent.EMAIL_VERIFICATION_FAILED,
                details={"reason": "invalid_token"},
            )
            raise InvalidTokenError("Verification token is invalid or expired")

        try:
            redeemed = self.code_manager.validate_code(claims.user_id, claims.code)
        except UnauthorizedError as e:
            redeemed = False
            logger.warning(f"Verification code mismatch for user {claims.user_id}: {e}")

        if not redeemed:
            self.security_logger.log(
                SecurityEvent.EMAIL_VERIFICATION_FAILED,
                email=claims.email,
                user_id=claims.user_id,
                details={"reason": "invalid_code"},
            )
            raise InvalidTokenError("Verification code is invalid or expired")

        self.identity.update_email_verification(claims.user_id, True)
        self.security_logger.log(SecurityEvent.EMAIL_VERIFIED, email=claims.email, user_id=claims.user_id)
        return claims.user_id
