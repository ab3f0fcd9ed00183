"""
Signup saga: directory user -> identity account -> profile.

Steps run strictly in order because each feeds the next (the directory sync
code goes to the profile service). A failure after the directory user
exists is compensated backwards: the identity account (if created) is
deleted, then the directory user, then one UserDeleted event goes out. The
caller gets the original error back. If a compensating action fails too,
the caller gets a CompensationError carrying the original failure and every
compensation failure.

Only Exception triggers compensation. KeyboardInterrupt, SystemExit and
other BaseExceptions propagate untouched.
"""

import logging
from typing import Callable
from uuid import UUID, uuid4

from auth.exceptions import (
    AccountsError,
    CompensationError,
    InternalFailureError,
    InvalidInputError,
    NotFoundError,
)
from auth.security_logger import SecurityEvent, SecurityLogger
from auth.types import CreatedAccount, Provider, SignupResult
from clients.identity_client import IdentityClient
from clients.profile_client import ProfileClient
from core.directory import DirectoryRepository
from core.event_emitter import EventEmitter
from core.services.verification_service import VerificationService
from oauth.registry import ProviderRegistry

logger = logging.getLogger(__name__)


class SignupService:
    """Multi-store account provisioning with full backward compensation."""

    def __init__(
        self,
        directory: DirectoryRepository,
        identity: IdentityClient,
        profile: ProfileClient,
        emitter: EventEmitter,
        security_logger: SecurityLogger,
        verification: VerificationService | None = None,
    ):
        self.directory = directory
        self.identity = identity
        self.profile = profile
        self.emitter = emitter
        self.security_logger = security_logger
        self.verification = verification

    def local_signup(self, email: str, password: str) -> SignupResult:
        """
        Provision a local (email + password) user. The account starts unverified.

        Raises:
            InvalidInputError: If email or password is empty.
            AccountsError: The failing step's error, after compensation.
            CompensationError: If compensation itself failed.
        """
        if not email or not password:
            raise InvalidInputError("Email and password are required")

        return self._run(
            lambda user_id: self.identity.create_local(user_id, email, password),
            provider=Provider.LOCAL,
            email=email,
        )

    def oauth_signup(
        self,
        provider: Provider | str,
        access_token: str | None = None,
        code: str | None = None,
    ) -> SignupResult:
        """
        Provision a user from an OAuth access token or authorization code.

        Raises:
            InvalidInputError: Unsupported provider, or neither token nor code.
        """
        resolved = ProviderRegistry.resolve(provider)
        if not access_token and not code:
            raise InvalidInputError("Either access token or authorization code must be provided")

        return self._run(
            lambda user_id: self.identity.create_oauth(user_id, resolved, access_token=access_token, code=code),
            provider=resolved,
        )

    def signup_and_send_verification(self, email: str, password: str) -> tuple[SignupResult, bool]:
        """
        Local signup followed by the first verification email.

        The signup stands even if the email can't go out (rate limit, mail
        stream down); the user can ask for a resend.

        Returns:
            (signup result, whether the verification email was dispatched)
        """
        if self.verification is None:
            raise InternalFailureError("Verification workflow not configured")

        result = self.local_signup(email, password)
        try:
            self.verification.send_verification_email(result.user_id, email)
        except AccountsError as e:
            logger.error(f"Signup of {result.user_id} succeeded but verification email failed: {e}")
            return result, False
        return result, True

    def _run(
        self,
        create_account: Callable[[UUID], CreatedAccount],
        provider: Provider,
        email: str | None = None,
    ) -> SignupResult:
        """
        Run the saga. `email` is the caller-supplied address for local signup;
        OAuth signups take the address the identity service got from the provider.
        """
        user_id = uuid4()

        # Step 1: nothing to undo if this fails
        directory_user = self.directory.create_user(user_id)

        identity_created = False
        try:
            account = create_account(user_id)
            identity_created = True
            if email is None:
                email = account.email
            self.profile.create_profile(user_id, email, directory_user.sync_code)
        except Exception as e:
            logger.error(f"Signup of {user_id} failed ({type(e).__name__}: {e}), compensating")
            failures = self._compensate(user_id, identity_created)
            self._audit(
                SecurityEvent.SIGNUP_COMPENSATED,
                user_id=user_id,
                details={
                    "provider": provider.value,
                    "error": type(e).__name__,
                    "compensation_failures": len(failures),
                },
            )
            if failures:
                raise CompensationError(e, failures) from e
            raise

        logger.info(f"Signup completed for user {user_id} ({provider.value})")
        self._audit(
            SecurityEvent.SIGNUP_COMPLETED,
            email=email,
            user_id=user_id,
            details={"provider": provider.value},
        )
        return SignupResult(
            user_id=user_id,
            email=email,
            provider=provider,
            created_at=directory_user.created_at,
        )

    def _compensate(self, user_id: UUID, identity_created: bool) -> list[Exception]:
        """
        Undo completed steps in reverse order. Every action is attempted.

        Records already gone count as undone.

        Returns:
            Exceptions raised by compensating actions, empty if all succeeded.
        """
        failures: list[Exception] = []

        if identity_created:
            try:
                self.identity.delete_account(user_id)
            except NotFoundError:
                pass
            except Exception as e:
                logger.error(f"Compensation: failed to delete identity account of {user_id}: {e}")
                failures.append(e)

        directory_deleted = False
        try:
            self.directory.delete_user(user_id)
            directory_deleted = True
        except NotFoundError:
            directory_deleted = True
        except Exception as e:
            logger.error(f"Compensation: failed to delete directory user {user_id}: {e}")
            failures.append(e)

        # Only announce the deletion once the directory record is really gone
        if directory_deleted:
            try:
                self.emitter.user_deleted(user_id)
            except Exception as e:
                logger.error(f"Compensation: failed to emit UserDeleted for {user_id}: {e}")
                failures.append(e)

        return failures

    def _audit(self, event: SecurityEvent, **kwargs) -> None:
        """Audit trail write that never changes the saga's outcome."""
        try:
            self.security_logger.log(event, **kwargs)
        except InternalFailureError as e:
            logger.error(f"Could not record {event.value}: {e}")
