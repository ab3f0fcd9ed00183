"""Typed exceptions for account and auth failures.

Every error carries a stable ``kind`` and a ``public_message`` that is safe
to hand back to callers. ``str(err)`` holds the internal detail for logs.
"""


class AccountsError(Exception):
    """Base class for account provisioning and authentication errors."""

    kind = "internal_failure"
    default_public_message = "An internal error occurred"

    def __init__(self, message: str | None = None, public_message: str | None = None):
        self.public_message = public_message or self.default_public_message
        super().__init__(message or self.public_message)


class InvalidInputError(AccountsError):
    """Malformed arguments or unsupported provider."""

    kind = "invalid_input"
    default_public_message = "Invalid request"


class UnauthorizedError(AccountsError):
    """
    Bad credentials, unverified account, or OAuth token failure.

    Note: The public message is the same for every cause so callers can't
    tell an unknown email from a wrong password or an unverified account.
    """

    kind = "unauthorized"
    default_public_message = "Invalid credentials"


class NotFoundError(AccountsError):
    """No such account or record."""

    kind = "not_found"
    default_public_message = "Not found"


class ConflictError(AccountsError):
    """Duplicate creation."""

    kind = "conflict"
    default_public_message = "Already exists"


class InvalidTokenError(AccountsError):
    """Code or token is malformed, expired, or already used."""

    kind = "invalid_token"
    default_public_message = "Invalid or expired token"


class RateLimitedError(AccountsError):
    """Too many requests. Client should wait before retrying."""

    kind = "too_many_requests"
    default_public_message = "Too many requests"

    def __init__(self, message: str | None = None, retry_after_seconds: int | None = None):
        self.retry_after_seconds = retry_after_seconds
        if message is None and retry_after_seconds is not None:
            message = f"Rate limited. Retry after {retry_after_seconds} seconds."
        super().__init__(message)


class InternalFailureError(AccountsError):
    """Adapter or infrastructure failure not otherwise classified."""


class CompensationError(InternalFailureError):
    """
    A saga step failed and undoing the earlier steps failed too.

    Carries both sides: ``original`` is the step failure that triggered
    compensation, ``compensation_failures`` lists every compensating action
    that raised. ``__cause__`` is set to the original failure.
    """

    def __init__(self, original: Exception, compensation_failures: list[Exception]):
        self.original = original
        self.compensation_failures = list(compensation_failures)
        failures = "; ".join(
            f"{type(e).__name__}: {e}" for e in self.compensation_failures
        )
        super().__init__(
            f"{type(original).__name__}: {original} "
            f"(compensation failed: {failures})"
        )
        self.__cause__ = original
