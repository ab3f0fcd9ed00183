"""Authentication: error taxonomy, domain types and configuration."""

from auth.exceptions import (
    AccountsError,
    InvalidInputError,
    UnauthorizedError,
    NotFoundError,
    ConflictError,
    InvalidTokenError,
    RateLimitedError,
    InternalFailureError,
    CompensationError,
)
from auth.types import (
    Provider,
    UserStatus,
    DirectoryUser,
    AuthAccount,
    SignupResult,
    TokenPair,
    LoginCodeResult,
)
from auth.config import AuthConfig
