"""Single-use, time-boxed codes bound to a user id.

Codes live in Valkey under ``prefix + code`` with the user id as value and
expire on their own. Redemption is one compare-and-delete script, so a code
resolves for at most one caller no matter how many race for it.

Unknown and expired codes look the same to callers on purpose: validation
just returns False, which gives nobody an oracle for guessing codes.
"""

import logging
import secrets
from uuid import UUID

import redis

from auth.exceptions import InternalFailureError, UnauthorizedError
from clients.valkey_client import DELETED, MISMATCH, MISSING, ValkeyClient

logger = logging.getLogger(__name__)


class CodeManager:
    """Issue and redeem codes for one purpose (login or email verification)."""

    MAX_ISSUE_ATTEMPTS = 3

    def __init__(self, valkey: ValkeyClient, prefix: str, ttl_seconds: int, code_bytes: int = 32):
        self._valkey = valkey
        self._prefix = prefix
        self._ttl_seconds = ttl_seconds
        self._code_bytes = code_bytes

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    def _key(self, code: str) -> str:
        """Generate Valkey key for a code."""
        return f"{self._prefix}{code}"

    def issue_code(self, user_id: UUID) -> str:
        """
        Generate a random code bound to user_id and store it with the TTL.

        Never overwrites an existing code; a collision just draws again.

        Raises:
            InternalFailureError: If the store is unreachable.
        """
        try:
            for _ in range(self.MAX_ISSUE_ATTEMPTS):
                code = secrets.token_urlsafe(self._code_bytes)
                if self._valkey.set_if_absent(self._key(code), str(user_id), self._ttl_seconds):
                    return code
        except redis.RedisError as e:
            logger.error(f"Code store unavailable while issuing code: {e}")
            raise InternalFailureError(f"Failed to store code: {e}") from e

        raise InternalFailureError("Could not allocate a unique code")

    def validate_code(self, user_id: UUID, code: str) -> bool:
        """
        Redeem a code for user_id.

        Returns:
            True if the code was live and bound to user_id (it is now
            consumed). False if it is unknown, expired or already used.

        Raises:
            UnauthorizedError: If the code is live but bound to another
                user. The code stays redeemable for its owner.
            InternalFailureError: If the store is unreachable.
        """
        if not code:
            return False

        try:
            outcome = self._valkey.delete_if_equals(self._key(code), str(user_id))
        except redis.RedisError as e:
            logger.error(f"Code store unavailable while validating code: {e}")
            raise InternalFailureError(f"Failed to validate code: {e}") from e

        if outcome == DELETED:
            return True
        if outcome == MISSING:
            return False
        if outcome == MISMATCH:
            logger.warning(f"Code presented for user {user_id} belongs to another user")
            raise UnauthorizedError("Code does not belong to this user")

        raise InternalFailureError(f"Unexpected compare-and-delete result: {outcome}")
