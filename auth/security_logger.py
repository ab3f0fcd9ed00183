"""Security event logging for the auth audit trail.

Append-only log to the security_events table. Never record passwords,
codes or tokens here, only who, what and why.
"""

import logging
from enum import Enum
from typing import Any
from uuid import UUID

import psycopg2
from psycopg2.extras import Json

from auth.exceptions import InternalFailureError
from clients.postgres_client import PostgresClient
from utils.timezone import now_utc

logger = logging.getLogger(__name__)


class SecurityEvent(Enum):
    """Auth security event types."""

    LOGIN_CODE_ISSUED = "login_code_issued"
    LOGIN_CODE_REJECTED = "login_code_rejected"
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    OAUTH_ACCOUNT_PROVISIONED = "oauth_account_provisioned"
    VERIFICATION_EMAIL_SENT = "verification_email_sent"
    VERIFICATION_EMAIL_RATE_LIMITED = "verification_email_rate_limited"
    EMAIL_VERIFIED = "email_verified"
    EMAIL_VERIFICATION_FAILED = "email_verification_failed"
    SIGNUP_COMPLETED = "signup_completed"
    SIGNUP_COMPENSATED = "signup_compensated"


class SecurityLogger:
    """Append-only security event logger."""

    def __init__(self, postgres: PostgresClient):
        self._db = postgres

    def log(
        self,
        event: SecurityEvent,
        email: str | None = None,
        user_id: UUID | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Log security event to database.

        Raises:
            InternalFailureError: If the audit table can't be written.
        """
        try:
            self._write(event, email, user_id, details)
        except psycopg2.Error as e:
            logger.error(f"Failed to record security event {event.value}: {e}")
            raise InternalFailureError(f"Failed to record security event: {e}") from e

    def _write(self, event, email, user_id, details) -> None:
        self._db.execute(
            """INSERT INTO security_events
               (event_type, email, user_id, details, created_at)
               VALUES (%s, %s, %s, %s, %s)
               RETURNING id""",
            (
                event.value,
                email,
                str(user_id) if user_id else None,
                Json(details) if details else None,
                now_utc(),
            ),
        )
