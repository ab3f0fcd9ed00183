"""Append-only audit of dispatched verification emails.

Rows are only ever inserted; the rate limiter counts them over a trailing
window.
"""

import logging
from datetime import datetime
from uuid import UUID, uuid4

import psycopg2

from auth.exceptions import InternalFailureError
from auth.types import SentEmailRecord
from clients.postgres_client import PostgresClient
from utils.timezone import now_utc

logger = logging.getLogger(__name__)


class SentEmailRepository:
    """Insert and count sent_emails rows."""

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def create(self, user_id: UUID, email: str) -> SentEmailRecord:
        try:
            row = self.postgres.execute_single(
                """
                INSERT INTO sent_emails (id, user_id, email, sent_at)
                VALUES (%s, %s, %s, %s)
                RETURNING *
                """,
                (uuid4(), user_id, email, now_utc()),
            )
        except psycopg2.Error as e:
            raise InternalFailureError(f"Failed to record sent email: {e}") from e

        if row is None:
            raise InternalFailureError("Insert into sent_emails returned no row")
        return SentEmailRecord.model_validate(row)

    def count_since(self, user_id: UUID, since: datetime) -> int:
        """Number of emails sent to user_id at or after ``since``."""
        try:
            count = self.postgres.execute_scalar(
                "SELECT COUNT(*) FROM sent_emails WHERE user_id = %s AND sent_at >= %s",
                (user_id, since),
            )
        except psycopg2.Error as e:
            logger.error(f"Failed to count sent emails for user {user_id}: {e}")
            raise InternalFailureError(f"Failed to count sent emails: {e}") from e
        return int(count or 0)
