"""
Directory repository: the canonical user record.

The directory owns user status, the sync code handed to dependent services,
and the soft-delete schedule. Hard deletes after ``delete_after`` are done by
an external sweeper; this repository only records the schedule.
"""

import logging
import secrets
from datetime import timedelta
from uuid import UUID

import psycopg2
import psycopg2.errors

from auth.exceptions import ConflictError, InternalFailureError, NotFoundError
from auth.types import DirectoryUser, UserStatus
from clients.postgres_client import PostgresClient
from utils.timezone import now_utc

logger = logging.getLogger(__name__)

SYNC_CODE_BYTES = 24


class DirectoryRepository:
    """CRUD over the directory_users table."""

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def _execute_single(self, query: str, params: tuple) -> dict | None:
        """Run a statement, translating driver errors into AccountsError."""
        try:
            return self.postgres.execute_single(query, params)
        except psycopg2.errors.UniqueViolation as e:
            raise ConflictError(f"Directory user already exists: {e}") from e
        except psycopg2.Error as e:
            logger.error(f"Directory query failed: {e}")
            raise InternalFailureError(f"Directory storage failure: {e}") from e

    def _require(self, row: dict | None, user_id: UUID) -> DirectoryUser:
        if row is None:
            raise NotFoundError(f"Directory user {user_id} not found")
        return DirectoryUser.model_validate(row)

    def create_user(self, user_id: UUID) -> DirectoryUser:
        """
        Create an active directory user with a fresh sync code.

        Raises:
            ConflictError: If the id is already taken.
        """
        row = self._execute_single(
            """
            INSERT INTO directory_users (id, sync_code, status, created_at)
            VALUES (%s, %s, %s, %s)
            RETURNING *
            """,
            (user_id, secrets.token_urlsafe(SYNC_CODE_BYTES), UserStatus.ACTIVE.value, now_utc()),
        )
        user = self._require(row, user_id)
        logger.info(f"Created directory user {user_id}")
        return user

    def get_user(self, user_id: UUID) -> DirectoryUser:
        row = self._execute_single("SELECT * FROM directory_users WHERE id = %s", (user_id,))
        return self._require(row, user_id)

    def archive_user(self, user_id: UUID, delay: timedelta) -> DirectoryUser:
        """Mark archived now and schedule the hard delete ``delay`` from now."""
        now = now_utc()
        row = self._execute_single(
            """
            UPDATE directory_users
            SET status = %s, archived_at = %s, delete_after = %s
            WHERE id = %s
            RETURNING *
            """,
            (UserStatus.ARCHIVED.value, now, now + delay, user_id),
        )
        return self._require(row, user_id)

    def restore_user(self, user_id: UUID) -> DirectoryUser:
        """Back to active; clears the deletion schedule."""
        row = self._execute_single(
            """
            UPDATE directory_users
            SET status = %s, archived_at = NULL, delete_after = NULL
            WHERE id = %s
            RETURNING *
            """,
            (UserStatus.ACTIVE.value, user_id),
        )
        return self._require(row, user_id)

    def block_user(self, user_id: UUID, blocked: bool) -> DirectoryUser:
        status = UserStatus.BLOCKED if blocked else UserStatus.ACTIVE
        row = self._execute_single(
            "UPDATE directory_users SET status = %s WHERE id = %s RETURNING *",
            (status.value, user_id),
        )
        return self._require(row, user_id)

    def delete_user(self, user_id: UUID) -> None:
        """
        Hard delete.

        Raises:
            NotFoundError: If there was nothing to delete.
        """
        row = self._execute_single(
            "DELETE FROM directory_users WHERE id = %s RETURNING id",
            (user_id,),
        )
        if row is None:
            raise NotFoundError(f"Directory user {user_id} not found")
        logger.info(f"Deleted directory user {user_id}")
