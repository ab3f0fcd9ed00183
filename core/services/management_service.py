"""User management: archive, restore, block, unblock, delete.

Each mutation updates the directory first, then publishes the matching
event with the user's sync code so dependent services can follow.
"""

import logging
from datetime import timedelta
from uuid import UUID

from auth.config import AuthConfig
from auth.types import DirectoryUser
from core.directory import DirectoryRepository
from core.event_emitter import EventEmitter

logger = logging.getLogger(__name__)


class ManagementService:
    """Directory user lifecycle operations."""

    def __init__(self, directory: DirectoryRepository, emitter: EventEmitter, config: AuthConfig):
        self.directory = directory
        self.emitter = emitter
        self.config = config

    def get_user(self, user_id: UUID) -> DirectoryUser:
        return self.directory.get_user(user_id)

    def archive_user(self, user_id: UUID) -> DirectoryUser:
        """Archive now, hard delete after the configured grace period."""
        delay = timedelta(hours=self.config.archive_delete_delay_hours)
        user = self.directory.archive_user(user_id, delay)
        self.emitter.user_archived(user.id, user.sync_code, user.delete_after)
        logger.info(f"Archived user {user_id}, delete after {user.delete_after}")
        return user

    def restore_user(self, user_id: UUID) -> DirectoryUser:
        user = self.directory.restore_user(user_id)
        self.emitter.user_restored(user.id, user.sync_code)
        logger.info(f"Restored user {user_id}")
        return user

    def block_user(self, user_id: UUID) -> DirectoryUser:
        user = self.directory.block_user(user_id, True)
        self.emitter.user_blocked(user.id, user.sync_code)
        logger.info(f"Blocked user {user_id}")
        return user

    def unblock_user(self, user_id: UUID) -> DirectoryUser:
        user = self.directory.block_user(user_id, False)
        self.emitter.user_unblocked(user.id, user.sync_code)
        logger.info(f"Unblocked user {user_id}")
        return user

    def delete_user(self, user_id: UUID) -> None:
        """
        Hard delete the directory record and announce it.

        Raises:
            NotFoundError: If the user doesn't exist.
        """
        self.directory.delete_user(user_id)
        self.emitter.user_deleted(user_id)
