"""
Publishes domain events to Valkey streams.

Lifecycle events go to the user-event stream, mail requests to the
mail-event stream. Publishing is synchronous: a failed XADD raises instead
of being dropped, so callers always know whether the event left.
"""

import logging
from datetime import datetime
from uuid import UUID

import redis

from auth.config import AuthConfig
from auth.exceptions import InternalFailureError
from clients.valkey_client import ValkeyClient
from core.events import (
    AccountsEvent,
    EmailVerificationRequested,
    UserArchived,
    UserBlocked,
    UserDeleted,
    UserRestored,
    UserUnblocked,
)

logger = logging.getLogger(__name__)


class EventEmitter:
    """Stream publisher for user lifecycle and mail events."""

    def __init__(self, valkey: ValkeyClient, config: AuthConfig):
        self._valkey = valkey
        self._user_stream = config.user_event_stream
        self._mail_stream = config.mail_event_stream
        self._maxlen = config.event_stream_maxlen

    def publish(self, event: AccountsEvent, stream: str) -> str:
        """
        Append an event to a stream.

        Returns:
            The stream entry id.

        Raises:
            InternalFailureError: If Valkey rejects or can't take the write.
        """
        try:
            entry_id = self._valkey.xadd(stream, event.to_fields(), maxlen=self._maxlen)
        except redis.RedisError as e:
            logger.error(f"Failed to publish {event.event_type} ({event.event_id}) to {stream}: {e}")
            raise InternalFailureError(f"Failed to publish {event.event_type}: {e}") from e

        logger.info(f"Published {event.event_type} ({event.event_id}) to {stream}")
        return entry_id

    def user_deleted(self, user_id: UUID) -> str:
        return self.publish(UserDeleted(user_id=user_id), self._user_stream)

    def user_archived(self, user_id: UUID, sync_code: str, delete_after: datetime | None = None) -> str:
        event = UserArchived(user_id=user_id, sync_code=sync_code, delete_after=delete_after)
        return self.publish(event, self._user_stream)

    def user_restored(self, user_id: UUID, sync_code: str) -> str:
        return self.publish(UserRestored(user_id=user_id, sync_code=sync_code), self._user_stream)

    def user_blocked(self, user_id: UUID, sync_code: str) -> str:
        return self.publish(UserBlocked(user_id=user_id, sync_code=sync_code), self._user_stream)

    def user_unblocked(self, user_id: UUID, sync_code: str) -> str:
        return self.publish(UserUnblocked(user_id=user_id, sync_code=sync_code), self._user_stream)

    def email_verification_requested(self, email: str, link: str) -> str:
        return self.publish(EmailVerificationRequested(email=email, link=link), self._mail_stream)
