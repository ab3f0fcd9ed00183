"""
Domain events for the accounts core.

Immutable event objects describing user lifecycle changes and mail dispatch
requests. They are published to Valkey streams by EventEmitter; consumers
(profile sync, mailer, sweepers) react without this service knowing who's
listening.

Event Categories:
- UserEvent: directory user lifecycle (deleted, archived, restored, blocked, unblocked)
- MailEvent: outbound mail requests (email verification)
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from uuid import UUID, uuid4

from utils.timezone import now_utc


@dataclass(frozen=True, kw_only=True)
class AccountsEvent:
    """Base class for all accounts domain events."""
    event_id: str = field(default_factory=lambda: str(uuid4()))
    occurred_at: datetime = field(default_factory=now_utc)

    event_type = "event"

    @property
    def stream_key(self) -> str:
        """Partition key carried with the stream entry."""
        raise NotImplementedError

    def to_fields(self) -> dict[str, str]:
        """Flatten to the string-to-string mapping XADD expects. None values are dropped."""
        fields = {"event_type": self.event_type, "key": self.stream_key}
        for name, value in asdict(self).items():
            if value is None:
                continue
            if isinstance(value, datetime):
                value = value.isoformat()
            fields[name] = str(value)
        return fields


# =============================================================================
# USER EVENTS
# =============================================================================


@dataclass(frozen=True, kw_only=True)
class UserEvent(AccountsEvent):
    """Events related to directory user lifecycle. Keyed by user id."""
    user_id: UUID

    @property
    def stream_key(self) -> str:
        return str(self.user_id)


@dataclass(frozen=True, kw_only=True)
class UserDeleted(UserEvent):
    """User was hard-deleted (management or saga compensation)."""
    event_type = "user_deleted"


@dataclass(frozen=True, kw_only=True)
class UserArchived(UserEvent):
    """User was archived and scheduled for deletion."""
    sync_code: str
    delete_after: datetime | None = None
    event_type = "user_archived"


@dataclass(frozen=True, kw_only=True)
class UserRestored(UserEvent):
    """Archived user was restored to active."""
    sync_code: str
    event_type = "user_restored"


@dataclass(frozen=True, kw_only=True)
class UserBlocked(UserEvent):
    sync_code: str
    event_type = "user_blocked"


@dataclass(frozen=True, kw_only=True)
class UserUnblocked(UserEvent):
    sync_code: str
    event_type = "user_unblocked"


# =============================================================================
# MAIL EVENTS
# =============================================================================


@dataclass(frozen=True, kw_only=True)
class EmailVerificationRequested(AccountsEvent):
    """A verification mail carrying ``link`` should go out to ``email``."""
    email: str
    link: str
    event_type = "email_verification_requested"

    @property
    def stream_key(self) -> str:
        return self.email
