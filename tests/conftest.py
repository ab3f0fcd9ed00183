"""Shared test fixtures for the accounts core test suite.

Valkey is replaced by an in-memory double, everything else by Mock(spec=...)
or the responses library. The only live dependency is the compare-and-delete
script check in tests/clients/test_valkey_client.py, which runs when
VALKEY_URL is set and is skipped otherwise.
"""

import threading
from uuid import UUID

import pytest

from auth.config import AuthConfig
from clients.valkey_client import DELETED, MISMATCH, MISSING


# =============================================================================
# TEST USER CONSTANTS
# =============================================================================

# Primary test user - use for single-user tests
TEST_USER_ID = UUID("00000000-0000-0000-0000-000000000001")
TEST_USER_EMAIL = "testuser@test.local"

# Secondary test user - use for ownership tests
TEST_USER_B_ID = UUID("00000000-0000-0000-0000-000000000002")
TEST_USER_B_EMAIL = "testuser-b@test.local"


# =============================================================================
# IN-MEMORY VALKEY
# =============================================================================


class FakeValkey:
    """
    Thread-safe stand-in for ValkeyClient.

    Time is a plain counter moved by advance(), so TTL tests don't sleep.
    Every operation holds one lock, which gives delete_if_equals the same
    atomicity the server-side script has.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._data: dict[str, tuple[str, float | None]] = {}
        self.streams: dict[str, list[tuple[str, dict[str, str]]]] = {}
        self.now = 0.0

    def advance(self, seconds: float) -> None:
        with self._lock:
            self.now += seconds

    def _live(self, key: str) -> str | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and expires_at <= self.now:
            del self._data[key]
            return None
        return value

    def ping(self) -> bool:
        return True

    # get/ttl are inspection helpers; the real client does not expose them
    def get(self, key: str) -> str | None:
        with self._lock:
            return self._live(key)

    def set_if_absent(self, key: str, value: str, expire_seconds: int) -> bool:
        with self._lock:
            if self._live(key) is not None:
                return False
            self._data[key] = (value, self.now + expire_seconds)
            return True

    def delete_if_equals(self, key: str, expected: str) -> int:
        with self._lock:
            current = self._live(key)
            if current is None:
                return MISSING
            if current != expected:
                return MISMATCH
            del self._data[key]
            return DELETED

    def ttl(self, key: str) -> int:
        with self._lock:
            if self._live(key) is None:
                return -2
            expires_at = self._data[key][1]
            if expires_at is None:
                return -1
            return int(expires_at - self.now)

    def xadd(self, stream: str, fields: dict[str, str], maxlen: int | None = None) -> str:
        with self._lock:
            entries = self.streams.setdefault(stream, [])
            entry_id = f"{int(self.now * 1000)}-{len(entries)}"
            entries.append((entry_id, dict(fields)))
            if maxlen is not None and len(entries) > maxlen:
                del entries[: len(entries) - maxlen]
            return entry_id

    def keys(self) -> list[str]:
        with self._lock:
            return [key for key in list(self._data) if self._live(key) is not None]

    def close(self) -> None:
        pass


@pytest.fixture
def valkey() -> FakeValkey:
    """Fresh in-memory Valkey per test."""
    return FakeValkey()


@pytest.fixture
def config() -> AuthConfig:
    """Default config with a small email limit for faster tests."""
    return AuthConfig(max_sent_emails=3, sent_email_window_hours=24)


@pytest.fixture
def test_user_id() -> UUID:
    """The primary test user's ID."""
    return TEST_USER_ID


@pytest.fixture
def test_user_b_id() -> UUID:
    """The secondary test user's ID."""
    return TEST_USER_B_ID
