"""
Valkey (Redis-compatible) client for the code store and event streams.

Simple wrapper around redis-py. Connection URL from Vault.
Fail-fast: raises on connection failure, never returns fallback values.
"""

import logging

import redis

logger = logging.getLogger(__name__)

# Returns 1 when the key held the expected value and was deleted,
# 0 when the key is missing, -1 when it holds a different value.
_COMPARE_AND_DELETE_SCRIPT = """
local current = redis.call('GET', KEYS[1])
if not current then
    return 0
end
if current ~= ARGV[1] then
    return -1
end
redis.call('DEL', KEYS[1])
return 1
"""

DELETED = 1
MISSING = 0
MISMATCH = -1


class ValkeyClient:
    """
    Redis-compatible client for Valkey.

    Usage:
        client = ValkeyClient("redis://localhost:6379/0")
        client.set_if_absent("login_code:abc", "user-id", expire_seconds=300)
        client.delete_if_equals("login_code:abc", "user-id")  # 1 / 0 / -1
    """

    def __init__(self, url: str):
        """
        Initialize Valkey connection.

        Args:
            url: Redis-compatible connection URL (e.g., redis://localhost:6379/0)

        Raises:
            redis.ConnectionError: If connection fails
        """
        self._client = redis.from_url(url, decode_responses=True)
        # Verify connectivity immediately (fail-fast)
        self._client.ping()
        self._compare_and_delete = self._client.register_script(_COMPARE_AND_DELETE_SCRIPT)
        logger.info("ValkeyClient connected")

    def ping(self) -> bool:
        """
        Health check.

        Returns True if Valkey responds.
        Raises redis.ConnectionError if unreachable.
        """
        self._client.ping()
        return True

    def set_if_absent(self, key: str, value: str, expire_seconds: int) -> bool:
        """
        Set key only if it doesn't exist yet (SET NX EX).

        Returns True if the key was written, False if it already existed.
        """
        return bool(self._client.set(key, value, ex=expire_seconds, nx=True))

    def delete_if_equals(self, key: str, expected: str) -> int:
        """
        Atomically delete key if it currently holds ``expected``.

        Runs as a single server-side script, so two callers racing on the
        same key can't both observe the value and both delete it.

        Returns:
            DELETED (1), MISSING (0) or MISMATCH (-1). On MISMATCH the key
            is left untouched.
        """
        return int(self._compare_and_delete(keys=[key], args=[expected]))

    def xadd(self, stream: str, fields: dict[str, str], maxlen: int | None = None) -> str:
        """
        Append an entry to a stream.

        Args:
            stream: Stream key
            fields: Flat string-to-string mapping
            maxlen: Approximate cap on stream length (None for unbounded)

        Returns:
            The entry ID assigned by the server.
        """
        return self._client.xadd(stream, fields, maxlen=maxlen, approximate=True)

    def close(self) -> None:
        """Close the connection."""
        self._client.close()
        logger.info("ValkeyClient closed")
