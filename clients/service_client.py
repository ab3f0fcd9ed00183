"""
Base client for the JSON-over-HTTP services this core coordinates.

Requests are signed with HMAC-SHA256 over the exact body bytes and carry an
API key. Responses use the shared envelope
``{"success": bool, "data": ..., "error": {"code", "message"}}``.
Every failure is translated to an AccountsError subclass with a public-safe
message; upstream detail only goes to the log and the internal message.
"""

import hashlib
import hmac
import json
import logging
from typing import Any

import requests

from auth.exceptions import (
    AccountsError,
    ConflictError,
    InternalFailureError,
    InvalidInputError,
    NotFoundError,
    RateLimitedError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)

_STATUS_ERRORS: dict[int, type[AccountsError]] = {
    400: InvalidInputError,
    401: UnauthorizedError,
    403: UnauthorizedError,
    404: NotFoundError,
    409: ConflictError,
    422: InvalidInputError,
    429: RateLimitedError,
}


class ServiceClient:
    """Signed JSON requests against one remote service."""

    service_name = "service"

    def __init__(self, base_url: str, api_key: str, hmac_secret: str, timeout: int = 10):
        """
        Initialize with service credentials.

        Raises:
            ValueError: If any credential is empty
        """
        if not base_url:
            raise ValueError("base_url is required")
        if not api_key:
            raise ValueError("api_key is required")
        if not hmac_secret:
            raise ValueError("hmac_secret is required")

        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.hmac_secret = hmac_secret
        self.timeout = timeout
        self._session = requests.Session()

    def _sign(self, body: bytes) -> str:
        return hmac.new(self.hmac_secret.encode("utf-8"), body, hashlib.sha256).hexdigest()

    def _request(
        self,
        method: str,
        path: str,
        payload: dict | None = None,
        params: dict | None = None,
        headers: dict | None = None,
    ) -> Any:
        """
        Send a signed request and unwrap the response envelope.

        Returns:
            The envelope's ``data`` field (may be None).

        Raises:
            AccountsError subclass matching the status code; connection
            failures and malformed responses raise InternalFailureError.
        """
        body = json.dumps(payload, separators=(",", ":")).encode("utf-8") if payload is not None else b""
        request_headers = {
            "Content-Type": "application/json",
            "X-API-Key": self.api_key,
            "X-Signature": self._sign(body),
        }
        if headers:
            request_headers.update(headers)

        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = self._session.request(
                method,
                url,
                data=body or None,
                params=params,
                headers=request_headers,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"{self.service_name} request failed: {method} {path}: {e}")
            raise InternalFailureError(f"{self.service_name} unreachable: {e}") from e

        try:
            envelope = response.json()
        except ValueError as e:
            logger.error(f"{self.service_name} returned invalid JSON (status {response.status_code})")
            raise InternalFailureError(f"Invalid response from {self.service_name}") from e

        if not isinstance(envelope, dict):
            raise InternalFailureError(f"Invalid response from {self.service_name}")

        if response.status_code >= 400 or not envelope.get("success", False):
            error = envelope.get("error") or {}
            message = error.get("message", "Unknown error")
            error_cls = _STATUS_ERRORS.get(response.status_code, InternalFailureError)
            logger.error(
                f"{self.service_name} error: {method} {path} -> "
                f"{response.status_code} {error.get('code', '')}: {message}"
            )
            raise error_cls(f"{self.service_name} {response.status_code}: {message}")

        return envelope.get("data")

    def close(self) -> None:
        self._session.close()
