"""
Common shape of a per-provider OAuth adapter.

Each adapter knows three things about its provider: where to send the user
to log in, how to trade an authorization code for an access token, and how
to read the user's id and email with that token.
"""

import logging
from abc import ABC, abstractmethod
from urllib.parse import urlencode

import requests

from auth.types import OAuthUserInfo, Provider

logger = logging.getLogger(__name__)


class OAuthProviderError(Exception):
    """Provider rejected the request or answered with something unusable."""


class OAuthProvider(ABC):
    """Synchronous OAuth 2.0 authorization-code adapter."""

    provider: Provider
    authorize_url: str
    token_url: str
    scopes: tuple[str, ...] = ()

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        timeout: int = 10,
        session: requests.Session | None = None,
    ):
        if not client_id:
            raise ValueError("client_id is required")
        if not client_secret:
            raise ValueError("client_secret is required")
        if not redirect_uri:
            raise ValueError("redirect_uri is required")

        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.timeout = timeout
        self._session = session or requests.Session()

    def get_login_url(self, state: str | None = None) -> str:
        """Build the provider's authorization URL."""
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
        }
        if self.scopes:
            params["scope"] = " ".join(self.scopes)
        if state:
            params["state"] = state
        return f"{self.authorize_url}?{urlencode(params)}"

    def exchange_code_for_token(self, code: str) -> str:
        """
        Trade an authorization code for an access token.

        Raises:
            OAuthProviderError: On transport failure, non-2xx status, or a
                response without an access token.
        """
        data = {
            "grant_type": "authorization_code",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.redirect_uri,
            "code": code,
        }
        payload = self._call("POST", self.token_url, data=data)
        access_token = payload.get("access_token")
        if not access_token:
            raise OAuthProviderError(f"Missing {self.provider.value} access token")
        return access_token

    def get_user_info(self, access_token: str) -> OAuthUserInfo:
        """Fetch the user's provider id and email with an access token."""
        payload = self._call(
            "GET",
            self.user_info_url,
            headers={"Authorization": f"Bearer {access_token}"},
        )
        return self._parse_user_info(payload)

    @property
    @abstractmethod
    def user_info_url(self) -> str:
        ...

    @abstractmethod
    def _parse_user_info(self, payload: dict) -> OAuthUserInfo:
        ...

    def _call(self, method: str, url: str, **kwargs) -> dict:
        try:
            response = self._session.request(method, url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
            payload = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error(f"{self.provider.value} OAuth call failed: {method} {url}: {e}")
            raise OAuthProviderError(f"{self.provider.value} request failed: {e}") from e

        if not isinstance(payload, dict):
            raise OAuthProviderError(f"Unexpected {self.provider.value} response")
        return payload
