"""
Client for the remote signup API.

Used only by OAuth login auto-provisioning: one call creates the directory
user, the OAuth account and the profile on the accounts side.
"""

import logging

from pydantic import ValidationError

from auth.exceptions import InternalFailureError
from auth.types import OAuthSignupResult, Provider
from clients.service_client import ServiceClient

logger = logging.getLogger(__name__)


class SignupClient(ServiceClient):
    """Provision a brand-new OAuth user remotely."""

    service_name = "signup"

    def oauth_signup(self, provider: Provider, access_token: str) -> OAuthSignupResult:
        data = self._request(
            "POST",
            f"/signup/oauth/{provider.value}",
            headers={"Authorization": f"Bearer {access_token}"},
        )
        try:
            result = OAuthSignupResult.model_validate(data)
        except ValidationError as e:
            raise InternalFailureError(f"Invalid signup response: {e}") from e

        logger.info(f"Provisioned {provider.value} user {result.user_id} via signup API")
        return result
