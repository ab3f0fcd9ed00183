"""
Client for the identity service that owns credential records (AuthAccount).

One local account and at most one account per OAuth provider per user; the
identity service enforces that uniqueness and answers 409 on duplicates.
"""

import logging
from uuid import UUID

from pydantic import ValidationError

from auth.exceptions import InternalFailureError, InvalidInputError
from auth.types import AuthAccount, CreatedAccount, PasswordCheck, Provider
from clients.service_client import ServiceClient

logger = logging.getLogger(__name__)


class IdentityClient(ServiceClient):
    """Create, look up, update and delete local and OAuth credential records."""

    service_name = "identity"

    def _parse(self, model, data):
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise InternalFailureError(f"Invalid {model.__name__} from identity service: {e}") from e

    def create_local(self, user_id: UUID, email: str, password: str) -> CreatedAccount:
        """Create the local (email + password) account for a user. Starts unverified."""
        data = self._request(
            "POST",
            "/accounts/local",
            {"user_id": str(user_id), "email": email, "password": password},
        )
        return self._parse(CreatedAccount, data)

    def create_oauth(
        self,
        user_id: UUID,
        provider: Provider,
        access_token: str | None = None,
        code: str | None = None,
    ) -> CreatedAccount:
        """
        Create an OAuth account from a provider access token or authorization code.

        Raises:
            InvalidInputError: If neither access_token nor code is given.
        """
        if not access_token and not code:
            raise InvalidInputError("Either access_token or code must be provided")

        payload = {"user_id": str(user_id), "provider": provider.value}
        if access_token:
            payload["access_token"] = access_token
        else:
            payload["code"] = code

        data = self._request("POST", "/accounts/oauth", payload)
        return self._parse(CreatedAccount, data)

    def get_oauth_account(self, provider: Provider, provider_id: str) -> AuthAccount:
        """
        Find the OAuth account for (provider, provider_id).

        Raises:
            NotFoundError: If no account exists. Callers must tell this apart
                from every other failure.
        """
        data = self._request(
            "GET",
            f"/accounts/oauth/{provider.value}/{provider_id}",
        )
        return self._parse(AuthAccount, data)

    def get_local_account(self, user_id: UUID) -> AuthAccount:
        """Get the local account of a user."""
        data = self._request("GET", f"/accounts/local/{user_id}")
        return self._parse(AuthAccount, data)

    def compare_password(self, email: str, password: str) -> PasswordCheck:
        """Check a password against the local account registered for email."""
        data = self._request(
            "POST",
            "/accounts/local/compare-password",
            {"email": email, "password": password},
        )
        return self._parse(PasswordCheck, data)

    def update_email(self, account_id: UUID, new_email: str) -> None:
        self._request("PATCH", f"/accounts/{account_id}/email", {"email": new_email})

    def update_email_verification(self, user_id: UUID, verified: bool) -> None:
        """Set the verified flag on the user's local account."""
        self._request(
            "PATCH",
            f"/accounts/local/{user_id}/verification",
            {"verified": verified},
        )
        logger.info(f"Email verification set to {verified} for user {user_id}")

    def delete_account(self, user_id: UUID) -> None:
        """Delete every credential record of the user."""
        self._request("DELETE", f"/accounts/users/{user_id}")
