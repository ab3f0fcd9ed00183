"""
Client for the token-signing service.

Access, refresh and email verification tokens are minted and checked
remotely; this core never sees signing keys.
"""

from uuid import UUID

from pydantic import ValidationError

from auth.exceptions import InternalFailureError, InvalidInputError, UnauthorizedError
from auth.types import EmailVerificationClaims
from clients.service_client import ServiceClient


class TokenClient(ServiceClient):
    """Mint and verify tokens via the token service."""

    service_name = "token"

    def _token(self, path: str, payload: dict) -> str:
        data = self._request("POST", path, payload) or {}
        token = data.get("token")
        if not token:
            raise InternalFailureError(f"Token service returned no token for {path}")
        return token

    def generate_access_token(self, user_id: UUID) -> str:
        return self._token("/tokens/access", {"user_id": str(user_id)})

    def generate_refresh_token(self, user_id: UUID) -> str:
        return self._token("/tokens/refresh", {"user_id": str(user_id)})

    def generate_email_verification_token(self, user_id: UUID, email: str, code: str) -> str:
        """Mint a signed token carrying (user_id, email, code)."""
        return self._token(
            "/tokens/email-verification",
            {"user_id": str(user_id), "email": email, "code": code},
        )

    def verify_email_verification_token(self, token: str) -> EmailVerificationClaims:
        """
        Decode and verify an email verification token.

        Returns claims with ``valid=False`` when the token service rejects
        the token: 400/422 for malformed input, 401/403 for a bad signature
        or an expired token.

        Raises:
            InternalFailureError: If the token service is unreachable or
                returns something unparseable.
        """
        try:
            data = self._request(
                "POST",
                "/tokens/email-verification/verify",
                {"token": token},
            )
        except (InvalidInputError, UnauthorizedError):
            return EmailVerificationClaims(valid=False)

        try:
            return EmailVerificationClaims.model_validate(data)
        except ValidationError as e:
            raise InternalFailureError(f"Invalid verification claims: {e}") from e
