"""
Client for the profile service.

Profiles are keyed by user id and carry the directory sync code, which the
profile service uses to correlate records with the directory without a
foreign key.
"""

from uuid import UUID

from pydantic import ValidationError

from auth.exceptions import InternalFailureError
from auth.types import CreatedProfile
from clients.service_client import ServiceClient


class ProfileClient(ServiceClient):
    """Create, update and delete profile records."""

    service_name = "profile"

    def create_profile(self, user_id: UUID, email: str | None, sync_code: str) -> CreatedProfile:
        data = self._request(
            "POST",
            "/profiles",
            {"user_id": str(user_id), "email": email, "sync_code": sync_code},
        )
        try:
            return CreatedProfile.model_validate(data)
        except ValidationError as e:
            raise InternalFailureError(f"Invalid profile response: {e}") from e

    def update_email(self, user_id: UUID, new_email: str, sync_code: str) -> None:
        self._request(
            "PATCH",
            f"/profiles/{user_id}/email",
            {"email": new_email, "sync_code": sync_code},
        )

    def delete_profile(self, user_id: UUID) -> None:
        self._request("DELETE", f"/profiles/{user_id}")
