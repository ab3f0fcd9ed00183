from auth.types import OAuthUserInfo, Provider
from oauth.base import OAuthProvider, OAuthProviderError

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"


class GoogleOAuthProvider(OAuthProvider):
    provider = Provider.GOOGLE
    authorize_url = GOOGLE_AUTH_URL
    token_url = GOOGLE_TOKEN_URL
    scopes = ("openid", "email", "profile")

    @property
    def user_info_url(self) -> str:
        return GOOGLE_USERINFO_URL

    def _parse_user_info(self, payload: dict) -> OAuthUserInfo:
        subject = payload.get("sub")
        if not subject:
            raise OAuthProviderError("Google user info has no subject")
        return OAuthUserInfo(
            provider_id=str(subject),
            email=payload.get("email"),
            email_verified=bool(payload.get("email_verified", False)),
        )
